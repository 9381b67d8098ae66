"""Tests for pluggable lexical resources."""

import pytest

from event_composer.lexicon import (
    RoleRestriction,
    SelectionalRestriction,
    StaticFrameResource,
    StaticSenseResource,
    ThetaRole,
    VerbClass,
    VerbClassResource,
)
from event_composer.lexicon.models import PredicateType, SemanticPredicate
from event_composer.lexicon.resources import class_count_confidence


class TestClassCountConfidence:
    """Tests for lookup confidence by class count."""

    @pytest.mark.parametrize("count,expected", [
        (0, 0.1),
        (1, 0.9),
        (2, 0.8),
        (3, 0.8),
        (5, 0.7),
        (12, 0.6),
    ])
    def test_confidence(self, count, expected):
        """Test ambiguity lowers confidence."""
        assert class_count_confidence(count) == expected


class TestVerbClassResource:
    """Tests for VerbClassResource."""

    def test_lookup(self, verb_index):
        """Test a known lemma returns its classes."""
        analysis = VerbClassResource(verb_index).lookup("give")

        assert analysis.class_ids == ["give-13.1"]
        assert analysis.primary_class.id == "give-13.1"
        assert analysis.confidence == 0.9

    def test_unknown_lemma(self, verb_index):
        """Test an unknown lemma returns None."""
        assert VerbClassResource(verb_index).lookup("walk") is None


class TestStaticResources:
    """Tests for in-memory frame and sense resources."""

    def test_frame_lookup(self):
        """Test frames are looked up case-insensitively."""
        resource = StaticFrameResource({"Stroll": ["Self_motion", "Travel"]})

        analysis = resource.lookup("stroll")

        assert analysis.primary_frame.name == "Self_motion"
        assert [f.name for f in analysis.frames] == ["Self_motion", "Travel"]
        assert analysis.confidence == 0.7

    def test_frame_unknown(self):
        """Test unknown lemmas and empty frame lists return None."""
        resource = StaticFrameResource({"stroll": []})

        assert resource.lookup("stroll") is None
        assert resource.lookup("amble") is None

    def test_sense_lookup(self):
        """Test sense lookup returns the lexname."""
        resource = StaticSenseResource({"dog": "noun.animal"}, confidence=0.8)

        analysis = resource.lookup("Dog")

        assert analysis.lexname == "noun.animal"
        assert analysis.synsets == ("dog.n.01",)
        assert analysis.confidence == 0.8

    def test_sense_unknown(self):
        """Test unknown senses return None."""
        assert StaticSenseResource({}).lookup("dog") is None


class TestModelParsing:
    """Tests for verb-class model parsing helpers."""

    @pytest.mark.parametrize("name,role", [
        ("Agent", ThetaRole.AGENT),
        ("Co-Agent", ThetaRole.AGENT),
        ("Destination", ThetaRole.GOAL),
        ("Initial_Location", ThetaRole.SOURCE),
        ("Beneficiary", ThetaRole.BENEFACTIVE),
        ("Topic", ThetaRole.THEME),
        ("Time", ThetaRole.TEMPORAL),
    ])
    def test_role_aliases(self, name, role):
        """Test role names are normalized."""
        assert ThetaRole.parse(name) == role

    def test_unknown_role(self):
        """Test unknown role names raise ValueError."""
        with pytest.raises(ValueError):
            ThetaRole.parse("Wizard")

    def test_restriction_polarity(self):
        """Test restriction polarity parsing."""
        negative = RoleRestriction.parse("-region")
        positive = RoleRestriction.parse("body-part")

        assert negative.positive is False
        assert negative.restriction == SelectionalRestriction.REGION
        assert positive.positive is True
        assert positive.restriction == SelectionalRestriction.BODY_PART
        assert str(negative) == "-region"

    def test_predicate_family(self):
        """Test predicate names map to families."""
        assert SemanticPredicate("has_possession").predicate_type == PredicateType.HAS_POSSESSION
        assert SemanticPredicate("take_in").predicate_type == PredicateType.OTHER

    def test_class_from_dict(self):
        """Test class parsing with defaults."""
        verb_class = VerbClass.from_dict({
            "id": "glow-43.1",
            "members": ["glow", {"name": "shine", "fn_mapping": "Light_movement"}],
            "roles": [{"type": "Theme", "restrictions": ["+concrete"]}],
        })

        assert verb_class.name == "glow"
        assert verb_class.member_names == ["glow", "shine"]
        assert verb_class.members[1].fn_mapping == "Light_movement"
        spec = verb_class.role_spec(ThetaRole.THEME)
        assert spec.requires(SelectionalRestriction.CONCRETE)
        assert not spec.requires(SelectionalRestriction.ANIMATE)
        assert verb_class.role_spec(ThetaRole.AGENT) is None
