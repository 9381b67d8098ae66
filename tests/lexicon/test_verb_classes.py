"""Tests for VerbClassIndex loading and queries."""

import concurrent.futures

import pytest

from event_composer.exceptions import (
    IndexDirectoryNotFoundError,
    IndexNotInitializedError,
    InvalidIndexFormatError,
)
from event_composer.lexicon import (
    PredicateType,
    RoleRestriction,
    SelectionalRestriction,
    ThetaRole,
    VerbClass,
    VerbClassIndex,
)
from event_composer.lexicon.verb_classes import parse_class_file


GLOW_YAML = """
classes:
  - id: glow-43.1
    members: [glow, shine, sparkle]
    roles:
      - {type: Theme, restrictions: [+concrete]}
    frames:
      - description: NP V
        syntax: [Theme, V]
        semantics:
          - {predicate: emit, event: during(E), args: [Theme]}
"""

SPIN_YAML = """
id: spin-51.3.1
members: [spin, twirl]
roles: [Theme]
frames:
  - syntax: Theme V
    semantics: [motion]
"""


def _write(directory, name, content):
    path = directory / name
    path.write_text(content)
    return path


# =============================================================================
# Loading
# =============================================================================


class TestIndexLoading:
    """Tests for building indexes from YAML."""

    def test_default_inventory(self, verb_index):
        """Test the bundled inventory loads every class."""
        assert verb_index.is_initialized
        assert len(verb_index) == 18
        assert verb_index.load_errors == ()

    def test_load_directory(self, tmp_path):
        """Test loading every YAML file in a directory."""
        _write(tmp_path, "glow.yaml", GLOW_YAML)
        _write(tmp_path, "spin.yml", SPIN_YAML)
        _write(tmp_path, "notes.txt", "not a class file")

        index = VerbClassIndex.load(tmp_path)

        assert len(index) == 2
        assert [c.id for c in index.get_verb_classes("shine")] == ["glow-43.1"]
        assert [c.id for c in index.get_verb_classes("twirl")] == ["spin-51.3.1"]

    def test_string_syntax_is_split(self, tmp_path):
        """Test a frame syntax string is split into elements."""
        _write(tmp_path, "spin.yaml", SPIN_YAML)

        frames = VerbClassIndex.load(tmp_path).get_syntactic_frames("spin")

        assert frames[0].syntax == ("Theme", "V")
        assert frames[0].semantics[0].predicate_type == PredicateType.MOTION

    def test_missing_directory(self, tmp_path):
        """Test a missing directory raises IndexDirectoryNotFoundError."""
        with pytest.raises(IndexDirectoryNotFoundError) as exc_info:
            VerbClassIndex.load(tmp_path / "missing")

        assert exc_info.value.path.endswith("missing")

    def test_invalid_file_skipped(self, tmp_path):
        """Test a broken file is recorded and skipped in lenient mode."""
        _write(tmp_path, "glow.yaml", GLOW_YAML)
        _write(tmp_path, "broken.yaml", "classes: [unclosed\n")

        index = VerbClassIndex.load(tmp_path)

        assert len(index) == 1
        assert len(index.load_errors) == 1
        assert "broken.yaml" in index.load_errors[0]

    def test_invalid_file_strict(self, tmp_path):
        """Test a broken file aborts loading in strict mode."""
        _write(tmp_path, "broken.yaml", "classes: [unclosed\n")

        with pytest.raises(InvalidIndexFormatError) as exc_info:
            VerbClassIndex.load(tmp_path, strict=True)

        assert exc_info.value.reason == "not valid YAML"
        assert exc_info.value.cause is not None

    def test_missing_id(self, tmp_path):
        """Test a class without an id is rejected."""
        path = _write(tmp_path, "noid.yaml", "classes:\n  - members: [glow]\n")

        with pytest.raises(InvalidIndexFormatError, match="missing"):
            parse_class_file(path)

    def test_unknown_role(self, tmp_path):
        """Test an unknown role name is rejected."""
        path = _write(
            tmp_path, "wizard.yaml",
            "classes:\n  - id: zap-1\n    members: [zap]\n    roles: [Wizard]\n",
        )

        with pytest.raises(InvalidIndexFormatError, match="entry 0"):
            parse_class_file(path)

    def test_empty_file(self, tmp_path):
        """Test an empty file contributes no classes."""
        path = _write(tmp_path, "empty.yaml", "")
        assert parse_class_file(path) == []

    def test_duplicate_class_keeps_first(self, tmp_path, caplog):
        """Test a repeated class id keeps the first definition."""
        _write(tmp_path, "a.yaml", GLOW_YAML)
        _write(tmp_path, "b.yaml", GLOW_YAML.replace("[glow, shine, sparkle]", "[gleam]"))

        index = VerbClassIndex.load(tmp_path)

        assert len(index) == 1
        assert "glow" in index
        assert "gleam" not in index
        assert "Duplicate verb class glow-43.1" in caplog.text

    def test_with_classes(self, verb_index):
        """Test extending an index returns a new index."""
        extra = VerbClass.from_dict({
            "id": "glow-43.1",
            "members": ["glow"],
            "roles": ["Theme"],
        })

        extended = verb_index.with_classes([extra])

        assert len(extended) == len(verb_index) + 1
        assert "glow" in extended
        assert "glow" not in verb_index
        assert extended.get_class("cut-21.1-1") is not None


# =============================================================================
# Queries
# =============================================================================


class TestIndexQueries:
    """Tests for lemma queries over the bundled inventory."""

    def test_get_verb_classes(self, verb_index):
        """Test lemma lookup is case- and whitespace-insensitive."""
        assert [c.id for c in verb_index.get_verb_classes(" Give ")] == ["give-13.1"]

    def test_unknown_lemma(self, verb_index):
        """Test unknown lemmas return empty results."""
        assert verb_index.get_verb_classes("walk") == []
        assert verb_index.get_theta_roles("walk") == []
        assert verb_index.verb_allows_role("walk", ThetaRole.AGENT) is False
        assert "walk" not in verb_index

    def test_subclass_inherits_roles(self, verb_index):
        """Test subclass members resolve with the parent's roles."""
        classes = verb_index.get_verb_classes("hack")

        assert [c.id for c in classes] == ["cut-21.1-1"]
        assert classes[0].role_types == [
            ThetaRole.AGENT, ThetaRole.PATIENT, ThetaRole.INSTRUMENT,
        ]

    def test_role_aliases(self, verb_index):
        """Test inventory role names map onto the role enum."""
        assert verb_index.verb_allows_role("give", ThetaRole.RECIPIENT)
        assert verb_index.verb_allows_role("put", ThetaRole.GOAL)
        assert verb_index.verb_allows_role("say", ThetaRole.THEME)
        assert verb_index.verb_allows_role("build", ThetaRole.BENEFACTIVE)

    def test_selectional_restrictions(self, verb_index):
        """Test restrictions keep their polarity."""
        restrictions = verb_index.get_selectional_restrictions("put", ThetaRole.GOAL)

        assert [str(r) for r in restrictions] == ["+location", "-region"]
        assert restrictions[1] == RoleRestriction(SelectionalRestriction.REGION, positive=False)

    def test_syntactic_frames(self, verb_index):
        """Test frame syntax is kept in order."""
        frames = verb_index.get_syntactic_frames("put")

        assert frames[0].syntax == ("Agent", "V", "Theme", "on", "Destination")
        assert frames[0].example == "I put the book on the table."

    def test_semantic_predicates(self, verb_index):
        """Test predicates are collected across frames."""
        names = [p.name for p in verb_index.get_semantic_predicates("break")]

        assert names[0] == "cause"
        assert names.count("degradation_material_integrity") == 2

    def test_member_details(self, verb_index):
        """Test member mappings are parsed."""
        give = verb_index.get_class("give-13.1")
        member = give.members[0]

        assert member.name == "give"
        assert member.fn_mapping == "Giving"
        assert member.grouping == "give.01"
        assert give.frames[0].secondary == "Dative"

    def test_verbs_with_role(self, verb_index):
        """Test reverse lookup from role to member verbs."""
        assert verb_index.verbs_with_role(ThetaRole.EXPERIENCER) == [
            "admire", "adore", "appreciate", "hate", "like", "love", "respect",
        ]

    def test_classes_with_predicate(self, verb_index):
        """Test reverse lookup from predicate family to classes."""
        ids = [c.id for c in verb_index.classes_with_predicate(PredicateType.TRANSFER_INFO)]
        assert ids == ["say-37.7", "tell-37.2"]

    def test_classes_with_restriction(self, verb_index):
        """Test reverse lookup from restriction to classes."""
        ids = [
            c.id for c in
            verb_index.classes_with_restriction(SelectionalRestriction.COMMUNICATION)
        ]
        assert ids == ["say-37.7", "tell-37.2"]

    def test_unknown_predicate_name(self, verb_index):
        """Test unrecognized predicate names fall into OTHER."""
        ids = [c.id for c in verb_index.classes_with_predicate(PredicateType.OTHER)]
        assert "appear-48.1" in ids
        assert "eat-39.1" in ids

    def test_statistics(self, verb_index):
        """Test index statistics."""
        stats = verb_index.get_statistics()

        assert stats["classes"] == 18
        assert stats["load_errors"] == 0
        assert stats["verbs"] > 60
        assert stats["frames"] >= 18


class TestAspectualInference:
    """Tests for aspect features inferred from predicates."""

    def test_transfer_is_telic(self, verb_index):
        """Test a transfer verb is telic and durative."""
        info = verb_index.infer_aspectual_class("give")

        assert info.durative is True
        assert info.dynamic is False
        assert info.telic is True
        assert info.punctual is False

    def test_motion_is_dynamic(self, verb_index):
        """Test a motion verb is dynamic and atelic."""
        info = verb_index.infer_aspectual_class("run")

        assert info.durative is True
        assert info.dynamic is True
        assert info.telic is False

    def test_single_predicate_is_punctual(self, verb_index):
        """Test a single predicate yields a punctual reading."""
        info = verb_index.infer_aspectual_class("admire")

        assert info.punctual is True
        assert info.durative is False

    def test_unknown_verb(self, verb_index):
        """Test an unknown verb has no dynamic or telic features."""
        info = verb_index.infer_aspectual_class("walk")

        assert info.dynamic is False
        assert info.telic is False
        assert info.punctual is True


class TestUninitializedIndex:
    """Tests for queries against an index with no data."""

    @pytest.mark.parametrize("query", [
        lambda index: index.get_verb_classes("give"),
        lambda index: index.get_theta_roles("give"),
        lambda index: index.get_class("give-13.1"),
        lambda index: index.verbs_with_role(ThetaRole.AGENT),
        lambda index: index.classes_with_predicate(PredicateType.CAUSE),
        lambda index: index.get_statistics(),
        lambda index: index.with_classes([]),
    ])
    def test_queries_raise(self, query):
        """Test every query raises IndexNotInitializedError."""
        with pytest.raises(IndexNotInitializedError):
            query(VerbClassIndex())

    def test_not_initialized_flag(self):
        """Test a bare index reports itself uninitialized."""
        index = VerbClassIndex()
        assert index.is_initialized is False
        assert len(index) == 0

    def test_empty_inventory_is_initialized(self):
        """Test an index built from zero classes is usable."""
        index = VerbClassIndex.from_classes([])
        assert index.is_initialized is True
        assert index.get_verb_classes("give") == []


class TestConcurrentReads:
    """Tests for sharing one index across threads."""

    def test_concurrent_lookups(self, verb_index):
        """Test many threads reading the same index see the same data."""
        lemmas = ["give", "break", "run", "say", "hack", "walk"] * 20

        with concurrent.futures.ThreadPoolExecutor(max_workers=20) as executor:
            futures = [
                executor.submit(lambda lemma: [c.id for c in verb_index.get_verb_classes(lemma)], lemma)
                for lemma in lemmas
            ]
            concurrent.futures.wait(futures)

        results = [f.result() for f in futures]
        expected = {
            "give": ["give-13.1"],
            "break": ["break-45.1"],
            "run": ["run-51.3.2"],
            "say": ["say-37.7"],
            "hack": ["cut-21.1-1"],
            "walk": [],
        }
        assert results == [expected[lemma] for lemma in lemmas]
