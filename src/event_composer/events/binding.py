"""Theta-role binding from dependency arcs.

Walks the dependents of a predicate token and assigns each one a thematic
role. Each dependency relation proposes an ordered list of candidate roles
(subject -> Agent, Experiencer, Theme; indirect object -> Recipient, ...).
Only roles the decomposition expects can be bound, and each role is bound
at most once.

Conflicts are settled like a stable matching: when two dependents want the
same role, the one for which the role ranks higher in its candidate list
keeps it (then core relations beat adjuncts, then the closer token wins).
The loser moves on to its next expected candidate.

The binder never raises. Anything it cannot place becomes an
UnboundEntity, or an EventModifier for adjuncts outside the role template.

Example:
    "John gave Mary a book"
    - nsubj  John -> Agent
    - iobj   Mary -> Recipient
    - obj    book -> Theme   (Patient is not expected by give-13.1)
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from ..lexicon.models import SelectionalRestriction, ThetaRole, VerbClass
from .types import (
    Animacy,
    Concreteness,
    Countability,
    Definiteness,
    DependencyArc,
    DependencyRelation,
    EventModifier,
    LittleVType,
    ModifierType,
    Participant,
    ParticipantFeatures,
    SentenceAnalysis,
    TokenAnalysis,
    UnbindingReason,
    UnboundEntity,
    UPos,
    Voice,
)

logger = logging.getLogger(__name__)

R = ThetaRole
D = DependencyRelation


# =============================================================================
# Relation Tables
# =============================================================================


RELATION_ROLES: dict[DependencyRelation, tuple[ThetaRole, ...]] = {
    # Core arguments
    D.NOMINAL_SUBJECT: (R.AGENT, R.EXPERIENCER, R.THEME),
    D.NOMINAL_SUBJECT_PASSIVE: (R.THEME, R.PATIENT),
    D.CLAUSAL_SUBJECT: (R.THEME, R.STIMULUS),
    D.OBJECT: (R.PATIENT, R.THEME, R.STIMULUS),
    D.INDIRECT_OBJECT: (R.RECIPIENT, R.BENEFACTIVE, R.GOAL),
    # Complements
    D.CLAUSAL_COMPLEMENT: (R.THEME,),
    D.OPEN_CLAUSAL_COMPLEMENT: (R.THEME,),
    D.ADJECTIVAL_COMPLEMENT: (R.THEME,),
    D.ATTRIBUTE: (R.THEME,),
    # Obliques
    D.OBLIQUE: (R.LOCATION, R.SOURCE, R.GOAL, R.INSTRUMENT, R.MANNER, R.TEMPORAL),
    D.OBLIQUE_AGENT: (R.AGENT,),
    D.OBLIQUE_TEMPORAL: (R.TEMPORAL,),
    D.OBLIQUE_NPMOD: (R.MEASURE, R.TEMPORAL),
}

PASSIVE_SUBJECT_ROLES = (R.THEME, R.PATIENT)
STATIVE_SUBJECT_ROLES = (R.THEME, R.EXPERIENCER)
STATIVE_TYPES = frozenset({LittleVType.BE, LittleVType.BECOME, LittleVType.EXIST})

# Obliques are refined by their case marker
PREPOSITION_ROLES: dict[str, tuple[ThetaRole, ...]] = {
    "in": (R.LOCATION, R.GOAL),
    "at": (R.LOCATION, R.GOAL),
    "on": (R.LOCATION, R.GOAL),
    "near": (R.LOCATION,),
    "inside": (R.LOCATION,),
    "outside": (R.LOCATION,),
    "under": (R.LOCATION, R.GOAL),
    "above": (R.LOCATION,),
    "behind": (R.LOCATION,),
    "beside": (R.LOCATION,),
    "from": (R.SOURCE,),
    "to": (R.RECIPIENT, R.GOAL, R.DIRECTION),
    "into": (R.GOAL, R.DIRECTION),
    "onto": (R.GOAL, R.DIRECTION),
    "toward": (R.DIRECTION, R.GOAL),
    "towards": (R.DIRECTION, R.GOAL),
    "through": (R.DIRECTION, R.LOCATION),
    "across": (R.DIRECTION, R.LOCATION),
    "along": (R.DIRECTION, R.LOCATION),
    "with": (R.INSTRUMENT, R.COMITATIVE),
    "without": (R.MANNER,),
    "for": (R.BENEFACTIVE, R.TEMPORAL),
    "during": (R.TEMPORAL,),
    "before": (R.TEMPORAL,),
    "after": (R.TEMPORAL,),
    "until": (R.TEMPORAL,),
    "since": (R.TEMPORAL,),
    "because": (R.CAUSE,),
    "about": (R.THEME,),
}

# Lower wins a tie on candidate rank
RELATION_PRIORITY: dict[str, int] = {
    "nsubj": 0,
    "obj": 1,
    "iobj": 2,
    "csubj": 3,
    "ccomp": 4,
    "xcomp": 4,
    "acomp": 4,
    "attr": 4,
    "obl": 6,
}

COMPLEMENT_RELATIONS = frozenset({
    D.CLAUSAL_COMPLEMENT,
    D.OPEN_CLAUSAL_COMPLEMENT,
    D.ADJECTIVAL_COMPLEMENT,
    D.ATTRIBUTE,
})

# Function words and coordination never fill roles
SKIPPED_RELATIONS = frozenset({
    D.DETERMINER, D.CASE, D.MARKER, D.COORDINATING_CONJUNCTION, D.PUNCTUATION,
    D.AUXILIARY, D.AUXILIARY_PASSIVE, D.COPULA, D.EXPLETIVE, D.NEGATION,
    D.COMPOUND, D.FLAT, D.ADJECTIVAL_MODIFIER, D.NUMERIC_MODIFIER,
    D.CONJUNCT, D.ROOT,
})

MODIFIER_RELATIONS = frozenset({D.ADVERBIAL_MODIFIER, D.ADVERBIAL_CLAUSE})

PASSIVE_MARKERS = frozenset({D.NOMINAL_SUBJECT_PASSIVE, D.AUXILIARY_PASSIVE})

# Relations whose dependents make up the surface phrase of a participant
PHRASE_RELATIONS = frozenset({
    D.DETERMINER, D.ADJECTIVAL_MODIFIER, D.COMPOUND, D.NUMERIC_MODIFIER, D.FLAT,
})

ROLE_MODIFIER_TYPES: dict[ThetaRole, ModifierType] = {
    R.LOCATION: ModifierType.LOCATIVE,
    R.SOURCE: ModifierType.LOCATIVE,
    R.GOAL: ModifierType.LOCATIVE,
    R.DIRECTION: ModifierType.LOCATIVE,
    R.TEMPORAL: ModifierType.TEMPORAL,
    R.FREQUENCY: ModifierType.TEMPORAL,
    R.INSTRUMENT: ModifierType.INSTRUMENTAL,
    R.COMITATIVE: ModifierType.INSTRUMENTAL,
    R.MANNER: ModifierType.MANNER,
    R.BENEFACTIVE: ModifierType.PURPOSE,
    R.CAUSE: ModifierType.PURPOSE,
    R.MEASURE: ModifierType.DEGREE,
}

TEMPORAL_ADVERBS = frozenset({
    "yesterday", "today", "tomorrow", "now", "then", "later", "earlier",
    "soon", "already", "still", "always", "never", "sometimes", "often",
    "usually", "again", "once", "recently",
})

DEGREE_ADVERBS = frozenset({
    "very", "extremely", "too", "quite", "rather", "almost", "nearly",
    "completely", "totally", "barely", "hardly", "so",
})

NEGATION_WORDS = frozenset({"not", "n't", "never", "no"})

HUMAN_PRONOUNS = frozenset({
    "i", "you", "he", "she", "we", "they", "me", "him", "her", "us", "them",
    "who", "someone", "somebody", "everyone", "everybody", "anyone", "nobody",
})
INANIMATE_PRONOUNS = frozenset({"it", "something", "everything", "nothing"})

DEFINITE_DETERMINERS = frozenset({
    "the", "this", "that", "these", "those",
    "my", "your", "his", "her", "its", "our", "their",
})
INDEFINITE_DETERMINERS = frozenset({"a", "an", "some", "any", "another"})

LEXNAME_ANIMACY = {
    "noun.person": Animacy.HUMAN,
    "noun.animal": Animacy.ANIMATE,
    "noun.artifact": Animacy.INANIMATE,
    "noun.object": Animacy.INANIMATE,
    "noun.substance": Animacy.INANIMATE,
    "noun.food": Animacy.INANIMATE,
    "noun.location": Animacy.INANIMATE,
    "noun.plant": Animacy.INANIMATE,
}

LEXNAME_CONCRETENESS = {
    "noun.person": Concreteness.CONCRETE,
    "noun.animal": Concreteness.CONCRETE,
    "noun.artifact": Concreteness.CONCRETE,
    "noun.object": Concreteness.CONCRETE,
    "noun.substance": Concreteness.CONCRETE,
    "noun.food": Concreteness.CONCRETE,
    "noun.plant": Concreteness.CONCRETE,
    "noun.cognition": Concreteness.ABSTRACT,
    "noun.communication": Concreteness.ABSTRACT,
    "noun.attribute": Concreteness.ABSTRACT,
    "noun.act": Concreteness.ABSTRACT,
    "noun.feeling": Concreteness.ABSTRACT,
    "noun.state": Concreteness.ABSTRACT,
}

CONCRETE_RESTRICTIONS = frozenset({
    SelectionalRestriction.CONCRETE,
    SelectionalRestriction.SOLID,
    SelectionalRestriction.FLUID,
    SelectionalRestriction.SUBSTANCE,
    SelectionalRestriction.MACHINE,
    SelectionalRestriction.VEHICLE,
    SelectionalRestriction.BODY_PART,
})
ABSTRACT_RESTRICTIONS = frozenset({
    SelectionalRestriction.ABSTRACT,
    SelectionalRestriction.COMMUNICATION,
})


# =============================================================================
# Results
# =============================================================================


@dataclass
class _Claimant:
    """A dependent competing for roles during matching."""

    arc: DependencyArc
    token: TokenAnalysis
    candidates: tuple[ThetaRole, ...]
    preferred: tuple[ThetaRole, ...]
    priority: int
    distance: int
    pointer: int = 0
    lost_tie: bool = False

    def rank_key(self, role: ThetaRole) -> tuple[int, int, int, int]:
        return (
            self.candidates.index(role),
            self.priority,
            self.distance,
            self.arc.dependent_idx,
        )


@dataclass
class BindingResult:
    """Output of binding one predicate."""

    participants: dict[ThetaRole, Participant] = field(default_factory=dict)
    unbound: list[UnboundEntity] = field(default_factory=list)
    modifiers: list[EventModifier] = field(default_factory=list)
    confidence: float = 0.0
    voice: Voice = Voice.ACTIVE
    result_state: str | None = None
    touched: set[int] = field(default_factory=set)
    object_bound: bool = False


# =============================================================================
# Binder
# =============================================================================


class ThetaRoleBinder:
    """Binds syntactic dependents of a predicate to thematic roles.

    Stateless after construction; safe to share between threads.
    """

    def __init__(self, use_wordnet_animacy: bool = True):
        self.use_wordnet_animacy = use_wordnet_animacy

    # =========================================================================
    # Public API
    # =========================================================================

    def determine_voice(self, analysis: SentenceAnalysis, predicate_idx: int) -> Voice:
        """Passive if the sentence is flagged passive or the predicate
        carries a passive subject or passive auxiliary."""
        if analysis.metadata.is_passive:
            return Voice.PASSIVE
        if any(arc.relation in PASSIVE_MARKERS for arc in analysis.get_dependents(predicate_idx)):
            return Voice.PASSIVE
        return Voice.ACTIVE

    def evidence_roles(self, analysis: SentenceAnalysis, predicate_idx: int) -> set[ThetaRole]:
        """Canonical role of each argument dependent of the predicate.

        Only the first candidate counts, so a bare subject suggests Agent
        rather than every role a subject could take.
        """
        voice = self.determine_voice(analysis, predicate_idx)
        arcs, _ = self._argument_arcs(analysis, predicate_idx)
        roles: set[ThetaRole] = set()
        for arc in arcs:
            if arc.relation in MODIFIER_RELATIONS:
                continue
            candidates = self.candidate_roles(analysis, arc, voice)
            if candidates:
                roles.add(candidates[0])
        return roles

    def candidate_roles(
        self,
        analysis: SentenceAnalysis,
        arc: DependencyArc,
        voice: Voice,
        little_v: LittleVType | None = None,
    ) -> tuple[ThetaRole, ...]:
        """Ordered candidate roles for one dependent."""
        relation = arc.relation

        if relation == D.NOMINAL_SUBJECT:
            if voice == Voice.PASSIVE:
                return PASSIVE_SUBJECT_ROLES
            if little_v in STATIVE_TYPES:
                return STATIVE_SUBJECT_ROLES
            return RELATION_ROLES[relation]

        if relation == D.OBLIQUE:
            preposition = self._case_marker(analysis, arc.dependent_idx)
            if preposition == "by" and voice == Voice.PASSIVE:
                return (R.AGENT,)
            if preposition in PREPOSITION_ROLES:
                return PREPOSITION_ROLES[preposition]

        return RELATION_ROLES.get(relation, ())

    def bind(
        self,
        analysis: SentenceAnalysis,
        predicate_idx: int,
        expected_roles: Iterable[ThetaRole],
        little_v: LittleVType | None = None,
        verb_class: VerbClass | None = None,
    ) -> BindingResult:
        """Bind the predicate's dependents to roles.

        Args:
            analysis: The full sentence
            predicate_idx: Token index of the predicate
            expected_roles: Role template from decomposition
            little_v: Primary operator, used for subject candidates
            verb_class: Class supplying selectional restrictions

        Returns:
            BindingResult with participants, unbound entities, modifiers
            and binding confidence.
        """
        expected = tuple(dict.fromkeys(expected_roles))
        voice = self.determine_voice(analysis, predicate_idx)
        result = BindingResult(voice=voice)
        result.touched.add(predicate_idx)

        arcs, copular_head = self._argument_arcs(analysis, predicate_idx)
        if copular_head is not None:
            result.result_state = analysis.tokens[copular_head].text
            result.touched.add(copular_head)

        claimants: list[_Claimant] = []
        for arc in arcs:
            token = analysis.tokens[arc.dependent_idx]

            if arc.relation in MODIFIER_RELATIONS:
                modifier = self._adverbial_modifier(analysis, arc, token)
                if modifier is not None:
                    result.modifiers.append(modifier)
                    result.touched.add(arc.dependent_idx)
                continue

            candidates = self.candidate_roles(analysis, arc, voice, little_v)
            if not candidates:
                result.unbound.append(UnboundEntity(
                    token_idx=arc.dependent_idx,
                    text=token.text,
                    reason=UnbindingReason.MISSING_DEPENDENCY,
                ))
                continue

            preferred = tuple(r for r in candidates if r in expected)
            if not preferred:
                if arc.relation.base == "obl":
                    result.modifiers.append(EventModifier(
                        modifier_type=ROLE_MODIFIER_TYPES.get(candidates[0], ModifierType.MANNER),
                        expression=self._phrase(analysis, arc.dependent_idx, with_case=True),
                        token_idx=arc.dependent_idx,
                    ))
                    result.touched.add(arc.dependent_idx)
                elif not self._fold_into_state(result, arc, token, little_v):
                    result.unbound.append(UnboundEntity(
                        token_idx=arc.dependent_idx,
                        text=token.text,
                        reason=UnbindingReason.SEMANTIC_MISMATCH,
                        suggested_role=candidates[0],
                    ))
                continue

            claimants.append(_Claimant(
                arc=arc,
                token=token,
                candidates=candidates,
                preferred=preferred,
                priority=RELATION_PRIORITY.get(arc.relation.base, 5),
                distance=abs(arc.dependent_idx - predicate_idx),
            ))

        winners = self._match(claimants, result, little_v)

        filled_confidences = []
        for role, claimant in winners.items():
            idx = claimant.arc.dependent_idx
            result.participants[role] = self._participant(
                analysis, idx, role, verb_class
            )
            result.touched.add(idx)
            filled_confidences.append(claimant.arc.confidence)
            if claimant.arc.relation == D.OBJECT:
                result.object_bound = True

        if expected and filled_confidences:
            fraction = len(filled_confidences) / len(expected)
            mean_arc = sum(filled_confidences) / len(filled_confidences)
            result.confidence = min(fraction * mean_arc, 1.0)

        logger.debug(
            f"Bound {len(result.participants)}/{len(expected)} roles for token "
            f"{predicate_idx}, {len(result.unbound)} unbound"
        )
        return result

    # =========================================================================
    # Matching
    # =========================================================================

    def _match(
        self,
        claimants: list[_Claimant],
        result: BindingResult,
        little_v: LittleVType | None,
    ) -> dict[ThetaRole, _Claimant]:
        """Assign roles so each is held by its best-ranked claimant."""
        holders: dict[ThetaRole, _Claimant] = {}
        queue = deque(claimants)

        while queue:
            claimant = queue.popleft()
            if claimant.pointer >= len(claimant.preferred):
                if self._fold_into_state(result, claimant.arc, claimant.token, little_v):
                    continue
                result.unbound.append(UnboundEntity(
                    token_idx=claimant.arc.dependent_idx,
                    text=claimant.token.text,
                    reason=(
                        UnbindingReason.AMBIGUOUS_ROLE if claimant.lost_tie
                        else UnbindingReason.EXTRA_CORE_ARGUMENT
                    ),
                    suggested_role=claimant.candidates[0],
                ))
                continue

            role = claimant.preferred[claimant.pointer]
            holder = holders.get(role)
            if holder is None:
                holders[role] = claimant
                continue

            challenger_key = claimant.rank_key(role)
            holder_key = holder.rank_key(role)
            tie = challenger_key[:2] == holder_key[:2]

            if challenger_key < holder_key:
                holders[role] = claimant
                loser = holder
            else:
                loser = claimant
            loser.pointer += 1
            loser.lost_tie = tie
            queue.append(loser)

        return holders

    def _fold_into_state(
        self,
        result: BindingResult,
        arc: DependencyArc,
        token: TokenAnalysis,
        little_v: LittleVType | None,
    ) -> bool:
        """Record a copular complement as the predicated state."""
        if little_v != LittleVType.BE or arc.relation not in COMPLEMENT_RELATIONS:
            return False
        if result.result_state is None:
            result.result_state = token.text
            result.touched.add(arc.dependent_idx)
            return True
        return False

    # =========================================================================
    # Dependents
    # =========================================================================

    def _argument_arcs(
        self, analysis: SentenceAnalysis, predicate_idx: int
    ) -> tuple[list[DependencyArc], int | None]:
        """Arcs that may carry arguments of the predicate.

        A copula attached to a nominal or adjectival head ("John is happy",
        happy -cop-> is) takes over the head's dependents; the head itself
        is returned as the predicated state. Self-loop arcs are ignored; a
        predicate never fills one of its own roles.
        """
        arcs = [
            arc for arc in analysis.get_dependents(predicate_idx)
            if arc.dependent_idx != predicate_idx
            and arc.relation not in SKIPPED_RELATIONS
        ]

        copular_head = None
        head_arc = analysis.get_head_arc(predicate_idx)
        if head_arc is not None and head_arc.relation == D.COPULA:
            copular_head = head_arc.head_idx
            arcs.extend(
                arc for arc in analysis.get_dependents(copular_head)
                if arc.dependent_idx != predicate_idx
                and arc.relation not in SKIPPED_RELATIONS
            )

        return arcs, copular_head

    def _case_marker(self, analysis: SentenceAnalysis, token_idx: int) -> str | None:
        for arc in analysis.get_dependents(token_idx):
            if arc.relation == D.CASE:
                token = analysis.get_token(arc.dependent_idx)
                if token is not None:
                    return token.lemma.lower()
        return None

    def _adverbial_modifier(
        self,
        analysis: SentenceAnalysis,
        arc: DependencyArc,
        token: TokenAnalysis,
    ) -> EventModifier | None:
        lemma = token.lemma.lower()
        if lemma in NEGATION_WORDS and lemma != "never":
            return None

        if arc.relation == D.ADVERBIAL_CLAUSE:
            markers = {
                analysis.tokens[a.dependent_idx].lemma.lower()
                for a in analysis.get_dependents(arc.dependent_idx)
                if a.relation == D.MARKER
            }
            modifier_type = (
                ModifierType.PURPOSE if markers & {"to", "so", "because"}
                else ModifierType.TEMPORAL
            )
        elif lemma in TEMPORAL_ADVERBS:
            modifier_type = ModifierType.TEMPORAL
        elif lemma in DEGREE_ADVERBS:
            modifier_type = ModifierType.DEGREE
        else:
            modifier_type = ModifierType.MANNER

        return EventModifier(
            modifier_type=modifier_type,
            expression=self._phrase(analysis, arc.dependent_idx),
            token_idx=arc.dependent_idx,
        )

    # =========================================================================
    # Participants
    # =========================================================================

    def _phrase(self, analysis: SentenceAnalysis, head_idx: int, with_case: bool = False) -> str:
        """Head token plus its determiners and nominal modifiers."""
        relations = PHRASE_RELATIONS | {D.CASE} if with_case else PHRASE_RELATIONS
        indices = [head_idx] + [
            arc.dependent_idx for arc in analysis.get_dependents(head_idx)
            if arc.relation in relations
        ]
        return " ".join(analysis.tokens[i].text for i in sorted(set(indices)))

    def _participant(
        self,
        analysis: SentenceAnalysis,
        idx: int,
        role: ThetaRole,
        verb_class: VerbClass | None,
    ) -> Participant:
        token = analysis.tokens[idx]
        determiners = [
            analysis.tokens[arc.dependent_idx]
            for arc in analysis.get_dependents(idx)
            if arc.relation == D.DETERMINER
        ]
        return Participant(
            text=token.text,
            token_idx=idx,
            expression=self._phrase(analysis, idx),
            features=ParticipantFeatures(
                animacy=self._animacy(token),
                definiteness=self._definiteness(token, determiners),
                countability=self._countability(token, determiners),
                concreteness=self._concreteness(token, role, verb_class),
            ),
        )

    def _animacy(self, token: TokenAnalysis) -> Animacy | None:
        lower = token.text.lower()
        if token.pos == UPos.PROPN:
            return Animacy.HUMAN
        if token.pos == UPos.PRON:
            if lower in HUMAN_PRONOUNS:
                return Animacy.HUMAN
            if lower in INANIMATE_PRONOUNS:
                return Animacy.INANIMATE
        if self.use_wordnet_animacy and token.senses is not None and token.senses.lexname:
            return LEXNAME_ANIMACY.get(token.senses.lexname)
        return None

    def _definiteness(
        self, token: TokenAnalysis, determiners: list[TokenAnalysis]
    ) -> Definiteness | None:
        if token.pos == UPos.PROPN:
            return Definiteness.DEFINITE
        if token.pos == UPos.PRON and token.text.lower() in HUMAN_PRONOUNS | {"it"}:
            return Definiteness.DEFINITE
        for det in determiners:
            feature = det.features.get("Definite")
            if feature == "Def" or det.lemma.lower() in DEFINITE_DETERMINERS:
                return Definiteness.DEFINITE
            if feature == "Ind" or det.lemma.lower() in INDEFINITE_DETERMINERS:
                return Definiteness.INDEFINITE
        return None

    def _countability(
        self, token: TokenAnalysis, determiners: list[TokenAnalysis]
    ) -> Countability | None:
        if token.pos != UPos.NOUN:
            return None
        if token.features.get("Number") == "Plur":
            return Countability.COUNT
        if any(det.lemma.lower() in ("a", "an") for det in determiners):
            return Countability.COUNT
        return None

    def _concreteness(
        self,
        token: TokenAnalysis,
        role: ThetaRole,
        verb_class: VerbClass | None,
    ) -> Concreteness | None:
        if verb_class is not None:
            spec = verb_class.role_spec(role)
            if spec is not None:
                if any(spec.requires(r) for r in CONCRETE_RESTRICTIONS):
                    return Concreteness.CONCRETE
                if any(spec.requires(r) for r in ABSTRACT_RESTRICTIONS):
                    return Concreteness.ABSTRACT
        if token.senses is not None and token.senses.lexname:
            return LEXNAME_CONCRETENESS.get(token.senses.lexname)
        return None
