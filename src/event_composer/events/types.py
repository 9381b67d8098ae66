"""Type definitions for event composition.

Input side: a parsed sentence (SentenceAnalysis) made of TokenAnalysis
records and DependencyArc edges, plus sentence-level metadata.

Output side: Neo-Davidsonian events. Each Event has a predicate, a map of
thematic roles to participants, an aspectual class, a voice and a little-v
operator. Events are wrapped in ComposedEvent (span, provenance,
confidences) and collected per sentence in ComposedEvents.

All output types are frozen; a sentence result is never mutated after it
is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping

from ..exceptions import InvalidInputError
from ..lexicon.models import ThetaRole
from ..lexicon.resources import FrameAnalysis, SenseAnalysis, VerbClassAnalysis
from .aspect import AspectualClass


# =============================================================================
# Morphosyntax
# =============================================================================


class UPos(str, Enum):
    """Universal part-of-speech tags."""

    ADJ = "ADJ"
    ADP = "ADP"
    ADV = "ADV"
    AUX = "AUX"
    CCONJ = "CCONJ"
    DET = "DET"
    INTJ = "INTJ"
    NOUN = "NOUN"
    NUM = "NUM"
    PART = "PART"
    PRON = "PRON"
    PROPN = "PROPN"
    PUNCT = "PUNCT"
    SCONJ = "SCONJ"
    SYM = "SYM"
    VERB = "VERB"
    X = "X"

    @classmethod
    def parse(cls, tag: str | None) -> UPos | None:
        if not tag or tag == "_":
            return None
        try:
            return cls(tag.upper())
        except ValueError:
            return cls.X


class DependencyRelation(str, Enum):
    """Dependency relation labels (Universal Dependencies, with subtypes)."""

    NOMINAL_SUBJECT = "nsubj"
    NOMINAL_SUBJECT_PASSIVE = "nsubj:pass"
    CLAUSAL_SUBJECT = "csubj"
    OBJECT = "obj"
    INDIRECT_OBJECT = "iobj"
    OBLIQUE = "obl"
    OBLIQUE_AGENT = "obl:agent"
    OBLIQUE_TEMPORAL = "obl:tmod"
    OBLIQUE_NPMOD = "obl:npmod"
    CLAUSAL_COMPLEMENT = "ccomp"
    OPEN_CLAUSAL_COMPLEMENT = "xcomp"
    ADJECTIVAL_COMPLEMENT = "acomp"
    ATTRIBUTE = "attr"
    ADVERBIAL_MODIFIER = "advmod"
    ADVERBIAL_CLAUSE = "advcl"
    NOMINAL_MODIFIER = "nmod"
    ADJECTIVAL_MODIFIER = "amod"
    NUMERIC_MODIFIER = "nummod"
    AUXILIARY = "aux"
    AUXILIARY_PASSIVE = "aux:pass"
    COPULA = "cop"
    DETERMINER = "det"
    CASE = "case"
    MARKER = "mark"
    COORDINATING_CONJUNCTION = "cc"
    CONJUNCT = "conj"
    COMPOUND = "compound"
    FLAT = "flat"
    EXPLETIVE = "expl"
    NEGATION = "neg"
    PUNCTUATION = "punct"
    ROOT = "root"
    DEPENDENT = "dep"

    @classmethod
    def parse(cls, label: str) -> DependencyRelation:
        """Parse a relation label.

        Accepts older Stanford labels (dobj, nsubjpass, auxpass). Unknown
        subtypes fall back to their base relation; unknown labels to dep.
        """
        label = label.strip().lower()
        legacy = {
            "dobj": "obj",
            "nsubjpass": "nsubj:pass",
            "csubjpass": "csubj",
            "auxpass": "aux:pass",
            "pobj": "obl",
            "agent": "obl:agent",
            "tmod": "obl:tmod",
            "npadvmod": "obl:npmod",
        }
        label = legacy.get(label, label)
        try:
            return cls(label)
        except ValueError:
            pass
        try:
            return cls(label.split(":")[0])
        except ValueError:
            return cls.DEPENDENT

    @property
    def base(self) -> str:
        return self.value.split(":")[0]


@dataclass(frozen=True)
class TokenAnalysis:
    """A parsed token with optional lexical lookups.

    ``head`` and ``deprel`` are the parser's raw attachment (1-indexed head,
    0 for root) and are kept for reference; composition reads the explicit
    DependencyArc list of the sentence.
    """

    text: str
    lemma: str
    pos: UPos | None = None
    id: int | None = None
    head: int | None = None
    deprel: str | None = None
    features: Mapping[str, str] = field(default_factory=dict)

    confidence: float = 1.0
    """Upstream lemmatization/tagging confidence."""

    treebank_confidence: float | None = None
    """Parser attachment confidence, when the parser reports one."""

    verb_classes: VerbClassAnalysis | None = None
    frames: FrameAnalysis | None = None
    senses: SenseAnalysis | None = None

    @property
    def is_verbal(self) -> bool:
        return self.pos in (UPos.VERB, UPos.AUX)

    @property
    def is_nominal(self) -> bool:
        return self.pos in (UPos.NOUN, UPos.PROPN, UPos.PRON)


@dataclass(frozen=True)
class DependencyArc:
    """A head -> dependent edge over 0-indexed token positions."""

    head_idx: int
    dependent_idx: int
    relation: DependencyRelation
    confidence: float = 1.0


@dataclass(frozen=True)
class SentenceMetadata:
    """Sentence-level flags set by the parser."""

    sentence_id: str | None = None
    is_passive: bool = False
    is_interrogative: bool = False
    is_negated: bool = False
    is_imperative: bool = False


@dataclass(frozen=True)
class SentenceAnalysis:
    """A parsed sentence: tokens, dependency arcs and metadata."""

    text: str
    tokens: tuple[TokenAnalysis, ...] = ()
    dependencies: tuple[DependencyArc, ...] = ()
    metadata: SentenceMetadata = field(default_factory=SentenceMetadata)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def __len__(self) -> int:
        return len(self.tokens)

    def get_token(self, idx: int) -> TokenAnalysis | None:
        if 0 <= idx < len(self.tokens):
            return self.tokens[idx]
        return None

    def get_dependents(self, head_idx: int) -> list[DependencyArc]:
        """Arcs headed by ``head_idx``, in arc order."""
        return [arc for arc in self.dependencies if arc.head_idx == head_idx]

    def get_head_arc(self, dependent_idx: int) -> DependencyArc | None:
        """First arc whose dependent is ``dependent_idx``."""
        for arc in self.dependencies:
            if arc.dependent_idx == dependent_idx:
                return arc
        return None

    def find_predicates(self) -> list[int]:
        """Indices of verb and auxiliary tokens."""
        return [i for i, t in enumerate(self.tokens) if t.is_verbal]

    def validate(self) -> None:
        """Check arcs against the token list.

        Raises:
            InvalidInputError: If an arc references a token outside the
                sentence or has a confidence outside [0, 1].
        """
        size = len(self.tokens)
        for arc in self.dependencies:
            for idx in (arc.head_idx, arc.dependent_idx):
                if not 0 <= idx < size:
                    raise InvalidInputError(
                        f"Dependency arc {arc.head_idx}->{arc.dependent_idx} "
                        f"({arc.relation.value}) references token {idx} "
                        f"outside sentence of {size} tokens",
                        token_index=idx,
                    )
            if not 0.0 <= arc.confidence <= 1.0:
                raise InvalidInputError(
                    f"Dependency arc {arc.head_idx}->{arc.dependent_idx} "
                    f"has confidence {arc.confidence} outside [0, 1]",
                    token_index=arc.dependent_idx,
                )


# =============================================================================
# Event Semantics
# =============================================================================


class Voice(str, Enum):
    ACTIVE = "active"
    PASSIVE = "passive"


class LittleVType(str, Enum):
    """Primitive event operators of decompositional semantics."""

    CAUSE = "cause"
    BECOME = "become"
    BE = "be"
    DO = "do"
    EXPERIENCE = "experience"
    GO = "go"
    HAVE = "have"
    SAY = "say"
    EXIST = "exist"

    def default_roles(self) -> tuple[ThetaRole, ...]:
        """Expected roles of the operator."""
        return _DEFAULT_ROLES[self]


_DEFAULT_ROLES = {
    LittleVType.CAUSE: (ThetaRole.AGENT, ThetaRole.PATIENT),
    LittleVType.BECOME: (ThetaRole.THEME,),
    LittleVType.BE: (ThetaRole.THEME,),
    LittleVType.DO: (ThetaRole.AGENT,),
    LittleVType.EXPERIENCE: (ThetaRole.EXPERIENCER, ThetaRole.STIMULUS),
    LittleVType.GO: (ThetaRole.THEME, ThetaRole.GOAL),
    LittleVType.HAVE: (ThetaRole.AGENT, ThetaRole.THEME),
    LittleVType.SAY: (ThetaRole.AGENT, ThetaRole.RECIPIENT),
    LittleVType.EXIST: (ThetaRole.THEME, ThetaRole.LOCATION),
}


class Animacy(str, Enum):
    HUMAN = "human"
    ANIMATE = "animate"
    INANIMATE = "inanimate"


class Definiteness(str, Enum):
    DEFINITE = "definite"
    INDEFINITE = "indefinite"


class Countability(str, Enum):
    COUNT = "count"
    MASS = "mass"


class Concreteness(str, Enum):
    CONCRETE = "concrete"
    ABSTRACT = "abstract"


@dataclass(frozen=True)
class ParticipantFeatures:
    """Semantic features of a participant, each independently optional."""

    animacy: Animacy | None = None
    definiteness: Definiteness | None = None
    countability: Countability | None = None
    concreteness: Concreteness | None = None


@dataclass(frozen=True)
class Participant:
    """An entity filling a thematic role."""

    text: str
    """Head word."""

    token_idx: int | None = None
    """Head token position; None for placeholders."""

    expression: str = ""
    """Surface phrase (head plus determiners and modifiers)."""

    features: ParticipantFeatures = field(default_factory=ParticipantFeatures)

    @classmethod
    def placeholder(cls, role: ThetaRole) -> Participant:
        """Stand-in for an expected but unfilled role."""
        text = f"[{role.value}]"
        return cls(text=text, expression=text)

    @property
    def is_placeholder(self) -> bool:
        return self.token_idx is None


class PredicateSemanticType(str, Enum):
    ACTION = "action"
    STATE = "state"
    ACHIEVEMENT = "achievement"
    ACCOMPLISHMENT = "accomplishment"
    ACTIVITY = "activity"
    CAUSATIVE = "causative"
    INCHOATIVE = "inchoative"


class SemanticFeature(str, Enum):
    """Feature tags attached to a predicate."""

    MOTION = "motion"
    TRANSFER = "transfer"
    CONTACT = "contact"
    CHANGE_OF_STATE = "change_of_state"
    PERCEPTION = "perception"
    CREATION = "creation"
    COMMUNICATION = "communication"


@dataclass(frozen=True)
class Predicate:
    lemma: str
    semantic_type: PredicateSemanticType
    verb_class: str | None = None
    features: tuple[SemanticFeature, ...] = ()


class ModifierType(str, Enum):
    MANNER = "manner"
    TEMPORAL = "temporal"
    LOCATIVE = "locative"
    INSTRUMENTAL = "instrumental"
    PURPOSE = "purpose"
    DEGREE = "degree"


@dataclass(frozen=True)
class EventModifier:
    """An adjunct modifying the event, with its source token."""

    modifier_type: ModifierType
    expression: str
    token_idx: int


class StructureKind(str, Enum):
    SIMPLE = "simple"
    CAUSATIVE = "causative"
    INCHOATIVE = "inchoative"
    STATIVE = "stative"


@dataclass(frozen=True)
class EventStructure:
    """Internal structure of an event.

    Flat by construction: a causative records the caused sub-event's
    operator and predicate rather than owning a nested Event.
    """

    kind: StructureKind = StructureKind.SIMPLE
    causer: Participant | None = None
    theme: Participant | None = None
    caused_type: LittleVType | None = None
    caused_predicate: str | None = None
    result_state: str | None = None


@dataclass(frozen=True)
class Event:
    """A Neo-Davidsonian event."""

    id: int
    predicate: Predicate
    little_v: LittleVType
    participants: Mapping[ThetaRole, Participant] = field(default_factory=dict)
    aspect: AspectualClass = AspectualClass.ACTIVITY
    voice: Voice = Voice.ACTIVE
    structure: EventStructure = field(default_factory=EventStructure)
    modifiers: tuple[EventModifier, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "participants", MappingProxyType(dict(self.participants)))
        object.__setattr__(self, "modifiers", tuple(self.modifiers))

    def has_role(self, role: ThetaRole) -> bool:
        return role in self.participants

    def get_participant(self, role: ThetaRole) -> Participant | None:
        return self.participants.get(role)


# =============================================================================
# Composition Results
# =============================================================================


@dataclass(frozen=True)
class ComposedEvent:
    """An event with its provenance and confidences."""

    id: int
    event: Event
    token_span: tuple[int, int]
    verbnet_source: str | None = None
    framenet_source: str | None = None
    decomposition_confidence: float = 0.0
    binding_confidence: float = 0.0

    def overall_confidence(self) -> float:
        """Mean of decomposition and binding confidence, in [0, 1]."""
        value = (self.decomposition_confidence + self.binding_confidence) / 2
        return min(max(value, 0.0), 1.0)

    def has_role(self, role: ThetaRole) -> bool:
        return self.event.has_role(role)

    def get_participant(self, role: ThetaRole) -> Participant | None:
        return self.event.get_participant(role)

    @property
    def predicate(self) -> str:
        return self.event.predicate.lemma


class UnbindingReason(str, Enum):
    NO_PREDICATE_FOUND = "no_predicate_found"
    AMBIGUOUS_ROLE = "ambiguous_role"
    EXTRA_CORE_ARGUMENT = "extra_core_argument"
    MISSING_DEPENDENCY = "missing_dependency"
    SEMANTIC_MISMATCH = "semantic_mismatch"


@dataclass(frozen=True)
class UnboundEntity:
    """A token that could not be attached to any event role."""

    token_idx: int
    text: str
    reason: UnbindingReason
    suggested_role: ThetaRole | None = None


@dataclass(frozen=True)
class ComposedEvents:
    """All events composed from one sentence."""

    events: tuple[ComposedEvent, ...] = ()
    unbound_entities: tuple[UnboundEntity, ...] = ()
    confidence: float = 0.0
    processing_time_us: int = 0
    sources: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "events", tuple(self.events))
        object.__setattr__(self, "unbound_entities", tuple(self.unbound_entities))
        object.__setattr__(self, "sources", tuple(self.sources))

    @classmethod
    def empty(cls) -> ComposedEvents:
        return cls()

    def has_events(self) -> bool:
        return bool(self.events)

    @property
    def primary_event(self) -> ComposedEvent | None:
        return self.events[0] if self.events else None

    @property
    def predicates(self) -> list[str]:
        return [e.predicate for e in self.events]

    def total_participants(self) -> int:
        return sum(len(e.event.participants) for e in self.events)

    def __iter__(self) -> Iterator[ComposedEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)
