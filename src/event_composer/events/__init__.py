"""Event composition: decomposition, theta-role binding, aspect and algebra.

Example:
    from event_composer.events import EventComposer, SentenceAnalysisBuilder

    analysis = (
        SentenceAnalysisBuilder("John gave Mary a book")
        .add_token("John", "John", "PROPN")
        .add_token("gave", "give", "VERB")
        .add_token("Mary", "Mary", "PROPN")
        .add_token("a", "a", "DET")
        .add_token("book", "book", "NOUN")
        .add_arc(1, 0, "nsubj")
        .add_arc(1, 2, "iobj")
        .add_arc(4, 3, "det")
        .add_arc(1, 4, "obj")
        .build()
    )
    result = EventComposer().compose_sentence(analysis)
"""

from .algebra import (
    CausalRelation,
    CausationType,
    CompositeEvent,
    CompositionType,
    RelationGraph,
    TemporalRelation,
    TemporalRelationType,
    compose_causation,
    compose_conjunction,
    compose_sequence,
    is_temporally_consistent,
)
from .aspect import (
    AspectualClass,
    AspectualClassifier,
    AspectualFeatures,
    ProgressiveCompatibility,
    TemporalModifier,
    classify_verb,
    progressive_compatibility,
    temporal_modifier_compatibility,
)
from .binding import BindingResult, ThetaRoleBinder
from .builder import (
    SentenceAnalysisBuilder,
    arcs_from_heads,
    extract_metadata,
    parse_conllu_sentence,
)
from .composer import EventComposer
from .confidence import ConfidenceCalculator
from .decomposition import (
    DecomposedEvent,
    DecompositionArena,
    DecompositionNode,
    PredicateDecomposer,
    select_by_coverage,
)
from .types import (
    Animacy,
    ComposedEvent,
    ComposedEvents,
    Concreteness,
    Countability,
    Definiteness,
    DependencyArc,
    DependencyRelation,
    Event,
    EventModifier,
    EventStructure,
    LittleVType,
    ModifierType,
    Participant,
    ParticipantFeatures,
    Predicate,
    PredicateSemanticType,
    SemanticFeature,
    SentenceAnalysis,
    SentenceMetadata,
    StructureKind,
    TokenAnalysis,
    UnbindingReason,
    UnboundEntity,
    UPos,
    Voice,
)

__all__ = [
    # Data model
    "Animacy",
    "ComposedEvent",
    "ComposedEvents",
    "Concreteness",
    "Countability",
    "Definiteness",
    "DependencyArc",
    "DependencyRelation",
    "Event",
    "EventModifier",
    "EventStructure",
    "LittleVType",
    "ModifierType",
    "Participant",
    "ParticipantFeatures",
    "Predicate",
    "PredicateSemanticType",
    "SemanticFeature",
    "SentenceAnalysis",
    "SentenceMetadata",
    "StructureKind",
    "TokenAnalysis",
    "UnbindingReason",
    "UnboundEntity",
    "UPos",
    "Voice",
    # Aspect
    "AspectualClass",
    "AspectualClassifier",
    "AspectualFeatures",
    "ProgressiveCompatibility",
    "TemporalModifier",
    "classify_verb",
    "progressive_compatibility",
    "temporal_modifier_compatibility",
    # Decomposition and binding
    "DecomposedEvent",
    "DecompositionArena",
    "DecompositionNode",
    "PredicateDecomposer",
    "select_by_coverage",
    "BindingResult",
    "ThetaRoleBinder",
    "ConfidenceCalculator",
    # Composition
    "EventComposer",
    "SentenceAnalysisBuilder",
    "arcs_from_heads",
    "extract_metadata",
    "parse_conllu_sentence",
    # Algebra
    "CausalRelation",
    "CausationType",
    "CompositeEvent",
    "CompositionType",
    "RelationGraph",
    "TemporalRelation",
    "TemporalRelationType",
    "compose_causation",
    "compose_conjunction",
    "compose_sequence",
    "is_temporally_consistent",
]
