"""Event Composer - Neo-Davidsonian event composition for parsed sentences.

Turns a sentence's morphosyntactic analysis (tokens plus dependency arcs)
into events:
- Predicates decomposed into little-v operators (Cause, Become, Do, ...)
- Dependents bound to thematic roles (Agent, Theme, Recipient, ...)
- Events classified by Vendler aspect
- Events combined into conjunctions, sequences and causal chains

Example:
    from event_composer import EventComposer, EventComposerConfig, VerbClassIndex

    index = VerbClassIndex.default()
    composer = EventComposer(EventComposerConfig.from_env(), verb_index=index)
    result = composer.compose_sentence(analysis)
    print(result.predicates, result.confidence)
"""

__version__ = "0.1.0"

from event_composer.config import (
    BatchConfig,
    ConfidenceWeights,
    DecomposerConfig,
    EventComposerConfig,
)
from event_composer.events import (
    ComposedEvent,
    ComposedEvents,
    CompositeEvent,
    EventComposer,
    SentenceAnalysis,
    SentenceAnalysisBuilder,
    compose_causation,
    compose_conjunction,
    compose_sequence,
    is_temporally_consistent,
)
from event_composer.exceptions import (
    BatchCompositionError,
    ConfigurationError,
    DecompositionError,
    EventComposerError,
    IndexDirectoryNotFoundError,
    IndexNotInitializedError,
    InvalidIndexFormatError,
    InvalidInputError,
    VerbClassIndexError,
)
from event_composer.lexicon import ThetaRole, VerbClassIndex

__all__ = [
    "__version__",
    # Configuration
    "BatchConfig",
    "ConfidenceWeights",
    "DecomposerConfig",
    "EventComposerConfig",
    # Composition
    "ComposedEvent",
    "ComposedEvents",
    "CompositeEvent",
    "EventComposer",
    "SentenceAnalysis",
    "SentenceAnalysisBuilder",
    "compose_causation",
    "compose_conjunction",
    "compose_sequence",
    "is_temporally_consistent",
    # Lexicon
    "ThetaRole",
    "VerbClassIndex",
    # Errors
    "BatchCompositionError",
    "ConfigurationError",
    "DecompositionError",
    "EventComposerError",
    "IndexDirectoryNotFoundError",
    "IndexNotInitializedError",
    "InvalidIndexFormatError",
    "InvalidInputError",
    "VerbClassIndexError",
]
