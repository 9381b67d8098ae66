"""Standard exception hierarchy for event-composer.

All event-composer exceptions inherit from EventComposerError, making it
easy to catch all library-specific errors.

Only hard errors are raised. Linguistic problems (unknown verbs, roles that
cannot be bound) are reported as UnboundEntity records and lowered
confidence instead.

Exception Hierarchy:
    EventComposerError (base)
    ├── ConfigurationError - Invalid configuration
    ├── InvalidInputError - Malformed sentence analysis
    ├── DecompositionError - Decomposition arena misuse
    ├── VerbClassIndexError - Base for verb-class index errors
    │   ├── IndexDirectoryNotFoundError - Data directory missing
    │   ├── InvalidIndexFormatError - Unreadable class definition
    │   └── IndexNotInitializedError - Query against an empty index
    └── BatchCompositionError - Fail-fast batch abort
"""


class EventComposerError(Exception):
    """Base exception for all event-composer errors.

    Catch this to handle any library-specific exception:
        try:
            events = composer.compose_sentence(analysis)
        except EventComposerError as e:
            logger.error(f"Composition failed: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(EventComposerError):
    """Invalid configuration.

    Raised when EventComposerConfig has out-of-range values, weights that
    do not sum to one, or a config file that cannot be read.
    """

    pass


# =============================================================================
# Input Errors
# =============================================================================


class InvalidInputError(EventComposerError):
    """Malformed sentence analysis.

    Raised when:
    - A dependency arc references a token index outside the sentence
    - A dependency arc carries a confidence outside [0, 1]

    The whole sentence is rejected; nothing is retried internally.
    """

    def __init__(
        self,
        message: str,
        token_index: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.token_index = token_index


class DecompositionError(EventComposerError):
    """Decomposition arena error.

    Raised when a decomposition would nest deeper than the configured
    maximum depth, or a node id does not exist in the arena.
    """

    pass


# =============================================================================
# Verb-Class Index Errors
# =============================================================================


class VerbClassIndexError(EventComposerError):
    """Base exception for verb-class index errors."""

    pass


class IndexDirectoryNotFoundError(VerbClassIndexError):
    """The verb-class data directory does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Verb-class directory not found: {path}")
        self.path = path


class InvalidIndexFormatError(VerbClassIndexError):
    """A verb-class definition file could not be parsed.

    Raised when:
    - The file is not valid YAML
    - A class entry is missing its id
    - A role or restriction name is unknown
    """

    def __init__(self, path: str, reason: str, cause: Exception | None = None):
        super().__init__(f"Invalid verb-class data in {path}: {reason}", cause)
        self.path = path
        self.reason = reason


class IndexNotInitializedError(VerbClassIndexError):
    """A query was made against an index with no loaded data."""

    def __init__(self, operation: str = "lookup"):
        super().__init__(f"Verb-class index is not initialized ({operation})")
        self.operation = operation


# =============================================================================
# Batch Errors
# =============================================================================


class BatchCompositionError(EventComposerError):
    """A hard error aborted batch composition.

    Raised on the first hard error when the batch runs with fail_fast
    enabled, or when the batch timeout expires. The failing (or first
    unfinished) sentence position is kept so callers can report it.
    """

    def __init__(self, sentence_index: int, cause: Exception):
        super().__init__(f"Sentence {sentence_index} failed", cause)
        self.sentence_index = sentence_index
