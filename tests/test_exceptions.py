"""Tests for event_composer exception hierarchy."""

import pytest

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


class TestEventComposerError:
    """Tests for base EventComposerError."""

    def test_basic_error(self):
        """Test creating a basic error."""
        err = EventComposerError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.cause is None

    def test_error_with_cause(self):
        """Test error with underlying cause."""
        cause = ValueError("inner error")
        err = EventComposerError("Outer error", cause=cause)
        assert "Outer error" in str(err)
        assert "inner error" in str(err)
        assert err.cause is cause

    def test_all_errors_inherit_from_base(self):
        """Test that all exceptions inherit from EventComposerError."""
        exceptions = [
            ConfigurationError("test"),
            InvalidInputError("test"),
            DecompositionError("test"),
            VerbClassIndexError("test"),
            IndexDirectoryNotFoundError("/missing"),
            InvalidIndexFormatError("classes.yaml", "bad"),
            IndexNotInitializedError(),
            BatchCompositionError(0, ValueError("boom")),
        ]
        for exc in exceptions:
            assert isinstance(exc, EventComposerError), f"{type(exc).__name__} should inherit from EventComposerError"


class TestInputErrors:
    """Tests for input errors."""

    def test_token_index(self):
        """Test InvalidInputError carries the offending token index."""
        err = InvalidInputError("Arc out of range", token_index=7)
        assert err.token_index == 7
        assert err.cause is None

    def test_token_index_optional(self):
        """Test token index defaults to None."""
        assert InvalidInputError("bad").token_index is None


class TestIndexErrors:
    """Tests for verb-class index error hierarchy."""

    def test_directory_not_found(self):
        """Test IndexDirectoryNotFoundError keeps the path."""
        err = IndexDirectoryNotFoundError("/data/verbnet")
        assert isinstance(err, VerbClassIndexError)
        assert err.path == "/data/verbnet"
        assert "/data/verbnet" in str(err)

    def test_invalid_format(self):
        """Test InvalidIndexFormatError keeps path, reason and cause."""
        cause = KeyError("id")
        err = InvalidIndexFormatError("give.yaml", "entry 0 missing 'id'", cause=cause)
        assert isinstance(err, VerbClassIndexError)
        assert err.path == "give.yaml"
        assert err.reason == "entry 0 missing 'id'"
        assert err.cause is cause
        assert str(err).startswith("Invalid verb-class data in give.yaml")

    def test_not_initialized(self):
        """Test IndexNotInitializedError names the operation."""
        err = IndexNotInitializedError("get_verb_classes")
        assert isinstance(err, VerbClassIndexError)
        assert err.operation == "get_verb_classes"
        assert "get_verb_classes" in str(err)

    def test_not_initialized_default_operation(self):
        """Test the default operation name."""
        assert IndexNotInitializedError().operation == "lookup"


class TestBatchErrors:
    """Tests for batch errors."""

    def test_sentence_index(self):
        """Test BatchCompositionError keeps the failing position."""
        cause = InvalidInputError("bad arc")
        err = BatchCompositionError(3, cause)
        assert err.sentence_index == 3
        assert err.cause is cause
        assert "Sentence 3 failed" in str(err)
        assert "bad arc" in str(err)

    def test_catch_as_base(self):
        """Test batch errors are caught by the base class."""
        with pytest.raises(EventComposerError):
            raise BatchCompositionError(0, ValueError("boom"))
