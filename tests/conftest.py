"""Pytest configuration for event-composer tests."""

import pytest

from event_composer.config import EventComposerConfig
from event_composer.events import EventComposer, SentenceAnalysisBuilder
from event_composer.lexicon import VerbClassIndex


# =============================================================================
# Shared Resources
# =============================================================================


@pytest.fixture(scope="session")
def verb_index():
    """Bundled verb-class inventory, loaded once per test session."""
    return VerbClassIndex.default()


@pytest.fixture
def composer(verb_index):
    """Composer with default settings over the bundled inventory."""
    return EventComposer(EventComposerConfig(), verb_index=verb_index)


# =============================================================================
# Sentence Fixtures
# =============================================================================


@pytest.fixture
def john_runs():
    """'John runs' - intransitive motion verb."""
    return (
        SentenceAnalysisBuilder("John runs")
        .add_token("John", "John", "PROPN")
        .add_token("runs", "run", "VERB")
        .add_arc(1, 0, "nsubj")
        .build()
    )


@pytest.fixture
def mary_walks():
    """'Mary walks' - verb missing from the inventory."""
    return (
        SentenceAnalysisBuilder("Mary walks")
        .add_token("Mary", "Mary", "PROPN")
        .add_token("walks", "walk", "VERB")
        .add_arc(1, 0, "nsubj")
        .build()
    )


@pytest.fixture
def john_gave():
    """'John gave Mary a book' - ditransitive transfer."""
    return (
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


@pytest.fixture
def vase_broken():
    """'The vase was broken' - agentless passive."""
    return (
        SentenceAnalysisBuilder("The vase was broken")
        .add_token("The", "the", "DET")
        .add_token("vase", "vase", "NOUN")
        .add_token("was", "be", "AUX")
        .add_token("broken", "break", "VERB")
        .add_arc(1, 0, "det")
        .add_arc(3, 1, "nsubj")
        .add_arc(3, 2, "aux")
        .with_metadata(is_passive=True)
        .build()
    )


@pytest.fixture
def broke_the_vase():
    """'broke the vase' - transitive with no subject."""
    return (
        SentenceAnalysisBuilder("broke the vase")
        .add_token("broke", "break", "VERB")
        .add_token("the", "the", "DET")
        .add_token("vase", "vase", "NOUN")
        .add_arc(2, 1, "det")
        .add_arc(0, 2, "obj")
        .build()
    )


@pytest.fixture
def john_is_happy():
    """'John is happy' - copula attached to an adjectival head."""
    return (
        SentenceAnalysisBuilder("John is happy")
        .add_token("John", "John", "PROPN")
        .add_token("is", "be", "AUX")
        .add_token("happy", "happy", "ADJ")
        .add_arc(2, 0, "nsubj")
        .add_arc(2, 1, "cop")
        .build()
    )
