"""Pluggable lexical resources.

Every lexical backend (verb classes, semantic frames, word senses) exposes
the same capability: ``lookup(lemma)`` returning an analysis with an
attached confidence, or None when the lemma is unknown. The composer is
handed resources explicitly; nothing here is a process-wide singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, TypeVar

from .models import VerbClass
from .verb_classes import VerbClassIndex

AnalysisT = TypeVar("AnalysisT", covariant=True)


class LexicalResource(Protocol[AnalysisT]):
    """Protocol for lemma-keyed lexical lookups."""

    def lookup(self, lemma: str) -> AnalysisT | None:
        """Analyze a lemma, or return None if the resource does not know it."""
        ...


# =============================================================================
# Analyses
# =============================================================================


@dataclass(frozen=True)
class VerbClassAnalysis:
    """Verb classes found for a lemma."""

    verb_classes: tuple[VerbClass, ...]
    confidence: float

    @property
    def primary_class(self) -> VerbClass | None:
        return self.verb_classes[0] if self.verb_classes else None

    @property
    def class_ids(self) -> list[str]:
        return [c.id for c in self.verb_classes]


@dataclass(frozen=True)
class FrameInfo:
    """A semantic frame evoked by a lemma."""

    name: str
    elements: tuple[str, ...] = ()


@dataclass(frozen=True)
class FrameAnalysis:
    """Frames found for a lemma."""

    frames: tuple[FrameInfo, ...]
    confidence: float

    @property
    def primary_frame(self) -> FrameInfo | None:
        return self.frames[0] if self.frames else None


@dataclass(frozen=True)
class SenseAnalysis:
    """Word senses found for a lemma.

    ``lexname`` is the lexicographer file of the first sense
    (e.g. "noun.person", "noun.artifact").
    """

    synsets: tuple[str, ...]
    lexname: str | None
    confidence: float


# =============================================================================
# Implementations
# =============================================================================


def class_count_confidence(count: int) -> float:
    """Lookup confidence by how many classes matched.

    A single class is unambiguous; each additional class spreads the
    probability mass thinner.
    """
    if count == 0:
        return 0.1
    if count == 1:
        confidence = 0.9
    elif count <= 3:
        confidence = 0.8
    elif count <= 6:
        confidence = 0.7
    else:
        confidence = 0.6
    return min(confidence, 0.95)


class VerbClassResource:
    """Verb-class lookups backed by a shared VerbClassIndex."""

    def __init__(self, index: VerbClassIndex):
        self.index = index

    def lookup(self, lemma: str) -> VerbClassAnalysis | None:
        classes = self.index.get_verb_classes(lemma)
        if not classes:
            return None
        return VerbClassAnalysis(
            verb_classes=tuple(classes),
            confidence=class_count_confidence(len(classes)),
        )


class StaticFrameResource:
    """Frame lookups from an in-memory lemma -> frame names mapping."""

    def __init__(self, frames: Mapping[str, list[str]], confidence: float = 0.7):
        self._frames = {k.lower(): tuple(v) for k, v in frames.items()}
        self.confidence = confidence

    def lookup(self, lemma: str) -> FrameAnalysis | None:
        names = self._frames.get(lemma.lower())
        if not names:
            return None
        return FrameAnalysis(
            frames=tuple(FrameInfo(name=n) for n in names),
            confidence=self.confidence,
        )


class StaticSenseResource:
    """Sense lookups from an in-memory lemma -> lexname mapping."""

    def __init__(self, lexnames: Mapping[str, str], confidence: float = 0.7):
        self._lexnames = {k.lower(): v for k, v in lexnames.items()}
        self.confidence = confidence

    def lookup(self, lemma: str) -> SenseAnalysis | None:
        lexname = self._lexnames.get(lemma.lower())
        if lexname is None:
            return None
        return SenseAnalysis(
            synsets=(f"{lemma.lower()}.n.01",),
            lexname=lexname,
            confidence=self.confidence,
        )
