"""Confidence fusion for composed events.

Combines the independent confidence sources behind an event into one
score, and aggregates event scores into a sentence-level confidence.

Per event:
    verb-class confidence * w_verbnet
    + mean treebank confidence * w_treebank
    + decomposition confidence * w_decomposition
    + binding confidence * w_binding

Per sentence: geometric mean of event overall confidences, reduced by a
fixed penalty per unbound entity and boosted when several lexical
sources agree.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from ..config import ConfidenceWeights
from .types import ComposedEvent

# Used when a source reports nothing
NEUTRAL_CONFIDENCE = 0.5

SOURCE_BOOST = {2: 1.05, 3: 1.1}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def mean_treebank_confidence(confidences: Iterable[float | None]) -> float:
    """Mean parser confidence over tokens that report one."""
    reported = [c for c in confidences if c is not None]
    if not reported:
        return NEUTRAL_CONFIDENCE
    return sum(reported) / len(reported)


class ConfidenceCalculator:
    """Fuses per-source confidences using configurable weights.

    Usage:
        calculator = ConfidenceCalculator(ConfidenceWeights())
        score = calculator.event_score(
            verbnet=0.9, treebank=0.95, decomposition=0.8, binding=0.67
        )
    """

    def __init__(self, weights: ConfidenceWeights | None = None):
        self.weights = weights or ConfidenceWeights()

    def event_score(
        self,
        verbnet: float | None,
        treebank: float | None,
        decomposition: float,
        binding: float,
    ) -> float:
        """Weighted combination of the four evidence sources.

        Missing verb-class or treebank evidence counts as neutral.

        Returns:
            Fused score from 0.0 to 1.0
        """
        w = self.weights
        score = (
            (NEUTRAL_CONFIDENCE if verbnet is None else verbnet) * w.verbnet
            + (NEUTRAL_CONFIDENCE if treebank is None else treebank) * w.treebank
            + decomposition * w.decomposition
            + binding * w.binding
        )
        return _clamp(score)

    def sentence_score(
        self,
        events: Sequence[ComposedEvent],
        unbound_count: int,
        source_families: int,
    ) -> float:
        """Aggregate confidence for a whole sentence.

        Args:
            events: Composed events kept for the sentence
            unbound_count: Number of unbound entities recorded
            source_families: Distinct lexical source kinds that contributed
                (verb classes, frames, heuristics, ...)

        Returns:
            Sentence confidence from 0.0 to 1.0; 0.0 with no events
        """
        if not events:
            return 0.0

        scores = [e.overall_confidence() for e in events]
        if any(s <= 0.0 for s in scores):
            geometric = 0.0
        else:
            geometric = math.exp(sum(math.log(s) for s in scores) / len(scores))

        score = max(0.0, geometric - self.weights.unbound_penalty * unbound_count)

        boost = SOURCE_BOOST.get(min(source_families, 3), 1.0)
        return _clamp(score * boost)
