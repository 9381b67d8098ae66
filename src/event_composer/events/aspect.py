"""Vendler aspectual classification.

Classifies predicates into the four Vendler classes and encodes the
linguistic tests that distinguish them:
- States: incompatible with the progressive (*"I am knowing")
- Activities: compatible with "for X time"
- Accomplishments: compatible with "for X time" and "in X time"
- Achievements: "at X moment", instantaneous; progressive only by coercion

Example:
    >>> AspectualClass.classify_verb("build", has_direct_object=True)
    <AspectualClass.ACCOMPLISHMENT: 'accomplishment'>
    >>> AspectualClass.classify_verb("build", has_direct_object=False)
    <AspectualClass.ACTIVITY: 'activity'>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import LittleVType


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class AspectualFeatures:
    """Temporal features of an aspectual class."""

    dynamic: bool
    durative: bool
    telic: bool

    def compose(self, other: AspectualFeatures) -> AspectualFeatures:
        """Combine with a modifier's features.

        Either side can contribute change or duration; endedness needs both.
        """
        return AspectualFeatures(
            dynamic=self.dynamic or other.dynamic,
            durative=self.durative or other.durative,
            telic=self.telic and other.telic,
        )


class ProgressiveCompatibility(str, Enum):
    """How a class behaves under the progressive."""

    COMPATIBLE = "compatible"
    COERCIBLE = "coercible"  # "is arriving" shifts to the preparatory phase
    INCOMPATIBLE = "incompatible"


class TemporalModifier(str, Enum):
    """Duration/frame adverbial types."""

    FOR_ADVERBIAL = "for"  # "for an hour"
    IN_ADVERBIAL = "in"  # "in an hour"
    AT_ADVERBIAL = "at"  # "at noon"


class AspectualClass(str, Enum):
    """Vendler aspectual classes."""

    STATE = "state"
    ACTIVITY = "activity"
    ACCOMPLISHMENT = "accomplishment"
    ACHIEVEMENT = "achievement"

    def features(self) -> AspectualFeatures:
        return _FEATURES[self]

    @classmethod
    def from_features(cls, features: AspectualFeatures) -> AspectualClass:
        """Map features back onto the closest class."""
        if not features.dynamic:
            return cls.STATE
        if features.durative:
            return cls.ACCOMPLISHMENT if features.telic else cls.ACTIVITY
        if features.telic:
            return cls.ACHIEVEMENT
        return cls.ACTIVITY

    @classmethod
    def classify_verb(cls, lemma: str, has_direct_object: bool) -> AspectualClass:
        return classify_verb(lemma, has_direct_object)

    def compose(self, other: AspectualClass) -> AspectualClass:
        return compose(self, other)

    def progressive_compatibility(self) -> ProgressiveCompatibility:
        return progressive_compatibility(self)

    def is_compatible_with(self, modifier: TemporalModifier) -> bool:
        return temporal_modifier_compatibility(self, modifier)


_FEATURES = {
    AspectualClass.STATE: AspectualFeatures(dynamic=False, durative=True, telic=False),
    AspectualClass.ACTIVITY: AspectualFeatures(dynamic=True, durative=True, telic=False),
    AspectualClass.ACCOMPLISHMENT: AspectualFeatures(dynamic=True, durative=True, telic=True),
    AspectualClass.ACHIEVEMENT: AspectualFeatures(dynamic=True, durative=False, telic=True),
}

_PROGRESSIVE = {
    AspectualClass.STATE: ProgressiveCompatibility.INCOMPATIBLE,
    AspectualClass.ACTIVITY: ProgressiveCompatibility.COMPATIBLE,
    AspectualClass.ACCOMPLISHMENT: ProgressiveCompatibility.COMPATIBLE,
    AspectualClass.ACHIEVEMENT: ProgressiveCompatibility.COERCIBLE,
}

_TEMPORAL_MODIFIERS = {
    AspectualClass.STATE: {TemporalModifier.FOR_ADVERBIAL},
    AspectualClass.ACTIVITY: {TemporalModifier.FOR_ADVERBIAL},
    AspectualClass.ACCOMPLISHMENT: {
        TemporalModifier.FOR_ADVERBIAL,
        TemporalModifier.IN_ADVERBIAL,
    },
    AspectualClass.ACHIEVEMENT: {TemporalModifier.AT_ADVERBIAL},
}


# =============================================================================
# Lexical Classes
# =============================================================================


STATIVE_VERBS = frozenset({
    "be", "have", "know", "love", "hate", "want", "need", "own", "believe",
    "think", "understand", "remember", "forget", "doubt", "resemble",
    "contain", "include", "lack", "owe", "cost", "weigh", "measure",
})

ACHIEVEMENT_VERBS = frozenset({
    "arrive", "die", "leave", "start", "stop", "finish", "begin", "end",
    "reach", "find", "lose", "win", "notice", "realize", "recognize",
    "discover", "spot", "break", "explode", "collapse",
})

ACTIVITY_VERBS = frozenset({
    "run", "walk", "swim", "dance", "play", "work", "study", "sleep", "rest",
    "wait", "sit", "stand", "lie", "laugh", "cry", "sing", "talk", "chat",
    "argue",
})

# Accomplishments with an object ("build a house"), activities without
CREATION_VERBS = frozenset({
    "build", "create", "make", "write", "draw", "paint", "cook", "destroy",
    "repair", "fix", "clean", "wash",
})

CONSUMPTION_VERBS = frozenset({"eat", "drink", "read", "watch"})

LEXICAL_VERBS = (
    STATIVE_VERBS | ACHIEVEMENT_VERBS | ACTIVITY_VERBS | CREATION_VERBS | CONSUMPTION_VERBS
)


def classify_verb(lemma: str, has_direct_object: bool) -> AspectualClass:
    """Classify a verb by lexical class and transitivity.

    Unlisted verbs default to Accomplishment when transitive and Activity
    otherwise.
    """
    lemma = lemma.lower()
    if lemma in STATIVE_VERBS:
        return AspectualClass.STATE
    if lemma in ACHIEVEMENT_VERBS:
        return AspectualClass.ACHIEVEMENT
    if lemma in ACTIVITY_VERBS:
        return AspectualClass.ACTIVITY
    if has_direct_object:
        return AspectualClass.ACCOMPLISHMENT
    return AspectualClass.ACTIVITY


def compose(a: AspectualClass, b: AspectualClass) -> AspectualClass:
    """Compose a base class with a modifier's class."""
    return AspectualClass.from_features(a.features().compose(b.features()))


def progressive_compatibility(aspect: AspectualClass) -> ProgressiveCompatibility:
    return _PROGRESSIVE[aspect]


def temporal_modifier_compatibility(
    aspect: AspectualClass, modifier: TemporalModifier
) -> bool:
    return modifier in _TEMPORAL_MODIFIERS[aspect]


# =============================================================================
# Classifier
# =============================================================================


class AspectualClassifier:
    """Classifies event aspect from lexical class, then decomposition.

    Lexically listed verbs are classified directly. Other verbs fall back
    to the aspect implied by their little-v operator, and finally to the
    transitivity default.
    """

    LEXICAL_CONFIDENCE = 0.9
    LITTLE_V_CONFIDENCE = 0.6
    DEFAULT_CONFIDENCE = 0.5

    def classify(
        self,
        lemma: str,
        has_direct_object: bool,
        little_v: LittleVType | None = None,
    ) -> tuple[AspectualClass, float]:
        """Classify a predicate.

        Args:
            lemma: Predicate lemma
            has_direct_object: Whether an object was bound
            little_v: Decomposed operator, if known

        Returns:
            Tuple of (AspectualClass, confidence)
        """
        lower = lemma.lower()
        if lower in LEXICAL_VERBS:
            return classify_verb(lower, has_direct_object), self.LEXICAL_CONFIDENCE

        if little_v is not None:
            return _aspect_for_little_v(little_v, has_direct_object), self.LITTLE_V_CONFIDENCE

        return classify_verb(lower, has_direct_object), self.DEFAULT_CONFIDENCE


def _aspect_for_little_v(little_v: LittleVType, has_direct_object: bool) -> AspectualClass:
    from .types import LittleVType

    if little_v in (LittleVType.BE, LittleVType.HAVE, LittleVType.EXIST):
        return AspectualClass.STATE
    if little_v == LittleVType.BECOME:
        return AspectualClass.ACHIEVEMENT
    if little_v in (LittleVType.CAUSE, LittleVType.GO):
        return AspectualClass.ACCOMPLISHMENT
    if little_v == LittleVType.DO and has_direct_object:
        return AspectualClass.ACCOMPLISHMENT
    return AspectualClass.ACTIVITY
