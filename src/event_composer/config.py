"""Configuration for the event composition engine.

EventComposerConfig bundles every tunable of the pipeline:
- Confidence threshold and per-sentence event cap
- Decomposition confidence levels per evidence source
- Confidence fusion weights
- Batch dispatch (worker pool size, fail-fast policy, timeout)

Example:
    >>> from event_composer.config import EventComposerConfig
    >>>
    >>> config = EventComposerConfig.strict()
    >>> config.batch.max_workers = 8
    >>>
    >>> # Serialize and restore
    >>> restored = EventComposerConfig.from_dict(config.to_dict())
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


# =============================================================================
# Stage Configs
# =============================================================================


@dataclass
class DecomposerConfig:
    """Confidence levels used by the predicate decomposer."""

    evidence_weight: float = 0.6
    """Weight of lexical evidence against upstream parser confidence."""

    class_default_confidence: float = 0.75
    """Base confidence when only the verb-class id is recognized."""

    frame_confidence: float = 0.6
    """Base confidence for frame-name fallback."""

    heuristic_confidence: float = 0.4
    """Confidence for closed-class lemma cues."""

    unknown_confidence: float = 0.3
    """Base confidence when no lexical evidence exists at all."""

    max_depth: int = 3
    """Maximum nesting depth of a decomposition (root counts as 1)."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "evidence_weight": self.evidence_weight,
            "class_default_confidence": self.class_default_confidence,
            "frame_confidence": self.frame_confidence,
            "heuristic_confidence": self.heuristic_confidence,
            "unknown_confidence": self.unknown_confidence,
            "max_depth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecomposerConfig:
        """Deserialize from dictionary."""
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})


@dataclass
class ConfidenceWeights:
    """Weights for fusing per-event confidence sources."""

    verbnet: float = 0.30
    """Verb-class lookup confidence."""

    treebank: float = 0.20
    """Mean parser confidence over the sentence tokens."""

    decomposition: float = 0.25
    """Predicate decomposition confidence."""

    binding: float = 0.25
    """Theta-role binding confidence."""

    unbound_penalty: float = 0.1
    """Subtracted from sentence confidence per unbound entity."""

    def total(self) -> float:
        """Sum of the four source weights."""
        return self.verbnet + self.treebank + self.decomposition + self.binding

    def to_dict(self) -> dict[str, float]:
        """Serialize to dictionary."""
        return {
            "verbnet": self.verbnet,
            "treebank": self.treebank,
            "decomposition": self.decomposition,
            "binding": self.binding,
            "unbound_penalty": self.unbound_penalty,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfidenceWeights:
        """Deserialize from dictionary."""
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})


@dataclass
class BatchConfig:
    """Worker pool settings for batch composition."""

    max_workers: int = 4
    """Worker threads used by compose_batch."""

    fail_fast: bool = False
    """Abort the batch on the first hard error instead of substituting
    an empty result for the failing sentence."""

    timeout: float | None = None
    """Seconds to wait for the whole batch; None waits indefinitely."""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "max_workers": self.max_workers,
            "fail_fast": self.fail_fast,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BatchConfig:
        """Deserialize from dictionary."""
        return cls(**{k: v for k, v in data.items() if hasattr(cls, k)})


# =============================================================================
# Main Config
# =============================================================================


@dataclass
class EventComposerConfig:
    """Main configuration for the event composer.

    Create from environment variables:
        config = EventComposerConfig.from_env()

    Or from a YAML file:
        config = EventComposerConfig.from_yaml("composer.yaml")

    Or specify directly:
        config = EventComposerConfig(
            confidence_threshold=0.5,
            batch=BatchConfig(max_workers=8),
        )
    """

    confidence_threshold: float = 0.3
    """Events whose fused confidence falls below this are dropped."""

    require_agent_for_transitives: bool = False
    """Drop active transitive events that bound no Agent."""

    use_framenet_fallback: bool = True
    """Use frame evidence when no verb-class evidence exists."""

    use_wordnet_animacy: bool = True
    """Use sense lexnames to infer participant animacy."""

    max_events_per_sentence: int = 10
    """Hard cap on events emitted for one sentence."""

    include_sub_events: bool = True
    """Record nested sub-decompositions in the event structure."""

    verb_class_dir: str | None = None
    """Directory of YAML verb-class definitions; None uses the bundled set."""

    decomposer: DecomposerConfig = field(default_factory=DecomposerConfig)
    weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)
    batch: BatchConfig = field(default_factory=BatchConfig)

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If any value is out of range.
        """
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}"
            )
        if self.max_events_per_sentence < 1:
            raise ConfigurationError("max_events_per_sentence must be positive")
        if self.batch.max_workers < 1:
            raise ConfigurationError("batch.max_workers must be positive")
        if self.batch.timeout is not None and self.batch.timeout <= 0:
            raise ConfigurationError("batch.timeout must be positive when set")
        if self.decomposer.max_depth < 1:
            raise ConfigurationError("decomposer.max_depth must be at least 1")
        if not 0.0 <= self.decomposer.evidence_weight <= 1.0:
            raise ConfigurationError("decomposer.evidence_weight must be in [0, 1]")
        if abs(self.weights.total() - 1.0) > 0.001:
            raise ConfigurationError(
                f"confidence weights must sum to 1.0, got {self.weights.total():.3f}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "confidence_threshold": self.confidence_threshold,
            "require_agent_for_transitives": self.require_agent_for_transitives,
            "use_framenet_fallback": self.use_framenet_fallback,
            "use_wordnet_animacy": self.use_wordnet_animacy,
            "max_events_per_sentence": self.max_events_per_sentence,
            "include_sub_events": self.include_sub_events,
            "verb_class_dir": self.verb_class_dir,
            "decomposer": self.decomposer.to_dict(),
            "weights": self.weights.to_dict(),
            "batch": self.batch.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventComposerConfig:
        """Deserialize from dictionary."""
        nested = {
            "decomposer": DecomposerConfig.from_dict(data.get("decomposer", {})),
            "weights": ConfidenceWeights.from_dict(data.get("weights", {})),
            "batch": BatchConfig.from_dict(data.get("batch", {})),
        }
        flat = {
            k: v for k, v in data.items()
            if k not in nested and hasattr(cls, k)
        }
        return cls(**flat, **nested)

    @classmethod
    def from_yaml(cls, path: str | Path) -> EventComposerConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to a YAML mapping with the same keys as to_dict().

        Raises:
            ConfigurationError: If the file is missing or not a mapping.
        """
        import yaml

        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to load config file {path}: {e}")
            raise ConfigurationError(f"Invalid config file {path}", cause=e)

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        config = cls.from_dict(raw)
        config.validate()
        return config

    @classmethod
    def from_env(cls) -> EventComposerConfig:
        """Load configuration from environment variables.

        Environment variables:
        - EVENT_COMPOSER_CONFIDENCE_THRESHOLD: float in [0, 1]
        - EVENT_COMPOSER_MAX_EVENTS: Per-sentence event cap
        - EVENT_COMPOSER_REQUIRE_AGENT: true/false
        - EVENT_COMPOSER_FRAMENET_FALLBACK: true/false
        - EVENT_COMPOSER_WORDNET_ANIMACY: true/false
        - EVENT_COMPOSER_INCLUDE_SUB_EVENTS: true/false
        - EVENT_COMPOSER_VERB_CLASS_DIR: Verb-class YAML directory
        - EVENT_COMPOSER_MAX_WORKERS: Batch worker threads
        - EVENT_COMPOSER_FAIL_FAST: true/false
        - EVENT_COMPOSER_BATCH_TIMEOUT: Seconds
        """
        timeout = os.getenv("EVENT_COMPOSER_BATCH_TIMEOUT")

        try:
            return cls(
                confidence_threshold=float(
                    os.getenv("EVENT_COMPOSER_CONFIDENCE_THRESHOLD", "0.3")
                ),
                max_events_per_sentence=int(
                    os.getenv("EVENT_COMPOSER_MAX_EVENTS", "10")
                ),
                require_agent_for_transitives=_env_bool(
                    "EVENT_COMPOSER_REQUIRE_AGENT", False
                ),
                use_framenet_fallback=_env_bool(
                    "EVENT_COMPOSER_FRAMENET_FALLBACK", True
                ),
                use_wordnet_animacy=_env_bool(
                    "EVENT_COMPOSER_WORDNET_ANIMACY", True
                ),
                include_sub_events=_env_bool(
                    "EVENT_COMPOSER_INCLUDE_SUB_EVENTS", True
                ),
                verb_class_dir=os.getenv("EVENT_COMPOSER_VERB_CLASS_DIR"),
                batch=BatchConfig(
                    max_workers=int(os.getenv("EVENT_COMPOSER_MAX_WORKERS", "4")),
                    fail_fast=_env_bool("EVENT_COMPOSER_FAIL_FAST", False),
                    timeout=float(timeout) if timeout else None,
                ),
            )
        except ValueError as e:
            raise ConfigurationError("Invalid numeric environment value", cause=e)

    @classmethod
    def default(cls) -> EventComposerConfig:
        """Create a default configuration (same as no-arg constructor)."""
        return cls()

    @classmethod
    def strict(cls) -> EventComposerConfig:
        """High-precision preset: higher threshold, agents required."""
        return cls(confidence_threshold=0.6, require_agent_for_transitives=True)

    @classmethod
    def lenient(cls) -> EventComposerConfig:
        """High-recall preset: keeps nearly every event."""
        return cls(confidence_threshold=0.1)
