"""Tests for EventComposerConfig."""

import os
from unittest.mock import patch

import pytest

from event_composer.config import (
    BatchConfig,
    ConfidenceWeights,
    DecomposerConfig,
    EventComposerConfig,
)
from event_composer.exceptions import ConfigurationError


class TestEventComposerConfig:
    """Tests for EventComposerConfig."""

    def test_default_config(self):
        """Test creating default configuration."""
        config = EventComposerConfig()

        assert config.confidence_threshold == 0.3
        assert config.require_agent_for_transitives is False
        assert config.use_framenet_fallback is True
        assert config.use_wordnet_animacy is True
        assert config.max_events_per_sentence == 10
        assert config.include_sub_events is True
        assert config.verb_class_dir is None
        assert config.batch.max_workers == 4
        assert config.batch.fail_fast is False
        assert config.decomposer.max_depth == 3

    def test_presets(self):
        """Test strict and lenient presets."""
        strict = EventComposerConfig.strict()
        assert strict.confidence_threshold == 0.6
        assert strict.require_agent_for_transitives is True

        lenient = EventComposerConfig.lenient()
        assert lenient.confidence_threshold == 0.1
        assert lenient.require_agent_for_transitives is False

        assert EventComposerConfig.default() == EventComposerConfig()

    def test_default_validates(self):
        """Test that every preset passes validation."""
        EventComposerConfig().validate()
        EventComposerConfig.strict().validate()
        EventComposerConfig.lenient().validate()

    def test_dict_roundtrip(self):
        """Test to_dict/from_dict preserves nested settings."""
        config = EventComposerConfig(
            confidence_threshold=0.5,
            max_events_per_sentence=3,
            decomposer=DecomposerConfig(evidence_weight=0.8, max_depth=2),
            weights=ConfidenceWeights(verbnet=0.4, treebank=0.1),
            batch=BatchConfig(max_workers=8, fail_fast=True, timeout=5.0),
        )

        restored = EventComposerConfig.from_dict(config.to_dict())

        assert restored == config

    def test_from_dict_ignores_unknown_keys(self):
        """Test unknown keys are dropped rather than rejected."""
        config = EventComposerConfig.from_dict({
            "confidence_threshold": 0.4,
            "unknown_option": True,
            "batch": {"max_workers": 2, "queue_size": 100},
        })

        assert config.confidence_threshold == 0.4
        assert config.batch.max_workers == 2


class TestConfigValidation:
    """Tests for range checks."""

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, threshold):
        """Test threshold must lie in [0, 1]."""
        with pytest.raises(ConfigurationError, match="confidence_threshold"):
            EventComposerConfig(confidence_threshold=threshold).validate()

    def test_zero_event_cap(self):
        """Test the event cap must be positive."""
        with pytest.raises(ConfigurationError):
            EventComposerConfig(max_events_per_sentence=0).validate()

    def test_zero_workers(self):
        """Test the worker pool needs at least one thread."""
        config = EventComposerConfig(batch=BatchConfig(max_workers=0))
        with pytest.raises(ConfigurationError, match="max_workers"):
            config.validate()

    def test_non_positive_timeout(self):
        """Test a set timeout must be positive."""
        config = EventComposerConfig(batch=BatchConfig(timeout=0))
        with pytest.raises(ConfigurationError, match="timeout"):
            config.validate()

    def test_zero_depth(self):
        """Test decomposition depth must be at least one."""
        config = EventComposerConfig(decomposer=DecomposerConfig(max_depth=0))
        with pytest.raises(ConfigurationError, match="max_depth"):
            config.validate()

    def test_weights_must_sum_to_one(self):
        """Test unbalanced fusion weights are rejected."""
        config = EventComposerConfig(weights=ConfidenceWeights(verbnet=0.9))
        with pytest.raises(ConfigurationError, match="sum to 1.0"):
            config.validate()

    def test_weights_total(self):
        """Test the default weights are balanced."""
        assert ConfidenceWeights().total() == pytest.approx(1.0)


class TestConfigFromEnv:
    """Tests for environment loading."""

    def test_from_env_defaults(self):
        """Test loading from environment with no vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = EventComposerConfig.from_env()

        assert config.confidence_threshold == 0.3
        assert config.batch.timeout is None
        assert config.verb_class_dir is None

    def test_from_env_with_vars(self):
        """Test loading from environment variables."""
        env = {
            "EVENT_COMPOSER_CONFIDENCE_THRESHOLD": "0.55",
            "EVENT_COMPOSER_MAX_EVENTS": "4",
            "EVENT_COMPOSER_REQUIRE_AGENT": "true",
            "EVENT_COMPOSER_FRAMENET_FALLBACK": "false",
            "EVENT_COMPOSER_INCLUDE_SUB_EVENTS": "FALSE",
            "EVENT_COMPOSER_VERB_CLASS_DIR": "/data/verbnet",
            "EVENT_COMPOSER_MAX_WORKERS": "16",
            "EVENT_COMPOSER_FAIL_FAST": "True",
            "EVENT_COMPOSER_BATCH_TIMEOUT": "2.5",
        }
        with patch.dict(os.environ, env, clear=True):
            config = EventComposerConfig.from_env()

        assert config.confidence_threshold == 0.55
        assert config.max_events_per_sentence == 4
        assert config.require_agent_for_transitives is True
        assert config.use_framenet_fallback is False
        assert config.include_sub_events is False
        assert config.verb_class_dir == "/data/verbnet"
        assert config.batch.max_workers == 16
        assert config.batch.fail_fast is True
        assert config.batch.timeout == 2.5

    def test_from_env_invalid_number(self):
        """Test non-numeric values raise ConfigurationError."""
        env = {"EVENT_COMPOSER_MAX_WORKERS": "many"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                EventComposerConfig.from_env()

        assert isinstance(exc_info.value.cause, ValueError)


class TestConfigFromYaml:
    """Tests for YAML loading."""

    def test_from_yaml(self, tmp_path):
        """Test loading a YAML config file."""
        path = tmp_path / "composer.yaml"
        path.write_text(
            "confidence_threshold: 0.45\n"
            "include_sub_events: false\n"
            "batch:\n"
            "  max_workers: 2\n"
            "  fail_fast: true\n"
            "weights:\n"
            "  verbnet: 0.25\n"
            "  treebank: 0.25\n"
        )

        config = EventComposerConfig.from_yaml(path)

        assert config.confidence_threshold == 0.45
        assert config.include_sub_events is False
        assert config.batch.max_workers == 2
        assert config.batch.fail_fast is True
        assert config.weights.verbnet == 0.25
        assert config.weights.decomposition == 0.25

    def test_from_yaml_empty_file(self, tmp_path):
        """Test an empty file yields the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert EventComposerConfig.from_yaml(path) == EventComposerConfig()

    def test_from_yaml_missing_file(self, tmp_path):
        """Test a missing file raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="not found"):
            EventComposerConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_invalid(self, tmp_path):
        """Test malformed YAML raises ConfigurationError with a cause."""
        path = tmp_path / "broken.yaml"
        path.write_text("batch: [unclosed\n")

        with pytest.raises(ConfigurationError) as exc_info:
            EventComposerConfig.from_yaml(path)

        assert exc_info.value.cause is not None

    def test_from_yaml_not_a_mapping(self, tmp_path):
        """Test a top-level list is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            EventComposerConfig.from_yaml(path)

    def test_from_yaml_validates(self, tmp_path):
        """Test loaded values are range-checked."""
        path = tmp_path / "bad.yaml"
        path.write_text("confidence_threshold: 2.0\n")

        with pytest.raises(ConfigurationError):
            EventComposerConfig.from_yaml(path)
