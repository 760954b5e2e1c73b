"""Tests for configuration loading and validation."""

import logging
from decimal import Decimal

import pytest
from pydantic import ValidationError

from smart_recon.config import (
    EngineConfig,
    ReconConfig,
    generate_default_config,
    get_default_config,
    load_config,
    validate_engine_config,
)
from smart_recon.utils.exceptions import ConfigurationError, InvalidConfigurationError


class TestDefaults:
    """Default values used when no file is given."""

    def test_engine_defaults(self):
        config = EngineConfig()

        assert config.date_tolerance_days == 3
        assert config.description_threshold == 0.8
        assert config.amount_tolerance == Decimal("0.01")
        assert config.aggregation_amount_tolerance == Decimal("5")
        assert config.aggregation_max_group_size == 5

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")

        assert config.model_dump() == ReconConfig().model_dump()
        assert config.config_file_path is None

    def test_no_path_uses_defaults(self):
        config = load_config()

        assert config.output.currency_symbol == "R"
        assert config.output.sheets.audit_trail.name == "Audit Trail"

    def test_default_dict_excludes_file_path(self):
        assert "config_file_path" not in get_default_config()

    def test_engine_config_is_frozen(self):
        config = EngineConfig()

        with pytest.raises(ValidationError):
            config.date_tolerance_days = 10


class TestLoadConfig:
    """Merging YAML files over the defaults."""

    def test_partial_override_merged(self, tmp_path):
        path = tmp_path / "recon.yaml"
        path.write_text(
            "engine:\n"
            "  description_threshold: 0.6\n"
            "  aggregation_amount_tolerance: '0.5'\n"
            "output:\n"
            "  currency_symbol: $\n"
        )

        config = load_config(path)

        assert config.engine.description_threshold == 0.6
        assert config.engine.aggregation_amount_tolerance == Decimal("0.5")
        assert config.engine.date_tolerance_days == 3
        assert config.output.currency_symbol == "$"
        assert config.output.sheets.summary.name == "Summary"
        assert config.config_file_path == str(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.engine.model_dump() == EngineConfig().model_dump()

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("engine: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_wrong_type_raises(self, tmp_path):
        path = tmp_path / "typed.yaml"
        path.write_text("engine:\n  date_tolerance_days: soon\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_generated_file_loads_back(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"

        generate_default_config(path)
        config = load_config(path)

        assert path.read_text().startswith("# Smart Reconciliation Configuration")
        assert config.engine.model_dump() == EngineConfig().model_dump()
        assert config.input.date_formats == ReconConfig().input.date_formats


class TestValidateEngineConfig:
    """Range checks applied before a run."""

    def test_defaults_valid(self):
        validate_engine_config(EngineConfig())

    def test_all_problems_reported(self):
        config = EngineConfig(date_tolerance_days=-1, description_threshold=2.0)

        with pytest.raises(InvalidConfigurationError) as exc_info:
            validate_engine_config(config)

        message = str(exc_info.value)
        assert "date_tolerance_days" in message
        assert "description_threshold" in message

    def test_negative_aggregation_tolerance_rejected(self):
        config = EngineConfig(aggregation_amount_tolerance=Decimal("-0.5"))

        with pytest.raises(InvalidConfigurationError, match="aggregation_amount_tolerance"):
            validate_engine_config(config)

    def test_large_group_size_warns(self, caplog):
        config = EngineConfig(aggregation_max_group_size=10)

        with caplog.at_level(logging.WARNING, logger="smart_recon.config"):
            validate_engine_config(config)

        assert "aggregation_max_group_size=10" in caplog.text

    def test_invalid_config_is_configuration_error(self):
        assert issubclass(InvalidConfigurationError, ConfigurationError)
