"""Unit tests for Configuration Management."""

import os
import tempfile
import pytest
import yaml

from src.core.config import Configuration
from src.core.errors import ConfigError


def write_config(config_data):
    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".yaml", delete=False
    ) as f:
        yaml.dump(config_data, f)
        return f.name


class TestConfiguration:
    """Test cases for Configuration class."""

    def test_load_valid_config(self):
        """Test loading valid configuration."""
        config_path = write_config(
            {"aws": {"region": "eu-west-1", "profile": "ops"}}
        )

        try:
            config = Configuration(config_path)
            assert config.region() == "eu-west-1"
            assert config.profile() == "ops"
            assert config.get("aws.region") == "eu-west-1"
        finally:
            os.unlink(config_path)

    def test_missing_config_file(self):
        """Test handling of missing configuration file."""
        with pytest.raises(ConfigError) as exc_info:
            Configuration("/nonexistent/config.yaml")

        assert "Configuration file not found" in str(exc_info.value)

    def test_invalid_yaml(self):
        """Test handling of invalid YAML."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False
        ) as f:
            f.write("invalid: yaml: content: [")
            config_path = f.name

        try:
            with pytest.raises(ConfigError) as exc_info:
                Configuration(config_path)

            assert "Invalid YAML" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_non_mapping_document(self):
        """Test a YAML list is rejected."""
        config_path = write_config(["us-east-1"])

        try:
            with pytest.raises(ConfigError):
                Configuration(config_path)
        finally:
            os.unlink(config_path)

    def test_missing_region_is_empty(self):
        """Test missing region reads as empty string."""
        config_path = write_config({"aws": {}})

        try:
            config = Configuration(config_path)
            assert config.region() == ""
            assert config.profile() == ""
        finally:
            os.unlink(config_path)

    def test_invalid_region_type(self):
        """Test validation of region type."""
        config_path = write_config({"aws": {"region": ["us-east-1"]}})

        try:
            with pytest.raises(ConfigError) as exc_info:
                Configuration(config_path)

            assert "must be a string" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_environment_override(self, monkeypatch):
        """Test environment variable override for region and profile."""
        config_path = write_config(
            {"aws": {"region": "eu-west-1", "profile": "ops"}}
        )
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        monkeypatch.setenv("AWS_PROFILE", "dev")

        try:
            config = Configuration(config_path)
            assert config.region() == "us-west-2"
            assert config.profile() == "dev"
        finally:
            os.unlink(config_path)

    def test_from_dict_flat_keys(self):
        """Test dotted keys are expanded."""
        config = Configuration.from_dict(
            {"aws.region": "ap-southeast-2", "aws.profile": ""}
        )

        assert config.region() == "ap-southeast-2"
        assert config.profile() == ""
        assert config.to_dict() == {
            "aws": {"region": "ap-southeast-2", "profile": ""}
        }
        assert config.config_path is None

    def test_from_dict_ignores_environment_by_default(self, monkeypatch):
        """Test in-memory configuration is not overridden implicitly."""
        monkeypatch.setenv("AWS_REGION", "us-west-2")

        assert Configuration.from_dict({"aws": {"region": "eu-west-1"}}).region() == "eu-west-1"
        assert Configuration.from_dict({}, apply_environment=True).region() == "us-west-2"

    def test_to_dict_returns_copy(self):
        """Test callers cannot mutate the configuration."""
        config = Configuration.from_dict({"aws": {"region": "eu-west-1"}})

        data = config.to_dict()
        data["aws"]["region"] = "us-east-1"

        assert config.region() == "eu-west-1"
