"""Unit tests for the command line entry point."""

from unittest.mock import MagicMock, Mock, patch

import pytest
import yaml

from src.cli import load_configuration, main, parse_arguments
from src.cloud.service import ServiceRegistry
from src.core.errors import AuthError, ConfigError


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestLoadConfiguration:

    def test_command_line_overrides_file(self, workdir):
        """Test --region and --profile win over the file."""
        (workdir / "config.yaml").write_text(
            yaml.dump({"aws": {"region": "eu-west-1", "profile": "ops"}}), encoding="utf-8"
        )

        config = load_configuration(parse_arguments(["--region", "us-east-2"]))

        assert config.region() == "us-east-2"
        assert config.profile() == "ops"

    def test_without_file_uses_environment(self, workdir, monkeypatch):
        """Test region comes from the environment without a config file."""
        monkeypatch.setenv("AWS_REGION", "ca-central-1")

        config = load_configuration(parse_arguments([]))

        assert config.region() == "ca-central-1"

    def test_explicit_missing_file_fails(self, workdir):
        """Test an explicitly named file must exist."""
        with pytest.raises(ConfigError):
            load_configuration(parse_arguments(["missing.yaml"]))


class TestMain:

    @patch("src.cli.init_services")
    def test_lists_services(self, mock_init_services, workdir, capsys):
        """Test successful startup prints registered services."""
        registry = Mock(spec=ServiceRegistry)
        registry.names.return_value = ["access", "infra"]
        mock_init_services.return_value = registry

        exit_code = main(["--region", "eu-west-1"])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "AWS session ready in eu-west-1" in output
        assert "infra" in output

    @patch("src.cli.init_services")
    def test_auth_failure(self, mock_init_services, workdir, capsys):
        """Test authentication failures exit with status 1."""
        mock_init_services.side_effect = AuthError("Your AWS credentials seem undefined!")

        exit_code = main(["--region", "eu-west-1"])

        assert exit_code == 1
        assert "credentials seem undefined" in capsys.readouterr().out

    @patch("src.cli.init_services")
    def test_config_failure(self, mock_init_services, workdir, capsys):
        """Test configuration failures exit with status 1."""
        mock_init_services.side_effect = ConfigError("empty AWS region")

        exit_code = main([])

        assert exit_code == 1
        assert "Configuration error: empty AWS region" in capsys.readouterr().out

    @patch("src.cli.new_driver")
    def test_drivers_mode(self, mock_new_driver, workdir, capsys):
        """Test --drivers builds the aggregate driver."""
        service_driver = Mock()
        service_driver.service.name = "storage"
        service_driver.capabilities.return_value = [("create", "bucket")]
        driver = MagicMock()
        driver.drivers = [service_driver]
        driver.__len__.return_value = 1
        mock_new_driver.return_value = driver

        exit_code = main(["--region", "eu-west-1", "--profile", "ops", "--drivers"])

        assert exit_code == 0
        mock_new_driver.assert_called_once()
        assert mock_new_driver.call_args[0][:2] == ("eu-west-1", "ops")
        assert "storage: create bucket" in capsys.readouterr().out

    @patch("src.cli.init_services")
    def test_keyboard_interrupt(self, mock_init_services, workdir):
        """Test Ctrl-C exits with status 130."""
        mock_init_services.side_effect = KeyboardInterrupt()

        assert main(["--region", "eu-west-1"]) == 130
