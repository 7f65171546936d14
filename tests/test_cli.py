"""Tests for the command line interface."""

from unittest.mock import MagicMock, patch

import toml
from click.testing import CliRunner

from cctracker.cli import cli


class TestConfigShow:
    """Test `cctracker config show`."""

    def test_show_defaults(self, tmp_path):
        """Test the effective config is printed as TOML."""
        path = tmp_path / "cctracker.toml"
        path.write_text("[server]\nport = 9300\n")
        result = CliRunner().invoke(cli, ["config", "show", "--config", str(path)])
        assert result.exit_code == 0, result.output
        assert toml.loads(result.output)["server"]["port"] == 9300

    def test_show_invalid(self, tmp_path):
        """Test invalid configuration exits with an error."""
        path = tmp_path / "cctracker.toml"
        path.write_text("[server]\nport = -1\n")
        result = CliRunner().invoke(cli, ["config", "show", "--config", str(path)])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output


    def test_show_unknown_policy(self, tmp_path):
        """Test an unregistered policy name is rejected."""
        path = tmp_path / "cctracker.toml"
        path.write_text('[peer_handout_policy]\nsampling = "nope"\n')
        result = CliRunner().invoke(cli, ["config", "show", "--config", str(path)])
        assert result.exit_code != 0
        assert "nope" in result.output


class TestServe:
    """Test `cctracker serve` wiring without binding a socket."""

    def test_serve_applies_overrides(self, tmp_path):
        """Test --host/--port override the loaded config."""
        path = tmp_path / "cctracker.toml"
        path.write_text("[server]\nport = 9000\n")
        with patch("cctracker.cli.asyncio.run") as run, patch(
            "cctracker.cli._serve", new_callable=MagicMock
        ) as serve, patch("cctracker.cli.setup_logging"):
            result = CliRunner().invoke(
                cli, ["serve", "--config", str(path), "--host", "127.0.0.1", "--port", "9400"]
            )

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        (config,) = serve.call_args.args
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9400

    def test_serve_rejects_bad_port(self, tmp_path):
        """Test an out-of-range --port is a usage error."""
        path = tmp_path / "cctracker.toml"
        path.write_text("")
        with patch("cctracker.cli.asyncio.run"), patch("cctracker.cli.setup_logging"):
            result = CliRunner().invoke(
                cli, ["serve", "--config", str(path), "--port", "0"]
            )
        assert result.exit_code != 0
