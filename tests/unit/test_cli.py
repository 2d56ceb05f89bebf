"""Unit tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from conftest import FakeConverter

from apklink import __version__
from apklink import cli

runner = CliRunner()


@pytest.fixture
def fake_converter(config, monkeypatch):
    """Route the CLI to the test configuration and a fake converter."""
    converter = FakeConverter()
    monkeypatch.setattr(cli, "get_config", lambda: config)
    monkeypatch.setattr(cli, "build_converter", lambda cfg: converter)
    monkeypatch.setattr(cli, "setup_logging", lambda cfg=None: None)
    return converter


class TestLinkCommand:
    """Tests for ``apklink link``."""

    def test_links_local_apk(self, config, fake_converter, sample_apk):
        """A local APK is converted into the build directory."""
        result = runner.invoke(cli.app, ["link", "--apk", str(sample_apk)])

        assert result.exit_code == 0, result.output
        assert "regenerated" in result.output
        assert (config.paths.output_dir / "sample.jar").is_file()
        assert len(fake_converter.calls) == 1

    def test_second_invocation_reuses(self, config, fake_converter, sample_apk):
        """Running twice converts once."""
        runner.invoke(cli.app, ["link", "--apk", str(sample_apk)])
        result = runner.invoke(cli.app, ["link", "--apk", str(sample_apk)])

        assert result.exit_code == 0, result.output
        assert "reused" in result.output
        assert len(fake_converter.calls) == 1

    def test_explicit_output(self, fake_converter, sample_apk, temp_dir):
        """The output option places the JAR."""
        output = temp_dir / "libs" / "app.jar"

        result = runner.invoke(cli.app, ["link", "--apk", str(sample_apk), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.is_file()

    def test_disabled(self, fake_converter, sample_apk):
        """A disabled link is skipped."""
        result = runner.invoke(cli.app, ["link", "--apk", str(sample_apk), "--disable"])

        assert result.exit_code == 0, result.output
        assert "skipped" in result.output
        assert fake_converter.calls == []

    def test_multiple_sources_rejected(self, fake_converter, sample_apk):
        """Two sources are a configuration error."""
        result = runner.invoke(
            cli.app, ["link", "--apk", str(sample_apk), "--url", "https://example.com/app.apk"]
        )

        assert result.exit_code == 1
        assert fake_converter.calls == []

    def test_missing_apk_fails(self, fake_converter, temp_dir):
        """Source errors end the command with a failure."""
        result = runner.invoke(cli.app, ["link", "--apk", str(temp_dir / "missing.apk")])

        assert result.exit_code == 1
        assert "Link failed" in result.output


class TestStatusCommand:
    """Tests for ``apklink status``."""

    def test_status_of_linked_output(self, config, fake_converter, sample_apk):
        """Status reports the recorded state."""
        runner.invoke(cli.app, ["link", "--apk", str(sample_apk)])
        output = config.paths.output_dir / "sample.jar"

        result = runner.invoke(cli.app, ["status", str(output)])

        assert result.exit_code == 0, result.output
        assert "Link State" in result.output
        assert "True" in result.output
        assert "Input Exists" in result.output

    def test_status_without_state(self, temp_dir):
        """Status of an unknown output reports missing state."""
        result = runner.invoke(cli.app, ["status", str(temp_dir / "none.jar")])

        assert result.exit_code == 0, result.output
        assert "False" in result.output


class TestMiscCommands:
    """Tests for the informational commands."""

    def test_config(self, config, fake_converter):
        """The config command lists the effective settings."""
        result = runner.invoke(cli.app, ["config"])

        assert result.exit_code == 0, result.output
        assert "Current Configuration" in result.output
        assert "APKLINK_BUILD_DIR" in result.output

    def test_version(self):
        """The version flag prints the version."""
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
