"""
Tests for the openclaw-vps command line.
"""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from openclaw_vps.cli.deploy import PulumiCLI, PulumiCommandError
from openclaw_vps.cli.main import cli
from openclaw_vps.render.encoding import decode_user_data, encode_user_data

DATA_DIR = Path(__file__).parent / "data"

SECRETS = [
    "--set", "EBSVolumeID=vol-123",
    "--set", "TailscaleAuthKey=tskey",
    "--set", "AnthropicApiKey=sk-ant",
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def template_dir(tmp_path):
    (tmp_path / "docker-compose.yml").write_bytes((DATA_DIR / "docker-compose.yml").read_bytes())
    (tmp_path / "user-data.sh").write_text("vol={{.EBSVolumeID}}\n")
    return tmp_path


class TestRender:
    """Tests for the render command."""

    def test_render(self, runner):
        result = runner.invoke(cli, ["render", "--dir", str(DATA_DIR), *SECRETS])

        assert result.exit_code == 0, result.output
        assert 'VOLUME_ID="vol-123"' in result.output
        compose = (DATA_DIR / "docker-compose.yml").read_bytes()
        assert encode_user_data(compose) in result.output

    def test_render_encoded(self, runner, tmp_path):
        out = tmp_path / "user-data.b64"
        result = runner.invoke(
            cli, ["render", "--dir", str(DATA_DIR), *SECRETS, "--encode", "-o", str(out)]
        )

        assert result.exit_code == 0, result.output
        script = decode_user_data(out.read_text()).decode("utf-8")
        assert "tskey" in script
        assert "{{" not in script

    def test_values_file(self, runner, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text("EBSVolumeID: vol-999\nTailscaleAuthKey: a\nAnthropicApiKey: b\n")

        result = runner.invoke(
            cli, ["render", "--dir", str(DATA_DIR), "--values", str(values)]
        )

        assert result.exit_code == 0, result.output
        assert "vol-999" in result.output

    def test_malformed_values_file(self, runner, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text("EBSVolumeID: [unclosed\n")

        result = runner.invoke(
            cli, ["render", "--dir", str(DATA_DIR), "--values", str(values)]
        )

        assert result.exit_code == 2
        assert "invalid YAML" in result.output
        assert not isinstance(result.exception, yaml.YAMLError)

    def test_null_value_rejected(self, runner, tmp_path):
        values = tmp_path / "values.yaml"
        values.write_text("EBSVolumeID: vol-1\nTailscaleAuthKey:\nAnthropicApiKey: b\n")

        result = runner.invoke(
            cli, ["render", "--dir", str(DATA_DIR), "--values", str(values)]
        )

        assert result.exit_code == 2
        assert "no value for: TailscaleAuthKey" in result.output
        assert "None" not in result.output

    def test_missing_binding_fails(self, runner):
        result = runner.invoke(
            cli, ["render", "--dir", str(DATA_DIR), "--set", "EBSVolumeID=vol-123"]
        )

        assert result.exit_code == 1
        assert "Render failed" in result.output
        assert "AnthropicApiKey" in result.output

    def test_unused_binding_warns(self, runner, template_dir):
        result = runner.invoke(cli, ["render", "--dir", str(template_dir), *SECRETS])

        assert result.exit_code == 0, result.output
        assert "vol=vol-123" in result.output
        assert "warning: Binding 'TailscaleAuthKey'" in result.output

    def test_bad_assignment(self, runner):
        result = runner.invoke(cli, ["render", "--dir", str(DATA_DIR), "--set", "novalue"])

        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output


class TestDecode:
    """Tests for the decode command."""

    def test_argument(self, runner):
        result = runner.invoke(cli, ["decode", encode_user_data("#!/bin/bash\n")])

        assert result.exit_code == 0
        assert result.output == "#!/bin/bash\n"

    def test_stdin(self, runner):
        result = runner.invoke(cli, ["decode"], input=encode_user_data("echo hi") + "\n")

        assert result.exit_code == 0
        assert result.output == "echo hi"

    def test_invalid_payload(self, runner):
        result = runner.invoke(cli, ["decode", "not base64!"])

        assert result.exit_code == 1
        assert "Decode failed" in result.output


class TestValidate:
    """Tests for the validate command."""

    def test_valid(self, runner):
        result = runner.invoke(cli, ["validate", "--dir", str(DATA_DIR)])

        assert result.exit_code == 0, result.output
        assert "Placeholders: EBSVolumeID, TailscaleAuthKey" in result.output
        assert "Templates are valid" in result.output

    def test_unused_placeholder_warns(self, runner, template_dir):
        result = runner.invoke(cli, ["validate", "--dir", str(template_dir)])

        assert result.exit_code == 0
        assert "warning: AnthropicApiKey is supplied but not used" in result.output

    def test_unknown_placeholder(self, runner, template_dir):
        (template_dir / "user-data.sh").write_text("{{.Hostname}}\n")

        result = runner.invoke(cli, ["validate", "--dir", str(template_dir)])

        assert result.exit_code == 1
        assert "Unknown placeholder(s): Hostname" in result.output

    def test_invalid_compose(self, runner, template_dir):
        (template_dir / "docker-compose.yml").write_text("version: '3'\n")

        result = runner.invoke(cli, ["validate", "--dir", str(template_dir)])

        assert result.exit_code == 1
        assert "no 'services' defined" in result.output


class TestPulumiCommands:
    """Tests for the commands that shell out to pulumi."""

    @patch("openclaw_vps.cli.main.PulumiCLI")
    def test_outputs(self, mock_cli, runner):
        mock_cli.return_value.stack_output.return_value = {
            "asgName": "openclaw-asg-1a2b",
            "availabilityZone": "us-east-1a",
        }

        result = runner.invoke(cli, ["outputs", "--stack", "dev"])

        assert result.exit_code == 0
        assert "asgName: openclaw-asg-1a2b" in result.output
        assert "availabilityZone: us-east-1a" in result.output
        mock_cli.assert_called_once_with(".", "dev")

    @patch("openclaw_vps.cli.main.PulumiCLI")
    def test_up_passes_yes(self, mock_cli, runner):
        result = runner.invoke(cli, ["up", "-y"])

        assert result.exit_code == 0
        mock_cli.return_value.up.assert_called_once_with(yes=True)

    @patch("openclaw_vps.cli.main.PulumiCLI")
    def test_failure_exits_nonzero(self, mock_cli, runner):
        mock_cli.return_value.preview.side_effect = PulumiCommandError("boom")

        result = runner.invoke(cli, ["preview"])

        assert result.exit_code == 1
        assert "boom" in result.output


class TestPulumiCLI:
    """Tests for the pulumi subprocess wrapper."""

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_up_command(self, mock_run, tmp_path):
        PulumiCLI(tmp_path, stack="dev").up(yes=True)

        mock_run.assert_called_once_with(
            ["pulumi", "up", "--yes", "--stack", "dev"],
            cwd=tmp_path,
            check=True,
            capture_output=False,
            text=True,
        )

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_destroy_without_stack(self, mock_run, tmp_path):
        PulumiCLI(tmp_path).destroy()

        assert mock_run.call_args.args[0] == ["pulumi", "destroy"]

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_stack_output(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(stdout=json.dumps({"volumeId": "vol-1"}))

        assert PulumiCLI(tmp_path).stack_output() == {"volumeId": "vol-1"}
        assert mock_run.call_args.kwargs["capture_output"] is True

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_invalid_json(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(stdout="not json")

        with pytest.raises(PulumiCommandError, match="Failed to parse"):
            PulumiCLI(tmp_path).stack_output()

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_command_failure(self, mock_run, tmp_path):
        mock_run.side_effect = subprocess.CalledProcessError(
            255, ["pulumi", "up"], stderr="error: no stack selected"
        )

        with pytest.raises(PulumiCommandError, match="no stack selected"):
            PulumiCLI(tmp_path).up()

    @patch("openclaw_vps.cli.deploy.subprocess.run")
    def test_missing_binary(self, mock_run, tmp_path):
        mock_run.side_effect = FileNotFoundError("pulumi")

        with pytest.raises(PulumiCommandError, match="not found"):
            PulumiCLI(tmp_path).preview()

    def test_missing_project_dir(self, tmp_path):
        with pytest.raises(PulumiCommandError, match="directory not found"):
            PulumiCLI(tmp_path / "nope").preview()
