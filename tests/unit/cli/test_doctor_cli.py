"""Tests for the vtrim doctor command."""

import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from vtrim.cli.doctor import doctor_command
from vtrim.cli.exit_codes import ExitCode
from vtrim.tools.detection import ToolInfo, ToolStatus


def _available(name: str, configured=None) -> ToolInfo:
    return ToolInfo(
        name=name,
        path=Path(f"/usr/bin/{name}"),
        version="6.1",
        status=ToolStatus.AVAILABLE,
    )


def _missing(name: str, configured=None) -> ToolInfo:
    return ToolInfo(name=name, status_message=f"{name} not found in PATH")


class TestDoctorCommand:
    """Tests for doctor_command."""

    def test_all_tools_available(self) -> None:
        with patch("vtrim.cli.doctor.detect_tool", side_effect=_available):
            result = CliRunner().invoke(doctor_command, [])

        assert result.exit_code == ExitCode.SUCCESS
        assert "ffmpeg" in result.output
        assert "ffprobe" in result.output
        assert "Trim policy: copy" in result.output

    def test_missing_tool(self) -> None:
        def detect(name, configured=None):
            return _missing(name) if name == "ffprobe" else _available(name)

        with patch("vtrim.cli.doctor.detect_tool", side_effect=detect):
            result = CliRunner().invoke(doctor_command, [])

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
        assert "ffprobe not found in PATH" in result.output

    def test_json_output(self) -> None:
        with patch("vtrim.cli.doctor.detect_tool", side_effect=_missing):
            result = CliRunner().invoke(doctor_command, ["--json"])

        body = json.loads(result.stdout)
        assert body["ok"] is False
        assert body["policy"] == "copy"
        assert [t["status"] for t in body["tools"]] == ["missing", "missing"]
        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE
