"""CLI tests via Typer's CliRunner."""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from stitchflow.cli.main import app
from stitchflow.exceptions import CredentialMissing
from stitchflow.types import FlowLog, FlowResult, FlowState
from stitchflow.version import __version__

runner = CliRunner()


def _result(success=True):
    log = FlowLog()
    log.add("System", "Received design task: todo")
    if success:
        return FlowResult(success=True, code="<html><body>todo</body></html>", log=log,
                          continuation_token="projects/p/screens/s", version=1)
    log.add("Error", "MCP error: quota exhausted")
    return FlowResult(success=False, log=log, error="MCP error: quota exhausted", state=FlowState.FAILED)


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate_prints_html():
    with patch("stitchflow.cli.commands.generate._run", new=AsyncMock(return_value=_result())):
        result = runner.invoke(app, ["generate", "todo"])
    assert result.exit_code == 0
    assert "<html><body>todo</body></html>" in result.output


def test_generate_writes_file(tmp_path):
    out = tmp_path / "preview.html"
    with patch("stitchflow.cli.commands.generate._run", new=AsyncMock(return_value=_result())):
        result = runner.invoke(app, ["generate", "todo", "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8") == "<html><body>todo</body></html>"


def test_generate_passes_token_and_interaction_id():
    mock_run = AsyncMock(return_value=_result())
    with patch("stitchflow.cli.commands.generate._run", new=mock_run):
        runner.invoke(app, ["generate", "todo", "--token", "tok", "--interaction-id", "projects/p/screens/s"])
    mock_run.assert_awaited_once_with("todo", "tok", "projects/p/screens/s")


def test_generate_failure_exits_1():
    with patch("stitchflow.cli.commands.generate._run", new=AsyncMock(return_value=_result(success=False))):
        result = runner.invoke(app, ["generate", "todo"])
    assert result.exit_code == 1
    assert "quota exhausted" in result.output


def test_generate_without_credential_exits_2():
    with patch("stitchflow.cli.commands.generate._run",
               new=AsyncMock(side_effect=CredentialMissing("No credential provided."))):
        result = runner.invoke(app, ["generate", "todo"])
    assert result.exit_code == 2


def test_config_masks_token(monkeypatch):
    monkeypatch.setenv("STITCH_ACCESS_TOKEN", "supersecrettoken123")
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "supersecrettoken123" not in result.output
    assert "supers..." in result.output
