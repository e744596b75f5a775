import json
import sys
from pathlib import Path

from mediaagent import cli
from mediaagent.factory import create_media_agent
from mediaagent.models.mock import MockChatModel
from mediaagent.tools.registry import ToolRegistry


def _use_model(monkeypatch, model, registry=None):
    monkeypatch.setattr(
        cli, "build_agent", lambda settings: create_media_agent(model, registry=registry)
    )


def test_cli_without_api_key_uses_no_op_plan(monkeypatch, tmp_path: Path, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    exit_code = cli.main(["Describe the file", "--output-dir", str(tmp_path / "out")])
    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "success"
    assert payload["plan"]["steps"][0]["command"] == "none"
    assert (tmp_path / "out").is_dir()


def test_cli_reports_failed_step(monkeypatch, tmp_path: Path, capsys):
    plan = {"steps": [{"command": sys.executable, "arguments": ["-c", "raise SystemExit(2)"]}]}
    registry = ToolRegistry({sys.executable: {"title": "Python", "description": ""}})
    _use_model(monkeypatch, MockChatModel([json.dumps(plan)]), registry)
    exit_code = cli.main(["Fail please", "--output-dir", str(tmp_path), "--cwd", str(tmp_path)])
    assert exit_code == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "failed"
    assert payload["result"]["exitCode"] == 2
    assert "exited with code 2" in payload["detail"]


def test_cli_builds_request_from_files(tmp_path: Path):
    clip = tmp_path / "clip.mp4"
    clip.write_bytes(b"abc")
    args = cli.parse_args(["Trim", "--file", str(clip), "--output-dir", str(tmp_path / "o"), "--dry-run"])
    request = cli.build_request(args)
    assert args.dry_run
    assert request.files[0].size == 3
    assert request.files[0].mime_type == "video/mp4"
    assert request.output_dir == str((tmp_path / "o").resolve())


def test_cli_overrides_settings(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    args = cli.parse_args(["x", "--output-dir", "o", "--model", "gpt-x", "--api-key", "sk-1", "--timeout", "5"])
    settings = cli.apply_overrides(cli.Settings(), args)
    assert settings.openai_model == "gpt-x"
    assert settings.openai_api_key == "sk-1"
    assert settings.command_timeout_seconds == 5
