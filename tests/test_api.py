import json
from pathlib import Path

from fastapi.testclient import TestClient

from mediaagent import api
from mediaagent.api import create_app, create_safe_file_name, parse_boolean, parse_debug_mode
from mediaagent.config import Settings
from mediaagent.factory import create_media_agent
from mediaagent.models.mock import MockChatModel


def _settings(tmp_path: Path) -> Settings:
    return Settings(
        public_root=str(tmp_path / "public"),
        generated_root=str(tmp_path / "public" / "generated"),
        session_input_root=str(tmp_path / "storage" / "inputs"),
    )


def _client(tmp_path: Path, scripted=None) -> TestClient:
    agent = create_media_agent(MockChatModel(scripted))
    return TestClient(create_app(_settings(tmp_path), agent=agent))


def test_list_tools_excludes_none(tmp_path: Path):
    response = _client(tmp_path).get("/api/tools")
    assert response.status_code == 200
    ids = [tool["id"] for tool in response.json()["tools"]]
    assert ids == ["ffmpeg", "magick", "exiftool", "yt-dlp"]
    assert response.json()["tools"][0]["title"] == "FFmpeg"


def test_task_is_required(tmp_path: Path):
    response = _client(tmp_path).post("/api/tasks", data={"task": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "The task field is required."}


def test_dry_run_task_stores_uploads_and_reports_phases(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(api, "create_session_id", lambda: "session-1-abcdef")
    session_dir = tmp_path / "public" / "generated" / "session-1-abcdef"
    plan = {
        "overview": "convert",
        "steps": [
            {
                "command": "ffmpeg",
                "arguments": ["-i", "clip.mov", "clip.mp4"],
                "reasoning": "transcode",
                "outputs": [{"path": str(session_dir / "clip.mp4"), "description": "converted clip"}],
            }
        ],
    }
    client = _client(tmp_path, [json.dumps(plan)])
    response = client.post(
        "/api/tasks",
        data={"task": "Convert to mp4"},
        files=[("files", ("my clip.mov", b"moov", "video/quicktime"))],
        params={"dryRun": "true", "debug": "1"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["task"] == "Convert to mp4"
    session_id = body["sessionId"]
    assert session_id == "session-1-abcdef"

    uploaded = body["uploadedFiles"][0]
    assert uploaded["originalName"] == "my clip.mov"
    assert uploaded["size"] == 4
    assert uploaded["mimeType"] == "video/quicktime"
    stored = Path(uploaded["absolutePath"])
    assert stored.name == "my_clip.mov"
    assert stored.read_bytes() == b"moov"

    assert [phase["id"] for phase in body["phases"]] == ["request", "plan", "execute", "summarize"]
    assert body["phases"][0]["meta"]["fileCount"] == 1
    assert body["result"]["dryRun"] is True
    assert body["result"]["exitCode"] is None
    output = body["result"]["resolvedOutputs"][0]
    assert output["publicPath"] == f"generated/{session_id}/clip.mp4"
    assert output["exists"] is False
    assert body["debug"]["model"] == "mock"
    assert "rawResponse" not in body["debug"]


def test_no_op_plan_succeeds_without_executing(tmp_path: Path):
    response = _client(tmp_path).post("/api/tasks", data={"task": "What is this file?"})
    assert response.status_code == 200
    body = response.json()
    assert body["plan"]["steps"][0]["command"] == "none"
    assert body["result"]["steps"][0]["skipReason"] == "no_op_command"
    assert "debug" not in body


def test_rejected_plan_returns_failure_payload(tmp_path: Path):
    raw = {"steps": [{"command": "rm", "arguments": ["-rf", "/"]}]}
    client = _client(tmp_path, [json.dumps(raw)])
    response = client.post("/api/tasks", data={"task": "Delete everything"})
    assert response.status_code == 500
    body = response.json()
    assert body["status"] == "failed"
    assert body["error"] == "Command generation failed."
    assert "rm" in body["detail"]
    assert body["rawPlan"] == raw
    assert body["uploadedFiles"] == []
    statuses = [(phase["id"], phase["status"]) for phase in body["phases"]]
    assert statuses[:2] == [("request", "success"), ("plan", "failed")]


def test_generated_files_are_served(tmp_path: Path):
    client = _client(tmp_path)
    target = tmp_path / "public" / "generated" / "demo" / "note.txt"
    target.parent.mkdir(parents=True)
    target.write_text("hello")
    response = client.get("/files/generated/demo/note.txt")
    assert response.status_code == 200
    assert response.text == "hello"


def test_request_helpers():
    assert create_safe_file_name("../../etc/passwd") == "passwd"
    assert create_safe_file_name("a b$c.png") == "a_b_c.png"
    assert create_safe_file_name(".env").startswith("file_")
    assert parse_boolean("TRUE") and parse_boolean("on")
    assert not parse_boolean(None) and not parse_boolean("0")
    assert parse_debug_mode("verbose").include_raw
    assert parse_debug_mode("1").enabled and not parse_debug_mode("1").include_raw
    assert not parse_debug_mode(None).enabled
