"""FastAPI service."""

from __future__ import annotations

import re
import secrets
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from mediaagent.agent import AgentFile, AgentRequest, MediaAgent
from mediaagent.config import Settings
from mediaagent.errors import MediaAgentTaskError
from mediaagent.factory import build_agent
from mediaagent.reporting import failure_payload, success_payload
from mediaagent.tracking import utc_now
from mediaagent.util.logging import get_logger

logger = get_logger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]")


@dataclass(frozen=True)
class Session:
    id: str
    input_dir: Path
    output_dir: Path


@dataclass(frozen=True)
class DebugMode:
    enabled: bool = False
    include_raw: bool = False


def create_session_id() -> str:
    return f"session-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def create_safe_file_name(name: str | None) -> str:
    base_name = Path(name or "").name
    sanitized = _UNSAFE_NAME_CHARS.sub("_", base_name)
    if not sanitized or sanitized.startswith("."):
        return f"file_{int(time.time() * 1000)}"
    return sanitized[:200]


def parse_boolean(value: str | None) -> bool:
    return value is not None and value.lower() in _TRUTHY


def parse_debug_mode(value: str | None) -> DebugMode:
    if not value:
        return DebugMode()
    lower = value.lower()
    return DebugMode(
        enabled=lower in _TRUTHY | {"verbose", "full"},
        include_raw=lower in {"verbose", "full"},
    )


def create_request_phase(task: str, file_count: int, dry_run: bool, debug: bool) -> dict[str, Any]:
    now = utc_now()
    return {
        "id": "request",
        "title": "Receive request",
        "status": "success",
        "startedAt": now,
        "finishedAt": now,
        "error": None,
        "meta": {
            "taskPreview": task[:120],
            "fileCount": file_count,
            "dryRun": dry_run,
            "debug": debug,
        },
        "logs": [],
    }


def create_app(settings: Settings | None = None, agent: MediaAgent | None = None) -> FastAPI:
    settings = settings or Settings()
    agent = agent or build_agent(settings)
    public_root = Path(settings.public_root).resolve()
    generated_root = Path(settings.generated_root).resolve()
    session_input_root = Path(settings.session_input_root).resolve()
    for directory in (public_root, generated_root, session_input_root):
        directory.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="mediaagent")

    def prepare_session() -> Session:
        session_id = create_session_id()
        session = Session(
            id=session_id,
            input_dir=session_input_root / session_id,
            output_dir=generated_root / session_id,
        )
        session.input_dir.mkdir(parents=True, exist_ok=True)
        session.output_dir.mkdir(parents=True, exist_ok=True)
        return session

    def store_uploads(session: Session, uploads: list[UploadFile]) -> list[AgentFile]:
        stored = []
        for index, upload in enumerate(uploads):
            target = session.input_dir / create_safe_file_name(upload.filename)
            with target.open("wb") as handle:
                shutil.copyfileobj(upload.file, handle)
            stored.append(
                AgentFile(
                    id=f"{session.id}-file-{index}",
                    original_name=upload.filename or target.name,
                    absolute_path=str(target),
                    size=target.stat().st_size,
                    mime_type=upload.content_type,
                )
            )
        return stored

    @app.get("/api/tools")
    def list_tools() -> dict[str, Any]:
        return {"tools": [tool.model_dump() for tool in agent.registry.describe_executable_commands()]}

    @app.post("/api/tasks")
    def run_task(
        task: str = Form(default=""),
        files: list[UploadFile] | None = File(default=None),
        dry_run_flag: str | None = Query(default=None, alias="dryRun"),
        debug_flag: str | None = Query(default=None, alias="debug"),
    ) -> JSONResponse:
        task = task.strip()
        if not task:
            return JSONResponse(status_code=400, content={"error": "The task field is required."})

        session = prepare_session()
        dry_run = parse_boolean(dry_run_flag)
        debug_mode = parse_debug_mode(debug_flag)
        stored = store_uploads(session, files or [])
        uploaded = [item.model_dump(by_alias=True) for item in stored]
        request_phase = create_request_phase(task, len(stored), dry_run, debug_mode.enabled)
        request = AgentRequest(task=task, files=stored, output_dir=str(session.output_dir))
        logger.info("Session %s received task with %s file(s)", session.id, len(stored))

        try:
            outcome = agent.run_task(
                request,
                cwd=str(session.input_dir),
                public_root=str(public_root),
                dry_run=dry_run,
                debug=debug_mode.enabled,
                include_raw_response=debug_mode.include_raw,
            )
        except MediaAgentTaskError as exc:
            logger.warning("Session %s failed: %s", session.id, exc.detail)
            payload = failure_payload(exc, include_debug=debug_mode.enabled)
            payload["phases"] = [request_phase, *payload["phases"]]
            payload.update(
                {
                    "sessionId": session.id,
                    "error": "Command generation failed.",
                    "uploadedFiles": uploaded,
                }
            )
            return JSONResponse(status_code=500, content=payload)

        payload = success_payload(outcome, include_debug=debug_mode.enabled)
        payload["phases"] = [request_phase, *payload["phases"]]
        payload.update({"sessionId": session.id, "task": task, "uploadedFiles": uploaded})
        return JSONResponse(content=payload)

    app.mount("/files", StaticFiles(directory=str(public_root)), name="files")
    return app


def main() -> None:
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
