"""Command-line interface."""

from __future__ import annotations

import argparse
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

from mediaagent.agent import AgentFile, AgentRequest
from mediaagent.config import Settings
from mediaagent.errors import MediaAgentTaskError
from mediaagent.factory import build_agent
from mediaagent.reporting import failure_payload, success_payload


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan and run media CLI commands for a task")
    parser.add_argument("task", type=str, help="What to do with the input files")
    parser.add_argument("--file", dest="files", action="append", default=[], help="Input file")
    parser.add_argument("--output-dir", dest="output_dir", required=True)
    parser.add_argument("--cwd", dest="cwd")
    parser.add_argument("--public-root", dest="public_root")
    parser.add_argument("--timeout", type=float, dest="timeout_seconds")
    parser.add_argument("--dry-run", action="store_true", dest="dry_run")
    parser.add_argument("--debug", action="store_true", dest="debug")
    parser.add_argument("--raw-response", action="store_true", dest="include_raw_response")
    parser.add_argument("--base-url", dest="base_url")
    parser.add_argument("--api-key", dest="api_key")
    parser.add_argument("--model", dest="model")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    data: dict[str, Any] = settings.model_dump()
    if args.base_url:
        data["openai_base_url"] = args.base_url
    if args.api_key:
        data["openai_api_key"] = args.api_key
    if args.model:
        data["openai_model"] = args.model
    if args.timeout_seconds:
        data["command_timeout_seconds"] = args.timeout_seconds
    return Settings(**data)


def build_request(args: argparse.Namespace) -> AgentRequest:
    files = []
    for index, raw_path in enumerate(args.files):
        path = Path(raw_path).resolve()
        files.append(
            AgentFile(
                id=f"cli-file-{index}",
                original_name=path.name,
                absolute_path=str(path),
                size=path.stat().st_size,
                mime_type=mimetypes.guess_type(path.name)[0],
            )
        )
    output_dir = Path(args.output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    return AgentRequest(task=args.task, files=files, output_dir=str(output_dir))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = apply_overrides(Settings(), args)
    agent = build_agent(settings)
    request = build_request(args)
    try:
        outcome = agent.run_task(
            request,
            cwd=args.cwd or str(Path(request.output_dir)),
            public_root=args.public_root,
            dry_run=args.dry_run,
            debug=args.debug or args.include_raw_response,
            include_raw_response=args.include_raw_response,
        )
    except MediaAgentTaskError as exc:
        payload = failure_payload(exc, include_debug=args.debug)
        print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
        return 1
    payload = success_payload(outcome, include_debug=args.debug)
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
