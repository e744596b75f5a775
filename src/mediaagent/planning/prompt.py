"""Developer prompt and response schema for the planner model."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from mediaagent.tools.registry import NO_OP_COMMAND, ToolRegistry

if TYPE_CHECKING:
    from mediaagent.agent import AgentRequest


class PromptBuilder:
    """Builds the planning instructions sent ahead of the user's task."""

    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    def build(self, request: "AgentRequest") -> str:
        tool_summary = "\n".join(
            f"- {tool.id}: {tool.description}" for tool in self.registry.describe_executable_commands()
        )
        output_dir = _absolute(request.output_dir)
        sections = [
            "You are a multimedia conversion CLI assistant.",
            "Available commands:",
            tool_summary,
            "Input files:",
            self._describe_files(request),
            f"Place any new files inside: {output_dir}",
            "Rules:",
            "\n".join(
                [
                    "- Output must be JSON only.",
                    "- Define an ordered array of command steps in the steps property.",
                    f"- Each step command must be one of {' / '.join(self.registry.list_command_ids())};"
                    f" use {NO_OP_COMMAND} if nothing should run.",
                    "- arguments must list CLI arguments in execution order.",
                    "- reasoning should briefly explain why the step is needed.",
                    "- outputs must list planned files (even if they may not exist yet).",
                    "- Add followUp or overview strings when helpful.",
                    "- Use absolute paths and keep every path inside outputDir.",
                ]
            ),
        ]
        return "\n\n".join(sections)

    def _describe_files(self, request: "AgentRequest") -> str:
        if not request.files:
            return "No input files were provided."
        blocks = []
        for index, item in enumerate(request.files, start=1):
            lines = [
                f"{index}. {item.original_name}",
                f"   path: {_absolute(item.absolute_path)}",
                f"   size: {item.size} bytes",
            ]
            if item.mime_type:
                lines.append(f"   mime: {item.mime_type}")
            blocks.append("\n".join(lines))
        return "\n".join(blocks)


def _absolute(path: str) -> str:
    return str(Path(path).resolve())


def build_response_format(registry: ToolRegistry) -> dict[str, Any]:
    """JSON schema the model is asked to follow for ``command_plan`` output."""
    output_schema = {
        "type": "object",
        "additionalProperties": False,
        "required": ["path", "description"],
        "properties": {
            "path": {"type": "string"},
            "description": {"type": "string"},
        },
    }
    step_schema = {
        "type": "object",
        "additionalProperties": False,
        "required": ["command", "arguments", "reasoning", "outputs"],
        "properties": {
            "command": {
                "type": "string",
                "description": "Command name to execute.",
                "enum": registry.list_command_ids(),
            },
            "arguments": {
                "type": "array",
                "description": "Ordered command arguments.",
                "items": {"type": "string"},
            },
            "reasoning": {"type": "string", "description": "Why this step is needed."},
            "outputs": {
                "type": "array",
                "description": "Planned output files.",
                "items": output_schema,
            },
        },
    }
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "command_plan",
            "strict": True,
            "schema": {
                "type": "object",
                "additionalProperties": False,
                "required": ["steps", "overview", "followUp"],
                "properties": {
                    "steps": {"type": "array", "items": step_schema},
                    "overview": {"type": "string"},
                    "followUp": {"type": "string"},
                },
            },
        },
    }
