"""Catalog of CLI commands a plan is allowed to name."""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from mediaagent.config import Settings

NO_OP_COMMAND = "none"

DEFAULT_TOOL_DEFINITIONS: dict[str, dict[str, str]] = {
    "ffmpeg": {
        "title": "FFmpeg",
        "description": "Handles audio and video conversions and processing.",
    },
    "magick": {
        "title": "ImageMagick",
        "description": "Performs rich image conversions, resizing, and effects.",
    },
    "exiftool": {
        "title": "ExifTool",
        "description": "Reads and edits embedded metadata for media files.",
    },
    "yt-dlp": {
        "title": "yt-dlp",
        "description": "Downloads media from supported online services.",
    },
    NO_OP_COMMAND: {
        "title": "No command",
        "description": "Choose when no CLI tool is appropriate for the task.",
    },
}


class ToolDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str


class ToolRegistry:
    """Immutable lookup of allowed command ids and their metadata."""

    def __init__(self, definitions: Mapping[str, Mapping[str, str]] | None = None) -> None:
        merged: dict[str, ToolDefinition] = {}
        for source in (DEFAULT_TOOL_DEFINITIONS, definitions or {}):
            for command_id, meta in source.items():
                merged[command_id] = ToolDefinition(
                    id=command_id,
                    title=str(meta.get("title", command_id)),
                    description=str(meta.get("description", "")),
                )
        self._definitions: Mapping[str, ToolDefinition] = MappingProxyType(merged)

    @classmethod
    def create_default(cls) -> "ToolRegistry":
        return cls()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ToolRegistry":
        """Build the default catalog plus any JSON definitions from settings."""
        if not settings.tool_definitions:
            return cls()
        extra = json.loads(settings.tool_definitions)
        if not isinstance(extra, dict):
            raise ValueError("MEDIAAGENT_TOOL_DEFINITIONS must be a JSON object")
        return cls(extra)

    def has_command(self, command_id: str) -> bool:
        return command_id in self._definitions

    def get(self, command_id: str) -> ToolDefinition | None:
        return self._definitions.get(command_id)

    def list_command_ids(self) -> list[str]:
        return list(self._definitions)

    def list_executable_command_ids(self) -> list[str]:
        return [command_id for command_id in self._definitions if command_id != NO_OP_COMMAND]

    def describe_executable_commands(self) -> list[ToolDefinition]:
        return [self._definitions[command_id] for command_id in self.list_executable_command_ids()]
