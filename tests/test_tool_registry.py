import json

from mediaagent.config import Settings
from mediaagent.tools.registry import NO_OP_COMMAND, ToolRegistry


def test_default_registry_lists_commands_in_declaration_order():
    registry = ToolRegistry.create_default()
    assert registry.list_command_ids() == ["ffmpeg", "magick", "exiftool", "yt-dlp", "none"]
    assert registry.has_command("ffmpeg")
    assert registry.has_command(NO_OP_COMMAND)
    assert not registry.has_command("rm")


def test_executable_commands_exclude_none():
    registry = ToolRegistry.create_default()
    assert NO_OP_COMMAND not in registry.list_executable_command_ids()
    described = registry.describe_executable_commands()
    assert [tool.id for tool in described] == registry.list_executable_command_ids()
    assert described[0].title == "FFmpeg"


def test_extra_definitions_extend_catalog_and_keep_none():
    registry = ToolRegistry({"sox": {"title": "SoX", "description": "Audio effects."}})
    assert registry.has_command("sox")
    assert registry.has_command(NO_OP_COMMAND)
    assert registry.list_command_ids()[-1] == "sox"
    assert registry.get("sox").description == "Audio effects."


def test_registries_do_not_share_state():
    custom = ToolRegistry({"sox": {"title": "SoX", "description": ""}})
    default = ToolRegistry.create_default()
    assert custom.has_command("sox")
    assert not default.has_command("sox")


def test_registry_from_settings_reads_json_definitions():
    settings = Settings(
        tool_definitions=json.dumps({"gifsicle": {"title": "Gifsicle", "description": "GIFs"}})
    )
    registry = ToolRegistry.from_settings(settings)
    assert "gifsicle" in registry.list_executable_command_ids()
