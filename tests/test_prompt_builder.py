from pathlib import Path

from mediaagent.agent import AgentFile, AgentRequest
from mediaagent.planning.prompt import PromptBuilder, build_response_format
from mediaagent.tools.registry import ToolRegistry


def test_prompt_lists_tools_files_and_output_dir(tmp_path: Path):
    builder = PromptBuilder(ToolRegistry.create_default())
    request = AgentRequest(
        task="Transcode the clip and extract thumbnail.",
        files=[
            AgentFile(
                id="file-1",
                original_name="clip.mp4",
                absolute_path=str(tmp_path / "clip.mp4"),
                size=1024,
                mime_type="video/mp4",
            )
        ],
        output_dir=str(tmp_path / "outputs"),
    )
    prompt = builder.build(request)
    assert "multimedia conversion" in prompt
    assert "clip.mp4" in prompt
    assert "mime: video/mp4" in prompt
    assert str((tmp_path / "outputs").resolve()) in prompt
    assert "steps property" in prompt
    assert "- ffmpeg:" in prompt
    assert "- none:" not in prompt


def test_prompt_without_files(tmp_path: Path):
    builder = PromptBuilder(ToolRegistry.create_default())
    prompt = builder.build(AgentRequest(task="x", output_dir=str(tmp_path)))
    assert "No input files were provided." in prompt


def test_response_format_uses_registry_commands():
    registry = ToolRegistry({"sox": {"title": "SoX", "description": ""}})
    response_format = build_response_format(registry)
    schema = response_format["json_schema"]["schema"]
    step_schema = schema["properties"]["steps"]["items"]
    assert response_format["type"] == "json_schema"
    assert "command" in step_schema["required"]
    assert step_schema["properties"]["command"]["enum"] == registry.list_command_ids()
