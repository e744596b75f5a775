import json

import pytest

from mediaagent.errors import ResponseParseError
from mediaagent.planning.response import extract_response_text, parse_plan_text

PLAN = {
    "overview": "",
    "followUp": "",
    "steps": [{"command": "none", "arguments": [], "reasoning": "No work required.", "outputs": []}],
}


def test_extract_text_from_output_text():
    text = json.dumps(PLAN)
    assert extract_response_text({"output_text": text}) == text


def test_extract_text_from_output_array():
    response = {"output": [{"content": [{"type": "output_text", "text": '{"hello":"world"}'}]}]}
    assert extract_response_text(response) == '{"hello":"world"}'


def test_extract_text_from_chat_choices():
    assert extract_response_text({"choices": [{"message": {"content": "plain"}}]}) == "plain"
    parts = {"choices": [{"message": {"content": [{"type": "text", "text": "part"}]}}]}
    assert extract_response_text(parts) == "part"


def test_extract_text_rejects_unknown_shapes():
    with pytest.raises(ResponseParseError):
        extract_response_text("text")
    with pytest.raises(ResponseParseError):
        extract_response_text({"choices": [{"message": {"content": None}}]})


def test_parse_plan_text_strict_json():
    assert parse_plan_text(json.dumps(PLAN)) == PLAN


def test_parse_plan_text_with_fences_and_trailing_commas():
    text = 'Here is the plan:\n```json\n{"steps": [{"command": "none", "arguments": [],},], }\n```'
    parsed = parse_plan_text(text)
    assert parsed["steps"][0]["command"] == "none"


def test_parse_plan_text_with_surrounding_prose():
    parsed = parse_plan_text('Sure! {"steps": [], "overview": "a {brace} in text"} done')
    assert parsed["overview"] == "a {brace} in text"


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2]", '{"steps": ['])
def test_parse_plan_text_failures(text):
    with pytest.raises(ResponseParseError):
        parse_plan_text(text)
