import json

import httpx
import pytest

from mediaagent.models import openai_compat
from mediaagent.models.openai_compat import OpenAICompatChatModel, OpenAICompatError


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.parametrize(
    "base_url, expected",
    [
        ("https://api.example.com/v1", "https://api.example.com/v1/chat/completions"),
        ("https://api.example.com/v1/", "https://api.example.com/v1/chat/completions"),
        ("https://api.example.com", "https://api.example.com/v1/chat/completions"),
        ("http://localhost:8000/v1/chat/completions", "http://localhost:8000/v1/chat/completions"),
        ("localhost:8000", "http://localhost:8000/v1/chat/completions"),
    ],
)
def test_build_url(base_url, expected):
    model = OpenAICompatChatModel(base_url=base_url, api_key="sk-test", model="m")
    assert model._build_url() == expected


def test_chat_sends_messages_and_response_format():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["extra"] = request.headers.get("X-Org")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion('{"steps": []}'))

    model = OpenAICompatChatModel(
        base_url="https://api.example.com/v1",
        api_key="sk-test",
        model="gpt-test",
        extra_headers={"X-Org": "media"},
        transport=httpx.MockTransport(handler),
    )
    response_format = {"type": "json_schema", "json_schema": {"name": "command_plan"}}
    result = model.chat([{"role": "user", "content": "hi"}], response_format=response_format)

    assert result.text == '{"steps": []}'
    assert result.raw["choices"][0]["message"]["content"] == '{"steps": []}'
    assert seen["url"] == "https://api.example.com/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["extra"] == "media"
    assert seen["body"]["model"] == "gpt-test"
    assert seen["body"]["response_format"] == response_format


def test_response_format_omitted_when_not_given():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_completion("ok"))

    model = OpenAICompatChatModel(
        base_url="https://api.example.com", api_key="k", model="m", transport=httpx.MockTransport(handler)
    )
    model.chat([{"role": "user", "content": "hi"}])
    assert "response_format" not in bodies[0]


def test_client_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, json={"error": "bad key"})

    model = OpenAICompatChatModel(
        base_url="https://api.example.com", api_key="k", model="m", transport=httpx.MockTransport(handler)
    )
    with pytest.raises(OpenAICompatError, match="401"):
        model.chat([{"role": "user", "content": "hi"}])
    assert len(calls) == 1


def test_server_errors_are_retried(monkeypatch):
    sleeps = []
    monkeypatch.setattr(openai_compat.time, "sleep", lambda seconds: sleeps.append(seconds))
    statuses = [503, 429, 200]

    def handler(request: httpx.Request) -> httpx.Response:
        status = statuses.pop(0)
        if status == 200:
            return httpx.Response(200, json=_completion("done"))
        return httpx.Response(status, text="busy")

    model = OpenAICompatChatModel(
        base_url="https://api.example.com", api_key="k", model="m", transport=httpx.MockTransport(handler)
    )
    assert model.chat([{"role": "user", "content": "hi"}]).text == "done"
    assert sleeps == [1, 2]


def test_gives_up_after_max_attempts(monkeypatch):
    monkeypatch.setattr(openai_compat.time, "sleep", lambda seconds: None)
    model = OpenAICompatChatModel(
        base_url="https://api.example.com",
        api_key="k",
        model="m",
        max_attempts=2,
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down")),
    )
    with pytest.raises(OpenAICompatError, match="request failed"):
        model.chat([{"role": "user", "content": "hi"}])
