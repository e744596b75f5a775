"""Shared construction helpers for models, registries, and agents."""

from __future__ import annotations

import json

from mediaagent.agent import MediaAgent
from mediaagent.config import Settings
from mediaagent.execution.executor import CommandExecutor
from mediaagent.models.base import BaseChatModel
from mediaagent.models.mock import MockChatModel
from mediaagent.models.openai_compat import OpenAICompatChatModel
from mediaagent.planning.planner import LLMPlanner
from mediaagent.tools.registry import ToolRegistry


def build_model(settings: Settings, use_mock: bool = False) -> BaseChatModel:
    if use_mock or not settings.openai_api_key:
        return MockChatModel()
    extra_headers = None
    if settings.openai_extra_headers:
        extra_headers = json.loads(settings.openai_extra_headers)
    return OpenAICompatChatModel(
        base_url=settings.openai_base_url,
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        timeout_seconds=settings.openai_timeout_seconds,
        extra_headers=extra_headers,
    )


def create_media_agent(
    model: BaseChatModel,
    registry: ToolRegistry | None = None,
    timeout_seconds: float | None = None,
    scrub_secrets: bool = True,
) -> MediaAgent:
    """Wire the standard planner and executor around ``model``."""
    registry = registry or ToolRegistry.create_default()
    executor = (
        CommandExecutor(timeout_seconds=timeout_seconds, scrub_secrets=scrub_secrets)
        if timeout_seconds is not None
        else CommandExecutor(scrub_secrets=scrub_secrets)
    )
    return MediaAgent(planner=LLMPlanner(model, registry), executor=executor, registry=registry)


def build_agent(settings: Settings, model: BaseChatModel | None = None) -> MediaAgent:
    return create_media_agent(
        model or build_model(settings),
        registry=ToolRegistry.from_settings(settings),
        timeout_seconds=settings.command_timeout_seconds,
        scrub_secrets=settings.scrub_secrets,
    )
