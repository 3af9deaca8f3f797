"""Shared pytest fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, ModelConfig, PromptsConfig
from mindmate.models import MODE_INSIDE_OUT, ModelResponse, StoredMessage
from mindmate.providers.base import AIProvider
from mindmate.store import JsonChatStore

FIXED_NOW = 1_700_000_000.0


@pytest.fixture
def sample_model_config() -> ModelConfig:
    return ModelConfig(
        name="test_model",
        sdk="test",
        model="test-model-1",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
        base_url=None,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        initial="{agent_prompt}\n\nYour Response:",
        debate="You are {emotion}. Personality: {personality}\nHistory:\n{history}\nYour ({emotion}) reaction:",
        summary="Original: {user_input}\nTranscript:\n{history}\nSummary: ... Advice: ...",
        listener="Listen.\nHistory:\n{history}\nUser: {user_input}",
        coordinator="Coordinate.\nHistory:\n{history}\nUser: {user_input}\nListener: {listener_summary}",
    )


@pytest.fixture
def sample_defaults_config(tmp_path: Path) -> DefaultsConfig:
    return DefaultsConfig(
        agent_model="gemini",
        summary_model="gemini",
        debate_turns=3,
        db_path=tmp_path / "db.json",
    )


@pytest.fixture
def sample_app_config(
    sample_defaults_config: DefaultsConfig,
    sample_prompts_config: PromptsConfig,
) -> AppConfig:
    gemini_cfg = ModelConfig(
        name="gemini",
        sdk="google-genai",
        model="gemini-2.0-flash",
        api_key_env="GOOGLE_GENAI_API_KEY",
        timeout_sec=60,
        max_tokens=2048,
    )
    mistral_cfg = ModelConfig(
        name="mistral",
        sdk="openai",
        model="mistral-medium",
        api_key_env="MISTRAL_API_KEY",
        timeout_sec=60,
        max_tokens=2048,
        base_url="https://api.mistral.ai/v1",
    )
    return AppConfig(
        defaults=sample_defaults_config,
        models={"gemini": gemini_cfg, "mistral": mistral_cfg},
        prompts=sample_prompts_config,
        available_providers={"gemini"},
    )


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store(tmp_path: Path) -> JsonChatStore:
    return JsonChatStore(tmp_path / "db.json")


def make_message(
    text: str,
    sender: str = "user",
    conversation_id: str = "conv-1",
    type: str = MODE_INSIDE_OUT,
    agent_name: str | None = None,
    timestamp: int = 1_000,
    id: str | None = None,
) -> StoredMessage:
    return StoredMessage(
        id=id or f"{conversation_id}-{sender}-{timestamp}",
        text=text,
        sender=sender,
        timestamp=timestamp,
        conversation_id=conversation_id,
        type=type,
        agent_name=agent_name,
    )


def make_response(text: str, provider: str = "mock") -> ModelResponse:
    return ModelResponse(
        provider=provider,
        model="mock-model",
        text=text,
        latency_sec=0.1,
        token_count=10,
    )


class MockProvider(AIProvider):
    """Test double AIProvider."""

    def __init__(self, provider_name: str = "mock", response_text: str = "Mock response") -> None:
        self._name = provider_name
        self._response_text = response_text
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because invoke is defined in the class body below.
        self.invoke = AsyncMock(return_value=make_response(response_text, provider_name))  # type: ignore[method-assign]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def invoke(self, prompt: str, *, temperature: float | None = None) -> ModelResponse:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return make_response(self._response_text, self._name)

    def prompts(self) -> list[str]:
        """Every prompt sent so far, in call order."""
        return [c.args[0] for c in self.invoke.call_args_list]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()
