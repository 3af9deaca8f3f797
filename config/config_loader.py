"""Load settings.yaml into typed dataclasses. Checks API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None


@dataclass
class PromptsConfig:
    initial: str      # {agent_prompt}
    debate: str       # {emotion} {personality} {history}
    summary: str      # {user_input} {history}
    listener: str = ""     # {history} {user_input}
    coordinator: str = ""  # {history} {user_input} {listener_summary}


@dataclass
class DefaultsConfig:
    agent_model: str
    summary_model: str
    debate_turns: int = 3
    history_window: int = 6
    agent_temperature: float = 0.75
    summary_temperature: float = 0.5
    db_path: Path = Path("db.json")


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    available_providers: set[str] = field(default_factory=set)


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing and ValueError when the
    default models are not declared under ``models``. Missing API keys are
    logged, not raised; callers check ``available_providers``.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    defaults = DefaultsConfig(
        agent_model=str(defaults_raw["agent_model"]),
        summary_model=str(defaults_raw.get("summary_model", defaults_raw["agent_model"])),
        debate_turns=int(defaults_raw.get("debate_turns", 3)),
        history_window=int(defaults_raw.get("history_window", 6)),
        agent_temperature=float(defaults_raw.get("agent_temperature", 0.75)),
        summary_temperature=float(defaults_raw.get("summary_temperature", 0.5)),
        db_path=Path(defaults_raw.get("db_path", "db.json")),
    )
    if defaults.debate_turns < 0:
        raise ValueError(f"debate_turns must be >= 0, got {defaults.debate_turns}")

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        initial=prompts_raw["initial"],
        debate=prompts_raw["debate"],
        summary=prompts_raw["summary"],
        listener=prompts_raw.get("listener", ""),
        coordinator=prompts_raw.get("coordinator", ""),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in raw["models"].items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            max_tokens=int(model_raw["max_tokens"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Provider available: %s", provider_name)
        else:
            logger.info(
                "Provider skipped (no API key): %s, set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    for role, name in (("agent_model", defaults.agent_model), ("summary_model", defaults.summary_model)):
        if name not in models:
            raise ValueError(f"defaults.{role} refers to unknown model '{name}'")

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        available_providers=available_providers,
    )
