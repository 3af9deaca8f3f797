"""Single-agent replies: one persona, one model call, never raises."""

import logging
from collections.abc import Sequence

from config.config_loader import PromptsConfig
from mindmate.models import AgentReply, Persona, TranscriptEntry
from mindmate.providers.base import AIProvider

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = 6


def initial_fallback_text(persona: Persona) -> str:
    return f"({persona.name} failed to respond.)"


def debate_fallback_text(persona: Persona) -> str:
    return f"({persona.name} failed to join the debate.)"


def format_history(entries: Sequence[TranscriptEntry]) -> str:
    """Render entries as ``speaker: text`` lines."""
    return "\n".join(entry.format() for entry in entries)


async def _invoke_as(
    persona: Persona,
    provider: AIProvider,
    prompt: str,
    fallback_text: str,
    temperature: float | None,
    phase: str,
) -> AgentReply:
    try:
        response = await provider.invoke(prompt, temperature=temperature)
    except Exception as exc:
        logger.warning("%s %s reply failed via %s: %s", persona.name, phase, provider.name(), exc)
        return AgentReply(
            persona_name=persona.name,
            text=fallback_text,
            display_marker=persona.display_marker,
            failed=True,
        )

    logger.info("%s %s reply generated (%.2fs)", persona.name, phase, response.latency_sec)
    return AgentReply(
        persona_name=persona.name,
        text=response.text.strip(),
        display_marker=persona.display_marker,
    )


async def generate_initial_reply(
    user_input: str,
    persona: Persona,
    provider: AIProvider,
    prompts: PromptsConfig,
    temperature: float | None = None,
) -> AgentReply:
    """First reaction of one persona to the user's message, without history.

    A failed model call becomes a fallback reply attributed to the persona.
    """
    prompt = prompts.initial.format(agent_prompt=persona.prompt_builder(user_input))
    logger.debug("Initial prompt for %s: %d chars", persona.name, len(prompt))
    return await _invoke_as(
        persona, provider, prompt, initial_fallback_text(persona), temperature, "initial"
    )


async def generate_debate_reply(
    history: Sequence[TranscriptEntry],
    persona: Persona,
    provider: AIProvider,
    prompts: PromptsConfig,
    window: int = DEFAULT_HISTORY_WINDOW,
    temperature: float | None = None,
) -> AgentReply:
    """A short in-character reaction to the most recent ``window`` entries.

    Args:
        history: Conversation so far, oldest first.
        persona: The persona taking this turn.
        provider: Language-model collaborator.
        prompts: Prompt templates; ``prompts.debate`` is filled here.
        window: How many trailing entries the persona gets to see.
        temperature: Sampling temperature passed through to the provider.

    Returns:
        AgentReply for the persona; a fallback reply on model failure.
    """
    recent = list(history)[-window:] if window > 0 else []
    prompt = prompts.debate.format(
        emotion=persona.name,
        personality=persona.personality,
        history=format_history(recent),
    )
    logger.debug("Debate prompt for %s: %d entries, %d chars", persona.name, len(recent), len(prompt))
    return await _invoke_as(
        persona, provider, prompt, debate_fallback_text(persona), temperature, "debate"
    )
