"""Inside Out debate orchestration: concurrent initial burst, sequential debate turns."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import replace

from config.config_loader import PromptsConfig
from mindmate.models import MODE_INSIDE_OUT, AgentReply, Persona, StoredMessage, TranscriptEntry, USER_SPEAKER
from mindmate.personas import PERSONAS
from mindmate.providers.base import AIProvider
from mindmate.responder import DEFAULT_HISTORY_WINDOW, generate_debate_reply, generate_initial_reply

logger = logging.getLogger(__name__)

DEFAULT_DEBATE_TURNS = 3

# Spacing between debate-turn timestamps so replies sort even when the clock does not move.
TURN_SPACING_MS = 100


def has_debate_history(history: Sequence[StoredMessage]) -> bool:
    """True if any stored user message was sent in inside-out mode."""
    return any(m.is_user and m.type == MODE_INSIDE_OUT for m in history)


class DebateOrchestrator:
    """Runs one inside-out exchange per user message.

    Stateless between calls; whether the initial burst already happened is
    decided by the caller (or inferred from the stored history).
    """

    def __init__(
        self,
        provider: AIProvider,
        prompts: PromptsConfig,
        personas: Sequence[Persona] = PERSONAS,
        debate_turns: int = DEFAULT_DEBATE_TURNS,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        temperature: float | None = 0.75,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not personas:
            raise ValueError("DebateOrchestrator needs at least one persona")
        if debate_turns < 0:
            raise ValueError(f"debate_turns must be >= 0, got {debate_turns}")
        self._provider = provider
        self._prompts = prompts
        self._personas = tuple(personas)
        self._debate_turns = debate_turns
        self._history_window = history_window
        self._temperature = temperature
        self._clock = clock

    @property
    def personas(self) -> tuple[Persona, ...]:
        return self._personas

    @property
    def debate_turns(self) -> int:
        return self._debate_turns

    def persona_for_turn(self, turn_index: int) -> Persona:
        """Round-robin selection over the registry order."""
        return self._personas[turn_index % len(self._personas)]

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _initial_burst(self, user_text: str) -> list[AgentReply]:
        logger.info("Starting initial burst with %d personas", len(self._personas))
        replies = await asyncio.gather(
            *(
                generate_initial_reply(
                    user_text, persona, self._provider, self._prompts, temperature=self._temperature
                )
                for persona in self._personas
            )
        )
        stamp = self._now_ms()
        failed = sum(1 for r in replies if r.failed)
        logger.info(
            "Initial burst complete: %d/%d personas responded",
            len(replies) - failed,
            len(replies),
        )
        # gather preserves argument order, so this is registry order
        return [replace(r, timestamp_ms=stamp) for r in replies]

    async def run_debate_turn(
        self,
        conversation_id: str,
        user_text: str,
        prior_history: Sequence[StoredMessage],
        *,
        initial_burst_done: bool | None = None,
    ) -> list[AgentReply]:
        """Produce every persona reply for one user message.

        Args:
            conversation_id: Conversation being continued (used for logging).
            user_text: The user's new message.
            prior_history: Stored messages of this conversation before ``user_text``.
            initial_burst_done: Persisted session flag. None falls back to
                scanning ``prior_history`` for an inside-out user message.

        Returns:
            Initial-burst replies (first turn only) followed by the debate
            replies, in production order.
        """
        if initial_burst_done is None:
            initial_burst_done = has_debate_history(prior_history)

        transcript: list[TranscriptEntry] = [m.to_transcript_entry() for m in prior_history]
        transcript.append(TranscriptEntry(speaker=USER_SPEAKER, text=user_text))

        new_replies: list[AgentReply] = []

        if not initial_burst_done:
            burst = await self._initial_burst(user_text)
            new_replies.extend(burst)
            transcript.extend(TranscriptEntry(speaker=r.persona_name, text=r.text) for r in burst)
        else:
            logger.debug("Conversation %s already had its initial burst", conversation_id)

        base_ms = self._now_ms()
        for turn in range(self._debate_turns):
            persona = self.persona_for_turn(turn)
            logger.info(
                "Conversation %s debate turn %d/%d: %s",
                conversation_id,
                turn + 1,
                self._debate_turns,
                persona.name,
            )
            reply = await generate_debate_reply(
                list(transcript),
                persona,
                self._provider,
                self._prompts,
                window=self._history_window,
                temperature=self._temperature,
            )
            reply = replace(reply, timestamp_ms=base_ms + (turn + 1) * TURN_SPACING_MS)
            new_replies.append(reply)
            transcript.append(TranscriptEntry(speaker=reply.persona_name, text=reply.text))

        logger.info(
            "Conversation %s produced %d replies (%d failed)",
            conversation_id,
            len(new_replies),
            sum(1 for r in new_replies if r.failed),
        )
        return new_replies
