"""Team-chat conversation service: inside-out debates, standard replies, summaries.

Each user message costs one store read and one store write. Provider and
persistence collaborators are passed in, never created here.
"""

import logging
import time
import uuid
from collections.abc import Callable

from config.config_loader import PromptsConfig
from mindmate.models import (
    MODE_INSIDE_OUT,
    MODE_STANDARD,
    USER_SPEAKER,
    AgentReply,
    StoredMessage,
    SummaryResult,
    TeamChatResult,
)
from mindmate.orchestrator import DebateOrchestrator, has_debate_history
from mindmate.providers.base import AIProvider
from mindmate.responder import format_history
from mindmate.store import JsonChatStore
from mindmate.summarizer import summarize

logger = logging.getLogger(__name__)

COORDINATOR_NAME = "Coordinator"
MISSING_USER_INPUT = "User input not found."

_MODES = (MODE_INSIDE_OUT, MODE_STANDARD)


class ConversationNotFoundError(LookupError):
    """Raised when a conversation has no stored messages."""

    def __init__(self, conversation_id: str) -> None:
        self.conversation_id = conversation_id
        super().__init__(f"Conversation not found or empty: {conversation_id}")


def _new_id() -> str:
    return str(uuid.uuid4())


class TeamChatService:
    def __init__(
        self,
        store: JsonChatStore,
        orchestrator: DebateOrchestrator,
        provider: AIProvider,
        summary_provider: AIProvider,
        prompts: PromptsConfig,
        agent_temperature: float | None = 0.75,
        summary_temperature: float | None = 0.5,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._provider = provider
        self._summary_provider = summary_provider
        self._prompts = prompts
        self._agent_temperature = agent_temperature
        self._summary_temperature = summary_temperature
        self._id_factory = id_factory
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _reply_message(self, reply: AgentReply, conversation_id: str, fallback_ts: int) -> StoredMessage:
        return StoredMessage(
            id=self._id_factory(),
            text=reply.text,
            sender="ai",
            timestamp=reply.timestamp_ms if reply.timestamp_ms is not None else fallback_ts,
            conversation_id=conversation_id,
            type=MODE_INSIDE_OUT,
            agent_name=reply.persona_name,
            avatar=reply.display_marker,
        )

    async def send_message(
        self,
        text: str,
        conversation_id: str | None = None,
        mode: str = MODE_INSIDE_OUT,
    ) -> TeamChatResult:
        """Handle one user message and persist it together with the AI replies.

        Raises:
            ValueError: On blank text or an unknown mode.
            ProviderError: If a standard-mode model call fails.
            PersistenceError: If the store cannot be read or written.
        """
        if not text or not text.strip():
            raise ValueError("Invalid message format: text is required")
        if mode not in _MODES:
            raise ValueError(f"Unknown chat mode '{mode}', expected one of {', '.join(_MODES)}")

        conversation_id = conversation_id or self._id_factory()
        state = self._store.load_session(conversation_id)

        user_message = StoredMessage(
            id=self._id_factory(),
            text=text,
            sender=USER_SPEAKER,
            timestamp=self._now_ms(),
            conversation_id=conversation_id,
            type=mode,
        )

        logger.info("Conversation %s: %s message (%d prior)", conversation_id, mode, len(state.history))

        if mode == MODE_INSIDE_OUT:
            agent_replies = await self._orchestrator.run_debate_turn(
                conversation_id,
                text,
                state.history,
                # documents written before session flags existed only have the history
                initial_burst_done=state.initial_burst_done or has_debate_history(state.history),
            )
            replies = [self._reply_message(r, conversation_id, user_message.timestamp) for r in agent_replies]
            self._store.append_entries(conversation_id, [user_message, *replies], initial_burst_done=True)
        else:
            reply_text = await self._standard_reply(text, state.history)
            replies = [
                StoredMessage(
                    id=self._id_factory(),
                    text=reply_text,
                    sender="ai",
                    timestamp=self._now_ms(),
                    conversation_id=conversation_id,
                    type=MODE_STANDARD,
                    agent_name=COORDINATOR_NAME,
                )
            ]
            self._store.append_entries(conversation_id, [user_message, *replies])

        return TeamChatResult(conversation_id=conversation_id, user_message=user_message, replies=replies)

    async def _standard_reply(self, text: str, history: list[StoredMessage]) -> str:
        """Listener summarizes, Coordinator answers. Errors propagate."""
        history_block = format_history([m.to_transcript_entry() for m in history]) or "(none)"

        listener = await self._provider.invoke(
            self._prompts.listener.format(history=history_block, user_input=text),
            temperature=self._agent_temperature,
        )
        logger.debug("Listener summary: %d chars", len(listener.text))

        coordinator = await self._provider.invoke(
            self._prompts.coordinator.format(
                history=history_block,
                user_input=text,
                listener_summary=listener.text.strip(),
            ),
            temperature=self._agent_temperature,
        )
        return coordinator.text.strip()

    async def summarize_conversation(self, conversation_id: str) -> SummaryResult:
        """Summary and advice for a stored conversation.

        The first user message is the original input the summary is framed around.

        Raises:
            ConversationNotFoundError: If the conversation has no messages.
            PersistenceError: If the store cannot be read.
        """
        history = self._store.load_history(conversation_id)
        if not history:
            raise ConversationNotFoundError(conversation_id)

        first_user = next((m for m in history if m.is_user), None)
        original_input = first_user.text if first_user else MISSING_USER_INPUT

        logger.info("Summarizing conversation %s (%d messages)", conversation_id, len(history))
        return await summarize(
            [m.to_transcript_entry() for m in history],
            original_input,
            self._summary_provider,
            self._prompts,
            temperature=self._summary_temperature,
        )
