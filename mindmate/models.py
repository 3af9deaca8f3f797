"""Dataclasses for the team-chat pipeline. No I/O, no model calls."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

USER_SPEAKER = "user"

MODE_INSIDE_OUT = "insideOut"
MODE_STANDARD = "standard"


@dataclass(frozen=True)
class Persona:
    name: str
    personality: str
    prompt_builder: Callable[[str], str]
    display_marker: str | None = None   # emoji avatar


@dataclass
class TranscriptEntry:
    speaker: str           # "user" or a persona / agent name
    text: str

    def format(self) -> str:
        return f"{self.speaker}: {self.text}"


@dataclass
class AgentReply:
    persona_name: str
    text: str
    display_marker: str | None = None
    timestamp_ms: int | None = None     # synthetic sort key set by the orchestrator
    failed: bool = False


@dataclass
class SummaryResult:
    summary: str
    advice: str


@dataclass
class ModelResponse:
    provider: str          # "gemini", "mistral"
    model: str             # actual model string used
    text: str
    latency_sec: float
    token_count: int | None


@dataclass
class StoredMessage:
    """One message of the ``ai_team`` chat log, as persisted in the JSON store."""

    id: str
    text: str
    sender: str                    # "user" or "ai"
    timestamp: int                 # epoch milliseconds
    conversation_id: str
    type: str = MODE_STANDARD      # "standard" or "insideOut"
    agent_name: str | None = None
    avatar: str | None = None

    @property
    def is_user(self) -> bool:
        return self.sender == USER_SPEAKER

    def to_transcript_entry(self) -> TranscriptEntry:
        speaker = USER_SPEAKER if self.is_user else (self.agent_name or "ai")
        return TranscriptEntry(speaker=speaker, text=self.text)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "sender": self.sender,
            "timestamp": self.timestamp,
            "conversationId": self.conversation_id,
            "type": self.type,
        }
        if self.agent_name is not None:
            data["agentName"] = self.agent_name
        if self.avatar is not None:
            data["avatar"] = self.avatar
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredMessage":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            sender=str(data["sender"]),
            timestamp=int(data["timestamp"]),
            conversation_id=str(data["conversationId"]),
            type=str(data.get("type", MODE_STANDARD)),
            agent_name=data.get("agentName"),
            avatar=data.get("avatar"),
        )


@dataclass
class ConversationState:
    conversation_id: str
    history: list[StoredMessage] = field(default_factory=list)
    initial_burst_done: bool = False


@dataclass
class TeamChatResult:
    conversation_id: str
    user_message: StoredMessage
    replies: list[StoredMessage] = field(default_factory=list)
