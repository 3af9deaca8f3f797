"""Flat JSON file datastore for team-chat history.

The whole document is read and rewritten on every operation. There is no
locking: two writers for the same conversation can lose each other's updates.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mindmate.models import ConversationState, StoredMessage

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the chat store cannot be read or written."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"[{path}] {message}")


def _default_document() -> dict[str, Any]:
    return {
        "users": [],
        "chats": {"one_on_one": [], "ai_team": [], "multi_user": []},
        "sessions": {},
    }


class JsonChatStore:
    """Team-chat messages kept under ``chats.ai_team`` of a JSON document.

    Per-conversation flags live under ``sessions.<conversation_id>``.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            logger.debug("Store %s not found, using empty document", self._path)
            return _default_document()
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(self._path, f"Could not read database: {exc}") from exc

        if not isinstance(data, dict):
            raise PersistenceError(self._path, "Database root must be a JSON object")
        chats = data.setdefault("chats", {})
        if not isinstance(chats, dict) or not isinstance(chats.setdefault("ai_team", []), list):
            raise PersistenceError(self._path, "Malformed 'chats' section")
        if not isinstance(data.setdefault("sessions", {}), dict):
            raise PersistenceError(self._path, "Malformed 'sessions' section")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(self._path, f"Could not write to database: {exc}") from exc

    def _messages_for(self, data: dict[str, Any], conversation_id: str) -> list[StoredMessage]:
        try:
            return [
                StoredMessage.from_dict(raw)
                for raw in data["chats"]["ai_team"]
                if raw.get("conversationId") == conversation_id
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PersistenceError(self._path, f"Malformed message record: {exc}") from exc

    def load_session(self, conversation_id: str) -> ConversationState:
        """History plus session flags for one conversation, from a single read."""
        data = self._read()
        session = data["sessions"].get(conversation_id) or {}
        return ConversationState(
            conversation_id=conversation_id,
            history=self._messages_for(data, conversation_id),
            initial_burst_done=bool(session.get("initialBurstDone", False)),
        )

    def load_history(self, conversation_id: str) -> list[StoredMessage]:
        return self.load_session(conversation_id).history

    def append_entries(
        self,
        conversation_id: str,
        entries: Sequence[StoredMessage],
        *,
        initial_burst_done: bool = False,
    ) -> None:
        """Append messages to the conversation and write the document back.

        Raises:
            ValueError: If an entry belongs to another conversation.
            PersistenceError: If the document cannot be read or written.
        """
        for entry in entries:
            if entry.conversation_id != conversation_id:
                raise ValueError(
                    f"Message {entry.id} belongs to {entry.conversation_id}, not {conversation_id}"
                )

        data = self._read()
        data["chats"]["ai_team"].extend(entry.to_dict() for entry in entries)
        if initial_burst_done:
            session = data["sessions"].setdefault(conversation_id, {})
            session["initialBurstDone"] = True
        self._write(data)
        logger.info("Saved %d messages for conversation %s", len(entries), conversation_id)
