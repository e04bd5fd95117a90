"""Conversation history shared by every mode and command."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str

    def to_api(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class ContextManager:
    """Ordered, append-only conversation history.

    The only destructive operation is clear(); asking the user for
    confirmation is the caller's job.
    """

    def __init__(self):
        self._messages: list[Message] = []

    def add(self, role: Role | str, content: str) -> Message:
        if role is None:
            raise ValueError("message role is required")
        message = Message(Role(role), content)
        self._messages.append(message)
        return message

    def all(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def is_empty(self) -> bool:
        return not self._messages

    def size(self) -> int:
        return len(self._messages)

    __len__ = size

    def clear(self) -> None:
        self._messages.clear()

    def for_api(self) -> list[dict]:
        """Return the history as role/content dicts, in order, for the chat endpoint."""
        return [m.to_api() for m in self._messages]
