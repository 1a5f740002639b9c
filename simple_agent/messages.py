"""Conversation messages and the transcript sent to the model on every turn."""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, List, Tuple

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"
ROLES = (ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT, ROLE_TOOL)


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"unknown message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class Transcript:
    """Ordered, append-only message history seeded with the system prompt."""

    def __init__(self, system_prompt: str):
        self._messages: List[Message] = [Message(ROLE_SYSTEM, system_prompt)]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self._messages)

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def append(self, role: str, content: str) -> Message:
        msg = Message(role, content)
        self._messages.append(msg)
        return msg

    def mark(self) -> int:
        return len(self._messages)

    def rollback(self, mark: int) -> None:
        """Drop messages appended after `mark` (an abandoned turn)."""
        if mark < 1 or mark > len(self._messages):
            raise ValueError(f"invalid transcript mark: {mark}")
        del self._messages[mark:]

    def to_payload(self) -> List[Dict[str, str]]:
        return [m.to_dict() for m in self._messages]
