"""
Result types for client operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ChatResult:
    """Aggregated outcome of a chat or completion stream.

    Attributes:
        answer: Concatenated answer text
        conversation_id: Conversation the message belongs to
        message_id: Identifier of the generated message
        task_id: Generation task, usable with ``stop()``
        metadata: ``message_end`` metadata (usage, retriever resources)
        events_seen: Number of events received
    """

    answer: str = ""
    conversation_id: str | None = None
    message_id: str | None = None
    task_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    events_seen: int = 0

    @property
    def usage(self) -> dict[str, Any] | None:
        """Token usage reported by the service."""
        return self.metadata.get("usage")

    @property
    def total_tokens(self) -> int | None:
        if self.usage:
            return self.usage.get("total_tokens")
        return None

    @classmethod
    def from_blocking(cls, data: dict[str, Any]) -> ChatResult:
        """Build a result from a blocking-mode response body."""
        return cls(
            answer=data.get("answer", "") or "",
            conversation_id=data.get("conversation_id"),
            message_id=data.get("message_id") or data.get("id"),
            task_id=data.get("task_id"),
            metadata=data.get("metadata") or {},
        )
