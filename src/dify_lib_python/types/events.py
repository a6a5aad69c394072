"""
Streaming event model.

A StreamEvent is one decoded server-sent event carrying a JSON payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamEvent(BaseModel):
    """One event decoded from an event stream.

    Example:
        >>> async for event in session.events():
        ...     if event.name == "message":
        ...         print(event.data["answer"], end="")
    """

    model_config = ConfigDict(frozen=True)

    event: str | None = Field(default=None, description="Value of the 'event:' field")
    id: str | None = Field(default=None, description="Value of the 'id:' field")
    data: Any = Field(default=None, description="Parsed JSON payload")
    raw: str = Field(default="", description="Original event lines, for diagnostics")

    @property
    def name(self) -> str | None:
        """Event name: the 'event:' field, else the payload's own 'event' key.

        The service tags most events inside the payload rather than with
        an 'event:' line.
        """
        if self.event:
            return self.event
        if isinstance(self.data, dict):
            value = self.data.get("event")
            return value if isinstance(value, str) else None
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Read a key from an object payload."""
        if isinstance(self.data, dict):
            return self.data.get(key, default)
        return default
