"""
Completion app: single-turn text generation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dify_lib_python.apps.base import App
from dify_lib_python.client.stream import ChatStreamResponse
from dify_lib_python.transport.request import Request

if TYPE_CHECKING:
    from dify_lib_python.transport.response import Response


class CompletionApp(App):
    """Completion app operations."""

    @staticmethod
    def _payload(
        user: str,
        inputs: dict[str, Any],
        files: list[dict[str, Any]] | None,
        streaming: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "inputs": inputs,
            "user": user,
            "response_mode": "streaming" if streaming else "blocking",
        }
        if files:
            payload["files"] = files
        return payload

    async def create(
        self,
        user: str,
        inputs: dict[str, Any],
        *,
        files: list[dict[str, Any]] | None = None,
    ) -> Response:
        """Generate a completion and wait for the full answer."""
        return await self._transport.send(
            Request.post_json("/completion-messages", self._payload(user, inputs, files, False))
        )

    async def create_stream(
        self,
        user: str,
        inputs: dict[str, Any],
        *,
        files: list[dict[str, Any]] | None = None,
    ) -> ChatStreamResponse:
        """Generate a completion and stream the answer."""
        session = await self._transport.send(
            Request.post_json("/completion-messages", self._payload(user, inputs, files, True)),
            streaming=True,
        )
        return ChatStreamResponse(session)

    async def stop(self, task_id: str, user: str) -> Response:
        """Stop a streaming generation."""
        return await self._transport.send(
            Request.post_json(f"/completion-messages/{task_id}/stop", {"user": user})
        )
