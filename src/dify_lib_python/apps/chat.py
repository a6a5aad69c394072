"""
Chat app: multi-turn conversations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dify_lib_python.apps.base import App
from dify_lib_python.client.stream import ChatStreamResponse
from dify_lib_python.transport.request import Request

if TYPE_CHECKING:
    from dify_lib_python.transport.response import Response


class ChatApp(App):
    """Chat app operations.

    Example:
        >>> chat = client.chat("app-...")
        >>> async with await chat.send_message_stream("user-1", "Hello") as stream:
        ...     async for text in stream.text():
        ...         print(text, end="")
        >>> stream.conversation_id
    """

    def _message_payload(
        self,
        user: str,
        query: str,
        inputs: dict[str, Any] | None,
        conversation_id: str | None,
        files: list[dict[str, Any]] | None,
        streaming: bool,
        auto_generate_name: bool,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": query,
            "inputs": inputs or {},
            "user": user,
            "response_mode": "streaming" if streaming else "blocking",
            "auto_generate_name": auto_generate_name,
        }
        if conversation_id:
            payload["conversation_id"] = conversation_id
        if files:
            payload["files"] = files
        return payload

    async def send_message(
        self,
        user: str,
        query: str,
        *,
        inputs: dict[str, Any] | None = None,
        conversation_id: str | None = None,
        files: list[dict[str, Any]] | None = None,
        auto_generate_name: bool = True,
    ) -> Response:
        """Send a chat message and wait for the full answer.

        Args:
            user: End-user identifier
            query: User input
            inputs: App variable values
            conversation_id: Continue an existing conversation
            files: File references (e.g. ``{"type": "image",
                "transfer_method": "local_file", "upload_file_id": ...}``)
            auto_generate_name: Let the service title a new conversation
        """
        payload = self._message_payload(
            user, query, inputs, conversation_id, files, False, auto_generate_name
        )
        return await self._transport.send(Request.post_json("/chat-messages", payload))

    async def send_message_stream(
        self,
        user: str,
        query: str,
        *,
        inputs: dict[str, Any] | None = None,
        conversation_id: str | None = None,
        files: list[dict[str, Any]] | None = None,
        auto_generate_name: bool = True,
    ) -> ChatStreamResponse:
        """Send a chat message and stream the answer."""
        payload = self._message_payload(
            user, query, inputs, conversation_id, files, True, auto_generate_name
        )
        session = await self._transport.send(
            Request.post_json("/chat-messages", payload), streaming=True
        )
        return ChatStreamResponse(session)

    async def stop(self, task_id: str, user: str) -> Response:
        """Stop a streaming generation."""
        return await self._transport.send(
            Request.post_json(f"/chat-messages/{task_id}/stop", {"user": user})
        )

    async def suggested(self, message_id: str, user: str) -> Response:
        """Get suggested follow-up questions for a message."""
        return await self._transport.send(
            Request.get(f"/messages/{message_id}/suggested", {"user": user})
        )

    async def conversations(
        self,
        user: str,
        *,
        last_id: str | None = None,
        limit: int = 20,
        pinned: bool | None = None,
    ) -> Response:
        """List the user's conversations, newest first."""
        params: dict[str, Any] = {"user": user, "last_id": last_id, "limit": limit}
        if pinned is not None:
            params["pinned"] = "true" if pinned else "false"
        return await self._transport.send(Request.get("/conversations", params))

    async def messages(
        self,
        user: str,
        conversation_id: str,
        *,
        first_id: str | None = None,
        limit: int = 20,
    ) -> Response:
        """Get the message history of a conversation."""
        return await self._transport.send(
            Request.get(
                "/messages",
                {
                    "user": user,
                    "conversation_id": conversation_id,
                    "first_id": first_id,
                    "limit": limit,
                },
            )
        )

    async def rename_conversation(
        self,
        conversation_id: str,
        user: str,
        name: str | None = None,
        *,
        auto_generate: bool = False,
    ) -> Response:
        """Rename a conversation, or let the service generate a name."""
        payload: dict[str, Any] = {"user": user, "auto_generate": auto_generate}
        if name is not None:
            payload["name"] = name
        return await self._transport.send(
            Request.post_json(f"/conversations/{conversation_id}/name", payload)
        )

    async def delete_conversation(self, conversation_id: str, user: str) -> Response:
        return await self._transport.send(
            Request.delete(f"/conversations/{conversation_id}", {"user": user})
        )
