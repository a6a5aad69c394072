"""
Operations shared by every app type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dify_lib_python.client.stream import AudioStreamResponse
from dify_lib_python.transport.request import Request, resolve_upload_parts

if TYPE_CHECKING:
    from dify_lib_python.transport.http import HttpTransport
    from dify_lib_python.transport.request import FileInput
    from dify_lib_python.transport.response import Response

_RATINGS = frozenset({"like", "dislike"})


class App:
    """Base class for a service app bound to one API key.

    Example:
        >>> app = client.app("app-...")
        >>> params = (await app.parameters("user-1")).json()
    """

    def __init__(self, transport: HttpTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def api_key(self) -> str:
        """API key this app authenticates with."""
        return self._transport.api_key

    async def parameters(self, user: str | None = None) -> Response:
        """Get the app's input form and feature configuration."""
        return await self._transport.send(Request.get("/parameters", {"user": user}))

    async def meta(self, user: str | None = None) -> Response:
        """Get tool icons and other app meta information."""
        return await self._transport.send(Request.get("/meta", {"user": user}))

    async def message_feedback(
        self,
        user: str,
        message_id: str,
        rating: str | None = None,
        content: str | None = None,
    ) -> Response:
        """Rate a message.

        Args:
            user: End-user identifier
            message_id: Message to rate
            rating: "like", "dislike", or None to revoke a rating
            content: Optional feedback text
        """
        if rating is not None and rating not in _RATINGS:
            raise ValueError(f"rating must be 'like', 'dislike' or None, got {rating!r}")
        payload: dict[str, Any] = {"user": user, "rating": rating}
        if content is not None:
            payload["content"] = content
        return await self._transport.send(
            Request.post_json(f"/messages/{message_id}/feedbacks", payload)
        )

    async def file_upload(self, user: str, files: FileInput) -> Response:
        """Upload files for use in later messages.

        Args:
            user: End-user identifier
            files: SinglePath(path, name) or NamedParts([UploadFile(...), ...])

        Returns:
            Response whose JSON describes the uploaded file

        Raises:
            RequestBuildError: If a file is missing or unreadable
        """
        parts = resolve_upload_parts(user, files)
        return await self._transport.send(Request.post_multipart("/files/upload", parts))

    async def text_to_audio(
        self,
        user: str,
        text: str | None = None,
        *,
        message_id: str | None = None,
    ) -> Response:
        """Synthesize speech; the audio is in ``response.raw_body``."""
        return await self._transport.send(
            Request.post_json("/text-to-audio", self._tts_payload(user, text, message_id, False))
        )

    async def text_to_audio_stream(
        self,
        user: str,
        text: str | None = None,
        *,
        message_id: str | None = None,
    ) -> AudioStreamResponse:
        """Synthesize speech as a stream of audio chunks."""
        session = await self._transport.send(
            Request.post_json("/text-to-audio", self._tts_payload(user, text, message_id, True)),
            streaming=True,
        )
        return AudioStreamResponse(session)

    @staticmethod
    def _tts_payload(
        user: str, text: str | None, message_id: str | None, streaming: bool
    ) -> dict[str, Any]:
        if text is None and message_id is None:
            raise ValueError("Either text or message_id is required")
        payload: dict[str, Any] = {"user": user, "streaming": streaming}
        if text is not None:
            payload["text"] = text
        if message_id is not None:
            payload["message_id"] = message_id
        return payload

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> App:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
