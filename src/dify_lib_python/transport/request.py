"""
Request model for the transport layer.

A Request carries exactly one body representation: none, a JSON value,
or a list of multipart parts. File parts reference a path and are only
opened by the transport when the request is sent.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Union

import httpx

from dify_lib_python.errors import RequestBuildError

if TYPE_CHECKING:
    from collections.abc import Sequence

_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True)
class JsonBody:
    """A body serialized as UTF-8 JSON."""

    value: Any


@dataclass
class MultipartPart:
    """One multipart/form-data segment.

    Either ``content`` (a text or bytes field) or ``path`` (a file) is set.

    Attributes:
        name: Form field name
        content: Inline field value
        path: File to stream as the part body
        filename: Filename sent with file parts; derived from ``path`` if omitted
        content_type: MIME type; guessed from the filename if omitted
    """

    name: str
    content: str | bytes | None = None
    path: Path | None = None
    filename: str | None = None
    content_type: str | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.path is None):
            raise RequestBuildError(
                "Multipart part needs exactly one of content or path",
                field=self.name,
            )
        if self.path is not None:
            self.path = Path(self.path)
            if not self.filename:
                self.filename = self.path.name
            if not self.filename:
                raise RequestBuildError(
                    f"Cannot derive a filename from {str(self.path)!r}",
                    field=self.name,
                )

    @property
    def is_file(self) -> bool:
        return self.path is not None

    def check_readable(self) -> None:
        """Raise RequestBuildError unless the file part can be opened."""
        if self.path is None:
            return
        if not self.path.is_file() or not os.access(self.path, os.R_OK):
            raise RequestBuildError(
                f"Upload file is missing or unreadable: {self.path}",
                field=self.name,
            ).with_hint("Check the path and its permissions")

    def open(self) -> IO[bytes]:
        """Open the file part for streaming."""
        assert self.path is not None
        try:
            return self.path.open("rb")
        except OSError as e:
            raise RequestBuildError(
                f"Cannot open upload file {self.path}: {e}",
                field=self.name,
                cause=e,
            ) from e

    def guess_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.filename or "")
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class MultipartBody:
    """A multipart/form-data body."""

    parts: tuple[MultipartPart, ...]

    def __init__(self, parts: Sequence[MultipartPart]) -> None:
        object.__setattr__(self, "parts", tuple(parts))

    @property
    def file_parts(self) -> list[MultipartPart]:
        return [p for p in self.parts if p.is_file]


Body = Union[JsonBody, MultipartBody, None]


@dataclass
class Request:
    """A logical API request.

    Attributes:
        method: HTTP method
        path: Path relative to the configured base URI
        headers: Extra headers; ``Authorization`` is always replaced on send
        body: None, JsonBody or MultipartBody
        params: Query parameters
        timeout: Per-request deadline in seconds, overriding the client default
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Body = None
    params: dict[str, Any] | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.method not in _METHODS:
            raise RequestBuildError(f"Unsupported HTTP method: {self.method}", field="method")
        if not isinstance(self.body, (JsonBody, MultipartBody, type(None))):
            raise RequestBuildError(
                f"Unsupported body type: {type(self.body).__name__}",
                field="body",
            )
        try:
            url = httpx.URL(self.path)
        except httpx.InvalidURL as e:
            raise RequestBuildError(f"Invalid request path: {self.path!r}", field="path", cause=e) from e
        if url.is_absolute_url:
            raise RequestBuildError(
                f"Request path must be relative to the base URI, got {self.path!r}",
                field="path",
            )

    @classmethod
    def get(cls, path: str, params: dict[str, Any] | None = None) -> Request:
        return cls("GET", path, params=_drop_none(params))

    @classmethod
    def post_json(cls, path: str, payload: Any) -> Request:
        return cls("POST", path, body=JsonBody(payload))

    @classmethod
    def post_multipart(cls, path: str, parts: Sequence[MultipartPart]) -> Request:
        return cls("POST", path, body=MultipartBody(parts))

    @classmethod
    def delete(cls, path: str, payload: Any = None) -> Request:
        return cls("DELETE", path, body=JsonBody(payload) if payload is not None else None)


# Upload file inputs


@dataclass(frozen=True)
class UploadFile:
    """A file to upload, with an optional explicit filename."""

    path: str | Path
    name: str | None = None


@dataclass(frozen=True)
class SinglePath:
    """Upload a single file."""

    path: str | Path
    name: str | None = None


@dataclass(frozen=True)
class NamedParts:
    """Upload several files, each with an optional explicit filename."""

    files: tuple[UploadFile, ...]

    def __init__(self, files: Sequence[UploadFile]) -> None:
        object.__setattr__(self, "files", tuple(files))


FileInput = Union[SinglePath, NamedParts]


def resolve_upload_parts(user: str, files: FileInput) -> list[MultipartPart]:
    """Resolve a file input into multipart parts.

    The first part is the ``user`` field, followed by one ``file`` part
    per uploaded file.

    Args:
        user: End-user identifier
        files: SinglePath or NamedParts

    Returns:
        Parts ready for a MultipartBody

    Raises:
        RequestBuildError: On unsupported input or an empty file list
    """
    if isinstance(files, SinglePath):
        uploads: tuple[UploadFile, ...] = (UploadFile(files.path, files.name),)
    elif isinstance(files, NamedParts):
        uploads = files.files
    else:
        raise RequestBuildError(
            f"Unsupported file input: {type(files).__name__}",
            field="files",
        ).with_hint("Pass SinglePath(...) or NamedParts([...])")

    if not uploads:
        raise RequestBuildError("No files to upload", field="files")

    parts = [MultipartPart(name="user", content=user)]
    for upload in uploads:
        parts.append(MultipartPart(name="file", path=Path(upload.path), filename=upload.name))
    return parts


def _drop_none(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return {k: v for k, v in params.items() if v is not None}
