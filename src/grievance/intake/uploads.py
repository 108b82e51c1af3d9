"""Concurrent decoding of a batch of selected files into DocumentFiles."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from pydantic import BaseModel, Field

from grievance.core.types import DocumentType
from grievance.intake.models import DocumentFile

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILES = 5
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024


class UploadCandidate:
    """A file offered by the user, not yet read.

    ``size`` and ``mime_type`` are as declared by the picker; the content is
    only fetched by awaiting ``read()``.
    """

    def __init__(
        self,
        name: str,
        mime_type: str,
        size: int,
        read: Callable[[], Awaitable[bytes]],
    ) -> None:
        self.name = name
        self.mime_type = mime_type
        self.size = size
        self.read = read

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, payload: bytes) -> UploadCandidate:
        async def _read() -> bytes:
            return payload

        return cls(name, mime_type, len(payload), _read)

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> UploadCandidate:
        path = Path(path)
        guessed = mime_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"

        async def _read() -> bytes:
            return await asyncio.to_thread(path.read_bytes)

        return cls(path.name, guessed, path.stat().st_size, _read)

    def __repr__(self) -> str:
        return f"UploadCandidate(name={self.name!r}, mime_type={self.mime_type!r}, size={self.size})"


class UploadOutcome(BaseModel):
    """Files accepted from one batch and the messages for those rejected."""

    files: list[DocumentFile] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)


def _size_label(max_bytes: int) -> str:
    return f"{max_bytes // (1024 * 1024)}MB"


async def _decode(candidate: UploadCandidate) -> DocumentFile:
    payload = await candidate.read()
    return DocumentFile.from_bytes(candidate.name, candidate.mime_type, payload)


async def decode_uploads(
    existing_count: int,
    candidates: Sequence[UploadCandidate],
    max_files: int = DEFAULT_MAX_FILES,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> UploadOutcome:
    """Screen and decode a batch of candidates.

    A batch that would exceed ``max_files`` is rejected whole. Otherwise each
    candidate is screened on declared size and type, the survivors are read
    concurrently, and a failed read only drops that one file. The returned
    files are in the order the candidates were offered.
    """
    if not candidates:
        return UploadOutcome()

    if existing_count + len(candidates) > max_files:
        return UploadOutcome(messages=[f"Maximum {max_files} files allowed in total."])

    messages: list[str] = []
    accepted: list[UploadCandidate] = []
    for candidate in candidates:
        if candidate.size > max_file_size:
            messages.append(f"File {candidate.name} exceeds {_size_label(max_file_size)} limit.")
            continue
        if DocumentType.from_mime(candidate.mime_type) is None:
            messages.append(f"File {candidate.name} has unsupported format.")
            continue
        accepted.append(candidate)

    results = await asyncio.gather(*(_decode(c) for c in accepted), return_exceptions=True)

    files: list[DocumentFile] = []
    for candidate, result in zip(accepted, results):
        if isinstance(result, BaseException):
            logger.warning("Failed to read upload %r: %s", candidate.name, result)
            messages.append(f"File {candidate.name} could not be read.")
            continue
        # The declared size may understate the real content.
        if result.size > max_file_size:
            messages.append(f"File {candidate.name} exceeds {_size_label(max_file_size)} limit.")
            continue
        files.append(result)

    return UploadOutcome(files=files, messages=messages)
