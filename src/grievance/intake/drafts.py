"""Draft persistence: a single named slot holding the in-progress form."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from grievance.core.types import DraftStatus
from grievance.intake.errors import PersistenceError
from grievance.intake.models import DraftLoad, FormData, FormState

logger = logging.getLogger(__name__)

DEFAULT_DRAFT_KEY = "grievanceDraft"


@runtime_checkable
class DraftSlot(Protocol):
    """Persistent key-value storage for serialized drafts.

    Implementations raise PersistenceError when the backing storage fails.
    """

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryDraftSlot:
    """Dict-backed slot, scoped to the process."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileDraftSlot:
    """Slot storing each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read draft {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"Could not write draft {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Could not delete draft {path}: {exc}") from exc


class DraftStore:
    """Serializes wizard snapshots into a DraftSlot.

    Storage failures are logged and swallowed: a draft that cannot be read is
    treated as absent, and a save that cannot be written is skipped.
    """

    def __init__(self, slot: DraftSlot, key: str = DEFAULT_DRAFT_KEY) -> None:
        self._slot = slot
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def save(self, step: int, data: FormData) -> bool:
        """Persist ``(step, data)``. Returns True if a draft was written.

        An untouched form on the first step is never persisted; any existing
        draft is deleted instead.
        """
        if step == 0 and data.is_initial():
            self.clear()
            return False

        state = FormState(current_step=step, data=data, is_loaded=True)
        try:
            self._slot.write(self._key, state.model_dump_json(by_alias=True))
        except PersistenceError as exc:
            logger.warning("Skipping draft save: %s", exc)
            return False
        return True

    def load(self) -> DraftLoad:
        try:
            raw = self._slot.read(self._key)
        except PersistenceError as exc:
            logger.warning("Treating draft as absent: %s", exc)
            return DraftLoad(status=DraftStatus.ABSENT)

        if raw is None:
            return DraftLoad(status=DraftStatus.ABSENT)

        try:
            state = FormState.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Failed to parse draft %r: %s", self._key, exc)
            return DraftLoad(status=DraftStatus.CORRUPT)

        return DraftLoad(status=DraftStatus.OK, state=state)

    def clear(self) -> None:
        try:
            self._slot.delete(self._key)
        except PersistenceError as exc:
            logger.warning("Could not clear draft: %s", exc)
