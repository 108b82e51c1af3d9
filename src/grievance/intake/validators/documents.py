"""Validators for the attachment list."""

from __future__ import annotations

from typing import Any

from grievance.core.types import DocumentType
from grievance.intake.validators.common import register

_DEFAULT_MAX_BYTES = 5 * 1024 * 1024


def _item_value(item: Any, key: str) -> Any:
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


@register("min_files")
def validate_min_files(value: Any, count: int | str = 1, **_kwargs: Any) -> str | None:
    files = value if isinstance(value, (list, tuple)) else []
    if len(files) < int(count):
        return f"At least {count} document(s) required."
    return None


@register("max_files")
def validate_max_files(value: Any, count: int | str = 5, **_kwargs: Any) -> str | None:
    if not isinstance(value, (list, tuple)):
        return None
    if len(value) > int(count):
        return f"At most {count} documents allowed."
    return None


@register("file_size")
def validate_file_size(
    value: Any, max_bytes: int | str = _DEFAULT_MAX_BYTES, **_kwargs: Any
) -> str | None:
    if not isinstance(value, (list, tuple)):
        return None
    limit = int(max_bytes)
    for item in value:
        size = _item_value(item, "size")
        if not isinstance(size, int) or size < 0 or size > limit:
            return f"File {_item_value(item, 'name')} exceeds the size limit."
    return None


@register("file_type")
def validate_file_type(value: Any, **_kwargs: Any) -> str | None:
    if not isinstance(value, (list, tuple)):
        return None
    for item in value:
        if DocumentType.from_mime(_item_value(item, "type")) is None:
            return f"File {_item_value(item, 'name')} has unsupported format."
    return None
