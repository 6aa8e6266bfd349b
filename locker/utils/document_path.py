"""
Storage-key codec for documents.

There is no document table: the object key is the document record.

    {user_id}/{timestamp_ms}_{category}_{sanitized_name}.{ext}
    {user_id}/private/{timestamp_ms}_{category}_{sanitized_name}.{ext}

Category parsing is purely syntactic; anything that does not split into at
least three ``_`` segments is reported as ``other``.
"""
from __future__ import annotations

import re
import time
from typing import List, Optional, Tuple

from locker.consts import DocumentCategory
from locker.core.exceptions import ValidationFailed

PRIVATE_SEGMENT = "private"
LEGACY_TRASH_MARKER = "_trash_"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")
_EXTENSION = re.compile(r"\.\w+$")


def sanitize_name(name: str) -> str:
    """Replace every character outside [A-Za-z0-9] with an underscore."""
    return _UNSAFE_CHARS.sub("_", name)


def split_extension(file_name: str) -> Tuple[str, Optional[str]]:
    """Return (stem, ext) where ext has no leading dot, or None if absent."""
    if "." not in file_name:
        return file_name, None
    stem, ext = file_name.rsplit(".", 1)
    if not stem or not ext:
        return file_name, None
    return stem, ext


def user_prefix(user_id: str, private: bool = False) -> str:
    if private:
        return f"{user_id}/{PRIVATE_SEGMENT}/"
    return f"{user_id}/"


def build_object_path(
    user_id: str,
    name: str,
    category: str,
    ext: str,
    private: bool = False,
    timestamp_ms: Optional[int] = None,
) -> str:
    if not name or not name.strip():
        raise ValidationFailed("Document name is required", field="name")
    if not ext:
        raise ValidationFailed("File extension is required", field="file")
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{user_prefix(user_id, private)}{ts}_{category}_{sanitize_name(name.strip())}.{ext}"


def base_name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def parent_dir(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""


def is_private_path(user_id: str, path: str) -> bool:
    return path.startswith(user_prefix(user_id, private=True))


def belongs_to(user_id: str, path: str) -> bool:
    return path.startswith(user_prefix(user_id))


def parse_object_name(file_name: str) -> Tuple[str, str]:
    """Return (category, display_name) for a stored file name."""
    parts = file_name.split("_")
    if len(parts) >= 3:
        category = parts[1]
        name_with_ext = "_".join(parts[2:])
    else:
        category = DocumentCategory.OTHER.value
        name_with_ext = file_name
    display_name = _EXTENSION.sub("", name_with_ext).replace("_", " ")
    return category, display_name


def resolve_category(user_id: str, path: str) -> str:
    if is_private_path(user_id, path):
        return DocumentCategory.PRIVATE.value
    category, _ = parse_object_name(base_name(path))
    return category


def is_listable(file_name: str, size: Optional[int]) -> bool:
    """Directory placeholders and legacy trash copies never show up as documents."""
    return (
        "." in file_name
        and (size or 0) > 0
        and LEGACY_TRASH_MARKER not in file_name
    )


def with_category(path: str, category: str) -> str:
    """Same key with the category token swapped; timestamp and name are kept."""
    directory, file_name = parent_dir(path), base_name(path)
    parts = file_name.split("_")
    if len(parts) >= 3:
        parts[1] = category
        new_name = "_".join(parts)
    else:
        new_name = f"{int(time.time() * 1000)}_{category}_{file_name}"
    return f"{directory}/{new_name}" if directory else new_name


def with_display_name(path: str, new_name: str) -> str:
    """Same key with the name segment replaced by the sanitized new name."""
    if not new_name or not new_name.strip():
        raise ValidationFailed("New name is required", field="new_name")
    directory, file_name = parent_dir(path), base_name(path)
    _, ext = split_extension(file_name)
    suffix = f".{ext}" if ext else ""
    parts = file_name.split("_")
    if len(parts) >= 3:
        new_file = f"{parts[0]}_{parts[1]}_{sanitize_name(new_name.strip())}{suffix}"
    else:
        new_file = f"{sanitize_name(new_name.strip())}{suffix}"
    return f"{directory}/{new_file}" if directory else new_file


def candidate_paths(user_id: str, stored_path: str) -> List[str]:
    """Historical share records use inconsistent key formats; try each in order."""
    candidates = [
        stored_path,
        stored_path.lstrip("/"),
        f"{user_id}/{base_name(stored_path)}",
    ]
    seen = set()
    ordered = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            ordered.append(candidate)
    return ordered


__all__ = [
    "PRIVATE_SEGMENT",
    "LEGACY_TRASH_MARKER",
    "sanitize_name",
    "split_extension",
    "user_prefix",
    "build_object_path",
    "base_name",
    "parent_dir",
    "is_private_path",
    "belongs_to",
    "parse_object_name",
    "resolve_category",
    "is_listable",
    "with_category",
    "with_display_name",
    "candidate_paths",
]
