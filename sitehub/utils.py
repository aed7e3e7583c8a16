from __future__ import annotations

import base64
import binascii
import re
from pathlib import Path
from urllib.parse import unquote

from sitehub.errors import PublishPayloadError

PAGE_SUFFIX = ".html"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_page_key(name: str) -> str:
    """Storage/lookup key for a page: the name with a single ``.html`` suffix."""
    if name.endswith(PAGE_SUFFIX):
        return name
    return name + PAGE_SUFFIX


def is_within(path: Path, root: Path) -> bool:
    return path.resolve().is_relative_to(root.resolve())


def is_plain_filename(name: str) -> bool:
    if not name or name in {".", ".."}:
        return False
    return not any(ch in name for ch in ("/", "\\", "\x00"))


def decode_component(value: str, field_name: str = "value") -> str:
    """Strict percent-decoding; malformed escapes or bad UTF-8 are errors."""
    if _BAD_ESCAPE.search(value):
        raise PublishPayloadError(f"Malformed percent-encoding in {field_name}")
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError as exc:
        raise PublishPayloadError(f"Invalid UTF-8 in {field_name}") from exc


def decode_base64(data: str, field_name: str = "image") -> bytes:
    # Accept data URIs as sent by browser canvases/file readers
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PublishPayloadError(f"Invalid base64 data for {field_name}") from exc
