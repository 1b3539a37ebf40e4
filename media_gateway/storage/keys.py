"""StorageKey derivation and CanonicalURL parsing.

A StorageKey looks like ``designs/<entity>/<variant>/<timestamp>.<ext>`` and
is the only thing needed to find an object in any backend. Every public URL
handed out at upload time contains the key verbatim, so the key can always
be recovered from a stored URL by looking for the ``designs`` segment.
"""

import re
import time

from media_gateway.storage.exceptions import InvalidKeyError

KEY_ROOT = "designs"

DEFAULT_ENTITY = "unknown"
DEFAULT_VARIANT = "default"

_UNSAFE_SEGMENT = re.compile(r"[^A-Za-z0-9-]")
_UNSAFE_EXTENSION = re.compile(r"[^A-Za-z0-9]")


def sanitize_segment(value: str | None, placeholder: str) -> str:
    """Replace every character outside [A-Za-z0-9-] with '_'; empty -> placeholder."""
    if not value:
        return placeholder
    return _UNSAFE_SEGMENT.sub("_", value)


def file_extension(filename: str | None) -> str:
    """Last '.'-delimited segment of filename, or '' when there is none."""
    if not filename or "." not in filename:
        return ""
    return _UNSAFE_EXTENSION.sub("_", filename.rsplit(".", 1)[-1])


def current_timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def derive_key(
    entity_id: str | None,
    variant_id: str | None,
    timestamp_ms: int,
    original_filename: str | None,
) -> str:
    """
    Build the StorageKey for a new upload.
    Pure function: same inputs always give the same key.
    """
    entity = sanitize_segment(entity_id, DEFAULT_ENTITY)
    variant = sanitize_segment(variant_id, DEFAULT_VARIANT)
    name = str(int(timestamp_ms))
    ext = file_extension(original_filename)
    if ext:
        name = f"{name}.{ext}"
    return f"{KEY_ROOT}/{entity}/{variant}/{name}"


def is_storage_key(key: str) -> bool:
    """True for keys under designs/ with no empty, '.' or '..' segments."""
    parts = key.split("/")
    if len(parts) < 2 or parts[0] != KEY_ROOT:
        return False
    return all(part not in ("", ".", "..") for part in parts)


def extract_key(url: str | None) -> str | None:
    """
    Recover the StorageKey from a CanonicalURL.
    Returns everything from the first 'designs' path segment on, or None.
    """
    if not url:
        return None
    path = url.split("#", 1)[0].split("?", 1)[0]
    parts = path.split("/")
    try:
        start = parts.index(KEY_ROOT)
    except ValueError:
        return None
    key = "/".join(parts[start:])
    return key if is_storage_key(key) else None


def has_key_root_segment(base_url: str) -> bool:
    """True when base_url already has a 'designs' path segment."""
    return KEY_ROOT in base_url.split("?", 1)[0].rstrip("/").split("/")


def build_public_url(base_url: str, key: str) -> str:
    """Join base and key into a CanonicalURL that extract_key maps back to key."""
    if not is_storage_key(key):
        raise InvalidKeyError(f"Not a storage key: {key!r}")
    base = base_url.rstrip("/")
    if has_key_root_segment(base):
        # extract_key would stop at the base's segment instead of the key's
        raise InvalidKeyError(f"Base URL must not contain a '{KEY_ROOT}' segment: {base_url!r}")
    return f"{base}/{key}"
