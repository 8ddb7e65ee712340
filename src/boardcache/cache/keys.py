"""
Cache key normalization.

Turns a logical cache key into a file name that is safe to place directly
inside the store directory. The escaping is reversible for every key without
null bytes, so two distinct keys never share a file.
"""

from urllib.parse import unquote

from .. import constants


def escape_key(raw_key: str) -> str:
    """
    Escape the path separator and the escape character itself.

    Args:
        raw_key: The logical key, null bytes already stripped

    Returns:
        str: The escaped key
    """
    escaped = "".join(constants.KEY_ESCAPES.get(ch, ch) for ch in raw_key)
    # "." and ".." would name the directory itself or its parent
    if escaped in (".", ".."):
        escaped = escaped.replace(".", "%2E")
    return escaped


def unescape_key(escaped: str) -> str:
    """Inverse of :func:`escape_key`."""
    return unquote(escaped)


def normalize(prefix: str, raw_key: str) -> str:
    """
    Build the physical key for a logical key.

    Args:
        prefix: The store prefix, used verbatim
        raw_key: The logical key

    Returns:
        str: ``prefix`` followed by the escaped key
    """
    return prefix + escape_key(raw_key.replace("\0", ""))


def is_entry_name(prefix: str, name: str) -> bool:
    """Whether some logical key normalizes to the file name ``name``."""
    if not name.startswith(prefix):
        return False
    escaped = name[len(prefix):]
    return escape_key(unescape_key(escaped)) == escaped
