"""
mongotree - Path helpers and name validation

Paths are absolute, "/"-joined strings starting at the root name, e.g.
"files/docs/report.txt". Prefix relations are always separator-bounded so
"files/docs" never claims "files/docs-old".
"""
import re
from typing import Tuple

from mongotree.core.errors import InvalidCharacterError

SEPARATOR = "/"

# Backslash, the punctuation set and any whitespace
FORBIDDEN_CHARACTERS = re.compile(r"[\\/$%?@\"'!><*&{}#=`|:+\s]")


def validate_name(name: str, kind: str = "folder") -> None:
    """
    Reject a folder or file name containing a forbidden character.

    Raises:
        InvalidCharacterError: naming the leftmost offending character.
    """
    match = FORBIDDEN_CHARACTERS.search(name)
    if match:
        raise InvalidCharacterError(match.group(0), kind)


def join(parent: str, name: str) -> str:
    return f"{parent}{SEPARATOR}{name}"


def split(path: str) -> Tuple[str, str]:
    """Split into (parent directory, last segment)."""
    parent, _, name = path.rpartition(SEPARATOR)
    return parent, name


def is_under(path: str, prefix: str) -> bool:
    """True if `path` is `prefix` itself or lies below it."""
    return path == prefix or path.startswith(prefix + SEPARATOR)


def replace_prefix(value: str, old: str, new: str) -> str:
    """
    Substitute the leading `old` segment run of `value` with `new`.

    Only a whole-segment prefix is replaced; later occurrences of `old` in
    the string are left alone, and values outside `old` come back unchanged.
    """
    if not is_under(value, old):
        return value
    return new + value[len(old):]


def prefix_pattern(prefix: str) -> str:
    """Anchored regex matching `prefix` and everything below it."""
    return "^" + re.escape(prefix) + "(" + re.escape(SEPARATOR) + "|$)"
