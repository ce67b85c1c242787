"""Pointer text tokenization and array index parsing."""

from __future__ import annotations

import re
from typing import List

from .errors import MalformedPointer, OutOfBounds, TypeMismatch


_INDEX_RE = re.compile(r"[+-]?[0-9]+")


def unescape_token(token: str) -> str:
    # two whole-token passes; "~01" therefore decodes to "~1", never "/"
    return token.replace("~1", "/").replace("~0", "~")


def parse_tokens(pathspec: str) -> List[str]:
    """Split pointer text into unescaped tokens.

    The empty string is the root pointer and yields no tokens. Any other
    text must begin with ``/``; ``"/"`` alone yields a single empty token.
    """
    if pathspec == "":
        return []
    if not pathspec.startswith("/"):
        raise MalformedPointer("JSON pointer must start with '/'", pathspec)
    return [unescape_token(part) for part in pathspec.split("/")[1:]]


def join_tokens(tokens: List[str]) -> str:
    """Rebuild pointer text for already-split raw segments."""
    return "/" + "/".join(tokens)


def array_index(token: str, length: int) -> int:
    if not _INDEX_RE.fullmatch(token):
        raise TypeMismatch(f"invalid array index {token!r}", token)
    digits = token.lstrip("+-").lstrip("0") or "0"
    if len(digits) > len(str(length)):
        raise OutOfBounds(f"array index with {len(digits)} digits out of bounds (length {length})", token)
    index = int(token)
    if index < 0 or index >= length:
        raise OutOfBounds(f"array index {index} out of bounds (length {length})", token)
    return index
