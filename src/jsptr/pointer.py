"""Compiled JSON pointers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple

from .assign import Destination
from .sources import resolve_source
from .tokenizer import parse_tokens


@dataclass(frozen=True)
class Pointer:
    """A parsed pointer; immutable and safe to reuse across calls and threads."""

    pattern: str
    tokens: Tuple[str, ...] = ()

    def retrieve(self, dst: Destination, target: Any) -> None:
        """Resolve ``target`` against this pointer and write the result into ``dst``.

        ``target`` may be JSON text (``str``/``bytes``), a string-keyed
        mapping, a sequence, a dataclass or pydantic model, a weak
        reference to any of those, a scalar, or an object providing its own
        ``resolve_json_pointer(dst, ptrspec)``.

        Raises a ``JsonPointerError`` subclass on failure; ``dst`` is left
        untouched in that case.
        """
        resolve_source(target).resolve_json_pointer(dst, self.pattern)

    def get(self, target: Any, type_: Any = object) -> Any:
        dst = Destination(type_)
        self.retrieve(dst, target)
        return dst.value

    def __str__(self) -> str:
        return self.pattern


def new(pathspec: str) -> Pointer:
    """Parse ``pathspec`` into a ``Pointer``; raises ``MalformedPointer``."""
    return Pointer(pattern=pathspec, tokens=tuple(parse_tokens(pathspec)))
