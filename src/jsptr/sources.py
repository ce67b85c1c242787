"""Navigation strategies per source shape and the dispatch that picks one."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .assign import Destination, assign
from .errors import NotFound, TypeMismatch
from .json_text import JSONTextSource
from .records import get_field, is_record
from .tokenizer import array_index, join_tokens, parse_tokens


_logger = logging.getLogger("jsptr.sources")

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


@runtime_checkable
class Source(Protocol):
    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        ...


class ScalarSource:
    def __init__(self, data: Any) -> None:
        self.data = data

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        if ptrspec != "":
            raise TypeMismatch(
                f"cannot index into scalar value {type(self.data).__name__} with pointer {ptrspec!r}"
            )
        assign(dst, self.data)


class MapSource:
    def __init__(self, data: Mapping[str, Any]) -> None:
        self.data = data

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        current: Any = self.data
        for token in parse_tokens(ptrspec):
            if isinstance(current, Mapping):
                _require_string_keys(current, token)
                if token not in current:
                    raise NotFound(f"property {token!r} not found", token)
                current = current[token]
            elif _is_sequence(current):
                current = current[array_index(token, len(current))]
            else:
                raise TypeMismatch(f"cannot index into {type(current).__name__} with {token!r}", token)
        assign(dst, current)


class SequenceSource:
    """Indexes the first token, then hands the rest of the path to the element.

    The remainder is passed on as the raw, still-escaped segments of the
    incoming pointer text rather than a re-join of decoded tokens, so keys
    containing ``/`` or ``~`` stay reachable below an element. Joining the
    decoded tokens would re-split such keys.
    """

    def __init__(self, data: Sequence[Any]) -> None:
        self.data = data

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        tokens = parse_tokens(ptrspec)
        if not tokens:
            assign(dst, self.data)
            return
        element = self.data[array_index(tokens[0], len(self.data))]
        if len(tokens) == 1:
            assign(dst, element)
            return
        # elements may differ in shape, so the rest of the path is re-dispatched
        rest = join_tokens(ptrspec.split("/")[2:])
        resolve_source(element).resolve_json_pointer(dst, rest)


class RecordSource:
    def __init__(self, data: Any) -> None:
        self.data = data

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        current = self.data
        for token in parse_tokens(ptrspec):
            current = get_field(current, token)
        assign(dst, current)


def _is_sequence(value: Any) -> bool:
    if isinstance(value, _TEXT_TYPES):
        return False
    return isinstance(value, Sequence)


def _require_string_keys(mapping: Mapping[Any, Any], token: str | None = None) -> None:
    if not all(isinstance(key, str) for key in mapping):
        raise TypeMismatch(
            f"cannot use JSON pointer with non-string-keyed mapping {type(mapping).__name__}",
            token,
        )


def _is_custom(target: Any) -> bool:
    return not isinstance(target, type) and isinstance(target, Source)


def resolve_source(target: Any) -> Source:
    """Pick the navigation strategy for ``target``.

    Objects that implement ``resolve_json_pointer`` themselves are used
    as-is. Text is parsed as JSON immediately, so malformed input fails
    here rather than at lookup time.
    """
    while True:
        if _is_custom(target):
            _logger.debug("source_dispatch kind=custom type=%s", type(target).__name__)
            return target
        if isinstance(target, _TEXT_TYPES):
            _logger.debug("source_dispatch kind=json_text type=%s", type(target).__name__)
            data = target.tobytes() if isinstance(target, memoryview) else target
            return JSONTextSource(data)
        if isinstance(target, Mapping):
            _require_string_keys(target)
            _logger.debug("source_dispatch kind=keyed type=%s", type(target).__name__)
            return MapSource(target)
        if _is_sequence(target):
            _logger.debug("source_dispatch kind=indexed type=%s", type(target).__name__)
            return SequenceSource(target)
        if is_record(target):
            _logger.debug("source_dispatch kind=record type=%s", type(target).__name__)
            return RecordSource(target)
        if isinstance(target, weakref.ReferenceType):
            referent = target()
            if referent is None:
                _logger.debug("source_dispatch kind=scalar type=dead_reference")
                return ScalarSource(target)
            target = referent
            continue
        _logger.debug("source_dispatch kind=scalar type=%s", type(target).__name__)
        return ScalarSource(target)
