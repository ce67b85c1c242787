"""Write resolved values into typed destinations."""

from __future__ import annotations

import types
import typing
from typing import Any, Tuple

from .errors import TypeMismatch


_UNION_TYPES: Tuple[Any, ...] = (typing.Union, types.UnionType)


class Destination:
    """Receives the value located by a pointer.

    ``type_`` is the declared type of the slot. ``assign`` only writes when
    the value is compatible with it, so a failed retrieval never leaves a
    partial or ill-typed value behind.
    """

    def __init__(self, type_: Any = object) -> None:
        self.type_ = type_
        self.value: Any = None
        self.is_set = False

    def __repr__(self) -> str:
        return f"Destination(type_={self.type_!r}, value={self.value!r}, is_set={self.is_set})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _convert(type_: Any, value: Any) -> Tuple[bool, Any]:
    if type_ is object or type_ is Any:
        return True, value
    if type_ is None or type_ is type(None):
        return value is None, value

    origin = typing.get_origin(type_)
    if origin in _UNION_TYPES:
        for member in typing.get_args(type_):
            ok, converted = _convert(member, value)
            if ok:
                return True, converted
        return False, value
    if origin is not None:
        type_ = origin

    if not isinstance(type_, type):
        return False, value
    if value is None:
        return False, value
    if type_ is float and _is_number(value):
        return True, float(value)
    if type_ is int:
        if isinstance(value, bool):
            return False, value
        if isinstance(value, float) and value.is_integer():
            return True, int(value)
    return isinstance(value, type_), value


def assign(dst: Destination, value: Any) -> None:
    ok, converted = _convert(dst.type_, value)
    if not ok:
        raise TypeMismatch(
            f"cannot assign {type(value).__name__} to destination of type {_type_name(dst.type_)}"
        )
    dst.value = converted
    dst.is_set = True


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or repr(type_)
