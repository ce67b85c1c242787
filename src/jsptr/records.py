"""Field descriptor tables for record-like values (dataclasses, pydantic models)."""

from __future__ import annotations

import dataclasses
import logging
import os
import threading
import types
import typing
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel

from .errors import NotFound, TypeMismatch


_logger = logging.getLogger("jsptr.records")
_TAG_KEY = os.getenv("JSPTR_FIELD_TAG", "").strip() or "json"
_EMBED_KEY = os.getenv("JSPTR_EMBED_TAG", "").strip() or "embedded"
_SKIP_DIRECTIVES = {"skip", "-"}

_SHAPE_CACHE: Dict[type, "RecordShapeInfo"] = {}
_SHAPE_LOCK = threading.Lock()


@dataclass(frozen=True)
class FieldDescriptor:
    access_path: Tuple[str, ...]
    external_name: str


@dataclass(frozen=True)
class RecordShapeInfo:
    record_type: type
    fields: Mapping[str, FieldDescriptor] = field(default_factory=dict)


def is_record(value: Any) -> bool:
    if isinstance(value, type):
        return False
    return dataclasses.is_dataclass(value) or isinstance(value, BaseModel)


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in (typing.Union, types.UnionType):
        members = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return tp


def _field_types(cls: type) -> Dict[str, Any]:
    hints = {f.name: f.type for f in dataclasses.fields(cls)}
    if any(isinstance(tp, str) for tp in hints.values()):
        try:
            hints.update(typing.get_type_hints(cls))
        except NameError as exc:
            raise TypeMismatch(
                f"cannot resolve embedded field types of {cls.__qualname__}: {exc}"
            ) from exc
    return hints


def _external_name(name: str, directive: str | None) -> str | None:
    if directive is None or directive == "":
        return name
    if directive in _SKIP_DIRECTIVES:
        return None
    primary = directive.split(",", 1)[0]
    return primary or name


def _collect_dataclass(cls: type, prefix: Tuple[str, ...], out: Dict[str, FieldDescriptor]) -> None:
    hints = None
    for f in dataclasses.fields(cls):
        path = prefix + (f.name,)
        if f.metadata.get(_EMBED_KEY):
            if hints is None:
                hints = _field_types(cls)
            inner = _unwrap_optional(hints[f.name])
            if isinstance(inner, type) and dataclasses.is_dataclass(inner):
                _collect_dataclass(inner, path, out)
            continue
        if f.name.startswith("_"):
            continue
        name = _external_name(f.name, f.metadata.get(_TAG_KEY))
        if name is None:
            continue
        out[name] = FieldDescriptor(access_path=path, external_name=name)


def _collect_model(cls: type, out: Dict[str, FieldDescriptor]) -> None:
    for fname, info in cls.model_fields.items():
        if fname.startswith("_") or info.exclude is True:
            continue
        name = info.serialization_alias or info.alias or fname
        out[name] = FieldDescriptor(access_path=(fname,), external_name=name)


def _build_shape(cls: type) -> RecordShapeInfo:
    fields: Dict[str, FieldDescriptor] = {}
    if issubclass(cls, BaseModel):
        _collect_model(cls, fields)
    else:
        _collect_dataclass(cls, (), fields)
    return RecordShapeInfo(record_type=cls, fields=types.MappingProxyType(fields))


def shape_info(cls: type) -> RecordShapeInfo:
    """Return the cached descriptor table for ``cls``, building it once."""
    info = _SHAPE_CACHE.get(cls)
    if info is not None:
        return info
    with _SHAPE_LOCK:
        info = _SHAPE_CACHE.get(cls)
        if info is not None:
            return info
        info = _build_shape(cls)
        _SHAPE_CACHE[cls] = info
        _logger.debug("shape_cache_miss type=%s fields=%s", cls.__qualname__, sorted(info.fields))
        return info


def deref(value: Any) -> Any:
    while isinstance(value, weakref.ReferenceType):
        value = value()
    return value


def get_field(obj: Any, token: str) -> Any:
    obj = deref(obj)
    if obj is None:
        raise TypeMismatch(f"cannot access field {token!r} on nothing", token)
    if not is_record(obj):
        raise TypeMismatch(
            f"cannot access field {token!r} of non-record type {type(obj).__name__}", token
        )
    info = shape_info(type(obj))
    desc = info.fields.get(token)
    if desc is None:
        raise NotFound(f"field {token!r} not found in {type(obj).__name__}", token)
    current = obj
    for step in desc.access_path[:-1]:
        current = getattr(current, step)
        if current is None:
            raise TypeMismatch(f"cannot access field {token!r} through empty embedded {step!r}", token)
    return getattr(current, desc.access_path[-1])
