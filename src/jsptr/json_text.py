"""Pointer resolution over raw JSON text."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from .assign import Destination, assign
from .errors import NotFound, ParseFailure, TypeMismatch
from .tokenizer import array_index, parse_tokens


_logger = logging.getLogger("jsptr.json_text")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_json(data: str | bytes) -> Any:
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ParseFailure(f"failed to parse JSON: {exc}") from exc


def node_kind(node: Any) -> str:
    if node is None:
        return "null"
    if node is True:
        return "true"
    if node is False:
        return "false"
    if isinstance(node, str):
        return "string"
    if isinstance(node, (int, float)):
        return "number"
    if isinstance(node, list):
        return "array"
    if isinstance(node, dict):
        return "object"
    return type(node).__name__


def to_generic(node: Any) -> Any:
    """Convert a parsed JSON node into a plain value tree.

    Numbers always come back as floats. A failing array element aborts
    the whole array; a failing object member is left out of the result.
    """
    kind = node_kind(node)
    if kind == "null":
        return None
    if kind in ("true", "false", "string"):
        return node
    if kind == "number":
        try:
            return float(node)
        except OverflowError as exc:
            raise TypeMismatch(f"number {node} does not fit a double") from exc
    if kind == "array":
        items: List[Any] = []
        for idx, item in enumerate(node):
            try:
                items.append(to_generic(item))
            except TypeMismatch as exc:
                raise TypeMismatch(f"failed to convert array item {idx}: {exc.message}") from exc
        return items
    if kind == "object":
        result: Dict[str, Any] = {}
        for key, value in node.items():
            try:
                result[key] = to_generic(value)
            except TypeMismatch:
                _logger.debug("json_member_dropped key=%s", key)
        return result
    raise TypeMismatch(f"unsupported JSON type: {kind}")


class JSONTextSource:
    """Resolves pointers against JSON text parsed once up front."""

    def __init__(self, data: str | bytes) -> None:
        self.data = data
        self.parsed = parse_json(data)

    def resolve_json_pointer(self, dst: Destination, ptrspec: str) -> None:
        current = self.parsed
        for token in parse_tokens(ptrspec):
            kind = node_kind(current)
            if kind == "object":
                if token not in current:
                    raise NotFound(f"property {token!r} not found", token)
                current = current[token]
            elif kind == "array":
                current = current[array_index(token, len(current))]
            else:
                raise TypeMismatch(f"cannot index into {kind} with {token!r}", token)
        assign(dst, to_generic(current))
