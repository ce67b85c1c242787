"""Error taxonomy for JSON pointer resolution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class JsonPointerError(Exception):
    code: str
    message: str
    token: str | None = None

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        base = f"{self.code}: {self.message}"
        return f"{base} (token={self.token!r})" if self.token is not None else base


class MalformedPointer(JsonPointerError):
    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__("MALFORMED_POINTER", message, token)


class ParseFailure(JsonPointerError):
    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__("PARSE_FAILURE", message, token)


class NotFound(JsonPointerError):
    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__("NOT_FOUND", message, token)


class OutOfBounds(JsonPointerError):
    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__("OUT_OF_BOUNDS", message, token)


class TypeMismatch(JsonPointerError):
    def __init__(self, message: str, token: str | None = None) -> None:
        super().__init__("TYPE_MISMATCH", message, token)
