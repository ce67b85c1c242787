"""JSON pointer resolution over JSON text, containers, records and custom sources."""

from .assign import Destination, assign
from .errors import (
    JsonPointerError,
    MalformedPointer,
    NotFound,
    OutOfBounds,
    ParseFailure,
    TypeMismatch,
)
from .pointer import Pointer, new
from .records import FieldDescriptor, RecordShapeInfo, shape_info
from .sources import Source, resolve_source
from .tokenizer import unescape_token

__all__ = [
    "Destination",
    "FieldDescriptor",
    "JsonPointerError",
    "MalformedPointer",
    "NotFound",
    "OutOfBounds",
    "ParseFailure",
    "Pointer",
    "RecordShapeInfo",
    "Source",
    "TypeMismatch",
    "assign",
    "new",
    "resolve_source",
    "shape_info",
    "unescape_token",
]
