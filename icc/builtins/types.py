"""Built-in type definitions for IC."""

from __future__ import annotations
from enum import Enum


class PrimitiveKind(Enum):
    INT = "int"
    BOOLEAN = "boolean"
    NULL = "null"
    STRING = "string"
    VOID = "void"


# Interning order of the primitive types; fixes their type ids to 1..5.
PRIMITIVE_ORDER: tuple[PrimitiveKind, ...] = (
    PrimitiveKind.INT,
    PrimitiveKind.BOOLEAN,
    PrimitiveKind.NULL,
    PrimitiveKind.STRING,
    PrimitiveKind.VOID,
)

# Type names a declaration may spell out (null has no keyword).
TYPE_MAP: dict[str, PrimitiveKind] = {
    "int": PrimitiveKind.INT,
    "boolean": PrimitiveKind.BOOLEAN,
    "string": PrimitiveKind.STRING,
    "void": PrimitiveKind.VOID,
}


class LiteralKind(Enum):
    INTEGER = "integer"
    STRING = "string"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"


def resolve_primitive(name: str) -> PrimitiveKind | None:
    return TYPE_MAP.get(name)
