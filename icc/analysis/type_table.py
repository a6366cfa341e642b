"""Interning table for every type that appears in an IC program."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from icc.analysis.errors import UnresolvedSuperclassError
from icc.builtins.types import PrimitiveKind, PRIMITIVE_ORDER


class TypeKind(Enum):
    PRIMITIVE = "primitive"
    CLASS = "class"
    ARRAY = "array"
    METHOD = "method"


@dataclass(frozen=True)
class TypeEntry:
    type_id: int
    kind: TypeKind
    name: str = ""                      # primitive and class types
    element: Optional[int] = None       # array types
    return_type: Optional[int] = None   # method types
    params: tuple[int, ...] = ()        # method types


class TypeTable:
    """Assigns stable integer ids to types.

    Primitive, array and method types are structural: asking for the same
    one twice gives the same id. Class types are nominal: every call to
    ``intern_class`` gives a fresh id. Ids start at 1 and are handed out in
    interning order, so they never change meaning once returned.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._entries: list[TypeEntry] = []
        self._primitives: dict[PrimitiveKind, int] = {}
        self._arrays: dict[int, int] = {}
        self._methods: dict[tuple[int, tuple[int, ...]], int] = {}
        self._classes_by_name: dict[str, int] = {}
        self._superclass: dict[int, int] = {}
        for kind in PRIMITIVE_ORDER:
            self.intern_primitive(kind)

    def _add(self, **kwargs) -> int:
        type_id = len(self._entries) + 1
        self._entries.append(TypeEntry(type_id, **kwargs))
        return type_id

    def intern_primitive(self, kind: PrimitiveKind) -> int:
        type_id = self._primitives.get(kind)
        if type_id is None:
            type_id = self._add(kind=TypeKind.PRIMITIVE, name=kind.value)
            self._primitives[kind] = type_id
        return type_id

    def intern_class(self, name: str) -> int:
        type_id = self._add(kind=TypeKind.CLASS, name=name)
        # The first class registered under a name is the one lookups see.
        self._classes_by_name.setdefault(name, type_id)
        return type_id

    def intern_array(self, element: int) -> int:
        self.entry(element)
        type_id = self._arrays.get(element)
        if type_id is None:
            type_id = self._add(kind=TypeKind.ARRAY, element=element)
            self._arrays[element] = type_id
        return type_id

    def intern_method(self, return_type: int, params: list[int] | tuple[int, ...]) -> int:
        key = (return_type, tuple(params))
        type_id = self._methods.get(key)
        if type_id is None:
            type_id = self._add(kind=TypeKind.METHOD, return_type=return_type, params=key[1])
            self._methods[key] = type_id
        return type_id

    def lookup_class(self, name: str) -> int | None:
        return self._classes_by_name.get(name)

    def set_superclass(self, class_id: int, superclass_name: str) -> int:
        entry = self.entry(class_id)
        if entry.kind is not TypeKind.CLASS:
            raise ValueError(f"type {class_id} is not a class type")
        super_id = self._classes_by_name.get(superclass_name)
        if super_id is None:
            raise UnresolvedSuperclassError(entry.name, superclass_name)
        self._superclass[class_id] = super_id
        return super_id

    def superclass_of(self, class_id: int) -> int | None:
        return self._superclass.get(class_id)

    def entry(self, type_id: int) -> TypeEntry:
        if not 1 <= type_id <= len(self._entries):
            raise KeyError(f"unknown type id {type_id}")
        return self._entries[type_id - 1]

    def describe(self, type_id: int) -> str:
        """IC spelling of a type: ``int``, ``A[][]``, ``{int, A -> void}``."""
        entry = self.entry(type_id)
        if entry.kind is TypeKind.ARRAY:
            return self.describe(entry.element) + "[]"
        if entry.kind is TypeKind.METHOD:
            params = ", ".join(self.describe(p) for p in entry.params)
            return "{" + params + " -> " + self.describe(entry.return_type) + "}"
        return entry.name

    def entries_of(self, kind: TypeKind) -> list[TypeEntry]:
        return [e for e in self._entries if e.kind is kind]

    def __iter__(self) -> Iterator[TypeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
