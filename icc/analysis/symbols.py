"""Symbol tables with hierarchical scopes.

All scopes of a program live in one ScopeArena. A scope refers to its
parent and children by arena key only, so the arena is the single owner
and the parent link is a plain back-reference.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from icc.analysis.errors import DuplicateDeclarationError


class SymbolKind(Enum):
    CLASS = "Class"
    FIELD = "Field"
    VIRTUAL_METHOD = "Virtual method"
    STATIC_METHOD = "Static method"
    PARAMETER = "Parameter"
    LOCAL_VARIABLE = "Local variable"

    @property
    def is_method(self) -> bool:
        return self in (SymbolKind.VIRTUAL_METHOD, SymbolKind.STATIC_METHOD)


@dataclass(frozen=True)
class Symbol:
    name: str
    kind: SymbolKind
    type_id: int
    line: int = field(default=0, compare=False)


class ScopeKind(Enum):
    GLOBAL = "Global"
    CLASS = "Class"
    METHOD = "Method"
    BLOCK = "Statement Block"


@dataclass(eq=False)
class Scope:
    key: int
    kind: ScopeKind
    name: str = ""
    symbols: dict[str, Symbol] = field(default_factory=dict)
    children: list[int] = field(default_factory=list)
    parent: Optional[int] = None

    def lookup_local(self, name: str) -> Symbol | None:
        return self.symbols.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.symbols


class ScopeArena:
    def __init__(self):
        self._scopes: list[Scope] = []

    # --- Construction ---

    def new_scope(self, kind: ScopeKind, name: str = "") -> Scope:
        scope = Scope(len(self._scopes), kind, name)
        self._scopes.append(scope)
        return scope

    def insert(self, scope: Scope, symbol: Symbol) -> None:
        if symbol.name in scope.symbols:
            raise DuplicateDeclarationError(symbol.name, self.describe(scope))
        scope.symbols[symbol.name] = symbol

    def add_child(self, parent: Scope, child: Scope) -> None:
        parent.children.append(child.key)

    def set_parent(self, child: Scope, parent: Scope) -> None:
        child.parent = parent.key

    def finalize_parent_links(self, root: Scope) -> None:
        """Point every scope below ``root`` at its immediate enclosing scope."""
        for key in root.children:
            child = self._scopes[key]
            child.parent = root.key
            self.finalize_parent_links(child)

    # --- Queries ---

    def __getitem__(self, key: int) -> Scope:
        return self._scopes[key]

    def __iter__(self) -> Iterator[Scope]:
        return iter(self._scopes)

    def __len__(self) -> int:
        return len(self._scopes)

    def parent_of(self, scope: Scope) -> Scope | None:
        if scope.parent is None:
            return None
        return self._scopes[scope.parent]

    def children_of(self, scope: Scope) -> list[Scope]:
        return [self._scopes[k] for k in scope.children]

    def ancestors(self, scope: Scope) -> Iterator[Scope]:
        """Enclosing scopes of ``scope``, innermost first."""
        current = self.parent_of(scope)
        while current is not None:
            yield current
            current = self.parent_of(current)

    def lookup(self, scope: Scope, name: str) -> Symbol | None:
        found = self.resolve(scope, name)
        return found[1] if found is not None else None

    def resolve(self, scope: Scope, name: str) -> tuple[Scope, Symbol] | None:
        """Find ``name`` in ``scope`` or the nearest enclosing scope declaring it."""
        current: Scope | None = scope
        while current is not None:
            sym = current.symbols.get(name)
            if sym is not None:
                return current, sym
            current = self.parent_of(current)
        return None

    def walk(self, root: Scope) -> Iterator[Scope]:
        """Pre-order traversal of the subtree under ``root``."""
        yield root
        for key in root.children:
            yield from self.walk(self._scopes[key])

    def enclosing_method(self, scope: Scope) -> Scope | None:
        if scope.kind is ScopeKind.METHOD:
            return scope
        for s in self.ancestors(scope):
            if s.kind is ScopeKind.METHOD:
                return s
        return None

    def label(self, scope: Scope) -> str:
        """Name used when listing a scope, e.g. ``statement block in main``."""
        if scope.kind is ScopeKind.BLOCK:
            method = self.enclosing_method(scope)
            return f"statement block in {method.name if method else '?'}"
        return scope.name

    def describe(self, scope: Scope) -> str:
        # Block parents are only linked once the enclosing method is done.
        if scope.kind is ScopeKind.BLOCK:
            return "statement block"
        return f"{scope.kind.value.lower()} scope '{scope.name}'"
