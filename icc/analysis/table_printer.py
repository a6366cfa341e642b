"""Text dumps of symbol tables and the type table in the IC format."""

from __future__ import annotations

from icc.analysis.symbols import Scope, ScopeArena, ScopeKind, Symbol, SymbolKind
from icc.analysis.table_builder import SymbolTables
from icc.analysis.type_table import TypeKind, TypeTable

_INDENT = "    "


def format_symbol_tables(tables: SymbolTables) -> str:
    sections = [
        _format_scope(tables.scopes, scope, tables.type_table)
        for scope in tables.scopes.walk(tables.global_scope)
    ]
    return "\n\n".join(sections) + "\n"


def _format_scope(scopes: ScopeArena, scope: Scope, types: TypeTable) -> str:
    if scope.kind is ScopeKind.BLOCK:
        parent = scopes.parent_of(scope)
        located = scopes.label(parent) if parent is not None else "?"
        lines = [f"Statement Block Symbol Table ( located in {located} )"]
    else:
        lines = [f"{scope.kind.value} Symbol Table: {scope.name}"]
    for sym in scope.symbols.values():
        lines.append(_INDENT + _format_symbol(sym, types))
    if scope.children:
        names = ", ".join(scopes.label(child) for child in scopes.children_of(scope))
        lines.append(f"Children tables: {names}")
    return "\n".join(lines)


def _format_symbol(sym: Symbol, types: TypeTable) -> str:
    if sym.kind is SymbolKind.CLASS:
        return f"{sym.kind.value}: {sym.name}"
    if sym.kind.is_method:
        return f"{sym.kind.value}: {sym.name} {types.describe(sym.type_id)}"
    return f"{sym.kind.value}: {types.describe(sym.type_id)} {sym.name}"


def format_type_table(types: TypeTable) -> str:
    lines = [f"Type Table: {types.name}"]
    for entry in types.entries_of(TypeKind.PRIMITIVE):
        lines.append(f"{_INDENT}{entry.type_id}: Primitive type: {entry.name}")
    for entry in types.entries_of(TypeKind.CLASS):
        line = f"{_INDENT}{entry.type_id}: Class: {entry.name}"
        super_id = types.superclass_of(entry.type_id)
        if super_id is not None:
            line += f", Superclass ID: {super_id}"
        lines.append(line)
    for entry in types.entries_of(TypeKind.ARRAY):
        lines.append(f"{_INDENT}{entry.type_id}: Array type: {types.describe(entry.type_id)}")
    for entry in types.entries_of(TypeKind.METHOD):
        lines.append(f"{_INDENT}{entry.type_id}: Method type: {types.describe(entry.type_id)}")
    return "\n".join(lines) + "\n"
