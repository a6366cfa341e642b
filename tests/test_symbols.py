"""Tests for scopes and the scope arena."""

import pytest
from icc.analysis.errors import DuplicateDeclarationError
from icc.analysis.symbols import ScopeArena, ScopeKind, Symbol, SymbolKind


def _arena():
    """global -> class A -> method m -> block"""
    arena = ScopeArena()
    g = arena.new_scope(ScopeKind.GLOBAL, "t.ic")
    a = arena.new_scope(ScopeKind.CLASS, "A")
    m = arena.new_scope(ScopeKind.METHOD, "m")
    b = arena.new_scope(ScopeKind.BLOCK)
    arena.add_child(g, a)
    arena.set_parent(a, g)
    arena.add_child(a, m)
    arena.set_parent(m, a)
    arena.add_child(m, b)
    arena.finalize_parent_links(m)
    return arena, g, a, m, b


class TestInsert:
    def test_insert_and_lookup_local(self):
        arena, g, *_ = _arena()
        sym = Symbol("A", SymbolKind.CLASS, 6, 1)
        arena.insert(g, sym)
        assert g.lookup_local("A") is sym
        assert "A" in g
        assert g.lookup_local("B") is None

    def test_duplicate_rejected(self):
        arena, _, a, _, _ = _arena()
        arena.insert(a, Symbol("x", SymbolKind.FIELD, 1, 2))
        with pytest.raises(DuplicateDeclarationError, match="class scope 'A'"):
            arena.insert(a, Symbol("x", SymbolKind.VIRTUAL_METHOD, 9, 3))
        assert a.symbols["x"].kind is SymbolKind.FIELD

    def test_duplicate_in_block(self):
        arena, _, _, _, b = _arena()
        arena.insert(b, Symbol("i", SymbolKind.LOCAL_VARIABLE, 1))
        with pytest.raises(DuplicateDeclarationError, match="statement block"):
            arena.insert(b, Symbol("i", SymbolKind.LOCAL_VARIABLE, 1))

    def test_symbol_equality_ignores_line(self):
        assert Symbol("x", SymbolKind.FIELD, 1, 2) == Symbol("x", SymbolKind.FIELD, 1, 7)


class TestHierarchy:
    def test_parent_links(self):
        arena, g, a, m, b = _arena()
        assert arena.parent_of(g) is None
        assert arena.parent_of(b) is m
        assert [s.key for s in arena.ancestors(b)] == [m.key, a.key, g.key]

    def test_children(self):
        arena, g, a, m, b = _arena()
        assert arena.children_of(g) == [a]
        assert arena.children_of(m) == [b]
        assert arena.children_of(b) == []

    def test_walk_is_preorder(self):
        arena, g, a, m, b = _arena()
        extra = arena.new_scope(ScopeKind.CLASS, "B")
        arena.add_child(g, extra)
        assert [s.key for s in arena.walk(g)] == [g.key, a.key, m.key, b.key, extra.key]

    def test_arena_owns_every_scope(self):
        arena, g, a, m, b = _arena()
        assert len(arena) == 4
        assert list(arena) == [g, a, m, b]
        assert arena[m.key] is m


class TestLookup:
    def test_lookup_through_chain(self):
        arena, g, a, m, b = _arena()
        arena.insert(g, Symbol("A", SymbolKind.CLASS, 6))
        arena.insert(a, Symbol("x", SymbolKind.FIELD, 1))
        assert arena.lookup(b, "x").kind is SymbolKind.FIELD
        assert arena.lookup(b, "A").kind is SymbolKind.CLASS
        assert arena.lookup(b, "missing") is None

    def test_innermost_wins(self):
        arena, g, a, m, b = _arena()
        arena.insert(a, Symbol("x", SymbolKind.FIELD, 1))
        arena.insert(m, Symbol("x", SymbolKind.PARAMETER, 2))
        arena.insert(b, Symbol("x", SymbolKind.LOCAL_VARIABLE, 4))
        scope, sym = arena.resolve(b, "x")
        assert scope is b
        assert sym.kind is SymbolKind.LOCAL_VARIABLE
        assert arena.lookup(m, "x").kind is SymbolKind.PARAMETER
        assert arena.lookup(a, "x").kind is SymbolKind.FIELD

    def test_lookup_does_not_descend(self):
        arena, g, a, m, b = _arena()
        arena.insert(b, Symbol("i", SymbolKind.LOCAL_VARIABLE, 1))
        assert arena.lookup(m, "i") is None


class TestLabels:
    def test_block_label_names_method(self):
        arena, g, a, m, b = _arena()
        inner = arena.new_scope(ScopeKind.BLOCK)
        arena.add_child(b, inner)
        arena.finalize_parent_links(m)
        assert arena.label(inner) == "statement block in m"
        assert arena.enclosing_method(inner) is m
        assert arena.label(a) == "A"

    def test_enclosing_method_outside_method(self):
        arena, g, a, *_ = _arena()
        assert arena.enclosing_method(a) is None
