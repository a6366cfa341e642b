"""Symbol table construction for IC programs.

Walks the syntax tree once and builds the scope hierarchy (global, class,
method and statement block scopes) together with the type table. Classes
are handled in two phases:

1. registration: every class gets its type id and global symbol, then its
   class scope is built (fields, methods, method bodies);
2. linkage: every class scope is hung under its superclass's scope, or under
   the global scope when it has none.

Because all class names are registered before any member is looked at, a
class may use classes declared after it, and a subclass is only linked once
its superclass scope is complete.

Table errors (duplicate names, unknown classes, bad superclasses) are
collected as diagnostics and the walk goes on; a tree of the wrong shape
raises MalformedTreeError.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from icc.analysis.errors import (
    Diagnostic, SemanticError, DuplicateDeclarationError,
    UndefinedClassError, CyclicInheritanceError, MalformedTreeError,
)
from icc.analysis.symbols import Scope, ScopeArena, ScopeKind, Symbol, SymbolKind
from icc.analysis.type_table import TypeTable
from icc.builtins.types import resolve_primitive
from icc.parser.ast_nodes import (
    Program, ICClass, Field, Formal, Method, VirtualMethod, LibraryMethod,
    PrimitiveType, UserType, TypeRef,
    Assignment, CallStatement, Return, If, While, Break, Continue,
    StatementsBlock, LocalVariable, Statement,
)

logger = logging.getLogger(__name__)

# Statements that never declare anything.
_PLAIN_STATEMENTS = (Assignment, CallStatement, Return, Break, Continue)


@dataclass
class BuildContext:
    scopes: ScopeArena
    types: TypeTable
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, err: SemanticError, line: int) -> None:
        diagnostic = err.diagnostic(line)
        logger.debug("%s", diagnostic)
        self.diagnostics.append(diagnostic)


@dataclass
class SymbolTables:
    """Everything the builder produced for one program."""
    program_name: str
    scopes: ScopeArena
    global_scope: Scope
    type_table: TypeTable
    class_scopes: list[Scope]  # one per class, declaration order
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def class_scope(self, name: str) -> Scope | None:
        for scope in self.class_scopes:
            if scope.name == name:
                return scope
        return None

    def lookup(self, scope: Scope, name: str) -> Symbol | None:
        return self.scopes.lookup(scope, name)


@dataclass
class _Contribution:
    """What one statement adds to the scope it appears in."""
    symbols: list[Symbol] = field(default_factory=list)
    scopes: list[Scope] = field(default_factory=list)

    def extend(self, other: _Contribution | None) -> None:
        if other is not None:
            self.symbols.extend(other.symbols)
            self.scopes.extend(other.scopes)

    def add_to(self, ctx: BuildContext, target: Scope) -> None:
        for sym in self.symbols:
            _insert(ctx, target, sym)
        for scope in self.scopes:
            ctx.scopes.add_child(target, scope)


def build_symbol_tables(program: Program, program_name: str = "") -> SymbolTables:
    if not isinstance(program, Program):
        raise MalformedTreeError(f"expected a Program, got {type(program).__name__}")

    ctx = BuildContext(ScopeArena(), TypeTable(program_name))
    global_scope = ctx.scopes.new_scope(ScopeKind.GLOBAL, program_name)
    program.scope = global_scope.key

    classes = list(program.classes)
    class_ids = []
    for icclass in classes:
        if not isinstance(icclass, ICClass):
            raise MalformedTreeError(f"expected a class declaration, got {type(icclass).__name__}")
        class_id = ctx.types.intern_class(icclass.name)
        class_ids.append(class_id)
        _insert(ctx, global_scope, Symbol(icclass.name, SymbolKind.CLASS, class_id, icclass.line))
        logger.debug("registered class %s as type %d", icclass.name, class_id)

    class_scopes = [_build_class(ctx, icclass) for icclass in classes]

    by_name: dict[str, Scope] = {}
    for icclass, scope in zip(classes, class_scopes):
        by_name.setdefault(icclass.name, scope)
    for icclass, class_id, scope in zip(classes, class_ids, class_scopes):
        _link_class(ctx, icclass, class_id, scope, global_scope, by_name)

    return SymbolTables(
        program_name, ctx.scopes, global_scope, ctx.types, class_scopes, ctx.diagnostics,
    )


def _link_class(
    ctx: BuildContext,
    icclass: ICClass,
    class_id: int,
    scope: Scope,
    global_scope: Scope,
    by_name: dict[str, Scope],
) -> None:
    parent = global_scope
    if icclass.has_super_class:
        super_scope = by_name.get(icclass.super_class_name)
        try:
            if super_scope is not None and _inherits_from(ctx.scopes, super_scope, scope):
                raise CyclicInheritanceError(icclass.name, icclass.super_class_name)
            ctx.types.set_superclass(class_id, icclass.super_class_name)
        except SemanticError as err:
            ctx.report(err, icclass.line)
        else:
            parent = super_scope
    ctx.scopes.add_child(parent, scope)
    ctx.scopes.set_parent(scope, parent)
    logger.debug("linked class %s under %s", icclass.name, ctx.scopes.describe(parent))


def _inherits_from(scopes: ScopeArena, scope: Scope, ancestor: Scope) -> bool:
    return scope is ancestor or any(s is ancestor for s in scopes.ancestors(scope))


def _build_class(ctx: BuildContext, icclass: ICClass) -> Scope:
    scope = ctx.scopes.new_scope(ScopeKind.CLASS, icclass.name)
    icclass.scope = scope.key

    for f in icclass.fields:
        if not isinstance(f, Field):
            raise MalformedTreeError(f"expected a field in class {icclass.name}, got {type(f).__name__}")
        type_id = _declared_type(ctx, f.type, f.line)
        if type_id is not None:
            _insert(ctx, scope, Symbol(f.name, SymbolKind.FIELD, type_id, f.line))

    for method in icclass.methods:
        if not isinstance(method, Method):
            raise MalformedTreeError(f"expected a method in class {icclass.name}, got {type(method).__name__}")
        signature = _method_type(ctx, method)
        method_scope = _build_method(ctx, method)
        ctx.scopes.add_child(scope, method_scope)
        ctx.scopes.set_parent(method_scope, scope)
        if signature is not None:
            # Library methods count as static.
            kind = SymbolKind.VIRTUAL_METHOD if isinstance(method, VirtualMethod) else SymbolKind.STATIC_METHOD
            _insert(ctx, scope, Symbol(method.name, kind, signature, method.line))

    return scope


def _build_method(ctx: BuildContext, method: Method) -> Scope:
    if isinstance(method, LibraryMethod) and method.statements:
        raise MalformedTreeError(f"library method {method.name} has a body")
    scope = ctx.scopes.new_scope(ScopeKind.METHOD, method.name)
    method.scope = scope.key

    for formal in method.formals:
        type_id = _declared_type(ctx, formal.type, formal.line)
        if type_id is not None:
            _insert(ctx, scope, Symbol(formal.name, SymbolKind.PARAMETER, type_id, formal.line))

    # Top-level locals go straight into the method scope.
    _fill_scope(ctx, scope, method.statements)
    ctx.scopes.finalize_parent_links(scope)
    return scope


def _fill_scope(ctx: BuildContext, target: Scope, statements: list[Statement]) -> None:
    for stmt in statements:
        contribution = _contribution(ctx, stmt)
        if contribution is not None:
            contribution.add_to(ctx, target)


def _contribution(ctx: BuildContext, stmt: Statement) -> _Contribution | None:
    if isinstance(stmt, LocalVariable):
        type_id = _declared_type(ctx, stmt.type, stmt.line)
        if type_id is None:
            return None
        return _Contribution(symbols=[Symbol(stmt.name, SymbolKind.LOCAL_VARIABLE, type_id, stmt.line)])

    if isinstance(stmt, StatementsBlock):
        scope = ctx.scopes.new_scope(ScopeKind.BLOCK)
        stmt.scope = scope.key
        _fill_scope(ctx, scope, stmt.statements)
        return _Contribution(scopes=[scope])

    if isinstance(stmt, If):
        result = _Contribution()
        result.extend(_contribution(ctx, stmt.operation))
        if stmt.has_else:
            result.extend(_contribution(ctx, stmt.else_operation))
        return result

    if isinstance(stmt, While):
        return _contribution(ctx, stmt.operation)

    if isinstance(stmt, _PLAIN_STATEMENTS):
        return None

    raise MalformedTreeError(
        f"unexpected statement node {type(stmt).__name__} at line {getattr(stmt, 'line', '?')}"
    )


def _insert(ctx: BuildContext, scope: Scope, symbol: Symbol) -> None:
    try:
        ctx.scopes.insert(scope, symbol)
    except DuplicateDeclarationError as err:
        ctx.report(err, symbol.line)


def _method_type(ctx: BuildContext, method: Method) -> int | None:
    # Parameter types are reported when the method scope is built.
    return_id = _declared_type(ctx, method.type, method.line)
    param_ids = []
    for formal in method.formals:
        if not isinstance(formal, Formal):
            raise MalformedTreeError(f"expected a formal in method {method.name}, got {type(formal).__name__}")
        try:
            param_ids.append(_type_id(ctx, formal.type))
        except UndefinedClassError:
            return None
    if return_id is None:
        return None
    return ctx.types.intern_method(return_id, param_ids)


def _declared_type(ctx: BuildContext, type_ref: TypeRef, line: int) -> int | None:
    try:
        return _type_id(ctx, type_ref)
    except UndefinedClassError as err:
        ctx.report(err, line)
        return None


def _type_id(ctx: BuildContext, type_ref: TypeRef) -> int:
    if isinstance(type_ref, PrimitiveType):
        kind = resolve_primitive(type_ref.name)
        if kind is None:
            raise MalformedTreeError(f"unknown primitive type '{type_ref.name}'")
        type_id = ctx.types.intern_primitive(kind)
    elif isinstance(type_ref, UserType):
        type_id = ctx.types.lookup_class(type_ref.name)
        if type_id is None:
            raise UndefinedClassError(type_ref.name)
    else:
        raise MalformedTreeError(f"expected a type, got {type(type_ref).__name__}")
    for _ in range(type_ref.dimension):
        type_id = ctx.types.intern_array(type_id)
    return type_id
