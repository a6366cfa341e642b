"""AST node definitions for IC.

Nodes that open a lexical scope (Program, ICClass, the method kinds and
StatementsBlock) carry a ``scope`` key. The symbol table builder fills it in
with the index of the scope it created for the node; the node never owns the
scope.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Union

from icc.builtins.types import LiteralKind


# --- Types ---

@dataclass
class PrimitiveType:
    name: str  # "int", "boolean", "string", "void"
    dimension: int = 0
    line: int = 0


@dataclass
class UserType:
    name: str
    dimension: int = 0
    line: int = 0


TypeRef = Union[PrimitiveType, UserType]


# --- Program ---

@dataclass
class Program:
    classes: list[ICClass] = field(default_factory=list)
    line: int = 0
    scope: Optional[int] = None


@dataclass
class ICClass:
    name: str
    super_class_name: Optional[str]
    fields: list[Field] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    line: int = 0
    scope: Optional[int] = None

    @property
    def has_super_class(self) -> bool:
        return self.super_class_name is not None


@dataclass
class Field:
    type: TypeRef
    name: str
    line: int = 0


@dataclass
class Formal:
    type: TypeRef
    name: str
    line: int = 0


# --- Methods ---

@dataclass
class Method:
    type: TypeRef
    name: str
    formals: list[Formal] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    line: int = 0
    scope: Optional[int] = None


@dataclass
class VirtualMethod(Method):
    pass


@dataclass
class StaticMethod(Method):
    pass


@dataclass
class LibraryMethod(Method):
    """Static method declared in a library signature file; it has no body."""


# --- Statements ---

@dataclass
class Assignment:
    variable: Location
    assignment: Expression
    line: int = 0


@dataclass
class CallStatement:
    call: Call
    line: int = 0


@dataclass
class Return:
    value: Optional[Expression] = None
    line: int = 0


@dataclass
class If:
    condition: Expression
    operation: Statement
    else_operation: Optional[Statement] = None
    line: int = 0

    @property
    def has_else(self) -> bool:
        return self.else_operation is not None


@dataclass
class While:
    condition: Expression
    operation: Statement
    line: int = 0


@dataclass
class Break:
    line: int = 0


@dataclass
class Continue:
    line: int = 0


@dataclass
class StatementsBlock:
    statements: list[Statement] = field(default_factory=list)
    line: int = 0
    scope: Optional[int] = None


@dataclass
class LocalVariable:
    type: TypeRef
    name: str
    init_value: Optional[Expression] = None
    line: int = 0


Statement = Union[
    Assignment, CallStatement, Return, If, While, Break, Continue,
    StatementsBlock, LocalVariable,
]


# --- Expressions ---

@dataclass
class VariableLocation:
    name: str
    location: Optional[Expression] = None  # object of a field access
    line: int = 0

    @property
    def is_external(self) -> bool:
        return self.location is not None


@dataclass
class ArrayLocation:
    array: Expression
    index: Expression
    line: int = 0


Location = Union[VariableLocation, ArrayLocation]


@dataclass
class StaticCall:
    class_name: str
    name: str
    arguments: list[Expression] = field(default_factory=list)
    line: int = 0


@dataclass
class VirtualCall:
    name: str
    arguments: list[Expression] = field(default_factory=list)
    location: Optional[Expression] = None  # receiver; None means this
    line: int = 0


Call = Union[StaticCall, VirtualCall]


@dataclass
class This:
    line: int = 0


@dataclass
class NewClass:
    name: str
    line: int = 0


@dataclass
class NewArray:
    type: TypeRef  # element type
    size: Expression
    line: int = 0


@dataclass
class Length:
    array: Expression
    line: int = 0


@dataclass
class MathBinaryOp:
    operator: str  # "+", "-", "*", "/", "%"
    operand1: Expression
    operand2: Expression
    line: int = 0


@dataclass
class LogicalBinaryOp:
    operator: str  # "&&", "||", "==", "!=", "<", "<=", ">", ">="
    operand1: Expression
    operand2: Expression
    line: int = 0


@dataclass
class MathUnaryOp:
    operator: str  # "-"
    operand: Expression
    line: int = 0


@dataclass
class LogicalUnaryOp:
    operator: str  # "!"
    operand: Expression
    line: int = 0


@dataclass
class Literal:
    kind: LiteralKind
    value: object = None
    line: int = 0


@dataclass
class ExpressionBlock:
    """Parenthesized expression."""
    expression: Expression
    line: int = 0


Expression = Union[
    VariableLocation, ArrayLocation, StaticCall, VirtualCall, This,
    NewClass, NewArray, Length, MathBinaryOp, LogicalBinaryOp,
    MathUnaryOp, LogicalUnaryOp, Literal, ExpressionBlock,
]
