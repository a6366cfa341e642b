"""Lark Transformer that builds our AST from the parse tree."""

from __future__ import annotations
from pathlib import Path
from lark import Lark, Transformer, Token
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from icc.builtins.types import LiteralKind
from icc.parser.ast_nodes import (
    Program, ICClass, Field, Formal, Method,
    VirtualMethod, StaticMethod, LibraryMethod,
    PrimitiveType, UserType,
    Assignment, CallStatement, Return, If, While, Break, Continue,
    StatementsBlock, LocalVariable,
    VariableLocation, ArrayLocation, StaticCall, VirtualCall, This,
    NewClass, NewArray, Length, MathBinaryOp, LogicalBinaryOp,
    MathUnaryOp, LogicalUnaryOp, Literal, ExpressionBlock,
)

_GRAMMAR_PATH = Path(__file__).parent.parent / "grammar" / "ic.lark"

_parser = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    propagate_positions=True,
    maybe_placeholders=True,
)

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class ICSyntaxError(Exception):
    def __init__(self, line: int, message: str):
        super().__init__(f"syntax error at line {line}: {message}")
        self.line = line
        self.message = message


def _line(tok) -> int:
    if isinstance(tok, Token) and tok.line is not None:
        return tok.line
    return getattr(tok, "line", 0) or 0


def _reject_void(type_ref, what: str, name: str) -> None:
    if isinstance(type_ref, PrimitiveType) and type_ref.name == "void":
        raise ICSyntaxError(type_ref.line, f"{what} '{name}' cannot have type void")


def _unescape(text: str) -> str:
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            out.append(_ESCAPES.get(text[i + 1], text[i + 1]))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class ICTransformer(Transformer):
    # --- Program ---

    def start(self, items):
        return Program(list(items))

    def class_decl(self, args):
        name, super_name = args[0], args[1]
        fields: list[Field] = []
        methods: list[Method] = []
        for item in args[2:]:
            if isinstance(item, list):
                fields.extend(item)
            elif isinstance(item, Method):
                methods.append(item)
        return ICClass(
            str(name),
            str(super_name) if super_name is not None else None,
            fields,
            methods,
            _line(name),
        )

    def field_decl(self, args):
        type_ref = args[0]
        fields = []
        for name in args[1:]:
            _reject_void(type_ref, "field", str(name))
            fields.append(Field(type_ref, str(name), _line(name)))
        return fields

    def method_decl(self, args):
        static, type_ref, name, formals, body = args
        formals = formals or []
        if body is None:
            if static is None:
                raise ICSyntaxError(_line(name), f"library method '{name}' must be static")
            return LibraryMethod(type_ref, str(name), formals, [], _line(name))
        cls = StaticMethod if static is not None else VirtualMethod
        return cls(type_ref, str(name), formals, body, _line(name))

    def method_body(self, args):
        if not args:
            return None
        return [a for a in args if not isinstance(a, Token)]

    def formal_list(self, args):
        return list(args)

    def formal(self, args):
        type_ref, name = args
        _reject_void(type_ref, "parameter", str(name))
        return Formal(type_ref, str(name), _line(name))

    def type_spec(self, args):
        base = args[0]
        dimension = len(args) - 1
        if base.type == "CLASS_ID":
            return UserType(str(base), dimension, _line(base))
        return PrimitiveType(str(base), dimension, _line(base))

    # --- Statements ---

    def local_var(self, args):
        type_ref, name, value = args
        _reject_void(type_ref, "local variable", str(name))
        return LocalVariable(type_ref, str(name), value, _line(name))

    def assign_stmt(self, args):
        target, value = args
        if not isinstance(target, (VariableLocation, ArrayLocation)):
            raise ICSyntaxError(_line(target), "invalid assignment target")
        return Assignment(target, value, _line(target))

    def call_stmt(self, args):
        call = args[0]
        if not isinstance(call, (StaticCall, VirtualCall)):
            raise ICSyntaxError(_line(call), "expression is not a statement")
        return CallStatement(call, _line(call))

    def return_stmt(self, args):
        kw, value = args
        return Return(value, _line(kw))

    def if_stmt(self, args):
        kw, condition, operation, else_operation = args
        return If(condition, operation, else_operation, _line(kw))

    def while_stmt(self, args):
        kw, condition, operation = args
        return While(condition, operation, _line(kw))

    def break_stmt(self, args):
        return Break(_line(args[0]))

    def continue_stmt(self, args):
        return Continue(_line(args[0]))

    def block(self, args):
        brace = args[0]
        return StatementsBlock(list(args[1:]), _line(brace))

    # --- Expressions ---

    def logical_binop(self, args):
        left, op, right = args
        return LogicalBinaryOp(str(op), left, right, _line(op))

    def math_binop(self, args):
        left, op, right = args
        return MathBinaryOp(str(op), left, right, _line(op))

    def math_unop(self, args):
        op, operand = args
        return MathUnaryOp(str(op), operand, _line(op))

    def logical_unop(self, args):
        op, operand = args
        return LogicalUnaryOp(str(op), operand, _line(op))

    def field_location(self, args):
        obj, name = args
        return VariableLocation(str(name), obj, _line(name))

    def virtual_call(self, args):
        obj, name, call_args = args
        return VirtualCall(str(name), call_args or [], obj, _line(name))

    def array_location(self, args):
        array, index = args
        return ArrayLocation(array, index, _line(array))

    def length(self, args):
        return Length(args[0], _line(args[0]))

    def static_call(self, args):
        class_name, name, call_args = args
        return StaticCall(str(class_name), str(name), call_args or [], _line(class_name))

    def local_call(self, args):
        name, call_args = args
        return VirtualCall(str(name), call_args or [], None, _line(name))

    def var_location(self, args):
        return VariableLocation(str(args[0]), None, _line(args[0]))

    def this_expr(self, args):
        return This(_line(args[0]))

    def new_class(self, args):
        kw, name = args
        return NewClass(str(name), _line(kw))

    def new_array(self, args):
        kw, type_ref, size = args
        if isinstance(type_ref, PrimitiveType) and type_ref.name == "void":
            raise ICSyntaxError(_line(kw), "cannot create an array of void")
        return NewArray(type_ref, size, _line(kw))

    def paren_expr(self, args):
        return ExpressionBlock(args[0], _line(args[0]))

    def int_literal(self, args):
        tok = args[0]
        return Literal(LiteralKind.INTEGER, int(str(tok)), _line(tok))

    def string_literal(self, args):
        tok = args[0]
        return Literal(LiteralKind.STRING, _unescape(str(tok)[1:-1]), _line(tok))

    def true_literal(self, args):
        return Literal(LiteralKind.TRUE, True, _line(args[0]))

    def false_literal(self, args):
        return Literal(LiteralKind.FALSE, False, _line(args[0]))

    def null_literal(self, args):
        return Literal(LiteralKind.NULL, None, _line(args[0]))

    def arg_list(self, args):
        return list(args)


def _describe(err: UnexpectedInput) -> str:
    if isinstance(err, UnexpectedToken):
        if err.token.type == "$END":
            return "unexpected end of input"
        return f"unexpected token '{err.token}'"
    if isinstance(err, UnexpectedCharacters):
        return f"unexpected character '{err.char}'"
    return "unexpected end of input"


def parse_ic(source: str) -> Program:
    try:
        tree = _parser.parse(source)
    except UnexpectedInput as e:
        raise ICSyntaxError(max(getattr(e, "line", 0), 0), _describe(e)) from e
    try:
        return ICTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ICSyntaxError):
            raise e.orig_exc from None
        raise
