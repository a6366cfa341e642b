"""Semantic errors raised while building symbol tables."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class DiagnosticKind(Enum):
    DUPLICATE_DECLARATION = "duplicate declaration"
    UNRESOLVED_SUPERCLASS = "unresolved superclass"
    CYCLIC_INHERITANCE = "cyclic inheritance"
    UNDEFINED_CLASS = "undefined class"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    line: int
    message: str

    def __str__(self):
        return f"semantic error at line {self.line}: {self.message}"


class SemanticError(Exception):
    """A recoverable table-construction error.

    The builder catches these, records a Diagnostic with the offending
    declaration's line, and carries on.
    """

    kind: DiagnosticKind

    def diagnostic(self, line: int) -> Diagnostic:
        return Diagnostic(self.kind, line, str(self))


class DuplicateDeclarationError(SemanticError):
    kind = DiagnosticKind.DUPLICATE_DECLARATION

    def __init__(self, name: str, scope_label: str):
        super().__init__(f"'{name}' is already declared in {scope_label}")
        self.name = name


class UnresolvedSuperclassError(SemanticError):
    kind = DiagnosticKind.UNRESOLVED_SUPERCLASS

    def __init__(self, class_name: str, superclass_name: str):
        super().__init__(
            f"class '{class_name}' extends undefined class '{superclass_name}'"
        )
        self.superclass_name = superclass_name


class CyclicInheritanceError(SemanticError):
    kind = DiagnosticKind.CYCLIC_INHERITANCE

    def __init__(self, class_name: str, superclass_name: str):
        super().__init__(
            f"class '{class_name}' cannot extend '{superclass_name}': inheritance cycle"
        )


class UndefinedClassError(SemanticError):
    kind = DiagnosticKind.UNDEFINED_CLASS

    def __init__(self, class_name: str):
        super().__init__(f"undefined class '{class_name}'")
        self.class_name = class_name


class MalformedTreeError(Exception):
    """The syntax tree does not have the shape the builder expects."""
