"""
Abstract Syntax Tree node definitions for Clausal.

Every node is a frozen dataclass and owns its children through tuples, so a
tree is never shared or mutated after the parser builds it. Source spans are
carried for diagnostics but ignored by equality: two parses of the same text
compare equal, and a hand-built tree compares equal to a parsed one.

"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from ..lexer.tokens import SourceSpan


class Visibility(Enum):
    """Function visibility marker."""
    PUBLIC = "pub"
    PRIVATE = "private"


class NumberKind(Enum):
    """Numeric literal classification."""
    INTEGER = "integer"
    FLOAT = "float"


@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""

    def children(self) -> Tuple["ASTNode", ...]:
        """Get all child nodes."""
        return ()

    @property
    def description(self) -> str:
        """Short human readable description used in diagnostics."""
        span = getattr(self, "span", None)
        where = f" at {span.start}" if span is not None else ""
        return f"{type(self).__name__}{where}"


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Variable(ASTNode):
    name: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NumberLiteral(ASTNode):
    """Integer or float literal; the Python type of ``value`` is the tag."""
    value: Union[int, float]
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    @property
    def kind(self) -> NumberKind:
        return NumberKind.FLOAT if isinstance(self.value, float) else NumberKind.INTEGER


@dataclass(frozen=True)
class StringLiteral(ASTNode):
    value: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Atom(ASTNode):
    value: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TupleLiteral(ASTNode):
    elements: Tuple["Expression", ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> Tuple[ASTNode, ...]:
        return self.elements


@dataclass(frozen=True)
class ListLiteral(ASTNode):
    """List literal. ``tail`` is the expression after ``|``, if any."""
    elements: Tuple["Expression", ...] = ()
    tail: Optional["Expression"] = None
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> Tuple[ASTNode, ...]:
        if self.tail is None:
            return self.elements
        return self.elements + (self.tail,)


@dataclass(frozen=True)
class Call(ASTNode):
    callee: "Expression"
    arguments: Tuple["Expression", ...] = ()
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> Tuple[ASTNode, ...]:
        return (self.callee,) + self.arguments


@dataclass(frozen=True)
class Assignment(ASTNode):
    """``target = value``; the target is a pattern."""
    target: "Expression"
    value: "Expression"
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    def children(self) -> Tuple[ASTNode, ...]:
        return (self.target, self.value)


Expression = Union[Variable, NumberLiteral, StringLiteral, Atom, TupleLiteral, ListLiteral, Call, Assignment]


# ============================================================================
# Functions and modules
# ============================================================================

@dataclass(frozen=True)
class FunctionClause(ASTNode):
    """One ``(arguments) { body }`` clause."""
    arguments: Tuple[Expression, ...]
    body: Tuple[Expression, ...]
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    @property
    def arity(self) -> int:
        return len(self.arguments)

    def children(self) -> Tuple[ASTNode, ...]:
        return self.arguments + self.body


@dataclass(frozen=True)
class Function(ASTNode):
    visibility: Visibility
    name: str
    clauses: Tuple[FunctionClause, ...]
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)

    @property
    def arity(self) -> int:
        # The parser guarantees that all clauses agree.
        return self.clauses[0].arity

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC

    def children(self) -> Tuple[ASTNode, ...]:
        return self.clauses


@dataclass(frozen=True)
class ModuleDeclaration(ASTNode):
    name: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ModuleAst(ASTNode):
    """Root node: the one module declaration and the functions in source order."""
    declaration: ModuleDeclaration
    functions: Tuple[Function, ...] = ()

    @property
    def name(self) -> str:
        return self.declaration.name

    def children(self) -> Tuple[ASTNode, ...]:
        return (self.declaration,) + self.functions


# Closed set of node variants; every traversal must handle each of them.
NODE_TYPES = (
    ModuleAst,
    ModuleDeclaration,
    Function,
    FunctionClause,
    Assignment,
    Variable,
    NumberLiteral,
    StringLiteral,
    TupleLiteral,
    ListLiteral,
    Atom,
    Call,
)
