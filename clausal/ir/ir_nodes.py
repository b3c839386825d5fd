"""
Clausal Intermediate Representation (IR) Nodes

The IR mirrors the constructs a host VM's bytecode compiler accepts: atoms,
integers, floats, strings, tuples, cons/nil lists, variables, calls,
matches, function definitions and modules. Patterns and expressions share
the same constructors; it is up to the host compiler to reject an
expression that cannot be used as a pattern.

Nodes are frozen dataclasses, so two lowerings of the same AST compare equal.

"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class IRNode:
    """Base class for all IR nodes."""

    def children(self) -> Tuple["IRNode", ...]:
        return ()


# ============================================================================
# Terms
# ============================================================================

@dataclass(frozen=True)
class IRAtom(IRNode):
    name: str

    def __str__(self) -> str:
        return f"'{self.name}'"


@dataclass(frozen=True)
class IRInteger(IRNode):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class IRFloat(IRNode):
    value: float

    def __str__(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class IRString(IRNode):
    value: str

    def __str__(self) -> str:
        return f'#{{"{self.value}"}}'


@dataclass(frozen=True)
class IRTuple(IRNode):
    elements: Tuple[IRNode, ...]

    def children(self) -> Tuple[IRNode, ...]:
        return self.elements

    def __str__(self) -> str:
        return "{" + ", ".join(str(element) for element in self.elements) + "}"


@dataclass(frozen=True)
class IRCons(IRNode):
    head: IRNode
    tail: IRNode

    def children(self) -> Tuple[IRNode, ...]:
        return (self.head, self.tail)

    def __str__(self) -> str:
        return f"[{self.head} | {self.tail}]"


@dataclass(frozen=True)
class IRNil(IRNode):

    def __str__(self) -> str:
        return "[]"


@dataclass(frozen=True)
class IRVar(IRNode):
    name: str

    def __str__(self) -> str:
        return self.name


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class IRCall(IRNode):
    callee: IRNode
    arguments: Tuple[IRNode, ...]

    def children(self) -> Tuple[IRNode, ...]:
        return (self.callee,) + self.arguments

    def __str__(self) -> str:
        return f"apply {self.callee}(" + ", ".join(str(arg) for arg in self.arguments) + ")"


@dataclass(frozen=True)
class IRMatch(IRNode):
    """Bind ``pattern`` against ``value``; evaluates to ``value``."""
    pattern: IRNode
    value: IRNode

    def children(self) -> Tuple[IRNode, ...]:
        return (self.pattern, self.value)

    def __str__(self) -> str:
        return f"{self.pattern} = {self.value}"


# ============================================================================
# Definitions
# ============================================================================

@dataclass(frozen=True)
class IRFunctionName(IRNode):
    name: str
    arity: int

    def __str__(self) -> str:
        return f"'{self.name}'/{self.arity}"


@dataclass(frozen=True)
class IRClause(IRNode):
    patterns: Tuple[IRNode, ...]
    body: Tuple[IRNode, ...]

    def children(self) -> Tuple[IRNode, ...]:
        return self.patterns + self.body

    def __str__(self) -> str:
        head = ", ".join(str(pattern) for pattern in self.patterns)
        return f"<{head}> -> " + ", ".join(str(expr) for expr in self.body)


@dataclass(frozen=True)
class IRFunction(IRNode):
    name: IRFunctionName
    clauses: Tuple[IRClause, ...]

    @property
    def arity(self) -> int:
        return self.name.arity

    def children(self) -> Tuple[IRNode, ...]:
        return (self.name,) + self.clauses

    def __str__(self) -> str:
        lines = [f"{self.name} ="]
        for clause in self.clauses:
            lines.append(f"    {clause}")
        return "\n".join(lines)


@dataclass(frozen=True)
class IRModule(IRNode):
    name: IRAtom
    exports: FrozenSet[IRFunctionName]
    functions: Tuple[IRFunction, ...]

    @property
    def export_pairs(self) -> FrozenSet[Tuple[str, int]]:
        """The export set as plain ``(name, arity)`` pairs."""
        return frozenset((export.name, export.arity) for export in self.exports)

    def children(self) -> Tuple[IRNode, ...]:
        ordered_exports = tuple(sorted(self.exports, key=lambda e: (e.name, e.arity)))
        return (self.name,) + ordered_exports + self.functions

    def __str__(self) -> str:
        exports = ", ".join(str(e) for e in sorted(self.exports, key=lambda e: (e.name, e.arity)))
        lines = [f"module {self.name} [{exports}]"]
        for function in self.functions:
            lines.append(str(function))
        lines.append("end")
        return "\n".join(lines)
