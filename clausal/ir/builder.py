"""
IR construction capability.

The generator never instantiates IR nodes itself; it asks an ``IRBuilder``.
A host can therefore supply its own builder and receive its own node types
while the lowering rules stay the same. ``TreeBuilder`` produces the
dataclasses in ``ir_nodes``.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from .ir_nodes import (
    IRAtom, IRInteger, IRFloat, IRString, IRTuple, IRCons, IRNil, IRVar,
    IRCall, IRMatch, IRFunctionName, IRClause, IRFunction, IRModule
)


class IRBuilder(ABC):
    """Constructor functions for every IR construct the generator emits."""

    @abstractmethod
    def atom(self, name: str) -> Any:
        pass

    @abstractmethod
    def integer(self, value: int) -> Any:
        pass

    @abstractmethod
    def float(self, value: float) -> Any:
        pass

    @abstractmethod
    def string(self, value: str) -> Any:
        pass

    @abstractmethod
    def tuple(self, elements: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def cons(self, head: Any, tail: Any) -> Any:
        pass

    @abstractmethod
    def nil(self) -> Any:
        pass

    @abstractmethod
    def var(self, name: str) -> Any:
        pass

    @abstractmethod
    def call(self, callee: Any, arguments: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def match(self, pattern: Any, value: Any) -> Any:
        pass

    @abstractmethod
    def function_name(self, name: str, arity: int) -> Any:
        pass

    @abstractmethod
    def clause(self, patterns: Sequence[Any], body: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def function(self, name: Any, clauses: Sequence[Any]) -> Any:
        pass

    @abstractmethod
    def module(self, name: Any, exports: Iterable[Any], functions: Sequence[Any]) -> Any:
        pass


class TreeBuilder(IRBuilder):
    """Default builder: plain immutable IR trees."""

    def atom(self, name: str) -> IRAtom:
        return IRAtom(name)

    def integer(self, value: int) -> IRInteger:
        return IRInteger(value)

    def float(self, value: float) -> IRFloat:
        return IRFloat(value)

    def string(self, value: str) -> IRString:
        return IRString(value)

    def tuple(self, elements) -> IRTuple:
        return IRTuple(tuple(elements))

    def cons(self, head, tail) -> IRCons:
        return IRCons(head, tail)

    def nil(self) -> IRNil:
        return IRNil()

    def var(self, name: str) -> IRVar:
        return IRVar(name)

    def call(self, callee, arguments) -> IRCall:
        return IRCall(callee, tuple(arguments))

    def match(self, pattern, value) -> IRMatch:
        return IRMatch(pattern, value)

    def function_name(self, name: str, arity: int) -> IRFunctionName:
        return IRFunctionName(name, arity)

    def clause(self, patterns, body) -> IRClause:
        return IRClause(tuple(patterns), tuple(body))

    def function(self, name, clauses) -> IRFunction:
        return IRFunction(name, tuple(clauses))

    def module(self, name, exports, functions) -> IRModule:
        return IRModule(name, frozenset(exports), tuple(functions))
