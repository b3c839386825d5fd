"""
Python VM backend for Clausal.

Lowers a module IR to a Python ``ast.Module`` and hands it to the built-in
``compile()``; the resulting code object is the loadable artifact.

All clauses of every function sharing a name become one Python function
taking ``*__args`` and dispatching through a ``match`` statement, one case
per clause in source order. Arity is part of each case's sequence pattern,
so definitions of different arity can share a name. When no case matches,
the function raises ``FunctionClauseError``.

Pattern lowering:

    variable        capture pattern (``_`` is the wildcard)
    literal         value pattern
    atom            dotted value pattern on ``__atoms__``
    tuple           ``__tuple__([...])``
    list            ``__list__([..., *tail])``
    p = v           ``p as v`` when either side is a variable

Clausal variables become Python locals prefixed ``__v_``; called names stay as
they are and resolve to module functions.

A ``=`` inside a body matches through a temporary and a ``match`` statement
whose fallback case raises ``BadMatchError``. Matches nested inside other
expressions are hoisted in front of the statement that contains them.

"""

import ast
import logging
from dataclasses import dataclass
from types import CodeType
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from ..fold import find_first
from ..ir.ir_nodes import (
    IRNode, IRAtom, IRInteger, IRFloat, IRString, IRTuple, IRCons, IRNil, IRVar,
    IRCall, IRMatch, IRClause, IRFunction, IRModule
)
from .errors import (
    create_illegal_pattern_error, create_duplicate_function_error,
    create_reserved_identifier_error, create_host_compile_error,
    create_repeated_binding_error, create_wildcard_value_error, create_nesting_too_deep_error
)

logger = logging.getLogger(__name__)


# Globals injected into every loaded module
ATOMS_NAME = "__atoms__"
RUNTIME_NAME = "__runtime__"
TUPLE_NAME = "__tuple__"
LIST_NAME = "__list__"

WILDCARD = "_"
VARIABLE_PREFIX = "__v_"

_FUNCTION_TEMPLATE = """
def __function(*__args):
    match __args:
        case _:
            pass
    raise __runtime__.FunctionClauseError(__name, __args)
"""


@dataclass(frozen=True)
class CompiledModule:
    """Host artifact for one module, ready for the loader."""
    name: str
    exports: FrozenSet[Tuple[str, int]]
    code: CodeType
    source: Optional[str] = None  # Decompiled Python, kept in debug mode


def _load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _store(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Store())


def _runtime(attribute: str) -> ast.Attribute:
    return ast.Attribute(value=_load(RUNTIME_NAME), attr=attribute, ctx=ast.Load())


def _flatten_list(node: IRNode) -> Tuple[List[IRNode], IRNode]:
    """Split a cons chain into its heads and its final tail."""
    heads = []
    while isinstance(node, IRCons):
        heads.append(node.head)
        node = node.tail
    return heads, node


class _FunctionCompiler:
    """Lowers the clauses of one Python function."""

    def __init__(self, name: str):
        self.name = name
        self._temporaries = 0

    def check_identifier(self, identifier: str):
        if identifier.startswith("__"):
            raise create_reserved_identifier_error(identifier, self.name)

    def new_temporary(self) -> str:
        self._temporaries += 1
        return f"__t{self._temporaries}"

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def top_pattern(self, node: IRNode, bound: Set[str]) -> ast.pattern:
        illegal = find_first(node, lambda n: isinstance(n, IRCall))
        if illegal is not None:
            raise create_illegal_pattern_error(self.name, illegal)
        return self.pattern(node, bound)

    def pattern(self, node: IRNode, bound: Set[str]) -> ast.pattern:
        if isinstance(node, IRVar):
            if node.name == WILDCARD:
                return ast.MatchAs()
            self.bind(node.name, bound)
            return ast.MatchAs(name=VARIABLE_PREFIX + node.name)

        if isinstance(node, IRAtom):
            return ast.MatchValue(value=self.atom(node))

        if isinstance(node, (IRInteger, IRFloat, IRString)):
            return ast.MatchValue(value=ast.Constant(value=node.value))

        if isinstance(node, IRTuple):
            elements = [self.pattern(element, bound) for element in node.elements]
            return ast.MatchClass(
                cls=_load(TUPLE_NAME),
                patterns=[ast.MatchSequence(patterns=elements)],
                kwd_attrs=[],
                kwd_patterns=[],
            )

        if isinstance(node, (IRCons, IRNil)):
            heads, tail = _flatten_list(node)
            elements = [self.pattern(head, bound) for head in heads]
            if isinstance(tail, IRVar):
                if tail.name == WILDCARD:
                    elements.append(ast.MatchStar())
                else:
                    self.bind(tail.name, bound)
                    elements.append(ast.MatchStar(name=VARIABLE_PREFIX + tail.name))
            elif not isinstance(tail, IRNil):
                raise create_illegal_pattern_error(self.name, node)
            return ast.MatchClass(
                cls=_load(LIST_NAME),
                patterns=[ast.MatchSequence(patterns=elements)],
                kwd_attrs=[],
                kwd_patterns=[],
            )

        if isinstance(node, IRMatch):
            if isinstance(node.pattern, IRVar):
                variable, other = node.pattern, node.value
            elif isinstance(node.value, IRVar):
                variable, other = node.value, node.pattern
            else:
                raise create_illegal_pattern_error(self.name, node)
            if variable.name == WILDCARD:
                return self.pattern(other, bound)
            inner = self.pattern(other, bound)
            self.bind(variable.name, bound)
            return ast.MatchAs(pattern=inner, name=VARIABLE_PREFIX + variable.name)

        raise create_illegal_pattern_error(self.name, node)

    def bind(self, variable: str, bound: Set[str]):
        self.check_identifier(variable)
        if variable in bound:
            raise create_repeated_binding_error(self.name, variable)
        bound.add(variable)

    def atom(self, node: IRAtom) -> ast.Attribute:
        self.check_identifier(node.name)
        return ast.Attribute(value=_load(ATOMS_NAME), attr=node.name, ctx=ast.Load())

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def expression(self, node: IRNode, prelude: List[ast.stmt]) -> ast.expr:
        """Lower an expression; statements it depends on go to ``prelude``."""
        if isinstance(node, IRVar):
            if node.name == WILDCARD:
                raise create_wildcard_value_error(self.name)
            self.check_identifier(node.name)
            return _load(VARIABLE_PREFIX + node.name)

        if isinstance(node, IRAtom):
            return self.atom(node)

        if isinstance(node, (IRInteger, IRFloat, IRString)):
            return ast.Constant(value=node.value)

        if isinstance(node, IRTuple):
            elements = [self.expression(element, prelude) for element in node.elements]
            return ast.Tuple(elts=elements, ctx=ast.Load())

        if isinstance(node, (IRCons, IRNil)):
            heads, tail = _flatten_list(node)
            elements = [self.expression(head, prelude) for head in heads]
            if not isinstance(tail, IRNil):
                checked = ast.Call(
                    func=_runtime("proper_tail"),
                    args=[self.expression(tail, prelude)],
                    keywords=[],
                )
                elements.append(ast.Starred(value=checked, ctx=ast.Load()))
            return ast.List(elts=elements, ctx=ast.Load())

        if isinstance(node, IRCall):
            callee = self.callee(node.callee, prelude)
            arguments = [self.expression(argument, prelude) for argument in node.arguments]
            return ast.Call(func=callee, args=arguments, keywords=[])

        if isinstance(node, IRMatch):
            return self.match(node, prelude)

        raise create_illegal_pattern_error(self.name, node)

    def callee(self, node: IRNode, prelude: List[ast.stmt]) -> ast.expr:
        if isinstance(node, IRVar):
            if node.name == WILDCARD:
                raise create_wildcard_value_error(self.name)
            self.check_identifier(node.name)
            return _load(node.name)
        return self.expression(node, prelude)

    def match(self, node: IRMatch, prelude: List[ast.stmt]) -> ast.expr:
        value = self.expression(node.value, prelude)
        target = node.pattern

        if isinstance(target, IRVar) and target.name != WILDCARD:
            self.check_identifier(target.name)
            local = VARIABLE_PREFIX + target.name
            prelude.append(ast.Assign(targets=[_store(local)], value=value))
            return _load(local)

        temporary = self.new_temporary()
        prelude.append(ast.Assign(targets=[_store(temporary)], value=value))
        pattern = self.top_pattern(target, set())

        cases = [ast.match_case(pattern=pattern, guard=None, body=[ast.Pass()])]
        # An irrefutable first case may not be followed by another
        if not (isinstance(pattern, ast.MatchAs) and pattern.pattern is None):
            failure = ast.Raise(
                exc=ast.Call(func=_runtime("BadMatchError"), args=[_load(temporary)], keywords=[]),
                cause=None,
            )
            cases.append(ast.match_case(pattern=ast.MatchAs(), guard=None, body=[failure]))

        prelude.append(ast.Match(subject=_load(temporary), cases=cases))
        return _load(temporary)

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def clause(self, clause: IRClause) -> ast.match_case:
        bound: Set[str] = set()
        patterns = [self.top_pattern(pattern, bound) for pattern in clause.patterns]

        statements: List[ast.stmt] = []
        last = len(clause.body) - 1
        for index, expression in enumerate(clause.body):
            value = self.expression(expression, statements)
            if index == last:
                statements.append(ast.Return(value=value))
            elif not isinstance(expression, IRMatch):
                statements.append(ast.Expr(value=value))

        return ast.match_case(
            pattern=ast.MatchSequence(patterns=patterns),
            guard=None,
            body=statements,
        )


class PythonBytecodeCompiler:
    """
    Compiles module IR into a Python code object.

    The compiler keeps no state between modules; one instance can serve any
    number of ``compile`` calls.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the compiler.

        Args:
            debug: Keep the decompiled Python source on the result
        """
        self.debug = debug

    def compile(self, module: IRModule, filename: Optional[str] = None) -> CompiledModule:
        """
        Compile a module IR.

        Args:
            module: Module IR from the generator
            filename: Filename recorded in the code object and tracebacks

        Returns:
            The compiled module

        Raises:
            BackendError: for IR the Python VM cannot express, including IR
                nested deeper than the host compiler accepts
        """
        name = module.name.name
        filename = filename or f"<clausal:{name}>"

        try:
            tree = ast.Module(body=self._function_defs(module), type_ignores=[])
            ast.fix_missing_locations(tree)
            try:
                code = compile(tree, filename, "exec")
            except (SyntaxError, ValueError, TypeError) as error:
                raise create_host_compile_error(name, str(error)) from error
            source = ast.unparse(tree) if self.debug else None
        except RecursionError as error:
            raise create_nesting_too_deep_error(name) from error

        logger.debug("compiled module %s: %d Python functions", name, len(tree.body))
        if source is not None:
            logger.debug("generated source for %s:\n%s", name, source)

        return CompiledModule(name, module.export_pairs, code, source)

    def _function_defs(self, module: IRModule) -> List[ast.FunctionDef]:
        groups: Dict[str, List[IRFunction]] = {}
        defined: Set[Tuple[str, int]] = set()
        for function in module.functions:
            key = (function.name.name, function.arity)
            if key in defined:
                raise create_duplicate_function_error(*key)
            defined.add(key)
            groups.setdefault(function.name.name, []).append(function)

        return [self._function_def(name, functions) for name, functions in groups.items()]

    def _function_def(self, name: str, functions: List[IRFunction]) -> ast.FunctionDef:
        compiler = _FunctionCompiler(name)
        compiler.check_identifier(name)

        cases = [compiler.clause(clause) for function in functions for clause in function.clauses]

        definition = ast.parse(_FUNCTION_TEMPLATE).body[0]
        definition.name = name
        definition.body[0].cases = cases
        definition.body[1].exc.args[0] = ast.Constant(value=name)
        return definition
