"""
IR Generator for Clausal.

Lowers a module AST into IR through an ``IRBuilder``. Every AST variant has
exactly one lowering rule, registered in a table keyed by node class; the
table is checked against ``NODE_TYPES`` when the generator is created, so a
new node variant without a rule fails immediately instead of at the first
program that uses it.

Lowering is post-order: children are lowered before the node that owns them.
Patterns (clause arguments, assignment targets) go through the same rules as
expressions; it is the host compiler's job to reject what cannot be matched.

"""

import logging
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple, Type

from ..parser.ast_nodes import (
    ASTNode, NODE_TYPES, ModuleAst, ModuleDeclaration, Function, FunctionClause,
    Assignment, Variable, NumberLiteral, StringLiteral, Atom, TupleLiteral,
    ListLiteral, Call
)
from .builder import IRBuilder, TreeBuilder
from .errors import (
    create_unsupported_node_error, create_unsupported_literal_error,
    create_incomplete_table_error, create_nesting_too_deep_error
)

logger = logging.getLogger(__name__)


class IRGenerator:
    """
    Generates IR from a Clausal module AST.

    The generator performs the following lowerings:
    - Literals and variables map one-to-one onto IR terms
    - Lists become cons chains ending in nil, or in the lowered tail
    - Calls, tuples and assignments lower their children first
    - Functions carry their name and arity; public ones are exported
    """

    def __init__(self, builder: Optional[IRBuilder] = None):
        self.builder = builder if builder is not None else TreeBuilder()
        self._rules: Dict[Type[ASTNode], Callable[[Any], Any]] = {
            ModuleAst: self._lower_module,
            ModuleDeclaration: self._lower_module_declaration,
            Function: self._lower_function,
            FunctionClause: self._lower_clause,
            Assignment: self._lower_assignment,
            Variable: self._lower_variable,
            NumberLiteral: self._lower_number,
            StringLiteral: self._lower_string,
            TupleLiteral: self._lower_tuple,
            ListLiteral: self._lower_list,
            Atom: self._lower_atom,
            Call: self._lower_call,
        }

        missing = set(NODE_TYPES) - set(self._rules)
        if missing:
            raise create_incomplete_table_error(missing)

    def generate(self, module: ModuleAst):
        """
        Generate IR for a module.

        Args:
            module: Root of the parsed module

        Returns:
            The module IR produced by the builder

        Raises:
            CodegenError: for a node shape without a lowering, or a tree
                nested deeper than the interpreter stack allows
        """
        logger.debug("lowering module %s", module.name)
        try:
            return self.lower(module)
        except RecursionError as error:
            raise create_nesting_too_deep_error(f"module {module.name}") from error

    def lower(self, node: ASTNode):
        """Lower any single AST node."""
        rule = self._rules.get(type(node))
        if rule is None:
            description = node.description if isinstance(node, ASTNode) else repr(node)
            raise create_unsupported_node_error(description)
        return rule(node)

    def compute_exports(self, module: ModuleAst) -> FrozenSet[Tuple[str, int]]:
        """(name, arity) of every public function, in no particular order."""
        return frozenset((fn.name, fn.arity) for fn in module.functions if fn.is_public)

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def _lower_module(self, node: ModuleAst):
        name = self.lower(node.declaration)
        exports = [self.builder.function_name(fn_name, arity)
                   for fn_name, arity in sorted(self.compute_exports(node))]
        functions = [self.lower(function) for function in node.functions]
        logger.debug("lowered %d functions, %d exported", len(functions), len(exports))
        return self.builder.module(name, exports, functions)

    def _lower_module_declaration(self, node: ModuleDeclaration):
        return self.builder.atom(node.name)

    def _lower_function(self, node: Function):
        clauses = [self.lower(clause) for clause in node.clauses]
        return self.builder.function(self.builder.function_name(node.name, node.arity), clauses)

    def _lower_clause(self, node: FunctionClause):
        patterns = [self.lower(argument) for argument in node.arguments]
        body = [self.lower(expression) for expression in node.body]
        return self.builder.clause(patterns, body)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _lower_assignment(self, node: Assignment):
        pattern = self.lower(node.target)
        value = self.lower(node.value)
        return self.builder.match(pattern, value)

    def _lower_variable(self, node: Variable):
        return self.builder.var(node.name)

    def _lower_number(self, node: NumberLiteral):
        value = node.value
        # bool is an int subclass but never a literal
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise create_unsupported_literal_error(node.description, value)
        if isinstance(value, float):
            return self.builder.float(value)
        return self.builder.integer(value)

    def _lower_string(self, node: StringLiteral):
        return self.builder.string(node.value)

    def _lower_atom(self, node: Atom):
        return self.builder.atom(node.value)

    def _lower_tuple(self, node: TupleLiteral):
        return self.builder.tuple([self.lower(element) for element in node.elements])

    def _lower_list(self, node: ListLiteral):
        elements = [self.lower(element) for element in node.elements]
        result = self.lower(node.tail) if node.tail is not None else self.builder.nil()
        for element in reversed(elements):
            result = self.builder.cons(element, result)
        return result

    def _lower_call(self, node: Call):
        callee = self.lower(node.callee)
        arguments = [self.lower(argument) for argument in node.arguments]
        return self.builder.call(callee, arguments)


def generate(module: ModuleAst, builder: Optional[IRBuilder] = None):
    """Lower a module AST to IR with a fresh generator."""
    return IRGenerator(builder).generate(module)
