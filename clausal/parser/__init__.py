"""
Clausal Parser Package

Implements the grammar-driven LALR(1) parser for the Clausal language.
Produces immutable Abstract Syntax Trees with source span information.

Key Features:
- Declarative grammar compiled once into a conflict-free LALR table
- AST built by construction actions during reduction
- Clause arity and module declaration checks in the actions
- Expected/found diagnostics at the first rejected token

"""

from .ast_nodes import *
from .parser import Parser, GRAMMAR, parse
from .errors import ParseError, ClauseArityError, ModuleDeclarationError

__all__ = [
    # Core parser
    "Parser", "GRAMMAR", "parse",

    # AST nodes
    "ASTNode", "Expression", "NODE_TYPES", "Visibility", "NumberKind",
    "ModuleAst", "ModuleDeclaration", "Function", "FunctionClause",
    "Assignment", "Variable", "NumberLiteral", "StringLiteral", "Atom",
    "TupleLiteral", "ListLiteral", "Call",

    # Error handling
    "ParseError", "ClauseArityError", "ModuleDeclarationError",
]
