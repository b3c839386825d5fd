"""
Clausal Intermediate Representation (IR) Package

A small term-and-clause IR shaped after what a host VM's compiler accepts.
The generator reaches the node types only through an ``IRBuilder``.

Key Features:
- Immutable IR trees with structural equality
- Swappable construction capability (``IRBuilder``)
- Table-driven lowering checked for completeness up front
- Export set computed from function visibility

"""

from .ir_nodes import *
from .builder import IRBuilder, TreeBuilder
from .ir_generator import IRGenerator, generate
from .errors import CodegenError

__all__ = [
    # Generation
    "IRGenerator", "generate", "IRBuilder", "TreeBuilder",

    # IR nodes
    "IRNode", "IRAtom", "IRInteger", "IRFloat", "IRString", "IRTuple",
    "IRCons", "IRNil", "IRVar", "IRCall", "IRMatch",
    "IRFunctionName", "IRClause", "IRFunction", "IRModule",

    # Error handling
    "CodegenError",
]
