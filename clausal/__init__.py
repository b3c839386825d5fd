"""
Clausal Compiler Package

A compiler for Clausal, a small functional language of pattern-matched
multi-clause functions, atoms, tuples and lists. Programs compile to Python
bytecode and load as modules into the running interpreter.

Architecture:
    clausal/
    ├── lexer/           # Rule-table tokenization
    ├── parser/          # LALR parsing and AST construction
    ├── ir/              # Intermediate representation and lowering
    ├── backend/         # Python VM host: bytecode compiler, loader, runtime
    └── driver.py        # Stage-by-stage module driver

"""

__version__ = "0.1.0"
__license__ = "MIT"

from .lexer import Lexer, tokenize
from .parser import Parser, parse
from .ir import IRGenerator, generate
from .backend import Host, create_python_host
from .options import CompilerOptions
from .driver import Stage, CompileError, build_ir, compile_source, compile_file

__all__ = [
    # Stages
    "Lexer", "tokenize",
    "Parser", "parse",
    "IRGenerator", "generate",
    "Host", "create_python_host",

    # Driver
    "Stage", "CompileError", "CompilerOptions",
    "build_ir", "compile_source", "compile_file",

    # Version info
    "__version__",
    "__license__",
]
