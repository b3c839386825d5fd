"""
Module driver for Clausal.

Runs one compilation unit through every stage:

    READ -> TOKENIZE -> PARSE -> GENERATE -> COMPILE -> LOAD

Stages run strictly in order and each consumes only the previous stage's
result. The first failing stage stops the pipeline; its exception is wrapped
in a ``CompileError`` tagged with the stage, and no later stage runs.

"""

import logging
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .fold import count_nodes
from .lexer import Lexer, LexError
from .parser import Parser, ParseError
from .ir import IRGenerator, IRBuilder, CodegenError
from .backend import Host, LoadedModule, BackendError, LoadError, create_python_host
from .options import CompilerOptions

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Pipeline stages, in execution order."""
    READ = "read"
    TOKENIZE = "tokenize"
    PARSE = "parse"
    GENERATE = "generate"
    COMPILE = "compile"
    LOAD = "load"


class CompileError(Exception):
    """
    Failure of one pipeline stage.

    ``detail`` is the stage's own exception (also chained as ``__cause__``).
    """

    def __init__(self, stage: Stage, detail: Exception):
        super().__init__(f"{stage.value} failed: {detail}")
        self.stage = stage
        self.detail = detail

    @property
    def diagnostic(self):
        return getattr(self.detail, "diagnostic", None)


def build_ir(source: str, filename: str = "<string>", builder: Optional[IRBuilder] = None):
    """
    Run the front half of the pipeline: tokenize, parse and generate.

    Returns:
        The module IR produced by ``builder``

    Raises:
        CompileError: tagged TOKENIZE, PARSE or GENERATE
    """
    try:
        tokens = Lexer(source, filename).tokenize()
    except LexError as error:
        raise CompileError(Stage.TOKENIZE, error) from error

    try:
        module_ast = Parser(tokens).parse()
    except ParseError as error:
        raise CompileError(Stage.PARSE, error) from error

    try:
        module_ir = IRGenerator(builder).generate(module_ast)
    except CodegenError as error:
        raise CompileError(Stage.GENERATE, error) from error

    return module_ir


def compile_source(source: str, module_name: str, host: Optional[Host] = None,
                   options: Optional[CompilerOptions] = None) -> LoadedModule:
    """
    Compile and load source text as module ``module_name``.

    Args:
        source: Program text
        module_name: Name to load the module under; must match its declaration
        host: Host capabilities; a fresh Python host by default
        options: Compiler options

    Returns:
        The loaded module

    Raises:
        CompileError: tagged with the first failing stage
    """
    options = options or CompilerOptions()
    host = host or create_python_host(options)
    filename = options.filename or "<string>"

    logger.debug("compiling %s from %s", module_name, filename)
    module_ir = build_ir(source, filename, host.builder)
    if options.debug:
        logger.debug("IR for %s (%d nodes):\n%s", module_name, count_nodes(module_ir), module_ir)

    try:
        compiled = host.compiler.compile(module_ir, filename)
    except BackendError as error:
        raise CompileError(Stage.COMPILE, error) from error

    try:
        loaded = host.loader.load(module_name, compiled)
    except LoadError as error:
        raise CompileError(Stage.LOAD, error) from error

    logger.debug("module %s ready", module_name)
    return loaded


def compile_file(source_path: Union[str, Path], module_name: str, host: Optional[Host] = None,
                 options: Optional[CompilerOptions] = None) -> LoadedModule:
    """
    Read a source file, then compile and load it as module ``module_name``.

    Raises:
        CompileError: tagged READ when the file cannot be read or decoded,
            otherwise tagged with the first failing later stage
    """
    options = options or CompilerOptions()
    path = Path(source_path)

    try:
        source = path.read_text(encoding=options.encoding)
    except (OSError, UnicodeDecodeError) as error:
        raise CompileError(Stage.READ, error) from error

    logger.debug("read %d characters from %s", len(source), path)
    if options.filename is None:
        options = replace(options, filename=str(path))
    return compile_source(source, module_name, host, options)
