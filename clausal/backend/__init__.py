"""
Clausal Backend Package.

Host backends turn module IR into code a VM can run. The Python backend
compiles to CPython code objects and loads them as modules.

"""

from dataclasses import dataclass
from typing import Optional

from ..ir.builder import IRBuilder, TreeBuilder
from ..options import CompilerOptions
from .python_backend import PythonBytecodeCompiler, CompiledModule
from .loader import ModuleLoader, LoadedModule
from .errors import BackendError, LoadError
from .runtime import (
    Atom, ATOMS, ClausalRuntimeError, FunctionClauseError, BadMatchError,
    ImproperListError, UndefinedFunctionError
)


@dataclass
class Host:
    """The three host capabilities the driver needs."""
    builder: IRBuilder
    compiler: PythonBytecodeCompiler
    loader: ModuleLoader


def create_python_host(options: Optional[CompilerOptions] = None) -> Host:
    """Create a host that compiles to and loads into the running Python VM."""
    options = options or CompilerOptions()
    return Host(
        builder=TreeBuilder(),
        compiler=PythonBytecodeCompiler(debug=options.debug),
        loader=ModuleLoader(register_in_sys_modules=options.register_in_sys_modules),
    )


__all__ = [
    'Host', 'create_python_host',
    'PythonBytecodeCompiler', 'CompiledModule', 'ModuleLoader', 'LoadedModule',
    'BackendError', 'LoadError',
    'Atom', 'ATOMS', 'ClausalRuntimeError', 'FunctionClauseError', 'BadMatchError',
    'ImproperListError', 'UndefinedFunctionError',
]
