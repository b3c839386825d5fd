"""
Module loader for compiled Clausal code.

Each module is executed in a fresh ``types.ModuleType`` whose globals hold
the runtime names the backend refers to and no Python builtins. Loaded
modules are tracked by name; loading a second module under a taken name is
an error, never a silent replacement.
"""

import functools
import logging
import sys
import types
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple

from . import runtime
from .errors import (
    create_module_collision_error, create_name_mismatch_error,
    create_execution_error, create_not_loaded_error
)
from .python_backend import CompiledModule, ATOMS_NAME, RUNTIME_NAME, TUPLE_NAME, LIST_NAME

logger = logging.getLogger(__name__)


class LoadedModule:
    """
    A module installed in the host VM.

    Only exported functions are reachable from outside: through ``call`` or
    as attributes, e.g. ``greeter.run()``.
    """

    def __init__(self, name: str, exports: FrozenSet[Tuple[str, int]], namespace: types.ModuleType):
        self.name = name
        self.exports = exports
        self.namespace = namespace

    @property
    def exported_names(self) -> FrozenSet[str]:
        return frozenset(name for name, _ in self.exports)

    def call(self, function: str, *args: Any) -> Any:
        """Call an exported function with positional arguments."""
        if (function, len(args)) not in self.exports:
            raise runtime.UndefinedFunctionError(self.name, function, len(args))
        return getattr(self.namespace, function)(*args)

    def __getattr__(self, attribute: str):
        exports = self.__dict__.get("exports", frozenset())
        if any(name == attribute for name, _ in exports):
            return functools.partial(self.call, attribute)
        raise AttributeError(f"module '{self.__dict__.get('name')}' exports no function '{attribute}'")

    def __dir__(self):
        return sorted(set(super().__dir__()) | self.exported_names)

    def __repr__(self) -> str:
        exports = ", ".join(f"{name}/{arity}" for name, arity in sorted(self.exports))
        return f"<LoadedModule {self.name} [{exports}]>"


class ModuleLoader:
    """Installs compiled modules and keeps track of what is loaded."""

    def __init__(self, register_in_sys_modules: bool = False):
        """
        Initialize the loader.

        Args:
            register_in_sys_modules: Also publish loaded modules in ``sys.modules``
        """
        self.register_in_sys_modules = register_in_sys_modules
        self._modules: Dict[str, LoadedModule] = {}

    def load(self, name: str, compiled: CompiledModule) -> LoadedModule:
        """
        Execute ``compiled`` as module ``name``.

        Raises:
            LoadError: if the name is taken, does not match the compiled
                module, or executing the module body fails
        """
        if name in self._modules or (self.register_in_sys_modules and name in sys.modules):
            raise create_module_collision_error(name)
        if compiled.name != name:
            raise create_name_mismatch_error(name, compiled.name)

        namespace = types.ModuleType(name)
        namespace.__dict__.update({
            ATOMS_NAME: runtime.ATOMS,
            RUNTIME_NAME: runtime,
            TUPLE_NAME: tuple,
            LIST_NAME: list,
            "__builtins__": {},
        })

        try:
            exec(compiled.code, namespace.__dict__)
        except Exception as error:
            raise create_execution_error(name, error) from error

        module = LoadedModule(name, compiled.exports, namespace)
        self._modules[name] = module
        if self.register_in_sys_modules:
            sys.modules[name] = namespace

        logger.debug("loaded module %s exporting %s", name, sorted(compiled.exports))
        return module

    def unload(self, name: str):
        """Forget a loaded module so its name can be reused."""
        if name not in self._modules:
            raise create_not_loaded_error(name)
        del self._modules[name]
        if self.register_in_sys_modules:
            sys.modules.pop(name, None)
        logger.debug("unloaded module %s", name)

    def get(self, name: str) -> Optional[LoadedModule]:
        return self._modules.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)
