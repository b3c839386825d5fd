"""
Runtime support for compiled Clausal modules.

Every loaded module sees this module as ``__runtime__`` and the atom table
as ``__atoms__``. Clausal values map onto Python values as follows:

    atom     Atom (interned, compared by identity)
    integer  int
    float    float
    string   str
    tuple    tuple
    list     list
"""

from typing import Any, Dict, Tuple


class Atom:
    """An interned symbolic constant."""

    __slots__ = ("name",)
    _interned: Dict[str, "Atom"] = {}

    def __new__(cls, name: str) -> "Atom":
        existing = cls._interned.get(name)
        if existing is not None:
            return existing
        atom = super().__new__(cls)
        object.__setattr__(atom, "name", name)
        cls._interned[name] = atom
        return atom

    def __setattr__(self, key, value):
        raise AttributeError("atoms are immutable")

    def __reduce__(self):
        return (Atom, (self.name,))

    def __repr__(self) -> str:
        return f":{self.name}"


class AtomTable:
    """Attribute access yields the atom of that name: ``ATOMS.ok is Atom("ok")``."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Atom:
        if name.startswith("__"):
            raise AttributeError(name)
        return Atom(name)


ATOMS = AtomTable()


class ClausalRuntimeError(Exception):
    """Base class for errors raised by compiled code."""


class FunctionClauseError(ClausalRuntimeError):
    """No clause of a function accepted the arguments."""

    def __init__(self, function: str, arguments: Tuple[Any, ...]):
        super().__init__(f"no clause of {function}/{len(arguments)} matches {arguments!r}")
        self.function = function
        self.arguments = arguments


class BadMatchError(ClausalRuntimeError):
    """The right-hand side of ``=`` did not match its pattern."""

    def __init__(self, value: Any):
        super().__init__(f"no match of right hand side value {value!r}")
        self.value = value


class ImproperListError(ClausalRuntimeError):
    """A list tail evaluated to something other than a list."""

    def __init__(self, value: Any):
        super().__init__(f"list tail is not a list: {value!r}")
        self.value = value


class UndefinedFunctionError(ClausalRuntimeError):
    """A function was called from outside its module without being exported."""

    def __init__(self, module: str, function: str, arity: int):
        super().__init__(f"function {module}:{function}/{arity} is undefined or not exported")
        self.module = module
        self.function = function
        self.arity = arity


def proper_tail(value: Any) -> list:
    """Check the tail of a ``[h | t]`` construction."""
    if not isinstance(value, list):
        raise ImproperListError(value)
    return value
