"""
Error handling for the host backend and module loader.

"""

from typing import Optional, List

from ..lexer.errors import Diagnostic


class BackendError(Exception):
    """
    Exception raised when the host compiler rejects a module IR.

    ``function`` names the function being compiled, when there is one.
    """

    def __init__(
        self,
        message: str,
        function: Optional[str] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.function = function
        self.diagnostic = Diagnostic(
            message=message,
            location=None,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class LoadError(BackendError):
    """Exception raised when compiled code cannot be installed as a module."""


ERROR_CODES = {
    "B001": "Illegal pattern",
    "B002": "Duplicate function definition",
    "B003": "Reserved identifier",
    "B004": "Host compilation failed",
    "B005": "Module already loaded",
    "B006": "Module name mismatch",
    "B007": "Module execution failed",
    "B008": "Module not loaded",
    "B009": "Wildcard used as a value",
    "B010": "Nesting too deep",
}


def create_illegal_pattern_error(function: str, pattern) -> BackendError:
    """Create an error for an expression used where only a pattern may stand."""
    return BackendError(
        message=f"Illegal pattern in function '{function}': {pattern}",
        function=function,
        code="B001",
        help_text="Patterns are built from variables, literals, atoms, tuples and lists; "
                  "function calls cannot be matched against."
    )


def create_duplicate_function_error(function: str, arity: int) -> BackendError:
    """Create an error for a second definition of the same name and arity."""
    return BackendError(
        message=f"Function '{function}/{arity}' is defined more than once",
        function=function,
        code="B002",
        suggestions=["Merge the definitions into one function with several clauses"]
    )


def create_reserved_identifier_error(identifier: str, function: Optional[str]) -> BackendError:
    """Create an error for a name that collides with runtime internals."""
    return BackendError(
        message=f"Identifier '{identifier}' is reserved",
        function=function,
        code="B003",
        help_text="Names starting with a double underscore are reserved for the runtime."
    )


def create_host_compile_error(module: str, detail: str) -> BackendError:
    """Create an error for code the host VM compiler refused."""
    return BackendError(
        message=f"Host compiler rejected module '{module}': {detail}",
        code="B004"
    )


def create_module_collision_error(name: str) -> LoadError:
    return LoadError(
        message=f"Module '{name}' is already loaded",
        code="B005",
        suggestions=[f"Unload '{name}' first, or load under a different name"]
    )


def create_name_mismatch_error(requested: str, declared: str) -> LoadError:
    return LoadError(
        message=f"Requested module '{requested}' but the code declares module '{declared}'",
        code="B006",
        help_text="The module declaration in the source must match the name it is loaded under."
    )


def create_execution_error(name: str, error: Exception) -> LoadError:
    return LoadError(
        message=f"Executing module '{name}' failed: {type(error).__name__}: {error}",
        code="B007"
    )


def create_not_loaded_error(name: str) -> LoadError:
    return LoadError(
        message=f"Module '{name}' is not loaded",
        code="B008"
    )


def create_repeated_binding_error(function: str, variable: str) -> BackendError:
    """Create an error for a variable bound twice within one pattern."""
    return BackendError(
        message=f"Variable '{variable}' is bound more than once in a pattern of function '{function}'",
        function=function,
        code="B001",
        help_text="Each variable may appear once per pattern; compare values explicitly instead."
    )


def create_wildcard_value_error(function: str) -> BackendError:
    """Create an error for '_' read as a value."""
    return BackendError(
        message=f"'_' used as a value in function '{function}'",
        function=function,
        code="B009",
        help_text="'_' only matches; it never holds a value."
    )


def create_nesting_too_deep_error(module: str) -> BackendError:
    """Create an error for IR nested deeper than the host compiler accepts."""
    return BackendError(
        message=f"Module '{module}' is nested too deeply for the host compiler",
        code="B010",
        help_text="Bind inner terms to variables to flatten deeply nested literals."
    )
