"""
Error handling for IR generation.

"""

from typing import Optional, List

from ..lexer.errors import Diagnostic


class CodegenError(Exception):
    """
    Exception raised when an AST node has no lowering.

    Only raised for trees the parser cannot produce (hand-built or from a
    different front end), or for a generator missing a rule.
    """

    def __init__(
        self,
        message: str,
        node_description: str,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.node_description = node_description
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


ERROR_CODES = {
    "G001": "Unsupported node",
    "G002": "Unsupported literal value",
    "G003": "Incomplete lowering table",
    "G004": "Nesting too deep",
}


def create_unsupported_node_error(description: str) -> CodegenError:
    """Create an error for a node the generator has no rule for."""
    return CodegenError(
        message=f"No IR lowering for {description}",
        node_description=description,
        code="G001"
    )


def create_unsupported_literal_error(description: str, value) -> CodegenError:
    """Create an error for a literal whose value is not of a supported type."""
    return CodegenError(
        message=f"Unsupported literal value {value!r} ({type(value).__name__}) in {description}",
        node_description=description,
        code="G002",
        help_text="Number literals hold an int or a float."
    )


def create_incomplete_table_error(missing) -> CodegenError:
    """Create an error for a lowering table that skips node variants."""
    names = ", ".join(sorted(cls.__name__ for cls in missing))
    return CodegenError(
        message=f"IR generator has no lowering for: {names}",
        node_description=names,
        code="G003"
    )


def create_nesting_too_deep_error(description: str) -> CodegenError:
    """Create an error for a tree nested deeper than the generator can walk."""
    return CodegenError(
        message=f"Expressions in {description} are nested too deeply to lower",
        node_description=description,
        code="G004",
        help_text="Bind inner terms to variables to flatten deeply nested literals."
    )
