"""
Error handling for the Clausal lexer.

Provides error reporting with source location information and
IDE-friendly diagnostics. The ``Diagnostic`` record defined here is shared
by every later stage.

"""

from typing import Optional, List
from dataclasses import dataclass
from .tokens import SourceLocation, STRING_ESCAPES


@dataclass
class Diagnostic:
    """Base class for compiler diagnostics (errors, warnings, info)."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning", "info", "hint"
    code: Optional[str] = None
    help_text: Optional[str] = None
    suggestions: Optional[List[str]] = None

    def __str__(self) -> str:
        severity_prefix = self.severity.upper()
        result = f"{severity_prefix}: {self.message}\n"
        if self.location is not None:
            result += f"  --> {self.location}\n"

        if self.help_text:
            result += f"  help: {self.help_text}\n"

        if self.suggestions:
            result += "  suggestions:\n"
            for suggestion in self.suggestions:
                result += f"    - {suggestion}\n"

        return result


class LexError(Exception):
    """
    Exception raised when no lexer rule matches the input.

    Tokenization is all-or-nothing: the first ``LexError`` aborts the unit.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        unrecognized_text: str = "",
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.location = location
        self.unrecognized_text = unrecognized_text
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    def __str__(self) -> str:
        return str(self.diagnostic)


class InvalidEscapeError(LexError):
    """A string literal contains an escape sequence the language does not define."""


# Common error codes for categorization
ERROR_CODES = {
    "L001": "Invalid character",
    "L002": "Unterminated string literal",
    "L003": "Numeric literal too large",
    "L006": "Invalid escape sequence",
}


def create_unrecognized_input_error(text: str, location: SourceLocation) -> LexError:
    """Create an error for input that matches no lexer rule."""
    char = text[:1]
    if char.isprintable():
        help_text = f"The character '{char}' does not start any Clausal token."
    else:
        help_text = f"Non-printable character (Unicode: U+{ord(char):04X}) is not allowed."

    return LexError(
        message=f"Unrecognized input: '{text}'",
        location=location,
        unrecognized_text=text,
        code="L001",
        help_text=help_text
    )


def create_unterminated_string_error(text: str, location: SourceLocation) -> LexError:
    """Create an error for an unterminated string literal."""
    return LexError(
        message="Unterminated string literal",
        location=location,
        unrecognized_text=text,
        code="L002",
        help_text='String literals must be closed with a matching " on the same line.',
        suggestions=['Add a closing " quote', "Check for unescaped quotes in the string"]
    )


def create_invalid_escape_error(sequence: str, location: SourceLocation) -> InvalidEscapeError:
    """Create an error for an unknown escape sequence inside a string."""
    known = ", ".join(f"\\{char}" for char in STRING_ESCAPES)
    return InvalidEscapeError(
        message=f"Invalid escape sequence: '{sequence}'",
        location=location,
        unrecognized_text=sequence,
        code="L006",
        help_text=f"Supported escape sequences are {known}.",
        suggestions=["Escape the backslash itself with \\\\"]
    )


def create_number_too_large_error(lexeme: str, location: SourceLocation) -> LexError:
    """Create an error for an integer literal the host cannot convert."""
    return LexError(
        message=f"Numeric literal too large ({len(lexeme)} characters)",
        location=location,
        unrecognized_text=lexeme[:20],
        code="L003",
        help_text="Integer literals are limited by the host's integer string conversion limit."
    )
