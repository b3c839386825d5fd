"""
Token definitions for the Clausal lexer.

This module defines the closed set of token kinds the grammar consumes:
- Keywords (module, pub, fn)
- Punctuation and delimiters
- Literals (atoms, numbers, strings) and identifiers
- End of input

"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenKind(Enum):
    """
    Enumeration of all token kinds in Clausal.

    Organized by category for clarity and maintainability.
    """

    # ========================================================================
    # Special Tokens
    # ========================================================================
    EOF = auto()                    # End of input

    # ========================================================================
    # Keywords
    # ========================================================================
    MODULE = auto()                 # module
    PUB = auto()                    # pub (public visibility)
    FN = auto()                     # fn

    # ========================================================================
    # Identifiers and Literals
    # ========================================================================
    IDENTIFIER = auto()             # run, x, _
    ATOM = auto()                   # :ok
    NUMBER = auto()                 # 42, -7, 3.14
    STRING = auto()                 # "hello\n"

    # ========================================================================
    # Punctuation and Delimiters
    # ========================================================================
    LPAREN = auto()                 # (
    RPAREN = auto()                 # )
    LBRACE = auto()                 # {
    RBRACE = auto()                 # }
    LBRACKET = auto()               # [
    RBRACKET = auto()               # ]
    COMMA = auto()                  # ,
    SEMICOLON = auto()              # ;
    EQUALS = auto()                 # =
    PIPE = auto()                   # |


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting and for the spans carried by tokens and AST nodes.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a span of source code (start and end locations)."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        if self.start.filename == self.end.filename:
            return f"{self.start.filename}:{self.start.line}:{self.start.column}-{self.end.line}:{self.end.column}"
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Clausal language.

    Contains the token kind, lexeme (raw text), semantic value and the
    source span. The value is computed once, when the token is built:
    the name of an identifier or atom, an ``int`` or ``float`` for numbers,
    the unescaped contents of a string.
    """
    kind: TokenKind
    lexeme: str                     # Raw text from source
    value: Any                      # Semantic value
    span: SourceSpan

    def __str__(self) -> str:
        if self.value is not None and self.value != self.lexeme:
            return f"{self.kind.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.kind.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.kind.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.span.start!r})")

    @property
    def location(self) -> SourceLocation:
        """Start location of the token."""
        return self.span.start

    @property
    def is_literal(self) -> bool:
        """Check if this token is a literal value."""
        return self.kind in LITERALS

    @property
    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.kind in KEYWORDS.values()


# Reserved words. A keyword is only recognized as a whole word, so
# ``modules`` is an identifier.
KEYWORDS = {
    "module": TokenKind.MODULE,
    "pub": TokenKind.PUB,
    "fn": TokenKind.FN,
}

PUNCTUATION = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    ",": TokenKind.COMMA,
    ";": TokenKind.SEMICOLON,
    "=": TokenKind.EQUALS,
    "|": TokenKind.PIPE,
}

LITERALS = frozenset({
    TokenKind.ATOM,
    TokenKind.NUMBER,
    TokenKind.STRING,
})

# Escape sequences accepted inside string literals
STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    '"': '"',
}
