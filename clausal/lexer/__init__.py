"""
Clausal Lexer Package

Implements the rule-table lexical analyzer (tokenizer) for the Clausal language.

Key Features:
- Ordered rule table: earlier tiers shadow later ones, longest match inside a tier
- Keywords recognized only as whole words
- Integer vs float classification fixed at token construction
- String escapes resolved once, when the token is built
- Source location tracking for diagnostics

"""

from .tokens import Token, TokenKind, SourceLocation, SourceSpan
from .lexer import Lexer, LexRule, DEFAULT_RULES, tokenize
from .errors import Diagnostic, LexError, InvalidEscapeError

__all__ = [
    "Lexer",
    "LexRule",
    "DEFAULT_RULES",
    "tokenize",
    "Token",
    "TokenKind",
    "SourceLocation",
    "SourceSpan",
    "Diagnostic",
    "LexError",
    "InvalidEscapeError",
]
