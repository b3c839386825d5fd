"""
Error handling for the Clausal parser.

Parsing stops at the first error; there is no recovery or synchronization.
Each error carries the expected token kinds and the token actually found so
diagnostics can say "expected X, found Y".

"""

from typing import Iterable, List, Optional, Tuple

from ..lexer.tokens import Token, TokenKind, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the token sequence cannot be reduced to a module.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        expected: Iterable[TokenKind] = (),
        found: Optional[Token] = None,
        code: Optional[str] = None,
        help_text: Optional[str] = None,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.location = location
        self.expected: Tuple[TokenKind, ...] = tuple(expected)
        self.found = found
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
            help_text=help_text,
            suggestions=suggestions
        )

    @property
    def found_kind(self) -> Optional[TokenKind]:
        return self.found.kind if self.found is not None else None

    def __str__(self) -> str:
        return str(self.diagnostic)


class ClauseArityError(ParseError):
    """The clauses of one function take different numbers of arguments."""


class ModuleDeclarationError(ParseError):
    """A compilation unit has no module declaration, or more than one."""


# Common error codes for categorization
ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Unexpected end of input",
    "P003": "Clause arity mismatch",
    "P004": "Missing module declaration",
    "P005": "Duplicate module declaration",
}

# Source spelling of each token kind, for messages
TOKEN_SPELLING = {
    TokenKind.EOF: "end of input",
    TokenKind.MODULE: "'module'",
    TokenKind.PUB: "'pub'",
    TokenKind.FN: "'fn'",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.ATOM: "atom",
    TokenKind.NUMBER: "number",
    TokenKind.STRING: "string",
    TokenKind.LPAREN: "'('",
    TokenKind.RPAREN: "')'",
    TokenKind.LBRACE: "'{'",
    TokenKind.RBRACE: "'}'",
    TokenKind.LBRACKET: "'['",
    TokenKind.RBRACKET: "']'",
    TokenKind.COMMA: "','",
    TokenKind.SEMICOLON: "';'",
    TokenKind.EQUALS: "'='",
    TokenKind.PIPE: "'|'",
}


def _describe(kinds: Iterable[TokenKind]) -> str:
    spelled = sorted(TOKEN_SPELLING[kind] for kind in kinds)
    if not spelled:
        return "nothing"
    if len(spelled) == 1:
        return spelled[0]
    return ", ".join(spelled[:-1]) + " or " + spelled[-1]


def create_unexpected_token_error(found: Token, expected: Iterable[TokenKind]) -> ParseError:
    """Create an error for a token the grammar does not accept here."""
    expected = sorted(expected, key=lambda kind: kind.value)
    if found.kind is TokenKind.EOF:
        message = f"Unexpected end of input, expected {_describe(expected)}"
        code = "P002"
    else:
        message = f"Unexpected {TOKEN_SPELLING[found.kind]} {found.lexeme!r}, expected {_describe(expected)}"
        code = "P001"

    return ParseError(
        message=message,
        location=found.location,
        expected=expected,
        found=found,
        code=code
    )


def create_clause_arity_error(function_name: str, arities: Iterable[int],
                              location: Optional[SourceLocation]) -> ClauseArityError:
    """Create an error for a function whose clauses disagree on arity."""
    arities = list(arities)
    return ClauseArityError(
        message=f"Clauses of function '{function_name}' take different numbers of arguments: "
                + ", ".join(str(arity) for arity in arities),
        location=location,
        code="P003",
        help_text="Every clause of a function must accept the same number of arguments.",
        suggestions=["Define a separate function for each arity"]
    )


def create_missing_module_error(location: Optional[SourceLocation]) -> ModuleDeclarationError:
    """Create an error for a unit without a module declaration."""
    return ModuleDeclarationError(
        message="Missing module declaration",
        location=location,
        code="P004",
        help_text="Every source file must declare its module, e.g. 'module greeter'."
    )


def create_duplicate_module_error(name: str, location: Optional[SourceLocation]) -> ModuleDeclarationError:
    """Create an error for a second module declaration."""
    return ModuleDeclarationError(
        message=f"Duplicate module declaration '{name}'",
        location=location,
        code="P005",
        help_text="A source file declares exactly one module."
    )
