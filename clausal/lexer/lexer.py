"""
Clausal Lexer - turns source text into a token list

The lexer is table driven: ``DEFAULT_RULES`` is an ordered tuple of
``LexRule`` entries, each a compiled pattern plus the function that builds
the token. At every position the rules are tried top to bottom:

- the first priority tier with any match wins, so a specific rule declared
  before a catch-all (keywords before identifiers) shadows it;
- inside that tier the longest match wins (``1.5`` is one float, not an
  integer followed by garbage);
- equal lengths go to the rule declared first.

Rules without a build function (whitespace, comments) consume input but
emit nothing.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Sequence, Tuple

from .tokens import (
    Token, TokenKind, SourceLocation, SourceSpan, KEYWORDS, PUNCTUATION, STRING_ESCAPES
)
from .errors import (
    LexError, create_unrecognized_input_error, create_unterminated_string_error,
    create_invalid_escape_error, create_number_too_large_error
)

logger = logging.getLogger(__name__)

TokenBuilder = Callable[[str, SourceSpan], Token]


@dataclass(frozen=True)
class LexRule:
    """One entry of the ordered rule table."""
    name: str
    pattern: Pattern[str]
    build: Optional[TokenBuilder]   # None discards the match
    priority: int                   # Lower tiers are tried first


def _rule(name: str, regex: str, build: Optional[TokenBuilder], priority: int) -> LexRule:
    return LexRule(name, re.compile(regex), build, priority)


def _fixed(kind: TokenKind) -> TokenBuilder:
    """Builder for tokens whose lexeme carries no value (keywords, punctuation)."""
    def build(lexeme: str, span: SourceSpan) -> Token:
        return Token(kind, lexeme, None, span)
    return build


def _build_identifier(lexeme: str, span: SourceSpan) -> Token:
    return Token(TokenKind.IDENTIFIER, lexeme, lexeme, span)


def _build_atom(lexeme: str, span: SourceSpan) -> Token:
    return Token(TokenKind.ATOM, lexeme, lexeme[1:], span)


def _build_number(lexeme: str, span: SourceSpan) -> Token:
    # The fractional separator decides int vs float, here and nowhere else.
    if "." in lexeme:
        value = float(lexeme)
    else:
        try:
            value = int(lexeme)
        except ValueError as error:
            raise create_number_too_large_error(lexeme, span.start) from error
    return Token(TokenKind.NUMBER, lexeme, value, span)


def _build_string(lexeme: str, span: SourceSpan) -> Token:
    return Token(TokenKind.STRING, lexeme, unescape_string(lexeme, span.start), span)


def unescape_string(lexeme: str, start: SourceLocation) -> str:
    """
    Strip the delimiting quotes of a string lexeme and resolve its escapes.

    Raises:
        InvalidEscapeError: for a backslash followed by an unknown character.
    """
    body = lexeme[1:-1]
    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            chars.append(char)
            i += 1
            continue

        escaped = body[i + 1]
        if escaped not in STRING_ESCAPES:
            # +1 for the opening quote; string literals never span lines
            location = SourceLocation(
                start.filename, start.line, start.column + i + 1, start.offset + i + 1
            )
            raise create_invalid_escape_error(body[i:i + 2], location)
        chars.append(STRING_ESCAPES[escaped])
        i += 2

    return "".join(chars)


DEFAULT_RULES: Tuple[LexRule, ...] = (
    # Discarded input
    _rule("whitespace", r"[ \t\r\n]+", None, 0),
    _rule("comment", r"//[^\n]*", None, 0),

    # Keywords have to come before the identifier catch-all
    *(_rule(f"keyword:{word}", rf"{word}(?![A-Za-z0-9_])", _fixed(kind), 1)
      for word, kind in KEYWORDS.items()),

    # Literals. float and integer share a tier so the longer one wins.
    _rule("float", r"-?[0-9]+\.[0-9]+", _build_number, 2),
    _rule("integer", r"-?[0-9]+", _build_number, 2),
    _rule("string", r'"(?:[^"\\\n]|\\.)*"', _build_string, 2),
    _rule("atom", r":[A-Za-z_][A-Za-z0-9_]*", _build_atom, 2),

    _rule("identifier", r"[A-Za-z_][A-Za-z0-9_]*", _build_identifier, 3),

    *(_rule(f"punctuation:{mark}", re.escape(mark), _fixed(kind), 4)
      for mark, kind in PUNCTUATION.items()),
)


class Lexer:
    """
    Clausal lexical analyzer.

    Converts source text into a list of tokens terminated by ``EOF``.
    The first unrecognized input raises ``LexError``; there is no recovery.
    """

    def __init__(self, source: str, filename: str = "<string>",
                 rules: Sequence[LexRule] = DEFAULT_RULES):
        """
        Initialize the lexer with source code.

        Args:
            source: Source code string
            filename: Name of source file for error reporting
            rules: Ordered rule table, tiers in non-decreasing priority
        """
        priorities = [rule.priority for rule in rules]
        if priorities != sorted(priorities):
            raise ValueError("Lexer rules must be declared in non-decreasing priority order")

        self.source = source
        self.filename = filename
        self.rules = tuple(rules)
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens including the EOF token
        """
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens = []

        while self.pos < len(self.source):
            rule, lexeme = self._match()
            if rule is None:
                raise self._unrecognized_input()

            start = self._location()
            self._advance_by(lexeme)
            if rule.build is not None:
                self.tokens.append(rule.build(lexeme, SourceSpan(start, self._location())))

        eof_location = self._location()
        self.tokens.append(Token(TokenKind.EOF, "", None, SourceSpan(eof_location, eof_location)))

        logger.debug("tokenized %s into %d tokens", self.filename, len(self.tokens))
        return self.tokens

    def _match(self) -> Tuple[Optional[LexRule], str]:
        """Pick the winning rule at the current position."""
        best_rule: Optional[LexRule] = None
        best_lexeme = ""

        for rule in self.rules:
            if best_rule is not None and rule.priority != best_rule.priority:
                break
            match = rule.pattern.match(self.source, self.pos)
            if match is None or match.end() == self.pos:
                continue
            lexeme = match.group(0)
            if len(lexeme) > len(best_lexeme):
                best_rule = rule
                best_lexeme = lexeme

        return best_rule, best_lexeme

    def _unrecognized_input(self) -> LexError:
        location = self._location()
        remaining = self.source[self.pos:]

        if remaining.startswith('"'):
            return create_unterminated_string_error(remaining.split("\n", 1)[0], location)

        word = re.match(r"\S{1,20}", remaining)
        text = word.group(0) if word else remaining[:1]
        return create_unrecognized_input_error(text, location)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.pos)

    def _advance_by(self, lexeme: str):
        self.pos += len(lexeme)
        newlines = lexeme.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(lexeme) - lexeme.rfind("\n")
        else:
            self.column += len(lexeme)


def tokenize(source: str, filename: str = "<string>") -> List[Token]:
    """Tokenize ``source`` with the default rule table."""
    return Lexer(source, filename).tokenize()
