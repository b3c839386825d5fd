"""
Clausal LALR Parser

The grammar below is compiled by Lark into an LALR(1) table once, when this
module is imported. Lark runs in strict mode, so a grammar with a
shift/reduce or reduce/reduce conflict is rejected at build time with a
``GrammarError``; the parser itself never backtracks.

The token list produced by ``clausal.lexer`` is fed to Lark through a
custom lexer class, and every production is reduced straight into an AST
node by ``AstBuilder`` while the parser runs. Actions only see already-built
children; leaf actions read the semantic value the lexer stored on the token.

"""

import logging
from typing import Dict, List, Optional, Sequence

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedToken
from lark.lexer import Lexer as LarkLexer, Token as LarkToken

from ..lexer.tokens import Token, TokenKind, SourceLocation, SourceSpan
from .ast_nodes import (
    ModuleAst, ModuleDeclaration, Function, FunctionClause, Visibility,
    Assignment, Variable, NumberLiteral, StringLiteral, Atom,
    TupleLiteral, ListLiteral, Call
)
from .errors import (
    ParseError, create_unexpected_token_error, create_clause_arity_error,
    create_missing_module_error, create_duplicate_module_error
)

logger = logging.getLogger(__name__)


# Grammar terminal for each token kind. Underscore terminals are dropped
# from the children handed to the actions; opening brackets are kept so
# literals and blocks can point at them.
TERMINALS: Dict[TokenKind, str] = {
    TokenKind.MODULE: "_MODULE",
    TokenKind.PUB: "_PUB",
    TokenKind.FN: "_FN",
    TokenKind.IDENTIFIER: "IDENTIFIER",
    TokenKind.ATOM: "ATOM",
    TokenKind.NUMBER: "NUMBER",
    TokenKind.STRING: "STRING",
    TokenKind.LPAREN: "_LPAREN",
    TokenKind.RPAREN: "_RPAREN",
    TokenKind.LBRACE: "LBRACE",
    TokenKind.RBRACE: "_RBRACE",
    TokenKind.LBRACKET: "LBRACKET",
    TokenKind.RBRACKET: "_RBRACKET",
    TokenKind.COMMA: "_COMMA",
    TokenKind.SEMICOLON: "_SEMICOLON",
    TokenKind.EQUALS: "_EQUALS",
    TokenKind.PIPE: "_PIPE",
}

KINDS_BY_TERMINAL: Dict[str, TokenKind] = {name: kind for kind, name in TERMINALS.items()}
KINDS_BY_TERMINAL["$END"] = TokenKind.EOF


GRAMMAR = r"""
    module: statements

    statements: statement
              | statement statements

    ?statement: module_declaration
              | function

    module_declaration: _MODULE IDENTIFIER

    function: visibility IDENTIFIER clause_block

    visibility: _PUB _FN        -> public
              | _FN             -> private

    clause_block: LBRACE clauses _RBRACE

    clauses: clause
           | clause clauses

    clause: argument_tuple body

    argument_tuple: _LPAREN _RPAREN
                  | _LPAREN elements _RPAREN

    body: LBRACE expressions _RBRACE

    expressions: expression
               | expression _SEMICOLON expressions

    ?expression: assignment
               | primary

    assignment: primary _EQUALS expression

    ?primary: variable
            | number
            | string
            | atom
            | tuple_literal
            | list_literal
            | call

    elements: expression
            | expression _COMMA elements

    tuple_literal: LBRACE _RBRACE
                 | LBRACE elements _RBRACE

    // One production per legal combination of the optional parts
    list_literal: LBRACKET _RBRACKET
                | LBRACKET elements _RBRACKET
                | LBRACKET elements _PIPE expression _RBRACKET     -> cons_list

    call: IDENTIFIER argument_tuple

    variable: IDENTIFIER
    number: NUMBER
    string: STRING
    atom: ATOM

    %declare _MODULE _PUB _FN IDENTIFIER ATOM NUMBER STRING
    %declare _LPAREN _RPAREN LBRACE _RBRACE LBRACKET _RBRACKET
    %declare _COMMA _SEMICOLON _EQUALS _PIPE
"""


class TokenStream(LarkLexer):
    """Hands an already tokenized unit to Lark, one grammar terminal per token."""

    def __init__(self, lexer_conf):
        pass

    def lex(self, tokens: Sequence[Token]):
        for token in tokens:
            if token.kind is TokenKind.EOF:
                break
            start = token.span.start
            # The clausal token rides along as the terminal's value.
            yield LarkToken(TERMINALS[token.kind], token, start.offset, start.line, start.column)


def _token(terminal: LarkToken) -> Token:
    return terminal.value


def _span(node) -> Optional[SourceSpan]:
    return getattr(node, "span", None)


def _append(items: Optional[list], item) -> list:
    if items is None:
        return [item]
    items.append(item)
    return items


def _in_order(items) -> tuple:
    return tuple(reversed(items))


@v_args(inline=True)
class AstBuilder(Transformer):
    """Construction actions, one per production (or alias) of ``GRAMMAR``."""

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------

    def variable(self, terminal):
        token = _token(terminal)
        return Variable(token.value, span=token.span)

    def number(self, terminal):
        token = _token(terminal)
        return NumberLiteral(token.value, span=token.span)

    def string(self, terminal):
        token = _token(terminal)
        return StringLiteral(token.value, span=token.span)

    def atom(self, terminal):
        token = _token(terminal)
        return Atom(token.value, span=token.span)

    # ------------------------------------------------------------------
    # Sequences
    #
    # The productions are right recursive, so the last item is reduced first.
    # Items are appended as they arrive and the owner reverses the list once.
    # ------------------------------------------------------------------

    def elements(self, expression, rest=None):
        return _append(rest, expression)

    def expressions(self, expression, rest=None):
        return _append(rest, expression)

    def clauses(self, clause, rest=None):
        return _append(rest, clause)

    def statements(self, statement, rest=None):
        return _append(rest, statement)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def tuple_literal(self, opening, elements=()):
        return TupleLiteral(_in_order(elements), span=_token(opening).span)

    def list_literal(self, opening, elements=()):
        return ListLiteral(_in_order(elements), span=_token(opening).span)

    def cons_list(self, opening, elements, tail):
        return ListLiteral(_in_order(elements), tail, span=_token(opening).span)

    def call(self, terminal, arguments):
        token = _token(terminal)
        return Call(Variable(token.value, span=token.span), arguments, span=token.span)

    def assignment(self, target, value):
        return Assignment(target, value, span=_span(target))

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def argument_tuple(self, elements=()):
        return _in_order(elements)

    def body(self, opening, expressions):
        return _in_order(expressions)

    def clause(self, arguments, body):
        span = _span(arguments[0]) if arguments else _span(body[0])
        return FunctionClause(arguments, body, span=span)

    def clause_block(self, opening, clauses):
        return _in_order(clauses)

    def public(self):
        return Visibility.PUBLIC

    def private(self):
        return Visibility.PRIVATE

    def function(self, visibility, terminal, clauses):
        token = _token(terminal)
        arities = [clause.arity for clause in clauses]
        if len(set(arities)) > 1:
            raise create_clause_arity_error(token.value, arities, token.location)
        return Function(visibility, token.value, clauses, span=token.span)

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------

    def module_declaration(self, terminal):
        token = _token(terminal)
        return ModuleDeclaration(token.value, span=token.span)

    def module(self, statements):
        statements = _in_order(statements)
        declarations = [s for s in statements if isinstance(s, ModuleDeclaration)]
        functions = tuple(s for s in statements if isinstance(s, Function))

        if not declarations:
            first = functions[0].span if functions and functions[0].span else None
            raise create_missing_module_error(first.start if first else None)
        if len(declarations) > 1:
            duplicate = declarations[1]
            raise create_duplicate_module_error(
                duplicate.name, duplicate.span.start if duplicate.span else None
            )

        return ModuleAst(declarations[0], functions)


_PARSER = Lark(
    GRAMMAR,
    parser="lalr",
    lexer=TokenStream,
    transformer=AstBuilder(),
    start="module",
    strict=True,
    maybe_placeholders=False,
)


class Parser:
    """
    Clausal parser.

    Reduces a token list to one ``ModuleAst``. Performs no semantic checks
    beyond what the grammar and the construction actions enforce.
    """

    def __init__(self, tokens: List[Token]):
        """
        Initialize parser with a list of tokens.

        Args:
            tokens: List of tokens from the lexer, normally ending with EOF
        """
        self.tokens = tokens

    def parse(self) -> ModuleAst:
        """
        Parse the token list.

        Returns:
            The module AST

        Raises:
            ParseError: at the first token the grammar cannot accept
        """
        try:
            module = _PARSER.parse(self.tokens)
        except UnexpectedToken as error:
            raise self._unexpected_token(error) from error

        logger.debug("parsed module %s with %d functions", module.name, len(module.functions))
        return module

    def _unexpected_token(self, error: UnexpectedToken) -> ParseError:
        if error.token.type == "$END":
            found = self._end_token()
        else:
            found = _token(error.token)

        expected = {KINDS_BY_TERMINAL[name] for name in error.expected if name in KINDS_BY_TERMINAL}
        return create_unexpected_token_error(found, expected)

    def _end_token(self) -> Token:
        if self.tokens and self.tokens[-1].kind is TokenKind.EOF:
            return self.tokens[-1]
        # Token list handed in without its EOF marker
        end = self.tokens[-1].span.end if self.tokens else SourceLocation("<string>", 1, 1, 0)
        return Token(TokenKind.EOF, "", None, SourceSpan(end, end))


def parse(tokens: List[Token]) -> ModuleAst:
    """Parse a token list into a module AST."""
    return Parser(tokens).parse()
