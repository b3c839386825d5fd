"""
Unit tests for the Clausal parser.

Tests AST construction from token lists and the parse diagnostics.
"""

import unittest
import sys
import os

from lark import Lark
from lark.exceptions import GrammarError

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from clausal.lexer import tokenize, TokenKind
from clausal.parser.parser import GRAMMAR, TokenStream
from clausal.parser import (
    Parser, parse, ParseError, ClauseArityError, ModuleDeclarationError,
    ModuleAst, ModuleDeclaration, Function, FunctionClause, Visibility,
    Assignment, Variable, NumberLiteral, StringLiteral, Atom,
    TupleLiteral, ListLiteral, Call, NumberKind
)


def parse_source(source: str) -> ModuleAst:
    return Parser(tokenize(source)).parse()


def body_of(expression_source: str):
    """Parse one expression as the body of a zero-arity function."""
    module = parse_source(f"module m\nfn f {{ () {{ {expression_source} }} }}")
    return module.functions[0].clauses[0].body


class TestModuleStructure(unittest.TestCase):
    """Whole-module parses."""

    def test_greeter_module(self):
        source = """
        module greeter

        pub fn run {
            () { "hi" }
        }

        fn pair {
            (x) { p = {x, x}; p }
        }
        """
        expected = ModuleAst(
            ModuleDeclaration("greeter"),
            (
                Function(Visibility.PUBLIC, "run", (
                    FunctionClause((), (StringLiteral("hi"),)),
                )),
                Function(Visibility.PRIVATE, "pair", (
                    FunctionClause(
                        (Variable("x"),),
                        (
                            Assignment(Variable("p"), TupleLiteral((Variable("x"), Variable("x")))),
                            Variable("p"),
                        ),
                    ),
                )),
            ),
        )
        self.assertEqual(parse_source(source), expected)

    def test_declaration_may_follow_functions(self):
        module = parse_source("fn f { () { 1 } } module late")
        self.assertEqual(module.name, "late")
        self.assertEqual(len(module.functions), 1)

    def test_multi_clause_function(self):
        module = parse_source("""
        module lists
        pub fn last {
            ([x]) { x }
            ([_ | t]) { last(t) }
        }
        """)
        function = module.functions[0]
        self.assertTrue(function.is_public)
        self.assertEqual(function.arity, 1)
        self.assertEqual(len(function.clauses), 2)
        self.assertEqual(
            function.clauses[1].arguments,
            (ListLiteral((Variable("_"),), Variable("t")),)
        )

    def test_spans_recorded_but_not_compared(self):
        first = parse_source("module m fn f { () { 1 } }")
        second = parse_source("module m\n\n\nfn f {\n () { 1 }\n}")
        self.assertEqual(first, second)
        self.assertEqual(first.functions[0].span.start.line, 1)
        self.assertEqual(second.functions[0].span.start.line, 4)

    def test_module_level_parse_function(self):
        self.assertEqual(parse(tokenize("module m")), ModuleAst(ModuleDeclaration("m")))


class TestExpressions(unittest.TestCase):
    """Expression forms inside clause bodies."""

    def test_literals(self):
        body = body_of('1; 2.5; "s"; :ok; x')
        self.assertEqual(body, (
            NumberLiteral(1), NumberLiteral(2.5), StringLiteral("s"), Atom("ok"), Variable("x")
        ))
        self.assertEqual(body[0].kind, NumberKind.INTEGER)
        self.assertEqual(body[1].kind, NumberKind.FLOAT)

    def test_tuples(self):
        self.assertEqual(body_of("{}"), (TupleLiteral(),))
        self.assertEqual(
            body_of("{1, {2, :a}}"),
            (TupleLiteral((NumberLiteral(1), TupleLiteral((NumberLiteral(2), Atom("a"))))),)
        )

    def test_lists(self):
        self.assertEqual(body_of("[]"), (ListLiteral(),))
        self.assertEqual(body_of("[1, 2]"), (ListLiteral((NumberLiteral(1), NumberLiteral(2))),))
        self.assertEqual(
            body_of("[h | t]"),
            (ListLiteral((Variable("h"),), Variable("t")),)
        )
        self.assertEqual(
            body_of("[1, 2 | [3]]"),
            (ListLiteral((NumberLiteral(1), NumberLiteral(2)), ListLiteral((NumberLiteral(3),))),)
        )

    def test_calls(self):
        self.assertEqual(body_of("f()"), (Call(Variable("f")),))
        self.assertEqual(
            body_of("f(1, g(:ok))"),
            (Call(Variable("f"), (NumberLiteral(1), Call(Variable("g"), (Atom("ok"),)))),)
        )

    def test_assignment_is_right_associative(self):
        self.assertEqual(
            body_of("a = b = 1"),
            (Assignment(Variable("a"), Assignment(Variable("b"), NumberLiteral(1))),)
        )

    def test_literal_spans_start_at_opening_bracket(self):
        for source in ("{}", "[]", "{1, 2}", "[x | t]", "[1]"):
            literal = body_of(source)[0]
            self.assertEqual((literal.span.start.line, literal.span.start.column), (2, 13), source)

    def test_long_list_keeps_order(self):
        items = list(range(2000))
        literal = body_of("[" + ", ".join(map(str, items)) + "]")[0]
        self.assertEqual([element.value for element in literal.elements], items)

    def test_assignment_to_structure(self):
        self.assertEqual(
            body_of("{a, [b | c]} = x"),
            (Assignment(
                TupleLiteral((Variable("a"), ListLiteral((Variable("b"),), Variable("c")))),
                Variable("x"),
            ),)
        )


class TestGrammar(unittest.TestCase):
    """LALR table construction."""

    def build(self, grammar: str, start: str) -> Lark:
        return Lark(grammar, parser="lalr", lexer=TokenStream, start=start,
                    strict=True, maybe_placeholders=False)

    def test_grammar_builds_in_strict_mode(self):
        self.build(GRAMMAR, "module")

    def test_conflicting_production_rejected(self):
        # pipeline | pipeline | pipeline can associate either way
        conflicting = GRAMMAR + "\n    pipeline: pipeline _PIPE pipeline\n            | variable\n"
        with self.assertRaises(GrammarError):
            self.build(conflicting, "pipeline")


class TestParseErrors(unittest.TestCase):
    """Rejected token sequences."""

    def test_unexpected_token_reports_expected_and_found(self):
        with self.assertRaises(ParseError) as context:
            parse_source("module m fn f ( ) { }")
        error = context.exception
        self.assertEqual(error.found_kind, TokenKind.LPAREN)
        self.assertEqual(error.expected, (TokenKind.LBRACE,))
        self.assertEqual(error.diagnostic.code, "P001")
        self.assertEqual(error.location.column, 15)

    def test_unexpected_end_of_input(self):
        with self.assertRaises(ParseError) as context:
            parse_source("module m fn f {")
        error = context.exception
        self.assertEqual(error.found_kind, TokenKind.EOF)
        self.assertIn(TokenKind.LPAREN, error.expected)
        self.assertEqual(error.diagnostic.code, "P002")

    def test_empty_input(self):
        with self.assertRaises(ParseError) as context:
            parse_source("")
        self.assertEqual(
            set(context.exception.expected),
            {TokenKind.MODULE, TokenKind.PUB, TokenKind.FN}
        )

    def test_token_list_without_eof(self):
        tokens = tokenize("module m fn")[:-1]
        with self.assertRaises(ParseError) as context:
            Parser(tokens).parse()
        self.assertEqual(context.exception.found_kind, TokenKind.EOF)

    def test_empty_body_rejected(self):
        with self.assertRaises(ParseError):
            parse_source("module m fn f { () { } }")

    def test_clause_arity_mismatch(self):
        with self.assertRaises(ClauseArityError) as context:
            parse_source("module m fn f { (x) { x } (x, y) { y } }")
        self.assertIsInstance(context.exception, ParseError)
        self.assertEqual(context.exception.diagnostic.code, "P003")
        self.assertIn("'f'", str(context.exception))

    def test_missing_module_declaration(self):
        with self.assertRaises(ModuleDeclarationError) as context:
            parse_source("fn f { () { 1 } }")
        self.assertEqual(context.exception.diagnostic.code, "P004")

    def test_duplicate_module_declaration(self):
        with self.assertRaises(ModuleDeclarationError) as context:
            parse_source("module a\nmodule b")
        self.assertEqual(context.exception.diagnostic.code, "P005")
        self.assertEqual(context.exception.location.line, 2)


if __name__ == '__main__':
    unittest.main()
