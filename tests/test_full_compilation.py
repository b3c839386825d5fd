"""
End-to-end compilation tests for Clausal.

Tests the full pipeline from source text to a loaded module, and the stage
reported when a unit fails.
"""

import logging
import unittest
from unittest import mock
import sys
import os
import tempfile

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from clausal import (
    Stage, CompileError, CompilerOptions, build_ir, compile_source, compile_file,
    create_python_host
)
from clausal.lexer import LexError
from clausal.parser import ParseError
from clausal.ir import IRGenerator, IRModule, CodegenError
from clausal.backend import BackendError, LoadError, ATOMS


GREETER = """
// The smallest useful module
module greeter

pub fn run {
    () { "hi" }
}

fn pair {
    (x) { p = {x, x}; p }
}
"""


class TestFullCompilation(unittest.TestCase):
    """Test the full compilation pipeline."""

    def setUp(self):
        """Set up test fixtures."""
        self.host = create_python_host()

    def test_greeter_runs(self):
        module = compile_source(GREETER, "greeter", self.host)
        self.assertEqual(module.run(), "hi")
        self.assertEqual(module.call("run"), "hi")
        self.assertEqual(module.exports, {("run", 0)})

    def test_compile_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "greeter.cl")
            with open(path, "w", encoding="utf-8") as f:
                f.write(GREETER)
            module = compile_file(path, "greeter", self.host)
        self.assertEqual(module.run(), "hi")

    def test_build_ir(self):
        module_ir = build_ir(GREETER, "greeter.cl")
        self.assertIsInstance(module_ir, IRModule)
        self.assertEqual(module_ir.export_pairs, {("run", 0)})

    def test_default_host(self):
        self.assertEqual(compile_source(GREETER, "greeter").run(), "hi")

    def test_larger_program(self):
        source = """
        module inventory

        pub fn count {
            (items) { count(items, 0) }
        }

        fn count {
            ([], n) { n }
            ([_ | rest], n) { count(rest, next(n)) }
        }

        // Peano-style successor over a small table
        fn next {
            (0) { 1 } (1) { 2 } (2) { 3 } (3) { 4 }
        }

        pub fn lookup {
            (key, []) { :none }
            (key, [{k, v} | rest]) { pick(same(key, k), v, key, rest) }
        }

        fn pick {
            (:yes, v, _, _) { {:ok, v} }
            (:no, _, key, rest) { lookup(key, rest) }
        }

        fn same {
            (:apple, :apple) { :yes }
            (:pear, :pear) { :yes }
            (_, _) { :no }
        }
        """
        module = compile_source(source, "inventory", self.host)
        self.assertEqual(module.count([ATOMS.a, ATOMS.b, ATOMS.c]), 3)
        table = [(ATOMS.apple, 3), (ATOMS.pear, 5)]
        self.assertEqual(module.lookup(ATOMS.pear, table), (ATOMS.ok, 5))
        self.assertIs(module.lookup(ATOMS.plum, table), ATOMS.none)


class TestStageFailures(unittest.TestCase):
    """The first failing stage is reported and nothing after it runs."""

    def setUp(self):
        self.host = create_python_host()

    def assertStage(self, stage, source, module_name="m", detail_type=Exception):
        with self.assertRaises(CompileError) as context:
            compile_source(source, module_name, self.host)
        error = context.exception
        self.assertEqual(error.stage, stage)
        self.assertIsInstance(error.detail, detail_type)
        self.assertIs(error.__cause__, error.detail)
        return error

    def test_read_failure(self):
        with self.assertRaises(CompileError) as context:
            compile_file(os.path.join(tempfile.gettempdir(), "no-such-dir", "x.cl"), "x", self.host)
        self.assertEqual(context.exception.stage, Stage.READ)
        self.assertIsInstance(context.exception.detail, OSError)

    def test_tokenize_failure(self):
        error = self.assertStage(Stage.TOKENIZE, "module m fn f { () { # } }", detail_type=LexError)
        self.assertEqual(error.diagnostic.code, "L001")

    def test_parse_failure_never_generates(self):
        with mock.patch.object(IRGenerator, "generate") as generate:
            self.assertStage(Stage.PARSE, "module m fn f { () }", detail_type=ParseError)
        generate.assert_not_called()

    def test_generate_failure(self):
        failure = CodegenError("no lowering", "Stray")
        with mock.patch.object(IRGenerator, "generate", side_effect=failure):
            error = self.assertStage(Stage.GENERATE, GREETER, "greeter", detail_type=CodegenError)
        self.assertIs(error.detail, failure)

    def test_oversized_integer_is_a_tokenize_failure(self):
        source = "module m pub fn f { () { " + "9" * 5000 + " } }"
        error = self.assertStage(Stage.TOKENIZE, source, detail_type=LexError)
        self.assertEqual(error.diagnostic.code, "L003")

    def test_deep_nesting_is_a_generate_failure(self):
        source = "module m pub fn f { () { " + "{" * 5000 + "1" + "}" * 5000 + " } }"
        error = self.assertStage(Stage.GENERATE, source, detail_type=CodegenError)
        self.assertEqual(error.diagnostic.code, "G004")

    def test_moderate_nesting_compiles(self):
        source = "module m pub fn f { () { " + "{" * 50 + "1" + "}" * 50 + " } }"
        result = compile_source(source, "m", self.host).f()
        for _ in range(50):
            result = result[0]
        self.assertEqual(result, 1)

    def test_illegal_pattern_is_a_compile_failure(self):
        error = self.assertStage(Stage.COMPILE, "module m pub fn f { (g(x)) { x } }",
                                 detail_type=BackendError)
        self.assertEqual(error.diagnostic.code, "B001")

    def test_compile_failure_never_loads(self):
        with mock.patch.object(self.host.loader, "load") as load:
            self.assertStage(Stage.COMPILE, "module m pub fn f { () { _ } }")
        load.assert_not_called()

    def test_collision_is_a_load_failure(self):
        compile_source(GREETER, "greeter", self.host)
        error = self.assertStage(Stage.LOAD, GREETER, "greeter", detail_type=LoadError)
        self.assertEqual(error.diagnostic.code, "B005")

    def test_name_mismatch_is_a_load_failure(self):
        error = self.assertStage(Stage.LOAD, GREETER, "other", detail_type=LoadError)
        self.assertEqual(error.diagnostic.code, "B006")


class TestOptions(unittest.TestCase):
    """CompilerOptions handling."""

    def test_filename_override_in_diagnostics(self):
        options = CompilerOptions(filename="src/bad.cl")
        with self.assertRaises(CompileError) as context:
            compile_source("module m fn $", "m", options=options)
        self.assertEqual(context.exception.detail.location.filename, "src/bad.cl")

    def test_file_path_used_as_filename(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "bad.cl")
            with open(path, "w", encoding="utf-8") as f:
                f.write("module m\nfn f {")
            with self.assertRaises(CompileError) as context:
                compile_file(path, "m")
        self.assertEqual(context.exception.stage, Stage.PARSE)
        self.assertEqual(context.exception.detail.location.filename, path)

    def test_encoding(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "latin.cl")
            with open(path, "w", encoding="latin-1") as f:
                f.write('module latin pub fn s { () { "café" } }')
            module = compile_file(path, "latin", options=CompilerOptions(encoding="latin-1"))
            with self.assertRaises(CompileError) as context:
                compile_file(path, "latin", options=CompilerOptions(encoding="utf-8"))
        self.assertEqual(module.s(), "café")
        self.assertEqual(context.exception.stage, Stage.READ)

    def test_debug_logging(self):
        options = CompilerOptions(debug=True)
        with self.assertLogs("clausal", level=logging.DEBUG) as logs:
            compile_source(GREETER, "greeter", options=options)
        output = "\n".join(logs.output)
        self.assertIn("IR for greeter", output)
        self.assertIn("generated source for greeter", output)

    def test_sys_modules_option(self):
        name = "clausal_driver_registered"
        options = CompilerOptions(register_in_sys_modules=True)
        host = create_python_host(options)
        compile_source(f"module {name} pub fn f {{ () {{ 1 }} }}", name, host, options)
        try:
            self.assertIn(name, sys.modules)
        finally:
            host.loader.unload(name)
        self.assertNotIn(name, sys.modules)


if __name__ == '__main__':
    unittest.main()
