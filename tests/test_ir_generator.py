"""
Test suite for Kaleido IR generation.

Tests cover:
- Lowering of definitions, externs and top-level expressions
- Name resolution errors (unknown variables and functions)
- Redefinition and argument count checks
- Cleanup after a failed definition

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleido.parser.parser import parse_string
from kaleido.parser.ast_nodes import BinaryOp, Call, FunctionDefinition, NumberLiteral, Prototype
from kaleido.ir.ir_generator import IRGenerator
from kaleido.analyzer.symbol_table import SymbolTable
from kaleido.analyzer.errors import (
    SemanticError, UndefinedSymbolError, RedefinitionError,
    ArityMismatchError, InvalidOperatorError,
)
from kaleido.backend.llvm_backend import LLVMBackend


class TestIRGenerator(unittest.TestCase):
    """Test cases for the IR generator."""

    def setUp(self):
        """Set up test fixtures."""
        self.backend = LLVMBackend()
        self.generator = IRGenerator(self.backend)

    def _generate(self, source: str):
        """Lower every construct in `source`, returning the last handle."""
        handle = None
        for item in parse_string(source):
            handle = self.generator.generate(item)
        return handle

    def test_simple_definition(self):
        handle = self._generate("def foo(x) x+1")
        self.assertTrue(handle.defined)
        self.assertEqual(handle.params, ("x",))
        text = self.backend.function_ir(handle)
        self.assertIn('define double @"foo"(double %"x")', text)
        self.assertIn("fadd double", text)

    def test_call_lowers(self):
        self._generate("def foo(x) x+1")
        handle = self._generate("foo(41)")
        self.assertTrue(handle.is_anonymous)
        self.assertTrue(handle.defined)
        text = self.backend.function_ir(handle)
        self.assertIn('declare double @"foo"(double', text)
        self.assertIn('call double @"foo"', text)

    def test_each_anonymous_expression_gets_its_own_symbol(self):
        first = self._generate("1")
        second = self._generate("2")
        self.assertNotEqual(first.symbol, second.symbol)
        self.assertIsNone(self.backend.lookup_function(""))

    def test_comparison_widens_to_double(self):
        handle = self._generate("def lt(a b) a < b")
        text = self.backend.function_ir(handle)
        self.assertIn("fcmp ult double", text)
        self.assertIn("uitofp i1", text)

    def test_recursive_definition(self):
        handle = self._generate("def f(x) f(x-1)*x")
        self.assertTrue(handle.defined)

    def test_extern_then_definition(self):
        extern = self._generate("extern foo(x)")
        self.assertFalse(extern.defined)
        handle = self._generate("def foo(x) x*2")
        self.assertIs(handle, extern)
        self.assertTrue(handle.defined)

    def test_second_definition_is_rejected(self):
        self._generate("extern foo(x)")
        first = self._generate("def foo(x) x*2")
        with self.assertRaises(RedefinitionError):
            self._generate("def foo(x) x*3")
        # The first body is untouched
        self.assertTrue(first.defined)
        text = self.backend.function_ir(first)
        self.assertIn("fmul", text)
        # Double constants print as IEEE hex: 2.0, not 3.0
        self.assertIn("0x4000000000000000", text)
        self.assertNotIn("0x4008000000000000", text)

    def test_unknown_function(self):
        with self.assertRaises(UndefinedSymbolError) as ctx:
            self._generate("bar(1,2)")
        self.assertEqual(ctx.exception.message, "Unknown function referenced 'bar'")
        self.assertEqual(ctx.exception.diagnostic.code, "S010")

    def test_unknown_variable(self):
        with self.assertRaises(UndefinedSymbolError) as ctx:
            self._generate("def f(x) y")
        self.assertEqual(ctx.exception.message, "Unknown variable name 'y'")

    def test_failed_definition_leaves_no_declaration(self):
        with self.assertRaises(UndefinedSymbolError):
            self._generate("def f(x) y")
        self.assertIsNone(self.backend.lookup_function("f"))
        # The name is free for a correct definition
        self.assertTrue(self._generate("def f(x) x").defined)

    def test_failed_definition_keeps_earlier_extern(self):
        self._generate("extern f(x)")
        with self.assertRaises(UndefinedSymbolError):
            self._generate("def f(x) y")
        handle = self.backend.lookup_function("f")
        self.assertIsNotNone(handle)
        self.assertFalse(handle.defined)
        self.assertTrue(self._generate("def f(x) x").defined)

    def test_call_arity_mismatch(self):
        self._generate("extern foo(a b)")
        with self.assertRaises(ArityMismatchError) as ctx:
            self._generate("foo(1)")
        self.assertEqual(ctx.exception.diagnostic.code, "S015")

    def test_extern_redeclaration_arity_mismatch(self):
        self._generate("extern foo(a)")
        with self.assertRaises(ArityMismatchError):
            self._generate("extern foo(a b)")
        # Same count redeclares fine
        self._generate("extern foo(z)")

    def test_definition_arity_mismatch_with_extern(self):
        self._generate("extern foo(a)")
        with self.assertRaises(ArityMismatchError):
            self._generate("def foo(a b) a")

    def test_duplicate_parameter(self):
        with self.assertRaises(RedefinitionError):
            self._generate("def f(x x) x")
        self.assertIsNone(self.backend.lookup_function("f"))

    def test_invalid_operator(self):
        item = FunctionDefinition(
            Prototype("", ()),
            BinaryOp('/', NumberLiteral(1.0), NumberLiteral(2.0)),
        )
        with self.assertRaises(InvalidOperatorError):
            self.generator.generate(item)

    def test_semantic_errors_share_a_base(self):
        for cls in (UndefinedSymbolError, RedefinitionError, ArityMismatchError, InvalidOperatorError):
            self.assertTrue(issubclass(cls, SemanticError))

    def test_module_ir_links_units(self):
        self._generate("extern sin(x); def foo(x) sin(x)+1; foo(2)")
        text = self.backend.module_ir()
        self.assertIn('define double @foo', text.replace('"', ''))
        self.assertIn('declare double @sin', text.replace('"', ''))

    def test_long_operator_chain(self):
        terms = 5000
        handle = self._generate("def f(x) " + "+".join(["x"] * terms))
        text = self.backend.function_ir(handle)
        self.assertEqual(text.count("fadd double"), terms - 1)

    def test_operands_lower_left_to_right(self):
        handle = self._generate("extern a(); extern b(); a() - b()")
        text = self.backend.function_ir(handle)
        self.assertLess(text.index('call double @"a"'), text.index('call double @"b"'))
        self.assertIn("fsub double", text)

    def test_invalid_operator_inside_call_argument(self):
        self._generate("extern f(x)")
        item = FunctionDefinition(
            Prototype("", ()),
            Call("f", (BinaryOp('/', NumberLiteral(1.0), NumberLiteral(2.0)),)),
        )
        with self.assertRaises(InvalidOperatorError):
            self.generator.generate(item)
        self.assertEqual(list(self.backend.units), [])

    def test_release_anonymous_function(self):
        self._generate("def f(x) x")
        named = self.backend.lookup_function("f")
        anonymous = self._generate("f(1)")
        self.assertIn(anonymous.symbol, self.backend.units)

        self.backend.release_function(anonymous)
        self.backend.release_function(named)
        self.assertEqual(list(self.backend.units), ["f"])
        self.assertFalse(anonymous.defined)
        self.assertTrue(named.defined)


class TestSymbolTable(unittest.TestCase):
    """Test cases for the parameter symbol table."""

    def test_bind_parameters_replaces_bindings(self):
        table = SymbolTable()
        table.bind_parameters(["a", "b"], [1, 2])
        self.assertEqual(table.lookup("b"), 2)
        table.bind_parameters(["c"], [3])
        self.assertIsNone(table.lookup("a"))
        self.assertEqual(table.lookup("c"), 3)
        self.assertEqual(len(table), 1)

    def test_define_rejects_duplicates(self):
        table = SymbolTable()
        table.define("x", 1)
        with self.assertRaises(RedefinitionError):
            table.define("x", 2)

    def test_reset(self):
        table = SymbolTable()
        table.define("x", 1)
        table.reset()
        self.assertNotIn("x", table)


if __name__ == '__main__':
    unittest.main()
