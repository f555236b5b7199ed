"""
End-to-end compilation tests for Kaleido.

Tests the full pipeline from source text through the LLVM JIT.

Author: xwest
"""

import io
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleido.driver import Driver, DriverOptions, run_string
from kaleido.parser.parser import parse_string
from kaleido.ir.ir_generator import IRGenerator
from kaleido.backend.llvm_backend import LLVMBackend
from kaleido.backend.errors import EvaluationError


class TestFullCompilation(unittest.TestCase):
    """Test the full compilation pipeline."""

    def setUp(self):
        """Set up test fixtures."""
        self.backend = LLVMBackend()
        self.generator = IRGenerator(self.backend)

    def _evaluate(self, source: str) -> float:
        """Lower every construct and evaluate the last one."""
        handle = None
        for item in parse_string(source):
            handle = self.generator.generate(item)
        return self.backend.evaluate(handle)

    def test_simple_function(self):
        self.assertEqual(self._evaluate("def foo(x) x+1; foo(41)"), 42.0)

    def test_precedence_is_respected(self):
        self.assertEqual(self._evaluate("1+2*3"), 7.0)
        self.assertEqual(self._evaluate("1-2-3"), -4.0)
        self.assertEqual(self._evaluate("(1+2)*3"), 9.0)

    def test_comparison_yields_zero_or_one(self):
        self.assertEqual(self._evaluate("1 < 2"), 1.0)
        self.assertEqual(self._evaluate("2 < 1"), 0.0)

    def test_multiple_arguments(self):
        source = "def madd(a b c) a*b+c; madd(3, 4, 5)"
        self.assertEqual(self._evaluate(source), 17.0)

    def test_functions_calling_functions(self):
        self._evaluate("def sq(x) x*x; 0")
        self._evaluate("def sumsq(a b) sq(a)+sq(b); 0")
        self.assertEqual(self._evaluate("sumsq(3, 4)"), 25.0)
        # Earlier functions stay callable after later evaluations
        self.assertEqual(self._evaluate("sq(5)"), 25.0)

    def test_extern_then_definition(self):
        self.assertEqual(self._evaluate("extern foo(x); def foo(x) x*2; foo(21)"), 42.0)

    def test_extern_resolved_from_process(self):
        self.assertEqual(self._evaluate("extern cos(x); cos(0)"), 1.0)

    def test_unresolved_extern(self):
        with self.assertRaises(EvaluationError) as ctx:
            self._evaluate("extern nosuchfunction(x); nosuchfunction(1)")
        self.assertEqual(ctx.exception.diagnostic.code, "B002")

    def test_unresolved_extern_through_callee(self):
        self._evaluate("extern nosuchfunction(x); def f(x) nosuchfunction(x); 0")
        with self.assertRaises(EvaluationError):
            self._evaluate("f(1)")

    def test_driver_evaluates(self):
        out = io.StringIO()
        driver = run_string("def foo(x) x+1\nfoo(41)\n", DriverOptions(evaluate=True), out=out)
        self.assertEqual(out.getvalue().splitlines(), [
            "Found a definition!",
            "Found a top level expression!",
            "Evaluated to 42.000000",
        ])
        self.assertEqual(driver.results, [42.0])

    def test_driver_reports_evaluation_error(self):
        out = io.StringIO()
        driver = Driver("extern nosuchfunction(x)\nnosuchfunction(2)\n3",
                        options=DriverOptions(evaluate=True), out=out)
        driver.run()
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[:2], ["Found an extern!", "Found a top level expression!"])
        self.assertTrue(lines[2].startswith("Error: Cannot evaluate"))
        self.assertEqual(lines[-1], "Evaluated to 3.000000")

    def test_module_ir_is_linkable(self):
        self._evaluate("def f(x) x+1; def g(x) f(x)*2; g(1)")
        text = self.backend.module_ir()
        for name in ("f", "g"):
            self.assertIn(f"define double @{name}(", text.replace('"', ''))


if __name__ == '__main__':
    unittest.main()
