"""
Kaleido driver: the top-level read-parse-lower loop.

Dispatches on the current token, hands each top-level construct to the
parser and then to the IR generator, and reports what happened on the
diagnostic stream. Errors never stop the loop; a syntax or lowering
error costs exactly one token of input.

Author: xwest
"""

import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO, Union

from .lexer.lexer import Lexer
from .lexer.errors import Diagnostic
from .lexer.tokens import TokenType
from .parser.parser import Parser, DEFAULT_MAX_DEPTH
from .parser.ast_nodes import ASTNode, to_sexpr
from .parser.errors import ParseError
from .analyzer.errors import SemanticError
from .ir.ir_generator import IRGenerator
from .backend.llvm_backend import LLVMBackend, FunctionHandle
from .backend.errors import BackendError


@dataclass
class DriverOptions:
    """What the driver does besides parsing and lowering."""
    evaluate: bool = False         # JIT-run top-level expressions
    emit_llvm: bool = False        # print IR of each committed function
    dump_ast: bool = False         # print each construct as an S-expression
    show_locations: bool = False   # append (file:line:col) to diagnostics
    keep_anonymous: bool = False   # keep top-level expression units for module_ir()
    max_depth: int = DEFAULT_MAX_DEPTH


class Driver:
    """
    Runs the Kaleido front end over one input.

    Everything the driver prints goes to `out` (standard error by default).
    """

    def __init__(
        self,
        source: Union[str, TextIO],
        options: Optional[DriverOptions] = None,
        backend: Optional[LLVMBackend] = None,
        out: Optional[TextIO] = None,
        filename: str = "<stdin>",
    ):
        """
        Initialize the driver.

        Args:
            source: Source code string or a readable text stream
            options: Driver options, defaults if omitted
            backend: Backend to lower into, a new one if omitted
            out: Stream for progress lines and diagnostics
            filename: Name of source for error reporting
        """
        self.options = options or DriverOptions()
        self.out = out if out is not None else sys.stderr
        self.lexer = Lexer(source, filename)
        self.parser = Parser(self.lexer, max_depth=self.options.max_depth)
        self.backend = backend if backend is not None else LLVMBackend()
        self.generator = IRGenerator(self.backend)

        self.diagnostics: List[Diagnostic] = []
        self.results: List[float] = []
        self._warnings_reported = 0

    def run(self) -> int:
        """
        Process the whole input.

        Returns:
            Exit status, 0 once end of input is reached
        """
        self.parser.next_token()
        while True:
            token = self.parser.current
            if token.is_eof:
                self._report_warnings()
                return 0
            elif token.is_char(';'):
                self.parser.next_token()
                continue
            elif token.type == TokenType.DEF:
                self.handle_definition()
            elif token.type == TokenType.EXTERN:
                self.handle_extern()
            else:
                self.handle_top_level_expression()
            self._report_warnings()

    def handle_definition(self):
        try:
            func_def = self.parser.parse_definition()
        except ParseError as e:
            self._recover(e)
            return

        self._print("Found a definition!")
        self._dump(func_def)
        handle = self._lower(func_def)
        if handle is not None:
            self._emit(handle)

    def handle_extern(self):
        try:
            proto = self.parser.parse_extern()
        except ParseError as e:
            self._recover(e)
            return

        self._print("Found an extern!")
        self._dump(proto)
        self._lower(proto)

    def handle_top_level_expression(self):
        try:
            func_def = self.parser.parse_top_level_expr()
        except ParseError as e:
            self._recover(e)
            return

        self._print("Found a top level expression!")
        self._dump(func_def)
        handle = self._lower(func_def)
        if handle is None:
            return
        self._emit(handle)

        if self.options.evaluate:
            self._evaluate(handle)
        if not self.options.keep_anonymous:
            self.backend.release_function(handle)

    def _evaluate(self, handle: FunctionHandle):
        try:
            value = self.backend.evaluate(handle)
        except BackendError as e:
            self._report(e.diagnostic)
            return
        self.results.append(value)
        self._print("Evaluated to %f" % value)

    def _lower(self, item) -> Optional[FunctionHandle]:
        """Lower a parsed construct, reporting failure."""
        try:
            return self.generator.generate(item)
        except (SemanticError, BackendError) as e:
            self._recover(e)
            return None

    def _recover(self, error: Union[ParseError, SemanticError, BackendError]):
        self._report(error.diagnostic)
        # Skip one token and try again from there
        self.parser.next_token()

    def _report(self, diagnostic: Diagnostic):
        self.diagnostics.append(diagnostic)
        self._print(diagnostic.render(show_location=self.options.show_locations))

    def _report_warnings(self):
        for warning in self.lexer.warnings[self._warnings_reported:]:
            self._report(warning.diagnostic)
        self._warnings_reported = len(self.lexer.warnings)

    def _dump(self, node: ASTNode):
        if self.options.dump_ast:
            self._print(to_sexpr(node))

    def _emit(self, handle: FunctionHandle):
        if self.options.emit_llvm:
            self._print(self.backend.function_ir(handle).rstrip())

    def _print(self, text: str):
        print(text, file=self.out)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "error"]


def run_string(source: str, options: Optional[DriverOptions] = None,
               out: Optional[TextIO] = None) -> Driver:
    """
    Convenience function to run the driver over a source string.

    Returns:
        The driver, for inspecting diagnostics and results
    """
    driver = Driver(source, options=options, out=out, filename="<string>")
    driver.run()
    return driver
