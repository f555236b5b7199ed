"""
LLVM Backend for Kaleido.

Builds LLVM IR with llvmlite. Every value is a double and every function
takes doubles and returns one.

Each function body is built in its own llvmlite module (a "unit"). A unit
is verified on its own, then committed, or thrown away if lowering failed
halfway; nothing half-built ever lands next to working code. Callees are
declared in the unit that calls them and resolved when units are linked
or loaded into the JIT.

Author: xwest
"""

import ctypes
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

import llvmlite.binding as llvm
import llvmlite.ir as ll

from .errors import (
    create_verification_error, create_unresolved_symbol_error,
    create_not_evaluable_error,
)


# Symbol given to anonymous top-level expressions
ANONYMOUS_SYMBOL = "__anon_expr"

DOUBLE = ll.DoubleType()


@dataclass
class FunctionHandle:
    """A declared function: its source name, IR symbol and parameters."""
    name: str
    symbol: str
    params: Tuple[str, ...]
    defined: bool = False

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def is_anonymous(self) -> bool:
        return self.name == ""

    @property
    def display_name(self) -> str:
        return self.name or self.symbol


@dataclass
class LLVMGenContext:
    """The unit currently being built."""
    module: Optional[ll.Module] = None
    builder: Optional[ll.IRBuilder] = None
    function: Optional[ll.Function] = None
    handle: Optional[FunctionHandle] = None


class LLVMBackend:
    """
    LLVM backend for Kaleido.

    Provides the value constructors the IR generator lowers into, manages
    function declarations and bodies, and can link or JIT-run what has been
    committed.
    """

    def __init__(self, module_name: str = "kaleido", triple: Optional[str] = None):
        """
        Initialize the LLVM backend.

        Args:
            module_name: Name of the linked module
            triple: Target triple, defaults to the running process
        """
        llvm.initialize_native_target()
        llvm.initialize_native_asmprinter()

        self.module_name = module_name
        self.triple = triple or llvm.get_process_triple()
        self.context = LLVMGenContext()

        # Named functions, declared or defined
        self.prototypes: Dict[str, FunctionHandle] = {}
        # Committed units by symbol, in commit order
        self.units: Dict[str, ll.Module] = {}
        self._anonymous_count = 0

        # JIT state, created on first evaluate()
        self._engine = None
        self._target_machine = None
        self._loaded: Dict[str, llvm.ModuleRef] = {}

    # Values

    def constant(self, value: float) -> ll.Constant:
        return ll.Constant(DOUBLE, float(value))

    def add(self, lhs, rhs):
        return self._builder().fadd(lhs, rhs, name="addtmp")

    def sub(self, lhs, rhs):
        return self._builder().fsub(lhs, rhs, name="subtmp")

    def mul(self, lhs, rhs):
        return self._builder().fmul(lhs, rhs, name="multmp")

    def less_than(self, lhs, rhs):
        """Unordered float compare, widened to 0.0 or 1.0."""
        builder = self._builder()
        cmp = builder.fcmp_unordered('<', lhs, rhs, name="cmptmp")
        return builder.uitofp(cmp, DOUBLE, name="booltmp")

    def call(self, handle: FunctionHandle, args: List) -> ll.CallInstr:
        callee = self._declare_in(self.context.module, handle)
        return self._builder().call(callee, args, name="calltmp")

    # Functions

    def declare_function(self, name: str, params) -> FunctionHandle:
        """
        Declare a function.

        Declaring an existing name returns the existing handle unchanged.
        The empty name always creates a new anonymous function.
        """
        if name == "":
            symbol = ANONYMOUS_SYMBOL
            if self._anonymous_count:
                symbol = f"{ANONYMOUS_SYMBOL}.{self._anonymous_count}"
            self._anonymous_count += 1
            return FunctionHandle(name, symbol, tuple(params))

        handle = self.prototypes.get(name)
        if handle is None:
            handle = FunctionHandle(name, name, tuple(params))
            self.prototypes[name] = handle
        return handle

    def lookup_function(self, name: str) -> Optional[FunctionHandle]:
        return self.prototypes.get(name)

    def open_function_body(self, handle: FunctionHandle) -> List[ll.Argument]:
        """
        Start a fresh unit holding the body of `handle`.

        Returns:
            The function's argument values, in parameter order
        """
        module = ll.Module(name=f"{self.module_name}.{handle.symbol}")
        module.triple = self.triple
        function = self._declare_in(module, handle)
        block = function.append_basic_block(name="entry")
        self.context = LLVMGenContext(module, ll.IRBuilder(block), function, handle)
        return list(function.args)

    def set_return(self, value):
        self._builder().ret(value)

    def finalize_function(self, handle: FunctionHandle):
        """
        Verify the open unit and commit it.

        Raises:
            VerificationError: If LLVM rejects the generated IR
        """
        module = self.context.module
        try:
            llvm.parse_assembly(str(module)).verify()
        except RuntimeError as e:
            raise create_verification_error(handle.display_name, str(e))

        self.units[handle.symbol] = module
        handle.defined = True
        self.context = LLVMGenContext()

    def discard_function(self, handle: FunctionHandle, forget_declaration: bool = False):
        """
        Throw away the open unit for `handle`.

        With `forget_declaration` the name is removed too; otherwise an
        earlier declaration stays usable.
        """
        if self.context.handle is handle:
            self.context = LLVMGenContext()
        if forget_declaration and self.prototypes.get(handle.name) is handle:
            del self.prototypes[handle.name]

    def release_function(self, handle: FunctionHandle):
        """
        Drop the committed unit of an anonymous function.

        Named functions stay callable and are never released. A released
        handle can no longer be evaluated, printed or linked.
        """
        if not handle.is_anonymous:
            return
        self.units.pop(handle.symbol, None)
        module = self._loaded.pop(handle.symbol, None)
        if module is not None:
            self._engine.remove_module(module)
        handle.defined = False

    # Output

    def function_ir(self, handle: FunctionHandle) -> str:
        """Textual IR of a committed unit."""
        return str(self.units[handle.symbol])

    def module_ir(self) -> str:
        """Link every committed unit into one module and return its IR."""
        shell = ll.Module(name=self.module_name)
        shell.triple = self.triple
        linked = llvm.parse_assembly(str(shell))
        for unit in self.units.values():
            linked.link_in(llvm.parse_assembly(str(unit)))
        linked.verify()
        return str(linked)

    # JIT

    def evaluate(self, handle: FunctionHandle) -> float:
        """
        JIT compile and run a committed function taking no arguments.

        Raises:
            EvaluationError: If the function or anything it calls can't run
        """
        if not handle.defined:
            raise create_not_evaluable_error(handle.display_name, "function has no body")
        if handle.arity:
            raise create_not_evaluable_error(handle.display_name, "function takes arguments")

        engine = self._get_engine()
        for symbol in self._collect_units(handle.symbol):
            if symbol not in self._loaded:
                module = llvm.parse_assembly(str(self.units[symbol]))
                module.verify()
                engine.add_module(module)
                self._loaded[symbol] = module
        engine.finalize_object()

        address = engine.get_function_address(handle.symbol)
        result = ctypes.CFUNCTYPE(ctypes.c_double)(address)()

        # Nothing can call an anonymous function, so it isn't kept loaded
        if handle.is_anonymous:
            engine.remove_module(self._loaded.pop(handle.symbol))
        return result

    def _collect_units(self, symbol: str) -> List[str]:
        """Symbols of every committed unit reachable from `symbol`, callees first."""
        order: List[str] = []
        seen: Set[str] = set()
        stack = [symbol]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            order.append(current)
            for function in self.units[current].functions:
                if not function.is_declaration:
                    continue
                if function.name in self.units:
                    stack.append(function.name)
                elif llvm.address_of_symbol(function.name) is None:
                    raise create_unresolved_symbol_error(function.name)
        order.reverse()
        return order

    def _get_engine(self):
        if self._engine is None:
            target = llvm.Target.from_triple(self.triple)
            self._target_machine = target.create_target_machine()
            # Creating the engine also makes process symbols (libm etc.)
            # visible to address_of_symbol
            backing = llvm.parse_assembly("")
            self._engine = llvm.create_mcjit_compiler(backing, self._target_machine)
        return self._engine

    # Helpers

    def _builder(self) -> ll.IRBuilder:
        if self.context.builder is None:
            raise RuntimeError("No function body is open")
        return self.context.builder

    def _declare_in(self, module: ll.Module, handle: FunctionHandle) -> ll.Function:
        """Get or add the declaration of `handle` in `module`."""
        existing = module.globals.get(handle.symbol)
        if existing is not None:
            return existing
        fnty = ll.FunctionType(DOUBLE, [DOUBLE] * handle.arity)
        function = ll.Function(module, fnty, name=handle.symbol)
        for arg, name in zip(function.args, handle.params):
            arg.name = name
        return function
