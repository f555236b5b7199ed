"""
IR Generator for Kaleido.

Lowers the AST one top-level construct at a time through an LLVMBackend.
Name resolution happens here: variables resolve against the parameters of
the function being generated, calls against the backend's declarations.

Author: xwest
"""

from dataclasses import dataclass, field
from typing import Optional

from ..parser.ast_nodes import (
    Expression, NumberLiteral, Variable, BinaryOp, Call, Prototype,
    FunctionDefinition, TopLevel,
)
from ..analyzer.symbol_table import SymbolTable
from ..analyzer.errors import (
    create_unknown_variable_error, create_unknown_function_error,
    create_function_redefinition_error, create_arity_mismatch_error,
    create_redeclaration_arity_error, create_invalid_operator_error,
)
from ..backend.llvm_backend import LLVMBackend, FunctionHandle


@dataclass
class IRGenContext:
    """Context for IR generation."""
    current_function: Optional[FunctionHandle] = None
    symbols: SymbolTable = field(default_factory=SymbolTable)


class IRGenerator:
    """
    Generates backend IR from Kaleido AST.

    Each call to `generate` handles one top-level construct. A definition
    either lands completely or leaves no trace, apart from an earlier
    extern for the same name.
    """

    def __init__(self, backend: Optional[LLVMBackend] = None):
        self.backend = backend if backend is not None else LLVMBackend()
        self.context = IRGenContext()

        # Operator character to backend constructor
        self.binary_ops = {
            '+': self.backend.add,
            '-': self.backend.sub,
            '*': self.backend.mul,
            '<': self.backend.less_than,
        }

    def generate(self, item: TopLevel) -> FunctionHandle:
        """
        Lower a definition or extern.

        Returns:
            The handle of the declared or defined function

        Raises:
            SemanticError: If a name doesn't resolve or a declaration conflicts
            BackendError: If the generated function fails verification
        """
        if isinstance(item, FunctionDefinition):
            return self._generate_function(item)
        elif isinstance(item, Prototype):
            return self._generate_prototype(item)
        raise TypeError(f"Not a top-level construct: {item!r}")

    def _generate_prototype(self, proto: Prototype) -> FunctionHandle:
        existing = self.backend.lookup_function(proto.name)
        if existing is not None and existing.arity != proto.arity:
            raise create_redeclaration_arity_error(proto.name, existing.arity, proto.arity, proto)
        return self.backend.declare_function(proto.name, proto.params)

    def _generate_function(self, func_def: FunctionDefinition) -> FunctionHandle:
        proto = func_def.prototype

        handle = None
        if not proto.is_anonymous:
            handle = self.backend.lookup_function(proto.name)

        created = handle is None
        if created:
            handle = self.backend.declare_function(proto.name, proto.params)
        elif handle.defined:
            raise create_function_redefinition_error(proto.name, func_def)
        elif handle.arity != proto.arity:
            raise create_redeclaration_arity_error(proto.name, handle.arity, proto.arity, proto)

        try:
            args = self.backend.open_function_body(handle)
            self.context = IRGenContext(current_function=handle)
            self.context.symbols.bind_parameters(proto.params, args, proto)

            self.backend.set_return(self.generate_expression(func_def.body))
            self.backend.finalize_function(handle)
        except Exception:
            self.backend.discard_function(handle, forget_declaration=created)
            raise
        finally:
            self.context = IRGenContext()

        return handle

    def generate_expression(self, expr: Expression):
        """
        Lower an expression inside the open function body, returning its value.

        Operands are lowered left to right with an explicit work stack, so
        operator chains of any length lower without deep Python recursion.
        """
        values = []
        pending = [(expr, None)]
        while pending:
            node, ready = pending.pop()
            if isinstance(node, NumberLiteral):
                values.append(self.backend.constant(node.value))
            elif isinstance(node, Variable):
                values.append(self._generate_variable(node))
            elif isinstance(node, (BinaryOp, Call)):
                if ready is None:
                    # Revisit the node once all of its operands have values
                    pending.append((node, self._prepare(node)))
                    pending.extend((child, None) for child in reversed(node.children()))
                    continue
                operands = values[len(values) - len(node.children()):]
                del values[len(values) - len(operands):]
                values.append(ready(*operands) if isinstance(node, BinaryOp)
                              else self.backend.call(ready, operands))
            else:
                raise TypeError(f"Not an expression: {node!r}")
        return values.pop()

    def _prepare(self, node):
        """Check an operator or call before its operands are lowered."""
        if isinstance(node, BinaryOp):
            return self._binary_builder(node)
        return self._resolve_callee(node)

    def _generate_variable(self, var: Variable):
        value = self.context.symbols.lookup(var.name)
        if value is None:
            raise create_unknown_variable_error(var.name, var)
        return value

    def _binary_builder(self, binary_op: BinaryOp):
        build = self.binary_ops.get(binary_op.operator)
        if build is None:
            raise create_invalid_operator_error(binary_op.operator, binary_op)
        return build

    def _resolve_callee(self, call: Call) -> FunctionHandle:
        callee = self.backend.lookup_function(call.callee)
        if callee is None:
            raise create_unknown_function_error(call.callee, call)
        if callee.arity != len(call.args):
            raise create_arity_mismatch_error(call.callee, callee.arity, len(call.args), call)
        return callee


def generate_ir(item: TopLevel, backend: Optional[LLVMBackend] = None) -> FunctionHandle:
    """
    Convenience function to lower one construct with a fresh generator.

    Args:
        item: Definition or extern
        backend: Backend to lower into, a new one if omitted

    Returns:
        The handle of the declared or defined function
    """
    return IRGenerator(backend).generate(item)
