"""
Abstract Syntax Tree node definitions for Kaleido.

The node set is closed: four expression variants plus the prototype and
function definition wrappers. Nodes are immutable and own their children,
so an AST is always a strict tree.

Author: xwest
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from ..lexer.tokens import SourceLocation, Token, TokenType


class ASTNodeType(Enum):
    """Enumeration of all AST node types."""

    # Expressions
    NUMBER_LITERAL = "NumberLiteral"
    VARIABLE = "Variable"
    BINARY_OP = "BinaryOp"
    CALL = "Call"

    # Top-level
    PROTOTYPE = "Prototype"
    FUNCTION_DEFINITION = "FunctionDefinition"


class ASTNode:
    """Base class for all AST nodes."""

    node_type: ASTNodeType

    def children(self) -> List['ASTNode']:
        """Get all child nodes."""
        return []

    def __str__(self) -> str:
        return to_sexpr(self)


class Expression(ASTNode):
    """Base class for expression nodes."""
    pass


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True, eq=True)
class NumberLiteral(Expression):
    """Numeric literal, always a double."""
    value: float
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.NUMBER_LITERAL


@dataclass(frozen=True, eq=True)
class Variable(Expression):
    """Reference to a function parameter."""
    name: str
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.VARIABLE


@dataclass(frozen=True, eq=True)
class BinaryOp(Expression):
    """Binary operation; `operator` is the single operator character."""
    operator: str
    lhs: Expression
    rhs: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.BINARY_OP

    def children(self) -> List[ASTNode]:
        return [self.lhs, self.rhs]


@dataclass(frozen=True, eq=True)
class Call(Expression):
    """Function call with positional arguments."""
    callee: str
    args: Tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.CALL

    def children(self) -> List[ASTNode]:
        return list(self.args)


# ============================================================================
# Top-level nodes
# ============================================================================

# Name of the prototype wrapping a bare top-level expression
ANONYMOUS_FUNCTION_NAME = ""


@dataclass(frozen=True, eq=True)
class Prototype(ASTNode):
    """
    A function's name and parameter names.

    Parameter order matters, arguments bind positionally. This is also the
    whole of an `extern` declaration.
    """
    name: str
    params: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.PROTOTYPE

    @property
    def is_anonymous(self) -> bool:
        return self.name == ANONYMOUS_FUNCTION_NAME

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True, eq=True)
class FunctionDefinition(ASTNode):
    """A prototype plus a body. The body expression is the return value."""
    prototype: Prototype
    body: Expression
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    node_type = ASTNodeType.FUNCTION_DEFINITION

    @property
    def name(self) -> str:
        return self.prototype.name

    def children(self) -> List[ASTNode]:
        return [self.prototype, self.body]


TopLevel = Union[FunctionDefinition, Prototype]


# ============================================================================
# Binary operator precedence
# ============================================================================

NOT_A_BINARY_OPERATOR = -1

# Higher binds tighter
BINOP_PRECEDENCE = {
    '<': 10,
    '+': 20,
    '-': 20,
    '*': 40,
}


def get_binary_precedence(token: Token) -> int:
    """Precedence of `token` as a binary operator, or NOT_A_BINARY_OPERATOR."""
    if token.type != TokenType.CHAR:
        return NOT_A_BINARY_OPERATOR
    return BINOP_PRECEDENCE.get(token.lexeme, NOT_A_BINARY_OPERATOR)


# ============================================================================
# Debug printing
# ============================================================================

def _format_number(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def to_sexpr(node: ASTNode) -> str:
    """
    Render a node as an S-expression.

    `1+2*3` becomes ``(+ 1 (* 2 3))``, `def f(x) x` becomes
    ``(def f (x) x)``.
    """
    if isinstance(node, Prototype):
        return f"(extern {node.name} ({' '.join(node.params)}))"
    elif isinstance(node, FunctionDefinition):
        if node.prototype.is_anonymous:
            return to_sexpr(node.body)
        params = ' '.join(node.prototype.params)
        return f"(def {node.name} ({params}) {to_sexpr(node.body)})"
    elif isinstance(node, Expression):
        return _expression_sexpr(node)
    raise TypeError(f"Unknown AST node: {node!r}")


def _expression_sexpr(expr: Expression) -> str:
    # Post-order walk with an explicit stack; operator chains can be very deep
    rendered: List[str] = []
    pending = [(expr, False)]
    while pending:
        node, expanded = pending.pop()
        if isinstance(node, NumberLiteral):
            rendered.append(_format_number(node.value))
        elif isinstance(node, Variable):
            rendered.append(node.name)
        elif isinstance(node, (BinaryOp, Call)):
            children = node.children()
            if not expanded:
                pending.append((node, True))
                pending.extend((child, False) for child in reversed(children))
                continue
            parts = rendered[len(rendered) - len(children):]
            del rendered[len(rendered) - len(parts):]
            head = node.operator if isinstance(node, BinaryOp) else f"call {node.callee}"
            rendered.append("(" + " ".join([head] + parts) + ")")
        else:
            raise TypeError(f"Unknown AST node: {node!r}")
    return rendered.pop()
