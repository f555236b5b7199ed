"""
Kaleido Parser Package

Recursive descent parser with operator precedence climbing for binary
expressions. Builds the immutable AST defined in ast_nodes.

Author: xwest
"""

from .parser import Parser, parse_string, DEFAULT_MAX_DEPTH
from .ast_nodes import (
    ASTNode, ASTNodeType, Expression, NumberLiteral, Variable, BinaryOp, Call,
    Prototype, FunctionDefinition, TopLevel, ANONYMOUS_FUNCTION_NAME,
    BINOP_PRECEDENCE, NOT_A_BINARY_OPERATOR, get_binary_precedence, to_sexpr,
)
from .errors import ParseError, PARSER_ERROR_CODES

__all__ = [
    "Parser",
    "parse_string",
    "DEFAULT_MAX_DEPTH",
    "ASTNode",
    "ASTNodeType",
    "Expression",
    "NumberLiteral",
    "Variable",
    "BinaryOp",
    "Call",
    "Prototype",
    "FunctionDefinition",
    "TopLevel",
    "ANONYMOUS_FUNCTION_NAME",
    "BINOP_PRECEDENCE",
    "NOT_A_BINARY_OPERATOR",
    "get_binary_precedence",
    "to_sexpr",
    "ParseError",
    "PARSER_ERROR_CODES",
]
