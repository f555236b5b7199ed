"""
Kaleido Analyzer Package

Name resolution support for code generation: the parameter symbol table and
the semantic errors raised while lowering.

Author: xwest
"""

from .symbol_table import SymbolTable
from .errors import (
    SemanticError, UndefinedSymbolError, RedefinitionError,
    ArityMismatchError, InvalidOperatorError, SEMANTIC_ERROR_CODES,
)

__all__ = [
    "SymbolTable",
    "SemanticError",
    "UndefinedSymbolError",
    "RedefinitionError",
    "ArityMismatchError",
    "InvalidOperatorError",
    "SEMANTIC_ERROR_CODES",
]
