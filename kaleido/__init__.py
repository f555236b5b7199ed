"""
Kaleido Compiler Package

A small front end for the Kaleido toy language: doubles, functions,
externs, four binary operators. Source is lexed, parsed and lowered to
LLVM IR through llvmlite, and top-level expressions can be run with the
LLVM JIT.

Architecture:
    kaleido/
    ├── lexer/           # Tokenization
    ├── parser/          # AST and precedence climbing parser
    ├── analyzer/        # Parameter symbol table and semantic errors
    ├── ir/              # AST to IR lowering
    ├── backend/         # llvmlite IR building, verification and JIT
    └── driver.py        # Top-level loop

Author: xwest
License: MIT
"""

__version__ = "0.1.0"
__author__ = "xwest"
__license__ = "MIT"

from .lexer import Lexer
from .parser import Parser
from .ir import IRGenerator
from .backend import LLVMBackend
from .driver import Driver, DriverOptions

__all__ = [
    # Core classes
    "Lexer",
    "Parser",
    "IRGenerator",
    "LLVMBackend",
    "Driver",
    "DriverOptions",

    # Version info
    "__version__",
]
