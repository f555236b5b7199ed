"""
Kaleido IR Generation Package

Lowers the AST to LLVM IR through the backend, one top-level construct at
a time.

Author: xwest
"""

from .ir_generator import IRGenerator, IRGenContext, generate_ir

__all__ = [
    "IRGenerator",
    "IRGenContext",
    "generate_ir",
]
