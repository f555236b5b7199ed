"""
Kaleido Backend Package.

LLVM code generation and JIT execution via llvmlite.

Author: xwest
"""

from .llvm_backend import LLVMBackend, FunctionHandle, ANONYMOUS_SYMBOL
from .errors import BackendError, VerificationError, EvaluationError, BACKEND_ERROR_CODES

__all__ = [
    'LLVMBackend',
    'FunctionHandle',
    'ANONYMOUS_SYMBOL',
    'BackendError',
    'VerificationError',
    'EvaluationError',
    'BACKEND_ERROR_CODES',
]
