"""
Backend error handling for Kaleido.

Author: xwest
"""

from typing import Optional

from ..lexer.errors import Diagnostic


class BackendError(Exception):
    """Exception raised by the IR backend after lowering succeeded."""

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=None,
            severity="error",
            code=code,
        )
        # Raw LLVM output, if any
        self.details = details

    def __str__(self) -> str:
        return str(self.diagnostic)


class VerificationError(BackendError):
    """Generated IR for a function failed LLVM verification."""
    pass


class EvaluationError(BackendError):
    """A function could not be JIT compiled or run."""
    pass


BACKEND_ERROR_CODES = {
    "B001": "Function failed verification",
    "B002": "Function could not be evaluated",
}


def create_verification_error(function_name: str, details: str) -> VerificationError:
    """Create an error for a function rejected by the LLVM verifier."""
    first_line = details.strip().splitlines()[0] if details.strip() else "invalid IR"
    return VerificationError(
        message=f"Function '{function_name}' failed verification: {first_line}",
        code="B001",
        details=details,
    )


def create_unresolved_symbol_error(symbol: str) -> EvaluationError:
    """Create an error for an extern with no definition and no process symbol."""
    return EvaluationError(
        message=f"Cannot evaluate: no definition found for '{symbol}'",
        code="B002",
    )


def create_not_evaluable_error(function_name: str, reason: str) -> EvaluationError:
    """Create an error for a function that can't be run as a top-level expression."""
    return EvaluationError(
        message=f"Cannot evaluate '{function_name}': {reason}",
        code="B002",
    )
