"""
Semantic error handling for Kaleido.

Errors raised while resolving names and lowering the AST: unknown
variables and functions, redefinitions, argument count mismatches.

Author: xwest
"""

from typing import Optional

from ..lexer.tokens import SourceLocation
from ..lexer.errors import Diagnostic
from ..parser.ast_nodes import ASTNode


class SemanticError(Exception):
    """
    Exception raised when lowering a top-level construct fails.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        node: Optional[ASTNode] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="error",
            code=code,
        )
        self.node = node

    def __str__(self) -> str:
        return str(self.diagnostic)


class UndefinedSymbolError(SemanticError):
    """A variable or function name that doesn't resolve."""
    pass


class RedefinitionError(SemanticError):
    """A function body or parameter name bound twice."""
    pass


class ArityMismatchError(SemanticError):
    """Argument or parameter count disagrees with a declaration."""
    pass


class InvalidOperatorError(SemanticError):
    """A binary operator the code generator can't lower."""
    pass


# Common semantic error codes for categorization
SEMANTIC_ERROR_CODES = {
    "S010": "Undefined symbol",
    "S011": "Symbol redefinition",
    "S015": "Argument count mismatch",
    "S016": "Invalid binary operator",
}


def _location_of(node: Optional[ASTNode]) -> Optional[SourceLocation]:
    return getattr(node, "location", None)


def create_unknown_variable_error(name: str, node: Optional[ASTNode] = None) -> UndefinedSymbolError:
    """Create an error for a variable that isn't a parameter of the current function."""
    return UndefinedSymbolError(
        message=f"Unknown variable name '{name}'",
        location=_location_of(node),
        node=node,
        code="S010",
    )


def create_unknown_function_error(name: str, node: Optional[ASTNode] = None) -> UndefinedSymbolError:
    """Create an error for a call to a function that was never declared."""
    return UndefinedSymbolError(
        message=f"Unknown function referenced '{name}'",
        location=_location_of(node),
        node=node,
        code="S010",
    )


def create_function_redefinition_error(name: str, node: Optional[ASTNode] = None) -> RedefinitionError:
    """Create an error for a second body attached to the same function."""
    return RedefinitionError(
        message=f"Function '{name}' cannot be redefined",
        location=_location_of(node),
        node=node,
        code="S011",
    )


def create_duplicate_parameter_error(name: str, node: Optional[ASTNode] = None) -> RedefinitionError:
    """Create an error for a parameter name used twice in one prototype."""
    return RedefinitionError(
        message=f"Duplicate parameter name '{name}'",
        location=_location_of(node),
        node=node,
        code="S011",
    )


def create_arity_mismatch_error(
    function_name: str,
    expected_args: int,
    actual_args: int,
    node: Optional[ASTNode] = None,
) -> ArityMismatchError:
    """Create an error for a call with the wrong number of arguments."""
    return ArityMismatchError(
        message=f"Function '{function_name}' expects {expected_args} arguments, got {actual_args}",
        location=_location_of(node),
        node=node,
        code="S015",
    )


def create_redeclaration_arity_error(
    function_name: str,
    declared_params: int,
    new_params: int,
    node: Optional[ASTNode] = None,
) -> ArityMismatchError:
    """Create an error for a prototype whose parameter count changed."""
    return ArityMismatchError(
        message=(f"Function '{function_name}' was declared with {declared_params} "
                 f"parameters, redeclared with {new_params}"),
        location=_location_of(node),
        node=node,
        code="S015",
    )


def create_invalid_operator_error(operator: str, node: Optional[ASTNode] = None) -> InvalidOperatorError:
    """Create an error for a binary operator with no lowering."""
    return InvalidOperatorError(
        message=f"Invalid binary operator '{operator}'",
        location=_location_of(node),
        node=node,
        code="S016",
    )
