"""
Error handling for the Kaleido parser.

The parser stops at the first syntax error in a top-level construct and
raises ParseError. Recovery (skipping input) is the driver's job.

Author: xwest
"""

from typing import Optional, Union

from ..lexer.tokens import Token, SourceLocation
from ..lexer.errors import Diagnostic


class ParseError(Exception):
    """
    Exception raised when the parser encounters a syntax error.

    Contains detailed diagnostic information for error reporting.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation],
        token: Optional[Token] = None,
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
        self.token = token

    def __str__(self) -> str:
        return str(self.diagnostic)


# Common parser error codes for categorization
PARSER_ERROR_CODES = {
    "P001": "Unexpected token",
    "P002": "Expected token not found",
    "P005": "Invalid expression",
    "P013": "Expression nested too deeply",
}


def _describe(expected: Union[str, Token]) -> str:
    return f"'{expected}'" if isinstance(expected, str) and len(expected) == 1 else str(expected)


def create_unexpected_token_error(found: Token) -> ParseError:
    """Create an error for a token that can't start an expression."""
    return ParseError(
        message=f"Unknown token {found} when expecting an expression",
        location=found.location,
        token=found,
        code="P005",
    )


def create_missing_token_error(expected: str, found: Token, context: Optional[str] = None) -> ParseError:
    """Create an error for a missing expected token, e.g. Expected ')'."""
    message = f"Expected {_describe(expected)}"
    if context:
        message += f" {context}"
    return ParseError(
        message=message,
        location=found.location,
        token=found,
        code="P002",
    )


def create_invalid_argument_list_error(found: Token) -> ParseError:
    """Create an error for a call argument list that isn't ',' or ')' separated."""
    return ParseError(
        message="Expected ')' or ',' in argument list",
        location=found.location,
        token=found,
        code="P001",
    )


def create_nesting_too_deep_error(max_depth: int, found: Token) -> ParseError:
    """Create an error for input nested beyond the parser's limit."""
    return ParseError(
        message=f"Expression nested more than {max_depth} levels deep",
        location=found.location,
        token=found,
        code="P013",
    )
