"""
Diagnostics for the Kaleido lexer.

The lexer never rejects input: anything it can't classify becomes a
single-character token for the parser to complain about. What it can do is
warn, e.g. when a numeric literal has more than one decimal point.

Author: xwest
"""

from typing import Optional
from dataclasses import dataclass
from .tokens import SourceLocation


@dataclass
class Diagnostic:
    """A single diagnostic (error, warning) produced by any compiler stage."""
    message: str
    location: Optional[SourceLocation]
    severity: str  # "error", "warning"
    code: Optional[str] = None

    def __str__(self) -> str:
        return self.render()

    def render(self, show_location: bool = False) -> str:
        """Format as one line, e.g. ``Error: Expected ')'``."""
        result = f"{self.severity.capitalize()}: {self.message}"
        if show_location and self.location is not None:
            result += f" ({self.location})"
        return result


class LexerWarning:
    """
    Represents a lexer warning that doesn't stop compilation.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation,
        code: Optional[str] = None,
    ):
        self.diagnostic = Diagnostic(
            message=message,
            location=location,
            severity="warning",
            code=code,
        )

    @property
    def message(self) -> str:
        return self.diagnostic.message

    def __str__(self) -> str:
        return str(self.diagnostic)


# Warning codes for categorization
ERROR_CODES = {
    "L003": "Malformed numeric literal",
}


def create_malformed_number_warning(lexeme: str, value: float, location: SourceLocation) -> LexerWarning:
    """Create a warning for a numeric literal that was only partially used."""
    return LexerWarning(
        message=f"Malformed numeric literal '{lexeme}' read as {value!r}",
        location=location,
        code="L003",
    )
