"""
Token definitions for the Kaleido lexer.

The language only has a handful of token kinds:
- End of input
- The two keywords (`def`, `extern`)
- Identifiers and number literals
- Any other single character (operators and punctuation)

Author: xwest
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any


class TokenType(Enum):
    """Enumeration of all token types in Kaleido."""

    EOF = auto()                    # End of input

    # Keywords
    DEF = auto()                    # def
    EXTERN = auto()                 # extern

    # Primary tokens
    IDENTIFIER = auto()             # foo, x1
    NUMBER = auto()                 # 42, 3.14

    # Everything else is handed to the parser as a raw character:
    # ( ) , ; + - * < = and so on
    CHAR = auto()


@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in the source code.

    Used for error reporting.
    """
    filename: str
    line: int
    column: int
    offset: int  # Character offset from start of input

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def __repr__(self) -> str:
        return f"SourceLocation({self.filename!r}, {self.line}, {self.column}, {self.offset})"


@dataclass(frozen=True)
class Token:
    """
    Represents a lexical token in the Kaleido language.

    Identifier tokens carry their text as value, number tokens carry the
    parsed float. CHAR tokens carry the character itself as lexeme.
    """
    type: TokenType
    lexeme: str                     # Raw text from source
    value: Any                      # Parsed value (str for IDENTIFIER, float for NUMBER)
    location: SourceLocation

    def __str__(self) -> str:
        if self.type == TokenType.CHAR:
            return repr(self.lexeme)
        if self.type == TokenType.EOF:
            return "end of input"
        if self.value is not None and self.value != self.lexeme:
            return f"{self.type.name}({self.lexeme!r} -> {self.value!r})"
        return f"{self.type.name}({self.lexeme!r})"

    def __repr__(self) -> str:
        return (f"Token({self.type.name}, {self.lexeme!r}, "
                f"{self.value!r}, {self.location!r})")

    def is_char(self, char: str) -> bool:
        """Check if this is the single-character token `char`."""
        return self.type == TokenType.CHAR and self.lexeme == char

    @property
    def is_identifier(self) -> bool:
        """Check if this token is an identifier."""
        return self.type == TokenType.IDENTIFIER

    @property
    def is_eof(self) -> bool:
        return self.type == TokenType.EOF


# Keyword lookup table used by the lexer after it has read a word
KEYWORDS = {
    "def": TokenType.DEF,
    "extern": TokenType.EXTERN,
}
