"""
Kaleido Lexer Package

Pull-based lexical analyzer for the Kaleido language. Produces one token per
call, reading the input character by character so it works the same on
strings, files and stdin.

Author: xwest
"""

from .tokens import Token, TokenType, SourceLocation, KEYWORDS
from .lexer import Lexer, tokenize_string
from .errors import Diagnostic, LexerWarning

__all__ = [
    "Lexer",
    "Token",
    "TokenType",
    "SourceLocation",
    "KEYWORDS",
    "Diagnostic",
    "LexerWarning",
    "tokenize_string",
]
