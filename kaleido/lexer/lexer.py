"""
Kaleido Lexer - turns a character stream into tokens, one at a time

The lexer is pull-based: the parser asks for the next token and the lexer
reads just enough characters to produce it. There's exactly one character
of lookahead (`last_char`), no pushback.

Works on strings and on any text stream (stdin included), which is why it
reads one character at a time instead of slurping the input.

xwest
"""

import re
from io import StringIO
from typing import List, TextIO, Union

from .tokens import Token, TokenType, SourceLocation, KEYWORDS
from .errors import LexerWarning, create_malformed_number_warning


# Value read at end of input (what `read(1)` returns)
EOF_CHAR = ''

# The part of a digits-and-dots run that strtod would actually consume
NUMBER_PREFIX_PATTERN = re.compile(r'\d+(?:\.\d*)?')


def _is_letter(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_digit(char: str) -> bool:
    return char.isascii() and char.isdigit()


def _is_alphanumeric(char: str) -> bool:
    return char.isascii() and char.isalnum()


class Lexer:
    """
    Kaleido lexical analyzer.

    Call `next_token()` to advance; it returns the token it just produced.
    Malformed numbers are accepted and recorded as warnings.
    """

    def __init__(self, source: Union[str, TextIO], filename: str = "<stdin>"):
        """
        Initialize the lexer.

        Args:
            source: Source code string or a readable text stream
            filename: Name of source for error reporting
        """
        self.stream = StringIO(source) if isinstance(source, str) else source
        self.filename = filename
        self.warnings: List[LexerWarning] = []

        # Position of `last_char`. We start on a virtual blank before the
        # first real character.
        self.line = 1
        self.column = 0
        self.offset = -1
        self.last_char = ' '

    def next_token(self) -> Token:
        """Scan and return the next token from the input."""
        while True:
            while self.last_char.isspace():
                self._advance()

            location = self._location()

            # Identifiers and keywords: [a-zA-Z][a-zA-Z0-9]*
            if _is_letter(self.last_char):
                return self._tokenize_identifier_or_keyword(location)

            # Numbers: [0-9][0-9.]*
            if _is_digit(self.last_char):
                return self._tokenize_number(location)

            # Comment until end of line. Loop around for the real token; a
            # comment that runs into end of input falls through to EOF.
            if self.last_char == '#':
                self._skip_comment()
                continue

            if self.last_char == EOF_CHAR:
                return Token(TokenType.EOF, "", None, location)

            char = self.last_char
            self._advance()
            return Token(TokenType.CHAR, char, None, location)

    def tokenize(self) -> List[Token]:
        """
        Drain the input.

        Returns:
            List of tokens including the final EOF token
        """
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.is_eof:
                return tokens

    def _tokenize_identifier_or_keyword(self, location: SourceLocation) -> Token:
        chars = [self.last_char]
        self._advance()
        while _is_alphanumeric(self.last_char):
            chars.append(self.last_char)
            self._advance()

        lexeme = ''.join(chars)
        token_type = KEYWORDS.get(lexeme, TokenType.IDENTIFIER)
        value = lexeme if token_type == TokenType.IDENTIFIER else None
        return Token(token_type, lexeme, value, location)

    def _tokenize_number(self, location: SourceLocation) -> Token:
        chars = [self.last_char]
        self._advance()
        while _is_digit(self.last_char) or self.last_char == '.':
            chars.append(self.last_char)
            self._advance()

        lexeme = ''.join(chars)
        # No check for a second '.', like strtod we just stop where the
        # number stops making sense: "1.2.3" is 1.2
        prefix = NUMBER_PREFIX_PATTERN.match(lexeme).group(0)
        value = float(prefix)
        if prefix != lexeme:
            self.warnings.append(create_malformed_number_warning(lexeme, value, location))

        return Token(TokenType.NUMBER, lexeme, value, location)

    def _skip_comment(self):
        """Skip from '#' up to and including the end of the line."""
        self._advance()
        while self.last_char not in (EOF_CHAR, '\n', '\r'):
            self._advance()
        if self.last_char != EOF_CHAR:
            self._advance()

    def _advance(self):
        """Read the next character into `last_char`, updating line/column."""
        if self.last_char == EOF_CHAR:
            return
        if self.last_char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.offset += 1
        self.last_char = self.stream.read(1)

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column, self.offset)

    def has_warnings(self) -> bool:
        """Check if lexer recorded any warnings."""
        return len(self.warnings) > 0


def tokenize_string(source: str, filename: str = "<string>") -> List[Token]:
    """
    Convenience function to tokenize a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting

    Returns:
        List of tokens, ending with EOF
    """
    return Lexer(source, filename).tokenize()
