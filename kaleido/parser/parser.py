"""
Kaleido recursive descent parser

Expressions are parsed with operator precedence climbing; everything else
(prototypes, definitions, externs) is plain recursive descent. The parser
pulls tokens from the lexer on demand and keeps exactly one token of
lookahead in `current`.

Author: xwest
"""

from typing import List, Optional

from ..lexer.lexer import Lexer
from ..lexer.tokens import Token, TokenType
from .ast_nodes import (
    Expression, NumberLiteral, Variable, BinaryOp, Call, Prototype,
    FunctionDefinition, TopLevel, ANONYMOUS_FUNCTION_NAME, get_binary_precedence,
)
from .errors import (
    create_unexpected_token_error, create_missing_token_error,
    create_invalid_argument_list_error, create_nesting_too_deep_error,
)


# Maximum nesting of parenthesised expressions and call argument lists.
# Each level costs a handful of Python frames.
DEFAULT_MAX_DEPTH = 128


class Parser:
    """
    Kaleido parser.

    The parser does not read anything on construction. Call `next_token()`
    once to load the first token, then dispatch on `current`; the driver does
    exactly that. Every parse_* method expects `current` to be the first
    token of its construct and leaves `current` on the token after it.
    """

    def __init__(self, lexer: Lexer, max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the parser.

        Args:
            lexer: Token source
            max_depth: Maximum nesting of '(' and call arguments
        """
        self.lexer = lexer
        self.max_depth = max_depth
        self.current: Optional[Token] = None
        self._depth = 0

    def next_token(self) -> Token:
        """Advance to the next token and return it."""
        self.current = self.lexer.next_token()
        return self.current

    # Expressions

    def parse_expression(self) -> Expression:
        """expression := primary (binary_op primary)*"""
        lhs = self.parse_primary()
        return self.parse_bin_op_rhs(0, lhs)

    def parse_primary(self) -> Expression:
        """Dispatch on the current token to the right primary parser."""
        token = self.current
        if token.is_identifier:
            return self.parse_identifier_expr()
        elif token.type == TokenType.NUMBER:
            return self.parse_number_expr()
        elif token.is_char('('):
            return self.parse_paren_expr()
        raise create_unexpected_token_error(token)

    def parse_identifier_expr(self) -> Expression:
        """identifier | identifier '(' arg_list? ')'"""
        name_token = self.current
        name = name_token.lexeme
        self.next_token()

        if not self.current.is_char('('):
            return Variable(name, location=name_token.location)

        self.next_token()  # eat '('
        args: List[Expression] = []
        self._enter_nesting()
        try:
            if not self.current.is_char(')'):
                while True:
                    args.append(self.parse_expression())
                    if self.current.is_char(')'):
                        break
                    if not self.current.is_char(','):
                        raise create_invalid_argument_list_error(self.current)
                    self.next_token()  # eat ','
        finally:
            self._leave_nesting()

        self.next_token()  # eat ')'
        return Call(name, tuple(args), location=name_token.location)

    def parse_number_expr(self) -> NumberLiteral:
        """number"""
        token = self.current
        self.next_token()
        return NumberLiteral(token.value, location=token.location)

    def parse_paren_expr(self) -> Expression:
        """'(' expression ')'"""
        self.next_token()  # eat '('
        self._enter_nesting()
        try:
            expr = self.parse_expression()
        finally:
            self._leave_nesting()

        if not self.current.is_char(')'):
            raise create_missing_token_error(')', self.current)
        self.next_token()  # eat ')'
        return expr

    def parse_bin_op_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        Fold `(binary_op primary)*` onto `lhs`.

        Only operators binding at least as tightly as `min_precedence` are
        consumed here; looser ones are left for the caller.
        """
        while True:
            precedence = get_binary_precedence(self.current)
            if precedence < min_precedence:
                return lhs

            op_token = self.current
            self.next_token()  # eat operator

            rhs = self.parse_primary()

            # If the next operator binds tighter, it takes rhs as its lhs
            next_precedence = get_binary_precedence(self.current)
            if precedence < next_precedence:
                rhs = self.parse_bin_op_rhs(precedence + 1, rhs)

            lhs = BinaryOp(op_token.lexeme, lhs, rhs, location=lhs.location)

    # Top-level constructs

    def parse_prototype(self) -> Prototype:
        """prototype := identifier '(' identifier* ')'"""
        name_token = self.current
        if not name_token.is_identifier:
            raise create_missing_token_error("function name", name_token, "in prototype")
        self.next_token()

        if not self.current.is_char('('):
            raise create_missing_token_error('(', self.current, "in prototype")

        params: List[str] = []
        while self.next_token().is_identifier:
            params.append(self.current.lexeme)

        if not self.current.is_char(')'):
            raise create_missing_token_error(')', self.current, "in prototype")
        self.next_token()  # eat ')'

        return Prototype(name_token.lexeme, tuple(params), location=name_token.location)

    def parse_definition(self) -> FunctionDefinition:
        """definition := 'def' prototype expression"""
        def_token = self.current
        self.next_token()  # eat 'def'
        prototype = self.parse_prototype()
        body = self.parse_expression()
        return FunctionDefinition(prototype, body, location=def_token.location)

    def parse_extern(self) -> Prototype:
        """extern_decl := 'extern' prototype"""
        self.next_token()  # eat 'extern'
        return self.parse_prototype()

    def parse_top_level_expr(self) -> FunctionDefinition:
        """Wrap a bare expression in an anonymous zero-argument function."""
        location = self.current.location
        body = self.parse_expression()
        prototype = Prototype(ANONYMOUS_FUNCTION_NAME, (), location=location)
        return FunctionDefinition(prototype, body, location=location)

    def parse_top_level(self) -> Optional[TopLevel]:
        """
        Parse the next top-level construct, skipping ';' separators.

        Returns:
            The parsed construct, or None at end of input
        """
        while self.current.is_char(';'):
            self.next_token()

        if self.current.is_eof:
            return None
        elif self.current.type == TokenType.DEF:
            return self.parse_definition()
        elif self.current.type == TokenType.EXTERN:
            return self.parse_extern()
        return self.parse_top_level_expr()

    # Nesting guard

    def _enter_nesting(self):
        if self._depth >= self.max_depth:
            raise create_nesting_too_deep_error(self.max_depth, self.current)
        self._depth += 1

    def _leave_nesting(self):
        self._depth -= 1


def parse_string(source: str, filename: str = "<string>",
                 max_depth: int = DEFAULT_MAX_DEPTH) -> List[TopLevel]:
    """
    Convenience function to parse a source string.

    Args:
        source: Source code string
        filename: Filename for error reporting
        max_depth: Parser nesting limit

    Returns:
        Every top-level construct, in source order

    Raises:
        ParseError: On the first syntax error
    """
    parser = Parser(Lexer(source, filename), max_depth=max_depth)
    parser.next_token()

    items: List[TopLevel] = []
    while True:
        item = parser.parse_top_level()
        if item is None:
            return items
        items.append(item)
