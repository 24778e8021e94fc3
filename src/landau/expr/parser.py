"""
Parser for the LaTeX expression subset.

Converts a normalized infix token sequence into postfix (reverse Polish)
order using the shunting-yard algorithm. The postfix sequence is then
turned into a tree by ``landau.expr.ast.TreeBuilder``.

Precedence (lowest to highest):
1. Additive: +, -
2. Multiplicative: *, /
3. Superscript: ^

Every binary operator pops stack entries of greater or equal
precedence before it is pushed, so all operators are left-associative,
superscript included: ``2^3^2`` is ``(2^3)^2``.
"""

import logging
from typing import Dict, List, Optional

from .ast import Ast, build_ast
from .errors import ParseError
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .tokenizer import OPERAND_TYPES, Proto, Token, TokenType, tokenize

logger = logging.getLogger("landau.expr.parser")


PRECEDENCE: Dict[TokenType, int] = {
    TokenType.ADD: 1,
    TokenType.SUB: 1,
    TokenType.TIMES: 2,
    TokenType.DIV: 2,
    TokenType.SUPERSCRIPT: 3,
}


def _precedence(token: Token) -> int:
    # Parentheses weigh 0, so no operator ever pops past one
    return PRECEDENCE.get(token.type, 0)


class Parser:
    """Converts infix token sequences to postfix order."""

    def __init__(self, tokens: Proto, source: Optional[str] = None):
        self._tokens = tokens
        self._source = source

    def to_postfix(self) -> Proto:
        """Returns the tokens in postfix order, bindings last, ending with EOF."""
        postfix: Proto = []
        stack: List[Token] = []
        bindings: Proto = []
        end = Token(TokenType.EOF)

        for token in self._tokens:
            if token.type in OPERAND_TYPES:
                postfix.append(token)
            elif token.type == TokenType.LPAREN:
                stack.append(token)
            elif token.type == TokenType.RPAREN:
                self._close_group(token, stack, postfix)
            elif token.type in PRECEDENCE:
                while stack and _precedence(stack[-1]) >= _precedence(token):
                    postfix.append(stack.pop())
                stack.append(token)
            elif token.type == TokenType.VAR_BINDING:
                bindings.append(token)
            elif token.type == TokenType.EOF:
                end = token
                break
            else:
                raise self._unexpected(token)

        while stack:
            token = stack.pop()
            if token.type == TokenType.LPAREN:
                raise ParseError("Unclosed '('", token.position, self._source)
            postfix.append(token)

        postfix.extend(bindings)
        postfix.append(end)
        return postfix

    def _close_group(self, token: Token, stack: List[Token], postfix: Proto) -> None:
        while stack and stack[-1].type != TokenType.LPAREN:
            postfix.append(stack.pop())
        if not stack:
            raise ParseError("Unbalanced ')'", token.position, self._source)
        stack.pop()

    def _unexpected(self, token: Token) -> ParseError:
        return ParseError(
            f"Unexpected token: {token.value or token.type.value}",
            token.position,
            self._source,
        )


def to_postfix(tokens: Proto, source: Optional[str] = None) -> Proto:
    """Converts an infix proto into postfix order."""
    return Parser(tokens, source).to_postfix()


def parse(
    source: str, limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS
) -> Ast:
    """
    Parses a LaTeX expression into an AST.

    Args:
        source: The expression to parse
        limits: Optional expression limits

    Returns:
        The parsed AST with its pending variable bindings

    Raises:
        TokenizerError: If tokenization fails
        ParseError: If the token sequence is not a well-formed expression
        BuildError: If the postfix sequence cannot form a single tree
    """
    tokens = tokenize(source, limits)
    postfix = to_postfix(tokens, source)
    ast = build_ast(postfix, source, limits)
    logger.debug(
        "Parsed %r: %d tokens, %d bindings", source, len(tokens), len(ast.bindings)
    )
    return ast
