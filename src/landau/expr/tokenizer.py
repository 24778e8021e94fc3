"""
Tokenizer (lexer) for the LaTeX expression subset.

Converts a single LaTeX expression into a normalized token sequence
(a "proto") for the parser. Scanning dispatches on one character at a
time; commands introduced by a backslash are read together with their
``[optional]`` and ``{required}`` argument blocks.

After the raw scan the token sequence is normalized:

- empty expressions (``{}`` separators, decorative ``\\left``/``\\right``)
  are dropped;
- big operators (``\\int``, ``\\sum``, ``\\prod``) absorb the subscript and
  superscript that follow them as ``[lower, upper]`` optional arguments.
  Only argument blocks written before the bounds belong to the operator:
  ``\\int{1}{4}{9}_0^2`` passes three samples, while in
  ``\\int_0^2{1}{4}{9}`` the blocks are separate operands;
- ``\\var{name=value}`` bindings are moved, in order, to the end of the
  sequence just before the terminating EOF token.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import TokenizerError
from .limits import ExpressionLimits, check_expression_length, check_function_arg_count

logger = logging.getLogger("landau.expr.tokenizer")


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Operands
    EXPRESSION = "EXPRESSION"
    FUNCTION = "FUNCTION"

    # Operators
    EQUAL = "EQUAL"
    ADD = "ADD"
    SUB = "SUB"
    TIMES = "TIMES"
    DIV = "DIV"
    SUPERSCRIPT = "SUPERSCRIPT"
    SUBSCRIPT = "SUBSCRIPT"

    # Delimiters
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    RBRACE = "RBRACE"
    DOT = "DOT"
    COMMA = "COMMA"

    # Special
    VAR_BINDING = "VAR_BINDING"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """
    A token produced by the tokenizer.

    ``value`` holds the expression text, the function name, the
    superscript/subscript content or the raw ``name=value`` binding,
    depending on the token type. Only function tokens carry arguments.
    """

    type: TokenType
    value: str = ""
    optional_args: Tuple[str, ...] = ()
    required_args: Tuple[str, ...] = ()
    position: int = field(default=0, compare=False)


# A token sequence, in infix or postfix order.
Proto = List[Token]

# Tokens that become tree leaves
OPERAND_TYPES = (TokenType.EXPRESSION, TokenType.FUNCTION)

# Tokens that combine operands; a superscript carries its own exponent
BINARY_OPERATOR_TYPES = (
    TokenType.ADD,
    TokenType.SUB,
    TokenType.TIMES,
    TokenType.DIV,
    TokenType.SUPERSCRIPT,
)


SENTINEL = "\0"

# Commands whose subscript/superscript are their bounds
BIG_OPERATORS = frozenset({"int", "sum", "prod"})

# Sizing hints with no arithmetic meaning
DECORATIVE_COMMANDS = frozenset({"left", "right", "big", "Big", "bigg", "Bigg"})

VAR_COMMAND = "var"

SINGLE_SYMBOL_TOKENS: Dict[str, TokenType] = {
    "=": TokenType.EQUAL,
    "+": TokenType.ADD,
    "-": TokenType.SUB,
    "*": TokenType.TIMES,
    "/": TokenType.DIV,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_letter(ch: str) -> bool:
    """Checks if a character is an ASCII letter."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_word_part(ch: str) -> bool:
    """Checks if a character can continue a word (letters, digits, dot)."""
    return _is_letter(ch) or _is_digit(ch) or ch == "."


def _is_number_part(ch: str) -> bool:
    return _is_digit(ch) or ch == "."


def _is_end(ch: str) -> bool:
    return ch in (SENTINEL, "\n")


def _strip_outer_braces(text: str) -> str:
    """Removes one brace pair if it wraps the whole text, e.g. ``{a}`` -> ``a``."""
    if len(text) < 2 or text[0] != "{" or text[-1] != "}":
        return text

    depth = 0
    for index, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                # The first brace closes before the end: "{a}{b}"
                return text[1:-1] if index == len(text) - 1 else text
    return text


class Tokenizer:
    """Tokenizer for LaTeX expression strings."""

    def __init__(self, source: str, limits: Optional[ExpressionLimits] = None):
        self._source = source
        self._input = source + SENTINEL
        self._limits = limits
        self._position = 0
        self._end_position = len(source)
        self._tokens: List[Token] = []

    @classmethod
    def from_file(
        cls, path: str, limits: Optional[ExpressionLimits] = None
    ) -> "Tokenizer":
        """Creates a tokenizer over the contents of a UTF-8 text file."""
        with open(path, encoding="utf-8") as handle:
            return cls(handle.read(), limits)

    def tokenize(self) -> Proto:
        """Tokenizes the source expression and returns the normalized proto."""
        check_expression_length(self._source, self._limits)

        while self._scan_token():
            pass

        proto = self._normalize(self._tokens)
        logger.debug(
            "Tokenized %d characters into %d tokens", self._end_position, len(proto)
        )
        return proto

    # ============================================================
    # Cursor Helpers
    # ============================================================

    def _peek(self) -> str:
        return self._input[self._position]

    def _advance(self) -> str:
        ch = self._input[self._position]
        self._position += 1
        return ch

    def _add_token(
        self,
        token_type: TokenType,
        value: str,
        position: int,
        optional_args: Tuple[str, ...] = (),
        required_args: Tuple[str, ...] = (),
    ) -> None:
        self._tokens.append(
            Token(token_type, value, optional_args, required_args, position)
        )

    def _read_while(self, predicate) -> str:
        start = self._position
        while predicate(self._peek()):
            self._position += 1
        return self._input[start : self._position]

    # ============================================================
    # Scanning
    # ============================================================

    def _scan_token(self) -> bool:
        """Scans one token. Returns False once the end of input is reached."""
        ch = self._advance()
        start_position = self._position - 1

        if ch in (" ", "\t", "\r"):
            return True

        if _is_end(ch):
            self._end_position = start_position
            return False

        if ch in SINGLE_SYMBOL_TOKENS:
            self._add_token(SINGLE_SYMBOL_TOKENS[ch], ch, start_position)
            return True

        if ch == "_":
            self._add_token(
                TokenType.SUBSCRIPT, self._read_script(ch, start_position), start_position
            )
            return True

        if ch == "^":
            self._add_token(
                TokenType.SUPERSCRIPT,
                self._read_script(ch, start_position),
                start_position,
            )
            return True

        if _is_letter(ch):
            self._position -= 1
            self._add_token(
                TokenType.EXPRESSION, self._read_while(_is_word_part), start_position
            )
            return True

        if _is_digit(ch):
            self._position -= 1
            self._add_token(
                TokenType.EXPRESSION, self._read_while(_is_number_part), start_position
            )
            return True

        if ch == "{":
            self._add_token(
                TokenType.EXPRESSION,
                self._read_brace_group(start_position),
                start_position,
            )
            return True

        if ch == "}":
            self._add_token(TokenType.RBRACE, ch, start_position)
            return True

        if ch == "\\":
            self._scan_command(start_position)
            return True

        raise TokenizerError(
            f"Unexpected character: '{ch}'", start_position, self._source
        )

    def _read_script(self, marker: str, start_position: int) -> str:
        """Reads ``^x``/``_x`` content: one character, or a whole brace group."""
        if _is_end(self._peek()):
            raise TokenizerError(
                f"Expected content after '{marker}'", start_position, self._source
            )

        ch = self._advance()
        if ch == "{":
            return self._read_brace_group(self._position - 1)
        return ch

    def _read_brace_group(self, open_position: int) -> str:
        """
        Reads up to the brace matching an already consumed ``{``.

        The closing brace is consumed but not included. If the content is
        itself fully wrapped in braces, one pair is removed.
        """
        depth = 0
        start = self._position

        while True:
            ch = self._peek()
            if _is_end(ch):
                raise TokenizerError("Unterminated '{'", open_position, self._source)
            self._position += 1

            if ch == "{":
                depth += 1
            elif ch == "}":
                if depth == 0:
                    break
                depth -= 1

        return _strip_outer_braces(self._input[start : self._position - 1])

    def _scan_command(self, start_position: int) -> None:
        """
        Scans a backslash command and its adjacent argument blocks.

        Argument counts are not validated here; the function decides what
        it accepts when it is evaluated.
        """
        name = self._read_while(_is_word_part)
        if not name:
            raise TokenizerError(
                "Expected a command name after '\\'", start_position, self._source
            )

        if name in DECORATIVE_COMMANDS:
            # Dropped during normalization
            self._add_token(TokenType.EXPRESSION, "", start_position)
            return

        optional_args: List[str] = []
        required_args: List[str] = []

        while True:
            ch = self._peek()
            block_position = self._position

            if ch == "[":
                self._advance()
                content = self._read_while(_is_word_part)
                if self._peek() != "]":
                    raise TokenizerError(
                        "Expected ']' after optional argument",
                        block_position,
                        self._source,
                    )
                self._advance()
                if content:
                    optional_args.append(content)
            elif ch == "{":
                self._advance()
                content = self._read_brace_group(block_position)
                if content:
                    required_args.append(content)
            else:
                break

        check_function_arg_count(len(optional_args) + len(required_args), self._limits)

        if name == VAR_COMMAND:
            if not required_args:
                raise TokenizerError(
                    "Expected a {name=value} block after \\var",
                    start_position,
                    self._source,
                )
            for binding in required_args:
                self._add_token(TokenType.VAR_BINDING, binding, start_position)
            return

        self._add_token(
            TokenType.FUNCTION,
            name,
            start_position,
            tuple(optional_args),
            tuple(required_args),
        )

    # ============================================================
    # Normalization
    # ============================================================

    def _normalize(self, tokens: List[Token]) -> Proto:
        tokens = [
            t for t in tokens if not (t.type == TokenType.EXPRESSION and not t.value)
        ]

        proto: Proto = []
        bindings: Proto = []
        index = 0

        while index < len(tokens):
            token = tokens[index]
            index += 1

            if token.type == TokenType.FUNCTION and token.value in BIG_OPERATORS:
                proto.append(self._fuse_bounds(token, tokens[index : index + 2]))
                index += 2
            elif token.type == TokenType.VAR_BINDING:
                bindings.append(token)
            else:
                proto.append(token)

        proto.extend(bindings)
        proto.append(Token(TokenType.EOF, "", position=self._end_position))
        return proto

    def _fuse_bounds(self, token: Token, following: List[Token]) -> Token:
        """Turns ``\\op_a^b`` or ``\\op^b_a`` into an op with optional args [a, b]."""
        types = tuple(t.type for t in following)

        if types == (TokenType.SUBSCRIPT, TokenType.SUPERSCRIPT):
            lower, upper = following
        elif types == (TokenType.SUPERSCRIPT, TokenType.SUBSCRIPT):
            upper, lower = following
        else:
            raise TokenizerError(
                f"Function {token.value} is missing bounds",
                token.position,
                self._source,
            )

        return Token(
            TokenType.FUNCTION,
            token.value,
            (lower.value, upper.value),
            token.required_args,
            token.position,
        )


def tokenize(source: str, limits: Optional[ExpressionLimits] = None) -> Proto:
    """
    Tokenizes a LaTeX expression into a normalized proto.

    Args:
        source: The expression to tokenize
        limits: Optional expression limits

    Returns:
        List of tokens ending with a single EOF token

    Raises:
        TokenizerError: If the expression contains unreadable input
    """
    tokenizer = Tokenizer(source, limits)
    return tokenizer.tokenize()


def tokenize_file(path: str, limits: Optional[ExpressionLimits] = None) -> Proto:
    """Tokenizes the expression stored in a text file."""
    return Tokenizer.from_file(path, limits).tokenize()
