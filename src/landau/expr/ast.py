"""
Abstract Syntax Tree (AST) node types and the postfix tree builder.

The tree is produced from a postfix token sequence and consumed by the
evaluator. It is a strict binary tree: every operator node owns exactly
two children and nodes are never shared.
"""

import logging
from abc import ABC
from dataclasses import dataclass
from typing import List, Literal, Optional, Tuple, Union

from .errors import BuildError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_variable_binding_count,
)
from .tokenizer import BINARY_OPERATOR_TYPES, OPERAND_TYPES, Proto, Token, TokenType

logger = logging.getLogger("landau.expr.ast")

# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int
    """Position in source expression (for error reporting)."""


@dataclass(frozen=True)
class ValueNode(AstNodeBase):
    """Leaf holding an expression or function token."""

    token: Token

    @property
    def type(self) -> Literal["Value"]:
        return "Value"


@dataclass(frozen=True)
class OperatorNode(AstNodeBase):
    """Binary operator node."""

    operator: Token
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["Operator"]:
        return "Operator"


# Union type for all AST nodes
AstNode = Union[ValueNode, OperatorNode]


@dataclass(frozen=True)
class Ast:
    """A built tree together with its raw ``name=value`` bindings."""

    root: AstNode
    bindings: Tuple[str, ...] = ()


# ============================================================
# Tree Builder
# ============================================================


class TreeBuilder:
    """
    Builds a tree from a postfix token sequence.

    Operands are kept on an explicit stack together with their depth, so
    size and depth limits are enforced while building.
    """

    def __init__(
        self,
        postfix: Proto,
        source: Optional[str] = None,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._postfix = postfix
        self._source = source
        self._limits = limits

    def build(self) -> Ast:
        """Builds the tree; the postfix sequence must reduce to one node."""
        stack: List[Tuple[AstNode, int]] = []
        bindings: List[str] = []
        node_count = 0

        for token in self._postfix:
            if token.type in OPERAND_TYPES:
                stack.append((ValueNode(position=token.position, token=token), 1))
                node_count += 1
            elif token.type == TokenType.SUPERSCRIPT:
                base, depth = self._pop(stack, token)
                exponent = ValueNode(
                    position=token.position,
                    token=Token(TokenType.EXPRESSION, token.value, position=token.position),
                )
                node = OperatorNode(
                    position=token.position, operator=token, left=base, right=exponent
                )
                stack.append((node, 1 + max(depth, 1)))
                node_count += 2
            elif token.type in BINARY_OPERATOR_TYPES:
                right, right_depth = self._pop(stack, token)
                left, left_depth = self._pop(stack, token)
                node = OperatorNode(
                    position=token.position, operator=token, left=left, right=right
                )
                stack.append((node, 1 + max(left_depth, right_depth)))
                node_count += 1
            elif token.type == TokenType.VAR_BINDING:
                bindings.append(token.value)
                check_variable_binding_count(len(bindings), self._limits)
                continue
            elif token.type == TokenType.EOF:
                break
            else:
                raise BuildError(
                    f"Token {token.value or token.type.value} cannot appear in a tree",
                    token.position,
                    self._source,
                )

            check_ast_node_count(node_count, self._limits)
            check_ast_depth(stack[-1][1], self._limits)

        if len(stack) != 1:
            raise BuildError(
                f"Expected a single expression, found {len(stack)} operands",
                None,
                self._source,
            )

        logger.debug("Built tree with %d nodes", node_count)
        return Ast(root=stack[0][0], bindings=tuple(bindings))

    def _pop(
        self, stack: List[Tuple[AstNode, int]], operator: Token
    ) -> Tuple[AstNode, int]:
        if not stack:
            raise BuildError(
                f"Missing operand for {operator.value or operator.type.value}",
                operator.position,
                self._source,
            )
        return stack.pop()


def build_ast(
    postfix: Proto,
    source: Optional[str] = None,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> Ast:
    """Builds an AST from a postfix token sequence."""
    return TreeBuilder(postfix, source, limits).build()


# ============================================================
# AST Utilities
# ============================================================


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 0
    pending: List[AstNode] = [node]

    while pending:
        current = pending.pop()
        count += 1
        if isinstance(current, OperatorNode):
            pending.append(current.left)
            pending.append(current.right)

    return count


def calculate_ast_depth(node: AstNode) -> int:
    """Calculates the maximum depth of an AST."""
    max_depth = 0
    pending: List[Tuple[AstNode, int]] = [(node, 1)]

    while pending:
        current, depth = pending.pop()
        max_depth = max(max_depth, depth)
        if isinstance(current, OperatorNode):
            pending.append((current.left, depth + 1))
            pending.append((current.right, depth + 1))

    return max_depth


def _describe_token(token: Token) -> str:
    if token.type == TokenType.FUNCTION:
        optional = "".join(f"[{arg}]" for arg in token.optional_args)
        required = "".join(f"{{{arg}}}" for arg in token.required_args)
        return f"Function: {token.value}{optional}{required}"
    return f"Expression: {token.value}"


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    lines: List[str] = []
    pending: List[Tuple[AstNode, int]] = [(node, indent)]

    while pending:
        current, level = pending.pop()
        prefix = "  " * level
        if isinstance(current, ValueNode):
            lines.append(f"{prefix}{_describe_token(current.token)}")
        else:
            lines.append(f"{prefix}Operator: {current.operator.type.value}")
            # Right is pushed first so the left subtree is printed first
            pending.append((current.right, level + 1))
            pending.append((current.left, level + 1))

    return "\n".join(lines)
