"""
Resource limits for expression lexing, tree building and evaluation.

These limits protect against pathological input: deeply nested
expressions would otherwise grow the tree and the evaluator's
recursion without bound.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum tree depth (nesting level)
    max_ast_depth: int = 128

    # Maximum number of tree nodes
    max_ast_nodes: int = 1024

    # Maximum optional + required arguments of one function
    max_function_args: int = 32

    # Maximum number of \var bindings
    max_variable_bindings: int = 64


# Default expression limits.
#
# The depth bound keeps the recursive evaluator well below the
# interpreter's recursion limit.
DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length", limits.max_expression_length, len(expression)
        )


def check_ast_depth(depth: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates tree depth during building."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth)


def check_ast_node_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates tree node count during building."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_function_arg_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates function argument count."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_function_args:
        raise LimitExceededError("max_function_args", limits.max_function_args, count)


def check_variable_binding_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates the number of \\var bindings."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_variable_bindings:
        raise LimitExceededError(
            "max_variable_bindings", limits.max_variable_bindings, count
        )
