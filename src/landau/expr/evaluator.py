"""
Expression evaluator.

Evaluates an AST to a float. Variables come from the ``\\var{name=value}``
bindings collected while building the tree, layered over any variables
supplied by the caller; they are resolved once, before evaluation starts.

Resolution semantics:
- An expression leaf is a numeric literal or, failing that, a variable name.
- Function arguments must be numeric literals; they never fall back to
  variables.
- Division follows IEEE-754 (``1/0`` is infinity) while ``\\frac`` rejects a
  zero divisor.
- Any failure aborts the whole calculation; no partial result is produced.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence

from .ast import Ast, AstNode, OperatorNode, ValueNode
from .builtins import DEFAULT_CATALOG, FunctionCatalog, call_function
from .config import get_config
from .errors import (
    BuiltinError,
    EvaluationError,
    ExpressionError,
    MalformedVariableBindingError,
    UnknownSymbolError,
)
from .known import NumericLiteral, VarMap, parse_number, to_known
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .numeric import divide, high_accuracy_pow, int_pow
from .parser import parse
from .tokenizer import Token, TokenType

logger = logging.getLogger("landau.expr.evaluator")


@dataclass
class EvaluationContext:
    """Evaluation context with variables and collaborators."""

    variables: Mapping[str, float] = field(default_factory=dict)
    """Variables available to expressions; inline bindings take precedence."""

    source: Optional[str] = None
    """Source expression for error reporting."""

    functions: Optional[FunctionCatalog] = None
    """Function catalog; defaults to the process-wide catalog."""

    high_accuracy: Optional[bool] = None
    """Power routine selection; defaults to the configured flag."""


@dataclass
class EvaluationResult:
    """Result of expression evaluation."""

    value: Optional[float]
    """The evaluated value."""

    success: bool
    """Whether evaluation succeeded."""

    error: Optional[str] = None
    """Error message if evaluation failed."""


def build_var_map(
    bindings: Sequence[str], variables: Optional[Mapping[str, float]] = None
) -> Dict[str, float]:
    """
    Resolves raw ``name=value`` bindings into a variable map.

    The text is split on the first ``=``; both sides are trimmed and the
    value must be a numeric literal.

    Raises:
        MalformedVariableBindingError: If a binding cannot be resolved
    """
    var_map: Dict[str, float] = {}
    for name, value in (variables or {}).items():
        try:
            var_map[name] = float(value)
        except (TypeError, ValueError):
            raise MalformedVariableBindingError(
                f"{name}={value!r}", f"{value!r} is not a number"
            ) from None

    for binding in bindings:
        name, separator, value_text = binding.partition("=")
        name = name.strip()

        if not separator:
            raise MalformedVariableBindingError(binding, "expected name=value")
        if not name:
            raise MalformedVariableBindingError(binding, "missing variable name")

        value = parse_number(value_text)
        if value is None:
            raise MalformedVariableBindingError(
                binding, f"'{value_text.strip()}' is not a number"
            )
        var_map[name] = value

    return var_map


class Evaluator:
    """Evaluates an AST and returns the result."""

    def __init__(self, ast: Ast, context: Optional[EvaluationContext] = None):
        context = context or EvaluationContext()
        self._ast = ast
        self._source = context.source
        self._functions = context.functions or DEFAULT_CATALOG

        if context.high_accuracy is None:
            self._high_accuracy = get_config().high_accuracy
        else:
            self._high_accuracy = context.high_accuracy

        self._variables: VarMap = MappingProxyType(
            build_var_map(ast.bindings, context.variables)
        )
        logger.debug(
            "Evaluator ready: %d variables, high_accuracy=%s",
            len(self._variables),
            self._high_accuracy,
        )

    @property
    def variables(self) -> VarMap:
        """The resolved variable map."""
        return self._variables

    @property
    def high_accuracy(self) -> bool:
        return self._high_accuracy

    def calculate(self) -> float:
        """Evaluates the whole tree."""
        return self.evaluate(self._ast.root)

    def evaluate(self, node: AstNode) -> float:
        """Evaluates an AST node and returns the value."""
        if isinstance(node, ValueNode):
            return self._evaluate_value(node.token)
        if isinstance(node, OperatorNode):
            return self._evaluate_operator(node)

        raise EvaluationError(f"Cannot evaluate {node!r}", None, self._source)

    def _evaluate_value(self, token: Token) -> float:
        if token.type == TokenType.FUNCTION:
            return self._evaluate_function(token)

        if token.type == TokenType.EXPRESSION:
            value = to_known(token.value).resolve(self._variables)
            if value is None:
                raise UnknownSymbolError(token.value, token.position, self._source)
            return value

        raise EvaluationError(
            f"Token {token.type.value} cannot be evaluated", token.position, self._source
        )

    def _evaluate_function(self, token: Token) -> float:
        """Evaluates a function call."""
        optional = self._resolve_arguments(token, token.optional_args)
        required = self._resolve_arguments(token, token.required_args)

        return call_function(
            token.value,
            optional,
            required,
            self._functions,
            token.position,
            self._source,
        )

    def _resolve_arguments(self, token: Token, texts: Sequence[str]) -> List[float]:
        values: List[float] = []
        for text in texts:
            known = to_known(text)
            if not isinstance(known, NumericLiteral):
                raise BuiltinError(
                    token.value,
                    f"argument '{text}' is not a number",
                    token.position,
                    self._source,
                )
            values.append(known.value)
        return values

    def _evaluate_operator(self, node: OperatorNode) -> float:
        """Evaluates a binary operation."""
        left_value = self.evaluate(node.left)
        right_value = self.evaluate(node.right)
        operator = node.operator.type

        if operator == TokenType.ADD:
            return left_value + right_value

        if operator == TokenType.SUB:
            return left_value - right_value

        if operator == TokenType.TIMES:
            return left_value * right_value

        if operator == TokenType.DIV:
            return divide(left_value, right_value)

        if operator == TokenType.SUPERSCRIPT:
            return self._power(left_value, right_value, node.position)

        raise EvaluationError(
            f"Token {operator.value} is not an operator", node.position, self._source
        )

    def _power(self, base: float, exponent: float, position: int) -> float:
        if not self._high_accuracy:
            return int_pow(base, exponent)

        result = high_accuracy_pow(base, exponent)
        if result is None:
            raise EvaluationError(
                f"{base}^{exponent} has no real value", position, self._source
            )
        return result


def evaluate(ast: Ast, context: Optional[EvaluationContext] = None) -> EvaluationResult:
    """
    Evaluates an AST against a context and returns the result.

    Args:
        ast: The AST to evaluate
        context: The evaluation context

    Returns:
        The evaluation result with value and success status
    """
    try:
        evaluator = Evaluator(ast, context)
        value = evaluator.calculate()
        return EvaluationResult(value=value, success=True)
    except ExpressionError as error:
        message = str(error)
        return EvaluationResult(value=None, success=False, error=message)


def calculate(
    source: str,
    variables: Optional[Mapping[str, float]] = None,
    functions: Optional[FunctionCatalog] = None,
    high_accuracy: Optional[bool] = None,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> float:
    """
    Parses and evaluates a LaTeX expression.

    Samples of ``\\int``, ``\\sum`` and ``\\prod`` are written before the
    bounds, as in ``\\int{1}{4}{9}_0^2``.

    Raises:
        ExpressionError: On the first lexing, parsing, building or
            evaluation failure
    """
    ast = parse(source, limits)
    context = EvaluationContext(
        variables=variables or {},
        source=source,
        functions=functions,
        high_accuracy=high_accuracy,
    )
    return Evaluator(ast, context).calculate()
