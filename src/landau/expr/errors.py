"""
Error types for the LaTeX expression engine.

All expression errors extend ExpressionError for consistent handling.
Lexing, parsing and tree building failures are fatal for the input;
evaluation failures are reported at the ``calculate()`` boundary.
"""

from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class TokenizerError(ExpressionError):
    """
    Error thrown during tokenization (unreadable character, missing bounds).
    """

    pass


class ParseError(ExpressionError):
    """
    Error thrown while converting infix tokens to postfix order.
    """

    pass


class BuildError(ExpressionError):
    """
    Error thrown when a postfix sequence cannot be turned into a tree.

    Signals a contract violation between the parser and the tree builder.
    """

    pass


class EvaluationError(ExpressionError):
    """
    Error thrown during evaluation (runtime error).
    """

    pass


class UnknownFunctionError(EvaluationError):
    """
    Error thrown when a function name is neither built-in nor registered.
    """

    def __init__(
        self,
        function_name: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Unknown function: {function_name}", position, expression)
        self.function_name = function_name


class UnknownSymbolError(EvaluationError):
    """
    Error thrown when an expression is neither a number nor a bound variable.
    """

    def __init__(
        self,
        symbol: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(f"Unknown symbol: {symbol}", position, expression)
        self.symbol = symbol


class MalformedVariableBindingError(EvaluationError):
    """
    Error thrown when a ``\\var{name=value}`` binding cannot be resolved.
    """

    def __init__(self, binding: str, reason: str):
        super().__init__(f"Malformed variable binding '{binding}': {reason}")
        self.binding = binding
        self.reason = reason


class LimitExceededError(ExpressionError):
    """
    Error thrown when expression limits are exceeded.
    """

    def __init__(self, limit_name: str, limit: int, actual: int):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class BuiltinError(EvaluationError):
    """
    Error thrown when a function receives arguments it cannot use.
    """

    def __init__(
        self,
        function_name: str,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        full_message = f"{function_name}: {message}"
        super().__init__(full_message, position, expression)
        self.function_name = function_name


class ArgumentDomainError(BuiltinError):
    """
    Error thrown when a function has no result for its arguments
    (zero divisor, even root of a negative, too few samples).
    """

    pass
