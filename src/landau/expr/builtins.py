"""
Built-in functions and the function catalog.

A function receives two sequences of already resolved numbers: the
``[optional]`` arguments and the ``{required}`` arguments, in the order
they were written. It returns a number, or None when it has no result
for its arguments. Non-numeric results and exceptions other than
``BuiltinError`` are reported as evaluation failures.

Lookup checks the built-ins first and the registered extensions second,
so a built-in can never be replaced. Extensions are append-only and may
be registered while other threads are evaluating.
"""

import logging
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence

from .errors import (
    ArgumentDomainError,
    BuiltinError,
    EvaluationError,
    UnknownFunctionError,
)
from .numeric import divide, nth_root

logger = logging.getLogger("landau.expr.builtins")

# Signature of a function: (optional args, required args) -> result.
CalcFunction = Callable[[Sequence[float], Sequence[float]], Optional[float]]

# Function registry for built-in functions.
FunctionRegistry = Mapping[str, CalcFunction]


@dataclass(frozen=True)
class Function:
    """A named calculation registered in a catalog."""

    name: str
    calc: CalcFunction


def _assert_arg_count(
    args: Sequence[float], expected: int, kind: str, function_name: str
) -> None:
    """Asserts argument count."""
    if len(args) != expected:
        raise BuiltinError(
            function_name,
            f"expected {expected} {kind} argument(s), got {len(args)}",
        )


def _assert_arg_count_range(
    args: Sequence[float], min_count: int, max_count: int, kind: str, function_name: str
) -> None:
    """Asserts argument count range."""
    if len(args) < min_count or len(args) > max_count:
        raise BuiltinError(
            function_name,
            f"expected {min_count}-{max_count} {kind} argument(s), got {len(args)}",
        )


# ============================================================
# Built-in Functions
# ============================================================


def _frac(optional: Sequence[float], required: Sequence[float]) -> Optional[float]:
    """\\frac{a}{b} -> a / b"""
    _assert_arg_count(optional, 0, "optional", "frac")
    _assert_arg_count(required, 2, "required", "frac")
    numerator, denominator = required
    if denominator == 0:
        raise ArgumentDomainError("frac", "division by zero")
    return divide(numerator, denominator)


def _sqrt(optional: Sequence[float], required: Sequence[float]) -> Optional[float]:
    """
    \\sqrt[n]{x} -> real n-th root of x

    The index defaults to 2. The 0th root is 1 for any x.
    """
    _assert_arg_count_range(optional, 0, 1, "optional", "sqrt")
    _assert_arg_count(required, 1, "required", "sqrt")

    index = optional[0] if optional else 2.0
    if not float(index).is_integer():
        raise ArgumentDomainError("sqrt", f"root index must be an integer, got {index}")

    result = nth_root(required[0], int(index))
    if result is None:
        raise ArgumentDomainError(
            "sqrt", f"even root of a negative number ({required[0]})"
        )
    return result


def _int(optional: Sequence[float], required: Sequence[float]) -> Optional[float]:
    """
    \\int_lo^hi{f(lo)}{f(mid)}{f(hi)} -> Simpson's rule

    (hi - lo) / 6 * (f(lo) + 4 f(mid) + f(hi)); extra samples are ignored.
    """
    _assert_arg_count(optional, 2, "optional", "int")
    if len(required) < 3:
        raise ArgumentDomainError("int", f"expected 3 samples, got {len(required)}")

    lower, upper = optional
    return (upper - lower) / 6.0 * (required[0] + 4.0 * required[1] + required[2])


def _sum(optional: Sequence[float], required: Sequence[float]) -> Optional[float]:
    """\\sum_lo^hi{v1}{v2}... -> v1 + v2 + ..."""
    _assert_arg_count_range(optional, 0, 2, "optional", "sum")
    if not required:
        raise ArgumentDomainError("sum", "no values to sum")
    return float(sum(required))


def _prod(optional: Sequence[float], required: Sequence[float]) -> Optional[float]:
    """\\prod_lo^hi{v1}{v2}... -> v1 * v2 * ..."""
    _assert_arg_count_range(optional, 0, 2, "optional", "prod")
    if not required:
        raise ArgumentDomainError("prod", "no values to multiply")

    result = 1.0
    for value in required:
        result *= value
    return result


# ============================================================
# Sample Helpers
# ============================================================


def int_auto_filler(
    fn: Callable[[float], float], lower: float, upper: float
) -> List[float]:
    """Samples fn at the bounds and midpoint, as \\int expects."""
    return [fn(lower), fn((lower + upper) / 2.0), fn(upper)]


def sum_auto_filler(fn: Callable[[int], float], lower: int, upper: int) -> List[float]:
    """Samples fn at every integer from lower to upper inclusive (empty if lower > upper)."""
    return [fn(i) for i in range(lower, upper + 1)]


# ============================================================
# Registry
# ============================================================

# Registry of all built-in functions.
BUILTIN_FUNCTIONS: FunctionRegistry = MappingProxyType(
    {
        "frac": _frac,
        "sqrt": _sqrt,
        "int": _int,
        "sum": _sum,
        "prod": _prod,
    }
)


class FunctionCatalog:
    """
    Built-in functions plus an append-only list of extensions.

    Built-ins are read-only. Extensions are guarded by a lock so that
    registration can happen while evaluators look functions up.
    """

    def __init__(self, builtins: FunctionRegistry = BUILTIN_FUNCTIONS):
        self._builtins = MappingProxyType(dict(builtins))
        self._extensions: List[Function] = []
        self._lock = threading.Lock()

    def register(self, name: str, calc: CalcFunction) -> Function:
        """Registers an extension; returns the registered Function."""
        function = Function(name=name, calc=calc)

        with self._lock:
            shadowed = name in self._builtins or any(
                f.name == name for f in self._extensions
            )
            self._extensions.append(function)

        if shadowed:
            logger.warning(
                "Function %s is already registered; the new definition is unreachable",
                name,
            )
        else:
            logger.debug("Registered function %s", name)
        return function

    def get(self, name: str) -> Optional[CalcFunction]:
        """Returns the first function with this name, built-ins first."""
        fn = self._builtins.get(name)
        if fn is not None:
            return fn

        with self._lock:
            for function in self._extensions:
                if function.name == name:
                    return function.calc
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def names(self) -> List[str]:
        """Returns the built-in names followed by the extension names."""
        with self._lock:
            extensions = [f.name for f in self._extensions]
        return list(self._builtins) + extensions


# Process-wide catalog used when an evaluator is not given one.
DEFAULT_CATALOG = FunctionCatalog()


def register_function(
    name: str, calc: CalcFunction, catalog: Optional[FunctionCatalog] = None
) -> Function:
    """Registers an extension function in the given (or default) catalog."""
    catalog = catalog or DEFAULT_CATALOG
    return catalog.register(name, calc)


def get_function(
    name: str, catalog: Optional[FunctionCatalog] = None
) -> CalcFunction:
    """
    Looks up a function by name.

    Raises:
        UnknownFunctionError: If no function has this name
    """
    catalog = catalog or DEFAULT_CATALOG
    fn = catalog.get(name)
    if fn is None:
        raise UnknownFunctionError(name)
    return fn


def call_function(
    name: str,
    optional: Sequence[float],
    required: Sequence[float],
    catalog: Optional[FunctionCatalog] = None,
    position: Optional[int] = None,
    source: Optional[str] = None,
) -> float:
    """
    Calls a function by name.

    Args:
        name: The function name
        optional: Resolved optional arguments
        required: Resolved required arguments
        catalog: Function catalog (defaults to DEFAULT_CATALOG)
        position: Position of the call, for error reporting
        source: Source expression, for error reporting

    Returns:
        The function result

    Raises:
        UnknownFunctionError: If the function doesn't exist
        BuiltinError: If the function rejects its arguments or has no result
        EvaluationError: If an extension fails unexpectedly
    """
    catalog = catalog or DEFAULT_CATALOG
    fn = catalog.get(name)
    if fn is None:
        raise UnknownFunctionError(name, position, source)

    try:
        result = fn(optional, required)
    except BuiltinError as error:
        if error.position is None:
            error.position = position
            error.expression = source
        raise
    except Exception as error:
        raise EvaluationError(f"{name}: {error}", position, source) from error

    if isinstance(result, bool) or not isinstance(result, (int, float)):
        raise ArgumentDomainError(name, "no result", position, source)
    return float(result)
