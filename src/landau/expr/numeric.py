"""
Numeric helpers used by the evaluator and the built-in functions.

All helpers are pure functions over floats. The high-accuracy power
routine evaluates with mpmath at a fixed working precision and rounds
the result back to a float.
"""

import math
from typing import Optional

import mpmath

# Working precision, in decimal digits, of the high-accuracy power routine
HIGH_ACCURACY_DPS = 50

# Largest number of decimal places custom_round accepts
MAX_ROUND_DIGITS = 8


def divide(numerator: float, denominator: float) -> float:
    """Divides with IEEE-754 semantics: x/0 is a signed infinity, 0/0 is nan."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def nth_root(x: float, n: int) -> Optional[float]:
    """
    Returns the real n-th root of x.

    The 0th root is 1 for every x. Even roots of negative numbers have no
    real value and return None; odd roots of negative numbers are negative.
    """
    if n == 0:
        return 1.0
    if x < 0 and n % 2 == 0:
        return None
    if x == 0:
        return 0.0 if n > 0 else math.inf

    root = math.pow(abs(x), 1.0 / n)
    return -root if x < 0 else root


def custom_round(value: float, digits: int) -> float:
    """Rounds half away from zero to the given number of decimal places."""
    if digits < 0 or digits > MAX_ROUND_DIGITS:
        raise ValueError(
            f"digits must be between 0 and {MAX_ROUND_DIGITS}, got {digits}"
        )
    if not math.isfinite(value):
        return value

    scale = 10**digits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


def int_pow(base: float, exponent: float) -> float:
    """
    Raises base to the exponent truncated toward zero.

    Uses exponentiation by squaring, so results stay exact for small
    integer powers (``2^2`` is exactly 4.0).
    """
    if not math.isfinite(exponent):
        return math.pow(base, exponent)

    power = int(exponent)
    result = 1.0
    factor = base
    remaining = abs(power)

    while remaining:
        if remaining & 1:
            result *= factor
        remaining >>= 1
        if remaining:
            factor *= factor

    if power < 0:
        return divide(1.0, result)
    return result


def high_accuracy_pow(base: float, exponent: float) -> Optional[float]:
    """
    Raises base to a real exponent at high working precision.

    Returns None when the result is not real (negative base with a
    fractional exponent).
    """
    if base == 0 and exponent < 0:
        return math.inf

    with mpmath.workdps(HIGH_ACCURACY_DPS):
        result = mpmath.power(mpmath.mpf(base), mpmath.mpf(exponent))

    if isinstance(result, mpmath.mpc):
        if result.imag != 0:
            return None
        result = result.real
    return float(result)
