"""
Resolution of expression text to known values.

A leaf of the tree is either a numeric literal (``2``, ``-0.5``) or a
reference to a variable bound with ``\\var{name=value}``. Function
arguments only accept numeric literals.
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional, Union

# Signed decimal such as 1, -2, 01.5, 1.; matched against the whole text
PURE_NUMBER = re.compile(r"[+-]?\d+(\.\d*)?")

# Resolved variable values, by name.
VarMap = Mapping[str, float]


@dataclass(frozen=True)
class NumericLiteral:
    """A number written directly in the expression."""

    value: float

    def resolve(self, variables: VarMap) -> Optional[float]:
        return self.value


@dataclass(frozen=True)
class VariableReference:
    """A name to look up in the variable map."""

    name: str

    def resolve(self, variables: VarMap) -> Optional[float]:
        return variables.get(self.name)


Known = Union[NumericLiteral, VariableReference]


def parse_number(text: str) -> Optional[float]:
    """Parses a signed decimal literal, returning None for anything else."""
    text = text.strip()
    if PURE_NUMBER.fullmatch(text) is None:
        return None
    return float(text)


def to_known(text: str) -> Known:
    """Classifies expression text as a numeric literal or a variable reference."""
    value = parse_number(text)
    if value is None:
        return VariableReference(text.strip())
    return NumericLiteral(value)
