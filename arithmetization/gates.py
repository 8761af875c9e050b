"""Gates, copy constraints and lookup constraints."""

from dataclasses import dataclass
from typing import List, Tuple

from arithmetization.expression import Expression, as_expression
from arithmetization.variable import Variable


@dataclass(frozen=True)
class Gate:
    """Constraints enforced on every row where the selector column is nonzero."""
    selector_index: int
    constraints: Tuple[Expression, ...]

    def __init__(self, selector_index: int, constraints):
        object.__setattr__(self, "selector_index", selector_index)
        object.__setattr__(self, "constraints", tuple(as_expression(c) for c in constraints))

    def degree(self) -> int:
        """Degree of the selector-weighted constraint."""
        return 1 + max((c.degree() for c in self.constraints), default=0)


@dataclass(frozen=True)
class CopyConstraint:
    """Two absolute cells asserted equal."""
    first: Variable
    second: Variable


@dataclass(frozen=True)
class LookupTable:
    """Permitted tuples, one per row of the listed constant columns."""
    columns: Tuple[int, ...]

    def __init__(self, columns):
        object.__setattr__(self, "columns", tuple(columns))

    @property
    def width(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class LookupConstraint:
    """Row-wise inclusion of a tuple of expressions in a lookup table."""
    inputs: Tuple[Expression, ...]
    table_index: int

    def __init__(self, inputs, table_index: int):
        object.__setattr__(self, "inputs", tuple(as_expression(e) for e in inputs))
        object.__setattr__(self, "table_index", table_index)

    def degree(self) -> int:
        return max((e.degree() for e in self.inputs), default=0)


@dataclass(frozen=True)
class LookupGate:
    """Lookup constraints enforced on rows where the 0/1 selector column is 1."""
    selector_index: int
    constraints: Tuple[LookupConstraint, ...]

    def __init__(self, selector_index: int, constraints: List[LookupConstraint]):
        object.__setattr__(self, "selector_index", selector_index)
        object.__setattr__(self, "constraints", tuple(constraints))
