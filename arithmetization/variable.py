"""Column kinds and cell references."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Tuple

from arithmetization.expression import Expression, Resolver


class ColumnType(IntEnum):
    """The four column kinds, in global column order."""
    WITNESS = 0
    PUBLIC_INPUT = 1
    CONSTANT = 2
    SELECTOR = 3


@dataclass(frozen=True)
class Variable(Expression):
    """Reference to a cell.

    Relative variables (the default) address the cell `rotation` rows away from
    the row a gate is evaluated on. Absolute variables (relative=False) name a
    fixed cell, with `rotation` holding the row; copy constraints use these.
    """
    index: int
    rotation: int = 0
    type: ColumnType = ColumnType.WITNESS
    relative: bool = True

    def degree(self) -> int:
        return 1

    def evaluate(self, resolve: Resolver, field):
        return resolve(self)

    def variables(self) -> Iterator["Variable"]:
        yield self

    @property
    def column(self) -> Tuple[ColumnType, int]:
        """(type, index) key of the referenced column."""
        return (self.type, self.index)

    def at_row(self, row: int) -> "Variable":
        """Absolute reference to this column at a given row."""
        return Variable(self.index, row, self.type, relative=False)


def witness(index: int, rotation: int = 0) -> Variable:
    return Variable(index, rotation, ColumnType.WITNESS)


def public_input(index: int, rotation: int = 0) -> Variable:
    return Variable(index, rotation, ColumnType.PUBLIC_INPUT)


def constant(index: int, rotation: int = 0) -> Variable:
    return Variable(index, rotation, ColumnType.CONSTANT)


def selector(index: int, rotation: int = 0) -> Variable:
    return Variable(index, rotation, ColumnType.SELECTOR)
