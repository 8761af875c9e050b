"""Constraint expressions over rotated column cells.

An expression is an immutable tree of constants, variables, sums, products and
powers. It is built with ordinary Python operators and evaluated row-wise by
a resolver that maps each Variable to either a field array (prover, every row
at once) or a field scalar (verifier, at the challenge point).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator, Union

if TYPE_CHECKING:
    from arithmetization.variable import Variable

# Resolver: Variable -> field value (array or scalar)
Resolver = Callable[["Variable"], object]


class Expression(ABC):
    """Base class for constraint expression nodes."""

    @abstractmethod
    def degree(self) -> int:
        """Degree in the column variables."""

    @abstractmethod
    def evaluate(self, resolve: Resolver, field):
        """Evaluate with each Variable replaced by resolve(variable)."""

    @abstractmethod
    def variables(self) -> Iterator["Variable"]:
        """Yield every variable occurrence."""

    # --- Operators ---

    def __add__(self, other: "ExpressionLike") -> "Expression":
        return Sum(self, as_expression(other))

    def __radd__(self, other: "ExpressionLike") -> "Expression":
        return Sum(as_expression(other), self)

    def __sub__(self, other: "ExpressionLike") -> "Expression":
        return Sum(self, Negation(as_expression(other)))

    def __rsub__(self, other: "ExpressionLike") -> "Expression":
        return Sum(as_expression(other), Negation(self))

    def __mul__(self, other: "ExpressionLike") -> "Expression":
        return Product(self, as_expression(other))

    def __rmul__(self, other: "ExpressionLike") -> "Expression":
        return Product(as_expression(other), self)

    def __neg__(self) -> "Expression":
        return Negation(self)

    def __pow__(self, exponent: int) -> "Expression":
        if not isinstance(exponent, int) or exponent < 0:
            raise ValueError(f"Exponent must be a non-negative integer, got {exponent!r}")
        return Power(self, exponent)


ExpressionLike = Union[Expression, int]


@dataclass(frozen=True)
class Constant(Expression):
    value: int

    def degree(self) -> int:
        return 0

    def evaluate(self, resolve: Resolver, field):
        return field(self.value % field.characteristic)

    def variables(self) -> Iterator["Variable"]:
        return iter(())


@dataclass(frozen=True)
class Sum(Expression):
    left: Expression
    right: Expression

    def degree(self) -> int:
        return max(self.left.degree(), self.right.degree())

    def evaluate(self, resolve: Resolver, field):
        return self.left.evaluate(resolve, field) + self.right.evaluate(resolve, field)

    def variables(self) -> Iterator["Variable"]:
        yield from self.left.variables()
        yield from self.right.variables()


@dataclass(frozen=True)
class Negation(Expression):
    operand: Expression

    def degree(self) -> int:
        return self.operand.degree()

    def evaluate(self, resolve: Resolver, field):
        return -self.operand.evaluate(resolve, field)

    def variables(self) -> Iterator["Variable"]:
        yield from self.operand.variables()


@dataclass(frozen=True)
class Product(Expression):
    left: Expression
    right: Expression

    def degree(self) -> int:
        return self.left.degree() + self.right.degree()

    def evaluate(self, resolve: Resolver, field):
        return self.left.evaluate(resolve, field) * self.right.evaluate(resolve, field)

    def variables(self) -> Iterator["Variable"]:
        yield from self.left.variables()
        yield from self.right.variables()


@dataclass(frozen=True)
class Power(Expression):
    base: Expression
    exponent: int

    def degree(self) -> int:
        return self.base.degree() * self.exponent

    def evaluate(self, resolve: Resolver, field):
        return self.base.evaluate(resolve, field) ** self.exponent

    def variables(self) -> Iterator["Variable"]:
        yield from self.base.variables()


def as_expression(value: ExpressionLike) -> Expression:
    """Wrap plain integers as constants."""
    if isinstance(value, Expression):
        return value
    if isinstance(value, int):
        return Constant(value)
    raise TypeError(f"Cannot use {type(value).__name__} in a constraint expression")
