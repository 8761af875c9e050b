"""Base classes for constraint evaluation.

ConstraintContext provides a uniform interface for constraint evaluation that works
for both prover (returns arrays) and verifier (returns scalars). The same constraint
code can be used in both contexts thanks to galois broadcasting.

Example:
    def eval_constraint(ctx: ConstraintContext):
        z = ctx.poly('permutation_product')
        z_next = ctx.poly('permutation_product', rotation=1)
        return z_next - z * ctx.challenge('beta')

    # Works for prover (arrays)
    prover_result = eval_constraint(ProverConstraintContext(prover_data))

    # Works for verifier (scalars)
    verifier_result = eval_constraint(VerifierConstraintContext(verifier_data))
"""

from abc import ABC, abstractmethod
from typing import List, Union

import numpy as np

from arithmetization.expression import Expression
from arithmetization.variable import Variable
from primitives.field import FieldType
from protocol.data import Poly, ProverData, Scalar, VerifierData


def column_name(variable: Variable) -> str:
    """Polynomial name of the column a variable reads ("witness", "selector", ...)."""
    return variable.type.name.lower()


class ConstraintContext(ABC):
    """Uniform interface for constraint evaluation - works for prover and verifier."""

    @property
    @abstractmethod
    def field(self) -> FieldType:
        """Field every returned value belongs to."""

    @abstractmethod
    def poly(self, name: str, index: int = 0, rotation: int = 0) -> Union[Poly, Scalar]:
        """Get a committed polynomial at a row offset.

        Args:
            name: Polynomial name ("witness", "sigma", "permutation_product", ...)
            index: Index within polynomials of that name
            rotation: Row offset; may be negative

        Returns:
            Prover: array rolled by -rotation rows (circular)
            Verifier: evaluation at y * omega^rotation
        """

    @abstractmethod
    def lagrange_0(self) -> Union[Poly, Scalar]:
        """First Lagrange polynomial L_0 (1 at row 0, 0 on the other rows)."""

    @abstractmethod
    def challenge(self, name: str) -> Scalar:
        """Get Fiat-Shamir challenge (always scalar)."""

    def cell(self, variable: Variable) -> Union[Poly, Scalar]:
        """Value of a relative variable."""
        return self.poly(column_name(variable), variable.index, variable.rotation)

    def evaluate(self, expression: Expression) -> Union[Poly, Scalar]:
        """Evaluate a constraint expression against the context's columns."""
        return expression.evaluate(self.cell, self.field)

    def one(self) -> Scalar:
        return self.field(1)


class ProverConstraintContext(ConstraintContext):
    """Prover implementation - returns polynomial arrays.

    The prover evaluates constraints at all domain points simultaneously,
    producing arrays of constraint evaluations.
    """

    def __init__(self, data: ProverData):
        self._data = data

    @property
    def field(self) -> FieldType:
        return self._data.field

    def poly(self, name: str, index: int = 0, rotation: int = 0) -> Poly:
        values = self._data.columns[(name, index)]
        if rotation == 0:
            return values
        # On extended domain, row offset is multiplied by extend factor
        return np.roll(values, -rotation * self._data.extend)

    def lagrange_0(self) -> Poly:
        return self._data.lagrange_0

    def challenge(self, name: str) -> Scalar:
        return self._data.challenges[name]


class VerifierConstraintContext(ConstraintContext):
    """Verifier implementation - returns scalar evaluations.

    The verifier evaluates constraints at a single random point y,
    checking that the combined constraint polynomial matches the quotient.
    """

    def __init__(self, data: VerifierData):
        self._data = data

    @property
    def field(self) -> FieldType:
        return self._data.field

    def poly(self, name: str, index: int = 0, rotation: int = 0) -> Scalar:
        return self._data.evals[(name, index, rotation)]

    def lagrange_0(self) -> Scalar:
        return self._data.lagrange_0

    def challenge(self, name: str) -> Scalar:
        return self._data.challenges[name]


class ConstraintModule(ABC):
    """One argument of the protocol. Used by both prover and verifier.

    Each module contributes a list of constraint polynomials F_i that vanish on
    the whole domain for a valid witness. The quotient argument weights them
    with one challenge each, so the number of polynomials must not depend on
    the context.
    """

    @abstractmethod
    def constraint_polynomials(self, ctx: ConstraintContext) -> List[Union[Poly, Scalar]]:
        """Evaluate every constraint polynomial of the argument.

        Args:
            ctx: ConstraintContext providing access to polynomials and challenges

        Returns:
            Prover: one array of evaluations per constraint polynomial
            Verifier: one evaluation at y per constraint polynomial
        """

    @abstractmethod
    def degrees(self) -> List[int]:
        """Degree of each constraint polynomial in units of the row count."""


def combine_constraints(constraints: List, weights: List, field: FieldType):
    """sum_i weights[i] * constraints[i]; zero for an empty list."""
    acc = field(0)
    for constraint, weight in zip(constraints, weights):
        acc = acc + weight * constraint
    return acc
