"""Quotient argument.

All constraint polynomials are combined with one challenge each,

    T(x) = sum_i alpha_i F_i(x),

and T vanishes on <omega_n> exactly when every gate, copy and lookup
constraint holds. The prover evaluates T on the coset g * <omega_{n * 2^e}>,
divides by Z_H(x) = x^n - 1 and splits H = T / Z_H into chunks of n
coefficients:

    H(x) = sum_k x^(k n) H_k(x)

The verifier checks T(y) == Z_H(y) * H(y) from the openings at y.
"""

from typing import Dict, List, Tuple

import galois

from arithmetization.constraint_system import ConstraintSystem
from constraints.base import (
    ConstraintModule,
    ProverConstraintContext,
    VerifierConstraintContext,
    combine_constraints,
)
from constraints.gates import GatesArgument
from constraints.lookup import LookupArgument
from constraints.permutation import PermutationArgument
from primitives.field import batch_inverse, generator
from primitives.polynomial import (
    coset_to_coefficients,
    domain_points,
    extend_to_coset,
    lagrange_0,
    to_evaluations,
    vanishing,
)
from protocol.common_data import BatchId, CommonData
from protocol.data import Poly, ProverData, Scalar, VerifierData


def quotient_extension(chunks: int) -> int:
    """Smallest power of two 2^e with 2^e >= chunks + 1."""
    extend = 1
    while extend < chunks + 1:
        extend <<= 1
    return extend


def constraint_modules(constraint_system: ConstraintSystem, common: CommonData) -> List[ConstraintModule]:
    """Arguments whose constraint polynomials make up T, in weighting order."""
    return [
        PermutationArgument(common.permuted_columns, common.permutation_partition),
        LookupArgument(constraint_system),
        GatesArgument(constraint_system),
    ]


def num_constraint_polynomials(modules: List[ConstraintModule]) -> int:
    return sum(len(module.degrees()) for module in modules)


def _evaluate_all(modules: List[ConstraintModule], ctx) -> List:
    constraints = []
    for module in modules:
        constraints.extend(module.constraint_polynomials(ctx))
    return constraints


# --- Prover ---

def compute_quotient(
    columns: Dict[Tuple[str, int], Poly],
    common: CommonData,
    modules: List[ConstraintModule],
    challenges: Dict[str, Scalar],
    alphas: List[Scalar],
) -> Dict[Tuple[str, int], Poly]:
    """Quotient chunks H_k as evaluations over the basic domain.

    Args:
        columns: Every committed polynomial of the earlier rounds, as
            evaluations over the basic domain
        common: Circuit common data
        modules: Constraint modules, as from constraint_modules()
        challenges: Named challenges drawn so far
        alphas: One weight per constraint polynomial

    Returns:
        ("quotient", k) -> evaluations of H_k over <omega_n>
    """
    field = common.field
    n = common.rows_amount
    extend = quotient_extension(common.quotient_chunks)
    size = n * extend
    shift = generator(field)

    # --- Coset evaluations ---
    layout = common.layout()
    coset_columns = {}
    for batch_id in (BatchId.FIXED_VALUES, BatchId.VARIABLE_VALUES, BatchId.LOOKUP, BatchId.PERMUTATION):
        for entry in layout[batch_id]:
            key = (entry.name, entry.index)
            coset_columns[key] = extend_to_coset(columns[key], size, shift)

    points = domain_points(field, size, shift)
    data = ProverData(
        columns=coset_columns,
        challenges=challenges,
        lagrange_0=lagrange_0(points, n),
        extend=extend,
        field=field,
    )
    ctx = ProverConstraintContext(data)

    # --- T / Z_H ---
    t = combine_constraints(_evaluate_all(modules, ctx), alphas, field)
    if not isinstance(t, galois.FieldArray) or t.ndim == 0:
        t = field.Zeros(size) + t
    quotient = t * batch_inverse(vanishing(points, n))

    # --- Split ---
    coefficients = coset_to_coefficients(quotient, shift)
    return {
        ("quotient", k): to_evaluations(coefficients[k * n:(k + 1) * n], n)
        for k in range(common.quotient_chunks)
    }


# --- Verifier ---

def evaluate_constraints(modules: List[ConstraintModule], data: VerifierData, alphas: List[Scalar]) -> Scalar:
    """T(y) from the openings."""
    ctx = VerifierConstraintContext(data)
    return combine_constraints(_evaluate_all(modules, ctx), alphas, data.field)


def check_quotient(
    modules: List[ConstraintModule],
    data: VerifierData,
    alphas: List[Scalar],
    y: Scalar,
    n: int,
    chunks: int,
) -> bool:
    """T(y) == Z_H(y) * sum_k y^(k n) H_k(y)."""
    field = data.field
    t = evaluate_constraints(modules, data, alphas)

    h = field(0)
    y_n = y ** n
    power = field(1)
    for k in range(chunks):
        h = h + power * data.evals[("quotient", k, 0)]
        power = power * y_n

    return bool(t == vanishing(y, n) * h)
