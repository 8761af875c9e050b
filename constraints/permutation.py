"""Permutation (copy constraint) argument.

For permuted columns f_j with identity and permutation polynomials S_id_j,
S_sigma_j the grand product Z satisfies Z(omega^0) = 1 and

    Z(omega x) * prod_j (f_j + beta S_sigma_j + gamma) = Z(x) * prod_j (f_j + beta S_id_j + gamma)

on every row before the last usable one. The columns are split into parts;
part t > 0 carries an intermediate product V_t so that each recurrence
constraint stays within the quotient degree bound:

    F_0 = L_0 (1 - Z)
    F_t = active * (next_t * h_t - cur_t * g_t)       for each part t
    F_last = q_last (Z^2 - Z)

where active = 1 - q_last - q_blind, cur_0 = Z, cur_t = V_t,
next_t = V_{t+1} and next of the last part is Z(omega x).
"""

from typing import List, Sequence, Tuple

from arithmetization.variable import Variable
from .base import ConstraintContext, ConstraintModule


def part_factors(ctx: ConstraintContext, columns: Sequence[Variable], positions: Sequence[int]):
    """Numerator and denominator factors (g_t, h_t) of one part."""
    beta = ctx.challenge("beta")
    gamma = ctx.challenge("gamma")
    g = ctx.one()
    h = ctx.one()
    for j in positions:
        value = ctx.cell(columns[j])
        g = g * (value + beta * ctx.poly("id", j) + gamma)
        h = h * (value + beta * ctx.poly("sigma", j) + gamma)
    return g, h


def active_rows(ctx: ConstraintContext):
    """1 on rows before the last usable row, 0 on it and on the blinding rows."""
    return ctx.one() - ctx.poly("q_last") - ctx.poly("q_blind")


class PermutationArgument(ConstraintModule):
    """Constraint polynomials of the copy constraint argument.

    Args:
        columns: Permuted columns, in argument order
        partition: Positions into `columns` handled by each part
    """

    def __init__(self, columns: List[Variable], partition: List[Tuple[int, ...]]):
        self.columns = columns
        self.partition = partition

    @property
    def enabled(self) -> bool:
        return len(self.columns) > 0

    def degrees(self) -> List[int]:
        if not self.enabled:
            return []
        return [2] + [len(part) + 2 for part in self.partition] + [3]

    def constraint_polynomials(self, ctx: ConstraintContext) -> List:
        if not self.enabled:
            return []

        one = ctx.one()
        z = ctx.poly("permutation_product")
        active = active_rows(ctx)
        last = len(self.partition) - 1

        constraints = [ctx.lagrange_0() * (one - z)]

        for t, positions in enumerate(self.partition):
            g, h = part_factors(ctx, self.columns, positions)
            cur = z if t == 0 else ctx.poly("permutation_part", t)
            nxt = ctx.poly("permutation_product", rotation=1) if t == last else ctx.poly("permutation_part", t + 1)
            constraints.append(active * (nxt * h - cur * g))

        constraints.append(ctx.poly("q_last") * (z * z - z))
        return constraints
