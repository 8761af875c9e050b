"""Lookup argument (sorted-difference grand product).

Per lookup constraint k, with theta = lookup_theta:

    S = sum_i theta^i table_i                compressed table
    A = sel * sum_i theta^i input_i + (1 - sel) * S
                                             compressed input; rows with a
                                             zero selector look up their own table row
    A', S'                                   committed sorted input and matched table
    Z_L                                      grand product, Z_L(omega^0) = 1

    F_0 = active (A' - S') (A' - A'(omega^-1 x))
    F_1 = L_0 (A' - S')
    F_2 = active (Z_L(omega x) (A' + beta) (S' + gamma) - Z_L (A + beta) (S + gamma))
    F_3 = L_0 (1 - Z_L)
    F_4 = q_last (Z_L^2 - Z_L)
"""

from typing import List, Tuple

from arithmetization.constraint_system import ConstraintSystem
from arithmetization.gates import LookupConstraint, LookupTable
from arithmetization.variable import ColumnType, Variable
from .base import ConstraintContext, ConstraintModule
from .permutation import active_rows


def compress_input(ctx: ConstraintContext, selector_index: int, constraint: LookupConstraint, table: LookupTable):
    """A = sel * sum theta^i input_i + (1 - sel) * S."""
    theta = ctx.challenge("lookup_theta")
    acc = ctx.field(0)
    power = ctx.one()
    for expression in constraint.inputs:
        acc = acc + power * ctx.evaluate(expression)
        power = power * theta
    selector = ctx.cell(Variable(selector_index, 0, ColumnType.SELECTOR))
    return selector * acc + (ctx.one() - selector) * compress_table(ctx, table)


def compress_table(ctx: ConstraintContext, table: LookupTable):
    """S = sum theta^i table_i."""
    theta = ctx.challenge("lookup_theta")
    acc = ctx.field(0)
    power = ctx.one()
    for index in table.columns:
        acc = acc + power * ctx.cell(Variable(index, 0, ColumnType.CONSTANT))
        power = power * theta
    return acc


class LookupArgument(ConstraintModule):
    """Constraint polynomials of every lookup constraint, in constraint system order."""

    def __init__(self, constraint_system: ConstraintSystem):
        self.constraint_system = constraint_system
        self.entries: List[Tuple[int, LookupConstraint]] = [
            (gate.selector_index, gate.constraints[position])
            for gate, position in constraint_system.lookup_constraints()
        ]

    def table(self, constraint: LookupConstraint) -> LookupTable:
        return self.constraint_system.lookup_tables[constraint.table_index]

    def degrees(self) -> List[int]:
        # A is at least degree 2 through (1 - sel) * S
        d = max(self.constraint_system.max_lookup_degree(), 1)
        return [3, 2, 4 + d, 2, 3] * len(self.entries)

    def constraint_polynomials(self, ctx: ConstraintContext) -> List:
        if not self.entries:
            return []

        beta = ctx.challenge("beta")
        gamma = ctx.challenge("gamma")
        one = ctx.one()
        l0 = ctx.lagrange_0()
        q_last = ctx.poly("q_last")
        active = active_rows(ctx)

        constraints = []
        for k, (selector_index, constraint) in enumerate(self.entries):
            table = self.table(constraint)
            a = compress_input(ctx, selector_index, constraint, table)
            s = compress_table(ctx, table)
            a_sorted = ctx.poly("sorted_input", k)
            a_sorted_prev = ctx.poly("sorted_input", k, rotation=-1)
            s_sorted = ctx.poly("sorted_table", k)
            z = ctx.poly("lookup_product", k)
            z_next = ctx.poly("lookup_product", k, rotation=1)

            constraints.append(active * (a_sorted - s_sorted) * (a_sorted - a_sorted_prev))
            constraints.append(l0 * (a_sorted - s_sorted))
            constraints.append(
                active * (z_next * (a_sorted + beta) * (s_sorted + gamma) - z * (a + beta) * (s + gamma))
            )
            constraints.append(l0 * (one - z))
            constraints.append(q_last * (z * z - z))
        return constraints
