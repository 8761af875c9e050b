"""Gate argument: every gate constraint folded into one polynomial.

    F = sum_g sel_g * sum_c theta^(k_gc) C_gc

with k_gc running over all gate constraints in order.
"""

from typing import List

from arithmetization.constraint_system import ConstraintSystem
from arithmetization.variable import ColumnType, Variable
from .base import ConstraintContext, ConstraintModule


class GatesArgument(ConstraintModule):
    """Combined gate constraint polynomial; empty when the circuit has no gates."""

    def __init__(self, constraint_system: ConstraintSystem):
        self.constraint_system = constraint_system
        self.gates = [gate for gate in constraint_system.gates if gate.constraints]

    def degrees(self) -> List[int]:
        if not self.gates:
            return []
        return [self.constraint_system.max_gates_degree()]

    def constraint_polynomials(self, ctx: ConstraintContext) -> List:
        if not self.gates:
            return []

        theta = ctx.challenge("gate_theta")
        power = ctx.one()
        combined = ctx.field(0)
        for gate in self.gates:
            acc = ctx.field(0)
            for constraint in gate.constraints:
                acc = acc + power * ctx.evaluate(constraint)
                power = power * theta
            combined = combined + ctx.cell(Variable(gate.selector_index, 0, ColumnType.SELECTOR)) * acc
        return [combined]
