"""Permutation argument witness generation.

Computes the grand product Z and, when the permuted columns are split into
several parts, the intermediate products

    V_t = Z * prod_{s<t} g_s / h_s

so that each part's recurrence V_{t+1} h_t = V_t g_t has bounded degree.
"""

from typing import List, Tuple

from arithmetization.variable import Variable
from constraints.base import ConstraintContext
from constraints.permutation import part_factors
from primitives.field import batch_inverse
from .base import Columns, WitnessModule


class PermutationWitness(WitnessModule):
    """Witness generation for the copy constraint argument."""

    def __init__(self, columns: List[Variable], partition: List[Tuple[int, ...]], usable_rows: int):
        self.columns = columns
        self.partition = partition
        self.usable_rows = usable_rows

    def compute_grand_products(self, ctx: ConstraintContext) -> Columns:
        if not self.columns:
            return {}

        ratios = []
        for positions in self.partition:
            g, h = part_factors(ctx, self.columns, positions)
            ratios.append(g * batch_inverse(h))

        step = ratios[0]
        for ratio in ratios[1:]:
            step = step * ratio

        z = self._grand_product(step, self.usable_rows)
        result = {("permutation_product", 0): z}

        partial = z
        for t in range(1, len(self.partition)):
            partial = partial * ratios[t - 1]
            result[("permutation_part", t)] = partial
        return result
