"""Base class for witness generation."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple

from constraints.base import ConstraintContext
from protocol.data import Poly

# (name, index) -> evaluations over the basic domain
Columns = Dict[Tuple[str, int], Poly]


class WitnessModule(ABC):
    """Per-argument witness generation. Used by prover only.

    Unlike ConstraintModule, this is only used by the prover - the verifier
    checks constraints but doesn't generate witnesses. Every method receives a
    ProverConstraintContext over the basic domain (extend = 1).
    """

    def compute_intermediates(self, ctx: ConstraintContext) -> Columns:
        """Columns committed before beta and gamma are drawn."""
        return {}

    @abstractmethod
    def compute_grand_products(self, ctx: ConstraintContext) -> Columns:
        """Grand product columns, committed after beta and gamma are drawn."""

    def _compute_cumulative_product(self, row_values: Poly) -> Poly:
        """Compute cumulative product: result[i] = prod(row_values[0:i+1])."""
        result = row_values.copy()
        for i in range(1, len(row_values)):
            result[i] = result[i - 1] * row_values[i]
        return result

    def _grand_product(self, step: Poly, usable_rows: int) -> Poly:
        """Z with Z[0] = 1 and Z[i+1] = Z[i] * step[i] up to the last usable row.

        Rows after the last usable row stay zero.
        """
        field = type(step)
        n = len(step)
        steps = min(usable_rows, n - 1)
        z = field.Zeros(n)
        z[0] = 1
        if steps > 0:
            z[1:steps + 1] = self._compute_cumulative_product(step[:steps])
        return z
