"""Lookup argument witness generation.

Over the usable rows, the sorted input A' is A ordered by value and the
matched table S' is a rearrangement of S such that every first occurrence of
a value in A' sits next to the same value in S':

    A' = [1, 1, 3, 5, 5]      S' = [1, 0, 3, 5, 7]

Table entries that are not needed at a first occurrence fill the remaining
positions in table order. An input value missing from the table leaves its
position to a leftover entry; the resulting columns then fail the
A' = S' or A' = A'(omega^-1 x) check.
"""

from collections import Counter
from typing import List

from constraints.base import ConstraintContext
from constraints.lookup import LookupArgument, compress_input, compress_table
from primitives.field import batch_inverse
from protocol.data import Poly
from .base import Columns, WitnessModule


def sort_lookup_columns(inputs: List[int], table: List[int]):
    """Sorted input and matched table over the usable rows.

    Args:
        inputs: Compressed input values
        table: Compressed table values, same length as inputs

    Returns:
        (sorted_input, sorted_table, missing) with missing the input values
        absent from the table
    """
    sorted_input = sorted(inputs)
    remaining = Counter(table)
    sorted_table = [None] * len(sorted_input)
    missing = []

    for i, value in enumerate(sorted_input):
        if i > 0 and value == sorted_input[i - 1]:
            continue
        if remaining[value] > 0:
            remaining[value] -= 1
            sorted_table[i] = value
        else:
            missing.append(value)

    leftovers = iter(remaining.elements())
    for i, value in enumerate(sorted_table):
        if value is None:
            sorted_table[i] = next(leftovers)
    return sorted_input, sorted_table, missing


class LookupWitness(WitnessModule):
    """Witness generation for every lookup constraint."""

    def __init__(self, argument: LookupArgument, usable_rows: int):
        self.argument = argument
        self.usable_rows = usable_rows

    def _padded(self, values: List[int], like: Poly) -> Poly:
        column = type(like).Zeros(len(like))
        column[:len(values)] = values
        return column

    def compressed(self, ctx: ConstraintContext):
        """(A, S) arrays for every lookup constraint; needs lookup_theta."""
        result = []
        for selector_index, constraint in self.argument.entries:
            table = self.argument.table(constraint)
            result.append((compress_input(ctx, selector_index, constraint, table), compress_table(ctx, table)))
        return result

    def compute_intermediates(self, ctx: ConstraintContext) -> Columns:
        result = {}
        u = self.usable_rows
        for k, (a, s) in enumerate(self.compressed(ctx)):
            a_sorted, s_sorted, _ = sort_lookup_columns(
                [int(v) for v in a[:u]], [int(v) for v in s[:u]]
            )
            result[("sorted_input", k)] = self._padded(a_sorted, a)
            result[("sorted_table", k)] = self._padded(s_sorted, s)
        return result

    def compute_grand_products(self, ctx: ConstraintContext) -> Columns:
        beta = ctx.challenge("beta")
        gamma = ctx.challenge("gamma")

        result = {}
        for k, (a, s) in enumerate(self.compressed(ctx)):
            a_sorted = ctx.poly("sorted_input", k)
            s_sorted = ctx.poly("sorted_table", k)
            numerator = (a + beta) * (s + gamma)
            denominator = (a_sorted + beta) * (s_sorted + gamma)
            step = numerator * batch_inverse(denominator)
            result[("lookup_product", k)] = self._grand_product(step, self.usable_rows)
        return result
