"""Per-circuit public data shared by prover and verifier."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Tuple

import galois

from arithmetization.table import TableDescription
from arithmetization.variable import ColumnType, Variable
from commitments.params import CommitmentParams


class BatchId(IntEnum):
    """Commitment batches, in opening order."""
    FIXED_VALUES = 0
    VARIABLE_VALUES = 1
    LOOKUP = 2
    PERMUTATION = 3
    QUOTIENT = 4


@dataclass(frozen=True)
class PolyEntry:
    """A committed polynomial and the rotations it is opened at (point y * omega^rotation)."""
    name: str
    index: int
    rotations: Tuple[int, ...] = (0,)


@dataclass(frozen=True)
class VerificationKey:
    constraint_system_hash: bytes
    fixed_values_commitment: bytes


@dataclass
class CommonData:
    """Preprocessor output every proof for the circuit is checked against.

    Attributes:
        table_description: Column and row counts
        commitment_params: LPC parameters for this domain size
        omega: Generator of the evaluation domain
        permuted_columns: Columns under copy constraints, in argument order
        columns_rotations: Rotations each column is opened at
        permutation_partition: Positions (into permuted_columns) handled by each
            permutation product part
        quotient_chunks: Number of committed quotient chunks
        max_degree: Highest constraint polynomial degree, in units of rows
        lookup_constraints: Number of lookup sub-arguments
        vk: Verification key
    """
    table_description: TableDescription
    commitment_params: CommitmentParams
    omega: galois.FieldArray
    permuted_columns: List[Variable]
    columns_rotations: Dict[Tuple[ColumnType, int], Tuple[int, ...]]
    permutation_partition: List[Tuple[int, ...]]
    quotient_chunks: int
    max_degree: int
    lookup_constraints: int
    vk: VerificationKey = None

    @property
    def rows_amount(self) -> int:
        return self.table_description.rows_amount

    @property
    def usable_rows(self) -> int:
        return self.table_description.usable_rows

    @property
    def field(self):
        return self.commitment_params.field

    def rotations(self, column_type: ColumnType, index: int) -> Tuple[int, ...]:
        return self.columns_rotations.get((column_type, index), (0,))

    def layout(self) -> Dict[BatchId, List[PolyEntry]]:
        """Polynomials of every batch, in commitment order."""
        table = self.table_description
        m = len(self.permuted_columns)

        def columns(column_type: ColumnType) -> List[PolyEntry]:
            return [
                PolyEntry(column_type.name.lower(), i, self.rotations(column_type, i))
                for i in range(table.column_count(column_type))
            ]

        fixed = (
            [PolyEntry("id", j) for j in range(m)]
            + [PolyEntry("sigma", j) for j in range(m)]
            + [PolyEntry("q_last", 0), PolyEntry("q_blind", 0)]
            + columns(ColumnType.CONSTANT)
            + columns(ColumnType.SELECTOR)
        )
        variable = columns(ColumnType.WITNESS) + columns(ColumnType.PUBLIC_INPUT)

        lookup: List[PolyEntry] = []
        for k in range(self.lookup_constraints):
            lookup.append(PolyEntry("sorted_input", k, (0, -1)))
            lookup.append(PolyEntry("sorted_table", k))

        permutation: List[PolyEntry] = []
        if m > 0:
            permutation.append(PolyEntry("permutation_product", 0, (0, 1)))
            permutation.extend(PolyEntry("permutation_part", t) for t in range(1, len(self.permutation_partition)))
        permutation.extend(PolyEntry("lookup_product", k, (0, 1)) for k in range(self.lookup_constraints))

        quotient = [PolyEntry("quotient", k) for k in range(self.quotient_chunks)]

        return {
            BatchId.FIXED_VALUES: fixed,
            BatchId.VARIABLE_VALUES: variable,
            BatchId.LOOKUP: lookup,
            BatchId.PERMUTATION: permutation,
            BatchId.QUOTIENT: quotient,
        }
