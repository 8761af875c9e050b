"""Table layout and assignment."""

from dataclasses import dataclass, field
from typing import List, Optional

from arithmetization.variable import ColumnType

Column = List[int]


@dataclass(frozen=True)
class TableDescription:
    """Column counts and row counts of the assignment table.

    Attributes:
        witness_columns: Number of private columns
        public_input_columns: Number of public input columns
        constant_columns: Number of fixed constant columns (lookup tables live here)
        selector_columns: Number of fixed selector columns
        usable_rows: Rows available to the witness
        rows_amount: Evaluation domain size; a power of two >= usable_rows.
            0 picks the smallest power of two strictly greater than usable_rows,
            leaving room for the "last usable row" marker.
    """
    witness_columns: int
    public_input_columns: int = 0
    constant_columns: int = 0
    selector_columns: int = 0
    usable_rows: int = 0
    rows_amount: int = 0

    def __post_init__(self):
        if self.rows_amount == 0:
            rows = 2
            while rows <= self.usable_rows:
                rows <<= 1
            object.__setattr__(self, "rows_amount", rows)

    def column_count(self, column_type: ColumnType) -> int:
        return {
            ColumnType.WITNESS: self.witness_columns,
            ColumnType.PUBLIC_INPUT: self.public_input_columns,
            ColumnType.CONSTANT: self.constant_columns,
            ColumnType.SELECTOR: self.selector_columns,
        }[column_type]

    @property
    def rows_log(self) -> int:
        return self.rows_amount.bit_length() - 1


@dataclass
class AssignmentTable:
    """Concrete column values.

    Columns may be shorter than usable_rows; the remainder is zero. A table
    whose `witnesses` is None carries only the public part and is what public
    preprocessing consumes.
    """
    witnesses: Optional[List[Column]] = None
    public_inputs: List[Column] = field(default_factory=list)
    constants: List[Column] = field(default_factory=list)
    selectors: List[Column] = field(default_factory=list)

    @property
    def has_witness(self) -> bool:
        return self.witnesses is not None

    def public_table(self) -> "AssignmentTable":
        """Copy without the witness columns."""
        return AssignmentTable(
            witnesses=None,
            public_inputs=self.public_inputs,
            constants=self.constants,
            selectors=self.selectors,
        )
