"""Small circuits shared by the protocol tests.

Each builder returns (constraint_system, table_description, assignment).
"""

from typing import List, Optional

from arithmetization import (
    AssignmentTable,
    ConstraintSystem,
    CopyConstraint,
    Gate,
    LookupConstraint,
    LookupGate,
    LookupTable,
    TableDescription,
    public_input,
    witness,
)


def boolean_circuit(values: List[int]):
    """One witness column, gate w * (w - 1) = 0 on every row of a 4-row domain."""
    cs = ConstraintSystem(gates=[Gate(0, [witness(0) * (witness(0) - 1)])])
    table = TableDescription(witness_columns=1, selector_columns=1, usable_rows=4, rows_amount=4)
    assignment = AssignmentTable(witnesses=[values], selectors=[[1, 1, 1, 1]])
    return cs, table, assignment


def copy_circuit(col0: List[int], col1: List[int]):
    """Two witness columns with col0[0] == col1[2]."""
    cs = ConstraintSystem(
        copy_constraints=[CopyConstraint(witness(0).at_row(0), witness(1).at_row(2))],
    )
    table = TableDescription(witness_columns=2, usable_rows=4)
    assignment = AssignmentTable(witnesses=[col0, col1])
    return cs, table, assignment


def chained_copy_circuit(columns: List[List[int]]):
    """Three witness columns, col0[0] == col1[1] == col2[3], plus col0[2] == col2[0]."""
    cs = ConstraintSystem(
        copy_constraints=[
            CopyConstraint(witness(0).at_row(0), witness(1).at_row(1)),
            CopyConstraint(witness(1).at_row(1), witness(2).at_row(3)),
            CopyConstraint(witness(0).at_row(2), witness(2).at_row(0)),
        ],
    )
    table = TableDescription(witness_columns=3, usable_rows=4)
    assignment = AssignmentTable(witnesses=columns)
    return cs, table, assignment


def range_lookup_circuit(
    values: List[int],
    table_values: Optional[List[int]] = None,
    selectors: Optional[List[int]] = None,
):
    """Every selected witness value must lie in the table, [0, 1, 2, 3] by default."""
    cs = ConstraintSystem(
        lookup_gates=[LookupGate(0, [LookupConstraint([witness(0)], 0)])],
        lookup_tables=[LookupTable([0])],
    )
    table = TableDescription(witness_columns=1, constant_columns=1, selector_columns=1, usable_rows=4)
    assignment = AssignmentTable(
        witnesses=[values],
        constants=[table_values if table_values is not None else [0, 1, 2, 3]],
        selectors=[selectors if selectors is not None else [1, 1, 1, 1]],
    )
    return cs, table, assignment


def square_lookup_circuit(xs: List[int], ys: List[int], active: Optional[List[int]] = None):
    """(x, y) pairs must appear in the table {(i, i^2)}."""
    cs = ConstraintSystem(
        lookup_gates=[LookupGate(0, [LookupConstraint([witness(0), witness(1)], 0)])],
        lookup_tables=[LookupTable([0, 1])],
    )
    table = TableDescription(witness_columns=2, constant_columns=2, selector_columns=1, usable_rows=5)
    assignment = AssignmentTable(
        witnesses=[xs, ys],
        constants=[[0, 1, 2, 3, 4], [0, 1, 4, 9, 16]],
        selectors=[active if active is not None else [1] * len(xs)],
    )
    return cs, table, assignment


def fibonacci_circuit(values: List[int], publics: List[int]):
    """w[i] + w[i+1] = w[i+2] on rows 0..3; the first two values are public inputs."""
    cs = ConstraintSystem(
        gates=[Gate(0, [witness(0) + witness(0, 1) - witness(0, 2)])],
        copy_constraints=[
            CopyConstraint(witness(0).at_row(0), public_input(0).at_row(0)),
            CopyConstraint(witness(0).at_row(1), public_input(0).at_row(1)),
        ],
    )
    table = TableDescription(witness_columns=1, public_input_columns=1, selector_columns=1, usable_rows=6)
    assignment = AssignmentTable(
        witnesses=[values],
        public_inputs=[publics],
        selectors=[[1, 1, 1, 1]],
    )
    return cs, table, assignment
