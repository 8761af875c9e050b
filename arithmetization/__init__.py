"""Arithmetization - columns, expressions, gates and the constraint system."""

from arithmetization.constraint_system import ConstraintSystem
from arithmetization.expression import (
    Constant,
    Expression,
    Negation,
    Power,
    Product,
    Sum,
)
from arithmetization.gates import (
    CopyConstraint,
    Gate,
    LookupConstraint,
    LookupGate,
    LookupTable,
)
from arithmetization.table import AssignmentTable, TableDescription
from arithmetization.variable import (
    ColumnType,
    Variable,
    constant,
    public_input,
    selector,
    witness,
)

__all__ = [
    "ConstraintSystem",
    "Expression",
    "Constant",
    "Sum",
    "Negation",
    "Product",
    "Power",
    "Gate",
    "CopyConstraint",
    "LookupConstraint",
    "LookupGate",
    "LookupTable",
    "AssignmentTable",
    "TableDescription",
    "ColumnType",
    "Variable",
    "witness",
    "public_input",
    "constant",
    "selector",
]
