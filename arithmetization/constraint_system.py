"""Circuit description: gates, copy constraints and lookups."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Set, Tuple

from arithmetization.gates import CopyConstraint, Gate, LookupGate, LookupTable
from arithmetization.variable import ColumnType, Variable
from primitives.hashing import Hasher


@dataclass
class ConstraintSystem:
    """Gates, copy constraints and lookup gates over the four column kinds."""
    gates: List[Gate] = field(default_factory=list)
    copy_constraints: List[CopyConstraint] = field(default_factory=list)
    lookup_gates: List[LookupGate] = field(default_factory=list)
    lookup_tables: List[LookupTable] = field(default_factory=list)

    def permuted_columns(self) -> List[Variable]:
        """Columns touched by copy constraints, in global column order."""
        columns: Set[Tuple[ColumnType, int]] = set()
        for constraint in self.copy_constraints:
            columns.add(constraint.first.column)
            columns.add(constraint.second.column)
        return [Variable(index, 0, column_type) for column_type, index in sorted(columns)]

    def max_gates_degree(self) -> int:
        """Highest selector-weighted degree over the gates."""
        return max((gate.degree() for gate in self.gates if gate.constraints), default=0)

    def max_lookup_degree(self) -> int:
        """Highest input expression degree over the lookup constraints."""
        return max(
            (c.degree() for gate in self.lookup_gates for c in gate.constraints),
            default=0,
        )

    def lookup_constraints(self) -> Iterator[Tuple[LookupGate, int]]:
        """(lookup gate, constraint position) pairs in argument order."""
        for gate in self.lookup_gates:
            for position in range(len(gate.constraints)):
                yield gate, position

    def num_lookup_constraints(self) -> int:
        return sum(len(gate.constraints) for gate in self.lookup_gates)

    def variables(self) -> Iterator[Variable]:
        """Every relative variable used by gate and lookup expressions, selectors included."""
        for gate in self.gates:
            yield Variable(gate.selector_index, 0, ColumnType.SELECTOR)
            for constraint in gate.constraints:
                yield from constraint.variables()
        for gate in self.lookup_gates:
            yield Variable(gate.selector_index, 0, ColumnType.SELECTOR)
            for constraint in gate.constraints:
                for expression in constraint.inputs:
                    yield from expression.variables()
        for table in self.lookup_tables:
            for index in table.columns:
                yield Variable(index, 0, ColumnType.CONSTANT)

    def columns_rotations(self) -> Dict[Tuple[ColumnType, int], Set[int]]:
        """Rotations each referenced column is read at."""
        rotations: Dict[Tuple[ColumnType, int], Set[int]] = {}
        for variable in self.variables():
            rotations.setdefault(variable.column, {0}).add(variable.rotation)
        return rotations

    def digest(self, hasher: Hasher) -> bytes:
        """Canonical hash of the circuit."""
        return hasher.hash(repr(self).encode())
