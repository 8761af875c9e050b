"""Public and private preprocessing.

Public preprocessing turns a constraint system and the public part of the
table (constant and selector columns) into the common data every proof for
the circuit shares:

    - identity polynomials  S_id_j(omega^i)    = delta^j * omega^i
    - permutation polynomials S_sigma_j(omega^i) = delta^j' * omega^i'
      where (j', i') is the next cell in the copy constraint cycle of (j, i)
    - q_last (1 on the last usable row) and q_blind (1 on the rows after it)
    - the committed fixed batch and the verification key

Private preprocessing turns a witness into evaluation buffers over the basic
domain.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import galois
import numpy as np

from arithmetization.constraint_system import ConstraintSystem
from arithmetization.table import AssignmentTable, TableDescription
from arithmetization.variable import ColumnType, Variable
from commitments.lpc import LpcCommitmentScheme
from constraints.gates import GatesArgument
from constraints.lookup import LookupArgument
from constraints.permutation import PermutationArgument
from primitives.field import FieldType, generator, get_omega, two_adicity
from primitives.hashing import Hasher
from primitives.polynomial import powers
from protocol.common_data import BatchId, CommonData, VerificationKey
from protocol.errors import InvalidTableDescription, MalformedConstraintSystem
from protocol.params import PlaceholderParams
from protocol.quotient import quotient_extension

logger = logging.getLogger(__name__)

# (name, index) -> evaluations over the basic domain
Columns = Dict[Tuple[str, int], galois.FieldArray]
# (position in permuted columns, row)
Cell = Tuple[int, int]


@dataclass
class PreprocessedPublicData:
    """Per-circuit data shared by every proof.

    Attributes:
        constraint_system: The circuit
        common_data: Layout, parameters and verification key
        params: Proving parameters the data was built with
        fixed_columns: id, sigma, q_last, q_blind, constant and selector
            evaluations over the basic domain
        lagrange_0: L_0 over the basic domain
        commitment_scheme: Scheme holding the committed fixed batch
    """
    constraint_system: ConstraintSystem
    common_data: CommonData
    params: PlaceholderParams
    fixed_columns: Columns = field(default_factory=dict)
    lagrange_0: galois.FieldArray = None
    commitment_scheme: LpcCommitmentScheme = None


@dataclass
class PreprocessedPrivateData:
    """Witness and public input evaluations over the basic domain."""
    columns: Columns = field(default_factory=dict)


def _reduce(column: List[int], field_type: FieldType) -> List[int]:
    p = field_type.characteristic
    return [int(v) % p for v in column]


def _padded_column(column: List[int], field_type: FieldType, rows: int) -> galois.FieldArray:
    values = field_type.Zeros(rows)
    values[:len(column)] = _reduce(column, field_type)
    return values


# --- Public ---

class PublicPreprocessor:
    """Builds the common data of a circuit."""

    def __init__(self, constraint_system: ConstraintSystem, table_description: TableDescription,
                 params: PlaceholderParams):
        self.constraint_system = constraint_system
        self.table = table_description
        self.params = params
        self.field = params.field

    # --- Validation ---

    def _check_variable(self, variable: Variable, where: str) -> None:
        count = self.table.column_count(variable.type)
        if not 0 <= variable.index < count:
            raise InvalidTableDescription(
                f"{where}: {variable.type.name.lower()} column {variable.index} out of range ({count} columns)"
            )
        if not variable.relative:
            raise InvalidTableDescription(f"{where}: gate and lookup variables must be relative")
        if abs(variable.rotation) >= self.table.rows_amount:
            raise InvalidTableDescription(
                f"{where}: rotation {variable.rotation} exceeds the domain of {self.table.rows_amount} rows"
            )

    def _check_selector(self, index: int, where: str) -> None:
        if not 0 <= index < self.table.selector_columns:
            raise InvalidTableDescription(f"{where}: selector {index} out of range")

    def _check_table(self) -> None:
        table = self.table
        rows = table.rows_amount
        if rows < 2 or rows & (rows - 1):
            raise InvalidTableDescription(f"rows_amount must be a power of two >= 2, got {rows}")
        if not 1 <= table.usable_rows <= rows:
            raise InvalidTableDescription(f"usable_rows must be in [1, {rows}], got {table.usable_rows}")
        for column_type in ColumnType:
            if table.column_count(column_type) < 0:
                raise InvalidTableDescription(f"Negative {column_type.name.lower()} column count")

    def _check_assignment(self, assignment: AssignmentTable) -> None:
        expected = [
            (ColumnType.PUBLIC_INPUT, assignment.public_inputs),
            (ColumnType.CONSTANT, assignment.constants),
            (ColumnType.SELECTOR, assignment.selectors),
        ]
        if assignment.has_witness:
            expected.append((ColumnType.WITNESS, assignment.witnesses))
        for column_type, columns in expected:
            name = column_type.name.lower()
            if len(columns) != self.table.column_count(column_type):
                raise InvalidTableDescription(
                    f"Expected {self.table.column_count(column_type)} {name} columns, got {len(columns)}"
                )
            for index, column in enumerate(columns):
                if len(column) > self.table.usable_rows:
                    raise InvalidTableDescription(
                        f"{name} column {index} has {len(column)} rows, usable_rows is {self.table.usable_rows}"
                    )

    def validate(self, assignment: AssignmentTable) -> None:
        """Raise InvalidTableDescription if the table does not fit the constraint system."""
        cs = self.constraint_system
        self._check_table()
        self._check_assignment(assignment)

        for g, gate in enumerate(cs.gates):
            self._check_selector(gate.selector_index, f"gate {g}")
            for constraint in gate.constraints:
                for variable in constraint.variables():
                    self._check_variable(variable, f"gate {g}")

        for t, table in enumerate(cs.lookup_tables):
            if table.width == 0:
                raise InvalidTableDescription(f"lookup table {t} has no columns")
            for index in table.columns:
                if not 0 <= index < self.table.constant_columns:
                    raise InvalidTableDescription(f"lookup table {t}: constant column {index} out of range")
            lengths = {len(assignment.constants[index]) for index in table.columns}
            if len(lengths) > 1:
                raise InvalidTableDescription(f"lookup table {t}: columns have different lengths {sorted(lengths)}")
            if lengths == {0}:
                raise InvalidTableDescription(f"lookup table {t} has no rows")

        for g, gate in enumerate(cs.lookup_gates):
            self._check_selector(gate.selector_index, f"lookup gate {g}")
            for constraint in gate.constraints:
                if not 0 <= constraint.table_index < len(cs.lookup_tables):
                    raise InvalidTableDescription(f"lookup gate {g}: no table {constraint.table_index}")
                width = cs.lookup_tables[constraint.table_index].width
                if len(constraint.inputs) != width:
                    raise InvalidTableDescription(
                        f"lookup gate {g}: {len(constraint.inputs)} inputs for a table of width {width}"
                    )
                for expression in constraint.inputs:
                    for variable in expression.variables():
                        self._check_variable(variable, f"lookup gate {g}")

        for c, copy in enumerate(cs.copy_constraints):
            for variable in (copy.first, copy.second):
                count = self.table.column_count(variable.type)
                if not 0 <= variable.index < count:
                    raise InvalidTableDescription(f"copy constraint {c}: column {variable.index} out of range")
                if variable.relative:
                    raise InvalidTableDescription(f"copy constraint {c}: cells must be absolute")
                if not 0 <= variable.rotation < self.table.usable_rows:
                    raise InvalidTableDescription(
                        f"copy constraint {c}: row {variable.rotation} is not a usable row"
                    )

    # --- Copy constraint cycles ---

    def cycle_representation(self, permuted: List[Variable]) -> List[List[Cell]]:
        """Permutation sigma over permuted cells, as mapping[j][i] = next cell of (j, i).

        Cycles are merged by size: the smaller cycle is relabelled to the
        larger cycle's representative, then the two cycles are joined by
        swapping the successors of the constrained cells.
        """
        rows = self.table.rows_amount
        position = {variable.column: j for j, variable in enumerate(permuted)}

        mapping: List[List[Cell]] = [[(j, i) for i in range(rows)] for j in range(len(permuted))]
        aux: List[List[Cell]] = [[(j, i) for i in range(rows)] for j in range(len(permuted))]
        sizes: List[List[int]] = [[1] * rows for _ in range(len(permuted))]

        for copy in self.constraint_system.copy_constraints:
            left = (position[copy.first.column], copy.first.rotation)
            right = (position[copy.second.column], copy.second.rotation)
            left_root = aux[left[0]][left[1]]
            right_root = aux[right[0]][right[1]]
            if left_root == right_root:
                continue

            if sizes[left_root[0]][left_root[1]] < sizes[right_root[0]][right_root[1]]:
                left, right = right, left
                left_root, right_root = right_root, left_root

            sizes[left_root[0]][left_root[1]] += sizes[right_root[0]][right_root[1]]

            cell = right
            while True:
                aux[cell[0]][cell[1]] = left_root
                cell = mapping[cell[0]][cell[1]]
                if cell == right:
                    break

            mapping[left[0]][left[1]], mapping[right[0]][right[1]] = (
                mapping[right[0]][right[1]],
                mapping[left[0]][left[1]],
            )
        return mapping

    def identity_polynomials(self, count: int) -> List[galois.FieldArray]:
        rows = self.table.rows_amount
        domain = powers(get_omega(self.field, self.table.rows_log), rows)
        delta = generator(self.field)
        return [delta ** j * domain for j in range(count)]

    def permutation_polynomials(self, mapping: List[List[Cell]]) -> List[galois.FieldArray]:
        rows = self.table.rows_amount
        omega = get_omega(self.field, self.table.rows_log)
        delta = generator(self.field)
        domain = powers(omega, rows)
        shifts = powers(delta, len(mapping))
        sigmas = []
        for cycle in mapping:
            column_index = [j for j, _ in cycle]
            row_index = [i for _, i in cycle]
            sigmas.append(shifts[column_index] * domain[row_index])
        return sigmas

    # --- Sizing ---

    def permutation_partition(self, m: int) -> List[Tuple[int, ...]]:
        """Split the permuted columns into parts that fit max_quotient_chunks."""
        if m == 0:
            return []
        limit = self.params.max_quotient_chunks
        if limit == 0:
            return [tuple(range(m))]
        if limit < 2:
            raise MalformedConstraintSystem(
                f"max_quotient_chunks={limit} leaves no room for the permutation argument"
            )
        size = limit - 1
        return [tuple(range(start, min(start + size, m))) for start in range(0, m, size)]

    def quotient_chunks(self, degrees: List[int]) -> Tuple[int, int]:
        """(chunk count, highest constraint degree)."""
        max_degree = max(degrees + [2])
        limit = self.params.max_quotient_chunks
        if limit == 0:
            return max_degree - 1, max_degree
        if max_degree - 1 > limit:
            raise MalformedConstraintSystem(
                f"Constraint degree {max_degree} needs {max_degree - 1} quotient chunks, "
                f"max_quotient_chunks is {limit}"
            )
        return limit, max_degree

    # --- Process ---

    def process(self, assignment: Optional[AssignmentTable] = None) -> PreprocessedPublicData:
        cs = self.constraint_system
        assignment = (assignment or AssignmentTable()).public_table()
        self.validate(assignment)

        rows = self.table.rows_amount
        usable = self.table.usable_rows
        try:
            commitment_params = self.params.commitment_params(self.table.rows_log)
        except ValueError as e:
            raise MalformedConstraintSystem(str(e)) from e

        permuted = cs.permuted_columns()
        partition = self.permutation_partition(len(permuted))

        degrees = (
            PermutationArgument(permuted, partition).degrees()
            + LookupArgument(cs).degrees()
            + GatesArgument(cs).degrees()
        )
        chunks, max_degree = self.quotient_chunks(degrees)
        extension = quotient_extension(chunks)
        if self.table.rows_log + extension.bit_length() - 1 > two_adicity(self.field):
            raise MalformedConstraintSystem(
                f"{self.field.name} has no subgroup for a quotient domain of {rows * extension} points"
            )

        rotations = {
            key: tuple(sorted(values)) for key, values in sorted(cs.columns_rotations().items())
        }

        common = CommonData(
            table_description=self.table,
            commitment_params=commitment_params,
            omega=get_omega(self.field, self.table.rows_log),
            permuted_columns=permuted,
            columns_rotations=rotations,
            permutation_partition=partition,
            quotient_chunks=chunks,
            max_degree=max_degree,
            lookup_constraints=cs.num_lookup_constraints(),
        )

        # --- Fixed polynomials ---
        fixed: Columns = {}
        for j, poly in enumerate(self.identity_polynomials(len(permuted))):
            fixed[("id", j)] = poly
        for j, poly in enumerate(self.permutation_polynomials(self.cycle_representation(permuted))):
            fixed[("sigma", j)] = poly

        q_last = self.field.Zeros(rows)
        q_blind = self.field.Zeros(rows)
        if usable < rows:
            q_last[usable] = 1
            q_blind[usable + 1:] = 1
        fixed[("q_last", 0)] = q_last
        fixed[("q_blind", 0)] = q_blind

        table_columns = {index for table in cs.lookup_tables for index in table.columns}
        for index, column in enumerate(assignment.constants):
            if index in table_columns:
                # lookup tables repeat their last row up to usable_rows
                column = list(column) + [column[-1]] * (usable - len(column))
            fixed[("constant", index)] = _padded_column(column, self.field, rows)
        for index, column in enumerate(assignment.selectors):
            fixed[("selector", index)] = _padded_column(column, self.field, rows)

        # --- Commit ---
        scheme = LpcCommitmentScheme(commitment_params)
        entries = common.layout()[BatchId.FIXED_VALUES]
        scheme.append_to_batch(BatchId.FIXED_VALUES, [fixed[(e.name, e.index)] for e in entries])
        fixed_root = scheme.commit(BatchId.FIXED_VALUES)
        scheme.mark_batch_as_fixed(BatchId.FIXED_VALUES)

        hasher = Hasher(self.params.hash_name)
        common.vk = VerificationKey(
            constraint_system_hash=hasher.hash(
                cs.digest(hasher),
                repr(self.table).encode(),
                repr(commitment_params).encode(),
                chunks.to_bytes(8, "big"),
            ),
            fixed_values_commitment=fixed_root,
        )

        lagrange = self.field.Zeros(rows)
        lagrange[0] = 1

        logger.debug(
            f"Preprocessed circuit: {rows} rows, {len(permuted)} permuted columns, "
            f"{common.lookup_constraints} lookups, {chunks} quotient chunks"
        )

        return PreprocessedPublicData(
            constraint_system=cs,
            common_data=common,
            params=self.params,
            fixed_columns=fixed,
            lagrange_0=lagrange,
            commitment_scheme=scheme,
        )


# --- Private ---

class PrivatePreprocessor:
    """Builds the witness and public input buffers of one proof."""

    def __init__(self, table_description: TableDescription, params: PlaceholderParams):
        self.table = table_description
        self.params = params
        self.field = params.field

    def _blinding(self, count: int, rng: np.random.Generator) -> galois.FieldArray:
        if count == 0:
            return self.field.Zeros(count)
        return self.field.Random(count, seed=rng)

    def process(self, assignment: AssignmentTable) -> PreprocessedPrivateData:
        if not assignment.has_witness:
            raise InvalidTableDescription("Private preprocessing needs witness columns")
        if len(assignment.witnesses) != self.table.witness_columns:
            raise InvalidTableDescription(
                f"Expected {self.table.witness_columns} witness columns, got {len(assignment.witnesses)}"
            )
        if len(assignment.public_inputs) != self.table.public_input_columns:
            raise InvalidTableDescription(
                f"Expected {self.table.public_input_columns} public input columns, "
                f"got {len(assignment.public_inputs)}"
            )

        rows = self.table.rows_amount
        usable = self.table.usable_rows
        # fresh entropy unless a seed pins the blinding rows
        rng = np.random.default_rng(self.params.blinding_seed)

        columns: Columns = {}
        for index, column in enumerate(assignment.witnesses):
            if len(column) > usable:
                raise InvalidTableDescription(f"witness column {index} is longer than usable_rows")
            values = _padded_column(column, self.field, rows)
            values[usable:] = self._blinding(rows - usable, rng)
            columns[("witness", index)] = values

        # Public inputs are interpolated by the verifier, so they are never blinded
        for index, column in enumerate(assignment.public_inputs):
            if len(column) > usable:
                raise InvalidTableDescription(f"public input column {index} is longer than usable_rows")
            columns[("public_input", index)] = _padded_column(column, self.field, rows)

        return PreprocessedPrivateData(columns=columns)


def process(
    constraint_system: ConstraintSystem,
    assignment: Optional[AssignmentTable],
    table_description: TableDescription,
    params: PlaceholderParams,
) -> Union[PreprocessedPublicData, Tuple[PreprocessedPublicData, PreprocessedPrivateData]]:
    """Preprocess a circuit, and the witness when the assignment carries one.

    Returns:
        PreprocessedPublicData for a table without witness columns, otherwise
        (PreprocessedPublicData, PreprocessedPrivateData)
    """
    public = PublicPreprocessor(constraint_system, table_description, params).process(assignment)
    if assignment is None or not assignment.has_witness:
        return public
    private = PrivatePreprocessor(table_description, params).process(assignment)
    return public, private
