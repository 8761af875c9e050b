"""Tests for public and private preprocessing."""

import pytest

from arithmetization import (
    AssignmentTable,
    ConstraintSystem,
    CopyConstraint,
    Gate,
    LookupConstraint,
    LookupGate,
    LookupTable,
    TableDescription,
    witness,
)
from primitives.field import FF
from protocol.common_data import BatchId
from protocol.errors import InvalidTableDescription, MalformedConstraintSystem
from protocol.params import PlaceholderParams
from protocol.preprocessor import PreprocessedPublicData, PrivatePreprocessor, PublicPreprocessor, process
from tests.circuits import boolean_circuit, chained_copy_circuit, copy_circuit, range_lookup_circuit


def _permutation_ratio(public, private, beta=FF(7), gamma=FF(11)):
    """prod over every permuted cell of (v + beta id + gamma) / (v + beta sigma + gamma)."""
    common = public.common_data
    numerator, denominator = FF(1), FF(1)
    for j, variable in enumerate(common.permuted_columns):
        values = private.columns[(variable.type.name.lower(), variable.index)]
        ids = public.fixed_columns[("id", j)]
        sigmas = public.fixed_columns[("sigma", j)]
        for i in range(common.rows_amount):
            numerator *= values[i] + beta * ids[i] + gamma
            denominator *= values[i] + beta * sigmas[i] + gamma
    return numerator / denominator


def _orbit(mapping, start):
    cells = [start]
    cell = mapping[start[0]][start[1]]
    while cell != start:
        cells.append(cell)
        cell = mapping[cell[0]][cell[1]]
    return cells


class TestPermutationPolynomials:
    """Identity and sigma polynomials built from the copy constraints."""

    def test_valid_copies_balance(self, fast_params) -> None:
        public, private = _process(copy_circuit([5, 1, 2, 3], [0, 0, 5, 0]), fast_params)
        assert _permutation_ratio(public, private) == FF(1)

    def test_broken_copy_does_not_balance(self, fast_params) -> None:
        public, private = _process(copy_circuit([5, 1, 2, 3], [0, 0, 6, 0]), fast_params)
        assert _permutation_ratio(public, private) != FF(1)

    def test_cycles_follow_copy_constraints(self, fast_params) -> None:
        cs, table, _ = chained_copy_circuit([[0] * 4] * 3)
        mapping = PublicPreprocessor(cs, table, fast_params).cycle_representation(cs.permuted_columns())

        assert sorted(_orbit(mapping, (0, 0))) == [(0, 0), (1, 1), (2, 3)]
        assert sorted(_orbit(mapping, (2, 0))) == [(0, 2), (2, 0)]
        assert mapping[1][0] == (1, 0)
        assert mapping[2][7] == (2, 7)

    def test_repeated_copy_is_ignored(self, fast_params) -> None:
        first = CopyConstraint(witness(0).at_row(0), witness(0).at_row(1))
        cs = ConstraintSystem(copy_constraints=[first, first, CopyConstraint(first.second, first.first)])
        table = TableDescription(witness_columns=1, usable_rows=2)
        mapping = PublicPreprocessor(cs, table, fast_params).cycle_representation(cs.permuted_columns())
        assert sorted(_orbit(mapping, (0, 0))) == [(0, 0), (0, 1)]

    def test_identity_polynomials_use_distinct_cosets(self, fast_params) -> None:
        cs, table, assignment = chained_copy_circuit([[0] * 4] * 3)
        public = process(cs, assignment.public_table(), table, fast_params)
        values = set()
        for j in range(3):
            values.update(int(v) for v in public.fixed_columns[("id", j)])
        assert len(values) == 3 * table.rows_amount


class TestFixedColumns:
    """Marker columns, layout and verification key."""

    def test_last_usable_row_markers(self, fast_params) -> None:
        cs, table, assignment = copy_circuit([1, 2, 3, 4], [0, 0, 1, 0])
        public = process(cs, assignment.public_table(), table, fast_params)
        assert [int(v) for v in public.fixed_columns[("q_last", 0)]] == [0, 0, 0, 0, 1, 0, 0, 0]
        assert [int(v) for v in public.fixed_columns[("q_blind", 0)]] == [0, 0, 0, 0, 0, 1, 1, 1]
        assert [int(v) for v in public.lagrange_0] == [1] + [0] * 7

    def test_full_table_has_no_markers(self, fast_params) -> None:
        cs, table, assignment = boolean_circuit([0, 1, 0, 1])
        public = process(cs, assignment.public_table(), table, fast_params)
        assert not any(public.fixed_columns[("q_last", 0)])
        assert not any(public.fixed_columns[("q_blind", 0)])

    def test_gate_only_circuit_has_no_permutation_columns(self, fast_params) -> None:
        cs, table, assignment = boolean_circuit([0, 1, 0, 1])
        public = process(cs, assignment.public_table(), table, fast_params)
        assert public.common_data.permutation_partition == []
        assert not [key for key in public.fixed_columns if key[0] in ("id", "sigma")]

    def test_short_lookup_table_repeats_its_last_row(self, fast_params) -> None:
        cs, table, assignment = range_lookup_circuit([1, 1, 2, 2], table_values=[1, 2])
        public = process(cs, assignment.public_table(), table, fast_params)
        assert [int(v) for v in public.fixed_columns[("constant", 0)]] == [1, 2, 2, 2, 0, 0, 0, 0]

    def test_public_only_assignment_returns_public_data(self, fast_params) -> None:
        cs, table, assignment = boolean_circuit([0, 1, 0, 1])
        public = process(cs, assignment.public_table(), table, fast_params)
        assert isinstance(public, PreprocessedPublicData)
        assert public.commitment_scheme.batch_size(BatchId.FIXED_VALUES) == len(
            public.common_data.layout()[BatchId.FIXED_VALUES]
        )

    def test_verification_key_is_deterministic(self, fast_params) -> None:
        cs, table, assignment = copy_circuit([1, 2, 3, 4], [0, 0, 1, 0])
        first = process(cs, assignment.public_table(), table, fast_params)
        second = process(cs, assignment.public_table(), table, fast_params)
        assert first.common_data.vk == second.common_data.vk

    def test_verification_key_tracks_circuit_and_params(self, fast_params) -> None:
        cs, table, assignment = copy_circuit([1, 2, 3, 4], [0, 0, 1, 0])
        base = process(cs, assignment.public_table(), table, fast_params).common_data.vk

        other_cs, other_table, other_assignment = chained_copy_circuit([[0] * 4] * 3)
        other = process(other_cs, other_assignment.public_table(), other_table, fast_params).common_data.vk
        assert other.constraint_system_hash != base.constraint_system_hash

        more_queries = PlaceholderParams(blowup_log=2, lambda_=7)
        rekeyed = process(cs, assignment.public_table(), table, more_queries).common_data.vk
        assert rekeyed.constraint_system_hash != base.constraint_system_hash


class TestSizing:
    """Quotient chunks and the permutation partition."""

    def test_chunks_follow_the_highest_degree(self, fast_params) -> None:
        cs, table, assignment = chained_copy_circuit([[0] * 4] * 3)
        common = process(cs, assignment.public_table(), table, fast_params).common_data
        assert common.permutation_partition == [(0, 1, 2)]
        assert common.max_degree == 5
        assert common.quotient_chunks == 4

    def test_lookup_input_degree_drives_chunks(self, fast_params) -> None:
        cs = ConstraintSystem(
            lookup_gates=[LookupGate(0, [LookupConstraint([witness(0) * witness(0)], 0)])],
            lookup_tables=[LookupTable([0])],
        )
        table = TableDescription(witness_columns=1, constant_columns=1, selector_columns=1, usable_rows=4)
        assignment = AssignmentTable(constants=[[0, 1, 4, 9]], selectors=[[1]])
        common = process(cs, assignment, table, fast_params).common_data
        assert common.max_degree == 6
        assert common.quotient_chunks == 5

    @pytest.mark.parametrize("limit, partition", [
        (2, [(0,), (1,), (2,)]),
        (3, [(0, 1), (2,)]),
        (4, [(0, 1, 2)]),
    ])
    def test_chunk_limit_splits_the_permutation(self, limit: int, partition) -> None:
        cs, table, assignment = chained_copy_circuit([[0] * 4] * 3)
        params = PlaceholderParams(blowup_log=2, lambda_=6, max_quotient_chunks=limit)
        common = process(cs, assignment.public_table(), table, params).common_data
        assert common.permutation_partition == partition
        assert common.quotient_chunks == limit
        layout = common.layout()[BatchId.PERMUTATION]
        assert len(layout) == len(partition)

    def test_gate_degree_above_limit_rejected(self) -> None:
        cs = ConstraintSystem(gates=[Gate(0, [witness(0) ** 3])])
        table = TableDescription(witness_columns=1, selector_columns=1, usable_rows=4)
        assignment = AssignmentTable(selectors=[[1, 1, 1, 1]])
        params = PlaceholderParams(blowup_log=2, lambda_=6, max_quotient_chunks=2)
        with pytest.raises(MalformedConstraintSystem):
            process(cs, assignment, table, params)

    def test_limit_too_small_for_permutation(self) -> None:
        cs, table, assignment = copy_circuit([1, 2, 3, 4], [0, 0, 1, 0])
        params = PlaceholderParams(blowup_log=2, lambda_=6, max_quotient_chunks=1)
        with pytest.raises(MalformedConstraintSystem):
            process(cs, assignment.public_table(), table, params)


def _process(circuit, params):
    cs, table, assignment = circuit
    return process(cs, assignment, table, params)


def _invalid_cases():
    one_column = TableDescription(witness_columns=1, selector_columns=1, usable_rows=4)
    selectors = AssignmentTable(selectors=[[1]])
    return [
        (ConstraintSystem(), TableDescription(witness_columns=1, usable_rows=4, rows_amount=6), AssignmentTable()),
        (ConstraintSystem(), TableDescription(witness_columns=1, usable_rows=9, rows_amount=8), AssignmentTable()),
        (ConstraintSystem(gates=[Gate(0, [witness(1)])]), one_column, selectors),
        (ConstraintSystem(gates=[Gate(1, [witness(0)])]), one_column, selectors),
        (ConstraintSystem(gates=[Gate(0, [witness(0, 8)])]), one_column, selectors),
        (
            ConstraintSystem(copy_constraints=[CopyConstraint(witness(0), witness(0).at_row(1))]),
            one_column, selectors,
        ),
        (
            ConstraintSystem(copy_constraints=[CopyConstraint(witness(0).at_row(0), witness(0).at_row(4))]),
            one_column, selectors,
        ),
        (
            ConstraintSystem(
                lookup_gates=[LookupGate(0, [LookupConstraint([witness(0), witness(0)], 0)])],
                lookup_tables=[LookupTable([0])],
            ),
            TableDescription(witness_columns=1, constant_columns=1, selector_columns=1, usable_rows=4),
            AssignmentTable(constants=[[0]], selectors=[[1]]),
        ),
        (
            ConstraintSystem(lookup_gates=[LookupGate(0, [LookupConstraint([witness(0)], 1)])]),
            one_column, selectors,
        ),
        (ConstraintSystem(), one_column, AssignmentTable(selectors=[[1, 1, 1, 1, 1]])),
        (ConstraintSystem(), one_column, AssignmentTable()),
        (
            ConstraintSystem(lookup_tables=[LookupTable([0, 1])]),
            TableDescription(witness_columns=1, constant_columns=2, usable_rows=4),
            AssignmentTable(constants=[[1, 2], [1]]),
        ),
        (
            ConstraintSystem(lookup_tables=[LookupTable([0])]),
            TableDescription(witness_columns=1, constant_columns=1, usable_rows=4),
            AssignmentTable(constants=[[]]),
        ),
    ]


class TestValidation:
    """Tables that do not fit the constraint system."""

    @pytest.mark.parametrize("cs, table, assignment", _invalid_cases())
    def test_invalid_table_rejected(self, cs, table, assignment, fast_params) -> None:
        with pytest.raises(InvalidTableDescription):
            process(cs, assignment, table, fast_params)

    def test_invalid_table_is_malformed_constraint_system(self) -> None:
        assert issubclass(InvalidTableDescription, MalformedConstraintSystem)

    def test_wrong_witness_column_count(self, fast_params) -> None:
        _, table, _ = copy_circuit([1], [1])
        with pytest.raises(InvalidTableDescription):
            PrivatePreprocessor(table, fast_params).process(AssignmentTable(witnesses=[[1, 2]]))

    def test_private_needs_witness(self, fast_params) -> None:
        _, table, _ = copy_circuit([1], [1])
        with pytest.raises(InvalidTableDescription):
            PrivatePreprocessor(table, fast_params).process(AssignmentTable())


class TestPrivatePreprocessor:
    """Witness padding and blinding."""

    def test_padding_is_blinded_without_a_seed(self, fast_params) -> None:
        _, table, assignment = copy_circuit([1, 2, 3, 4], [5, 6, 1, 8])
        first = PrivatePreprocessor(table, fast_params).process(assignment).columns[("witness", 0)]
        second = PrivatePreprocessor(table, fast_params).process(assignment).columns[("witness", 0)]
        assert [int(v) for v in first[:4]] == [1, 2, 3, 4]
        assert all(v != 0 for v in first[4:])
        assert list(first[4:]) != list(second[4:])

    def test_seeded_blinding_fills_padding_rows(self) -> None:
        _, table, assignment = copy_circuit([1, 2, 3, 4], [5, 6, 1, 8])
        params = PlaceholderParams(blowup_log=2, lambda_=6, blinding_seed=42)
        first = PrivatePreprocessor(table, params).process(assignment)
        second = PrivatePreprocessor(table, params).process(assignment)

        column = first.columns[("witness", 1)]
        assert [int(v) for v in column[:4]] == [5, 6, 1, 8]
        assert all(v != 0 for v in column[4:])
        assert list(column) == list(second.columns[("witness", 1)])

    def test_public_inputs_are_never_blinded(self) -> None:
        table = TableDescription(witness_columns=1, public_input_columns=1, usable_rows=3)
        params = PlaceholderParams(blowup_log=2, lambda_=6, blinding_seed=3)
        private = PrivatePreprocessor(table, params).process(
            AssignmentTable(witnesses=[[1, 2, 3]], public_inputs=[[9]])
        )
        assert [int(v) for v in private.columns[("public_input", 0)]] == [9, 0, 0, 0]

    def test_values_reduced_into_the_field(self, fast_params) -> None:
        table = TableDescription(witness_columns=1, usable_rows=2)
        private = PrivatePreprocessor(table, fast_params).process(
            AssignmentTable(witnesses=[[-1, FF.characteristic + 2]])
        )
        column = private.columns[("witness", 0)]
        assert column[0] == -FF(1)
        assert column[1] == FF(2)
