"""Placeholder proof generation.

Rounds, in transcript order:

    1. absorb the verification key and every public input column
    2. commit the witness and public input columns
    3. (lookups only) squeeze lookup_theta, commit sorted inputs and tables
    4. squeeze beta, gamma
    5. commit the permutation and lookup grand products
    6. squeeze gate_theta and one alpha per constraint polynomial
    7. commit the quotient chunks
    8. squeeze the evaluation point y (resampled while y^n = 1)
    9. open every batch at y * omega^rotation
"""

import logging
from typing import Dict, List, Optional

import galois

from arithmetization.variable import ColumnType, Variable
from constraints.base import ConstraintContext, ProverConstraintContext, column_name
from constraints.lookup import LookupArgument
from primitives.transcript import Transcript
from protocol.common_data import BatchId, CommonData
from protocol.data import ProverData
from protocol.errors import UnsatisfiedWitness
from protocol.preprocessor import PreprocessedPrivateData, PreprocessedPublicData
from protocol.proof import PlaceholderProof
from protocol.quotient import compute_quotient, constraint_modules, num_constraint_polynomials
from witness.lookup import LookupWitness
from witness.permutation import PermutationWitness

logger = logging.getLogger(__name__)


def init_transcript(common: CommonData, public_columns: List[galois.FieldArray]) -> Transcript:
    """Transcript after round 1, shared by prover and verifier."""
    params = common.commitment_params
    transcript = Transcript(b"", params.hash_name, params.field)
    transcript.put(common.vk.constraint_system_hash)
    transcript.put(common.vk.fixed_values_commitment)
    for column in public_columns:
        transcript.put(column)
    return transcript


def sample_evaluation_point(transcript: Transcript, n: int):
    """Evaluation point y outside the subgroup <omega_n>."""
    one = transcript.field(1)
    while True:
        y = transcript.get_field()
        if y ** n != one:
            return y


def evaluation_points(common: CommonData, y) -> Dict[BatchId, List[List]]:
    """y * omega^rotation for every polynomial of every batch, in layout order."""
    return {
        batch_id: [[y * common.omega ** rotation for rotation in entry.rotations] for entry in entries]
        for batch_id, entries in common.layout().items()
    }


class Prover:
    """Placeholder prover for one circuit and one witness.

    Args:
        public_data: Output of public preprocessing
        private_data: Output of private preprocessing
        check_witness: Evaluate every gate, copy and lookup constraint before
            proving and raise UnsatisfiedWitness on the first violation
    """

    def __init__(self, public_data: PreprocessedPublicData, private_data: PreprocessedPrivateData,
                 check_witness: bool = True):
        self.public = public_data
        self.private = private_data
        self.check_witness = check_witness
        self.common = public_data.common_data
        self.field = self.common.field

        self.modules = constraint_modules(public_data.constraint_system, self.common)
        self.lookups = LookupArgument(public_data.constraint_system)
        self.lookup_witness = LookupWitness(self.lookups, self.common.usable_rows)
        self.permutation_witness = PermutationWitness(
            self.common.permuted_columns, self.common.permutation_partition, self.common.usable_rows
        )

    # --- Witness check ---

    def _check_gates(self, ctx: ConstraintContext) -> None:
        cs = self.public.constraint_system
        for g, gate in enumerate(cs.gates):
            selector = ctx.cell(Variable(gate.selector_index, 0, ColumnType.SELECTOR))
            for c, constraint in enumerate(gate.constraints):
                values = selector * ctx.evaluate(constraint)
                failing = [row for row, v in enumerate(values) if v != 0]
                if failing:
                    raise UnsatisfiedWitness(f"Gate {g} constraint {c} fails on row {failing[0]}")

    def _check_copies(self, columns) -> None:
        for c, copy in enumerate(self.public.constraint_system.copy_constraints):
            first = columns[(column_name(copy.first), copy.first.index)][copy.first.rotation]
            second = columns[(column_name(copy.second), copy.second.index)][copy.second.rotation]
            if first != second:
                raise UnsatisfiedWitness(f"Copy constraint {c} fails: {int(first)} != {int(second)}")

    def _check_lookups(self, ctx: ConstraintContext) -> None:
        u = self.common.usable_rows
        for k, (selector_index, constraint) in enumerate(self.lookups.entries):
            table = self.lookups.table(constraint)
            table_columns = [ctx.cell(Variable(i, 0, ColumnType.CONSTANT)) for i in table.columns]
            allowed = {tuple(int(col[row]) for col in table_columns) for row in range(u)}

            selector = ctx.cell(Variable(selector_index, 0, ColumnType.SELECTOR))
            inputs = [
                selector * ctx.evaluate(expression) + (ctx.one() - selector) * col
                for expression, col in zip(constraint.inputs, table_columns)
            ]
            for row in range(u):
                value = tuple(int(col[row]) for col in inputs)
                if value not in allowed:
                    raise UnsatisfiedWitness(f"Lookup constraint {k} fails on row {row}: {value} not in table")

    def check(self, ctx: ConstraintContext, columns) -> None:
        """Raise UnsatisfiedWitness if the assignment violates any constraint."""
        self._check_gates(ctx)
        self._check_copies(columns)
        self._check_lookups(ctx)

    # --- Commitments ---

    def _commit(self, scheme, transcript: Transcript, batch_id: BatchId, columns) -> Optional[bytes]:
        entries = self.common.layout()[batch_id]
        if not entries:
            return None
        scheme.append_to_batch(batch_id, [columns[(e.name, e.index)] for e in entries])
        root = scheme.commit(batch_id)
        transcript.put(root)
        logger.debug(f"Committed {batch_id.name} ({len(entries)} polynomials)")
        return root

    # --- Prove ---

    def prove(self) -> PlaceholderProof:
        common = self.common
        n = common.rows_amount
        scheme = self.public.commitment_scheme.fork()

        columns = dict(self.public.fixed_columns)
        columns.update(self.private.columns)
        challenges: Dict[str, galois.FieldArray] = {}
        ctx = ProverConstraintContext(ProverData(
            columns=columns,
            challenges=challenges,
            lagrange_0=self.public.lagrange_0,
            extend=1,
            field=self.field,
        ))

        if self.check_witness:
            self.check(ctx, columns)

        # --- Round 1: public data ---
        public_columns = [
            columns[("public_input", i)] for i in range(common.table_description.public_input_columns)
        ]
        transcript = init_transcript(common, public_columns)
        commitments: Dict[int, bytes] = {}

        def commit(batch_id: BatchId) -> None:
            root = self._commit(scheme, transcript, batch_id, columns)
            if root is not None:
                commitments[int(batch_id)] = root

        # --- Round 2: variable values ---
        commit(BatchId.VARIABLE_VALUES)

        # --- Round 3: sorted lookup columns ---
        if self.lookups.entries:
            challenges["lookup_theta"] = transcript.get_field()
            columns.update(self.lookup_witness.compute_intermediates(ctx))
            commit(BatchId.LOOKUP)

        # --- Round 4-5: grand products ---
        challenges["beta"] = transcript.get_field()
        challenges["gamma"] = transcript.get_field()
        columns.update(self.permutation_witness.compute_grand_products(ctx))
        if self.lookups.entries:
            columns.update(self.lookup_witness.compute_grand_products(ctx))
        commit(BatchId.PERMUTATION)

        # --- Round 6-7: quotient ---
        challenges["gate_theta"] = transcript.get_field()
        alphas = transcript.get_fields(num_constraint_polynomials(self.modules))
        columns.update(compute_quotient(columns, common, self.modules, challenges, alphas))
        commit(BatchId.QUOTIENT)

        # --- Round 8-9: openings ---
        y = sample_evaluation_point(transcript, n)
        for batch_id, points in evaluation_points(common, y).items():
            for index, poly_points in enumerate(points):
                for point in poly_points:
                    scheme.append_eval_point(batch_id, index, point)

        eval_proof = scheme.proof_eval(transcript)
        logger.info(f"Generated proof with {len(commitments)} commitments at y={int(y)}")

        return PlaceholderProof(commitments=commitments, challenge=int(y), eval_proof=eval_proof)


def prove(public_data: PreprocessedPublicData, private_data: PreprocessedPrivateData,
          check_witness: bool = True) -> PlaceholderProof:
    """Generate a proof; see Prover."""
    return Prover(public_data, private_data, check_witness).prove()
