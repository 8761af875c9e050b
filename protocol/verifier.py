"""Placeholder proof verification.

The verifier replays the prover's transcript from the proof commitments,
then checks, in order:

1. The evaluation point recorded in the proof equals the replayed y
2. The LPC evaluation proof: Merkle paths, FRI folds, final polynomial
3. The opened public input columns against the supplied public inputs
4. The quotient identity T(y) == Z_H(y) * sum_k y^(k n) H_k(y)

Every failure is logged and makes verify() return False; malformed proofs
never raise.
"""

import logging
from typing import Dict, List, Optional

import galois

from arithmetization.constraint_system import ConstraintSystem
from arithmetization.variable import ColumnType
from commitments.lpc import LpcCommitmentScheme
from constraints.lookup import LookupArgument
from primitives.polynomial import lagrange_basis, vanishing
from protocol.common_data import BatchId, CommonData
from protocol.data import VerifierData
from protocol.preprocessor import PreprocessedPublicData
from protocol.proof import PlaceholderProof
from protocol.prover import evaluation_points, init_transcript, sample_evaluation_point
from protocol.quotient import check_quotient, constraint_modules, num_constraint_polynomials

logger = logging.getLogger(__name__)


class Verifier:
    """Placeholder verifier for one circuit."""

    def __init__(self, constraint_system: ConstraintSystem, common_data: CommonData):
        self.constraint_system = constraint_system
        self.common = common_data
        self.field = common_data.field
        self.modules = constraint_modules(constraint_system, common_data)
        self.has_lookups = len(LookupArgument(constraint_system).entries) > 0

    # --- Public inputs ---

    def _public_columns(self, public_inputs: List[List[int]]) -> Optional[List[galois.FieldArray]]:
        table = self.common.table_description
        if len(public_inputs) != table.public_input_columns:
            logger.error(
                f"Expected {table.public_input_columns} public input columns, got {len(public_inputs)}"
            )
            return None
        columns = []
        p = self.field.characteristic
        for index, column in enumerate(public_inputs):
            if len(column) > table.usable_rows:
                logger.error(f"Public input column {index} is longer than usable_rows")
                return None
            values = self.field.Zeros(table.rows_amount)
            values[:len(column)] = [int(v) % p for v in column]
            columns.append(values)
        return columns

    def _check_public_inputs(self, public_columns, evals, y) -> bool:
        n = self.common.rows_amount
        usable = self.common.usable_rows
        for index, column in enumerate(public_columns):
            for rotation in self.common.rotations(ColumnType.PUBLIC_INPUT, index):
                point = y * self.common.omega ** rotation
                basis = lagrange_basis(point, n, usable)
                expected = self.field(0)
                for value, weight in zip(column[:usable], basis):
                    expected = expected + value * weight
                if evals[("public_input", index, rotation)] != expected:
                    logger.error(f"Public input column {index} does not match its opening at rotation {rotation}")
                    return False
        return True

    # --- Verify ---

    def verify(self, proof: PlaceholderProof, public_inputs: Optional[List[List[int]]] = None) -> bool:
        """Check a proof against the circuit and its public inputs."""
        common = self.common
        n = common.rows_amount
        layout = common.layout()

        public_columns = self._public_columns(public_inputs or [])
        if public_columns is None:
            return False

        expected_batches = {
            int(batch_id) for batch_id, entries in layout.items()
            if entries and batch_id != BatchId.FIXED_VALUES
        }
        if set(proof.commitments) != expected_batches:
            logger.error(f"Proof commits batches {sorted(proof.commitments)}, expected {sorted(expected_batches)}")
            return False

        # --- Transcript replay ---
        transcript = init_transcript(common, public_columns)
        challenges: Dict[str, galois.FieldArray] = {}

        def absorb(batch_id: BatchId) -> None:
            if int(batch_id) in proof.commitments:
                transcript.put(proof.commitments[int(batch_id)])

        absorb(BatchId.VARIABLE_VALUES)
        if self.has_lookups:
            challenges["lookup_theta"] = transcript.get_field()
            absorb(BatchId.LOOKUP)
        challenges["beta"] = transcript.get_field()
        challenges["gamma"] = transcript.get_field()
        absorb(BatchId.PERMUTATION)
        challenges["gate_theta"] = transcript.get_field()
        alphas = transcript.get_fields(num_constraint_polynomials(self.modules))
        absorb(BatchId.QUOTIENT)

        y = sample_evaluation_point(transcript, n)
        if int(y) != proof.challenge:
            logger.error("Evaluation point does not match the transcript")
            return False

        # --- Commitment check ---
        scheme = LpcCommitmentScheme(common.commitment_params)
        points = evaluation_points(common, y)
        for batch_id, entries in layout.items():
            if not entries:
                continue
            scheme.set_batch_size(batch_id, len(entries))
            for index, poly_points in enumerate(points[batch_id]):
                for point in poly_points:
                    scheme.append_eval_point(batch_id, index, point)

        commitments = {int(BatchId.FIXED_VALUES): common.vk.fixed_values_commitment}
        commitments.update(proof.commitments)
        if not scheme.verify_eval(proof.eval_proof, commitments, transcript):
            logger.error("Commitment verification failed")
            return False

        # --- Algebraic checks ---
        evals = {}
        for batch_id, entries in layout.items():
            for index, entry in enumerate(entries):
                values = proof.eval_proof.evaluations[int(batch_id)][index]
                for rotation, value in zip(entry.rotations, values):
                    evals[(entry.name, entry.index, rotation)] = self.field(value)

        if not self._check_public_inputs(public_columns, evals, y):
            return False

        one = self.field(1)
        data = VerifierData(
            evals=evals,
            challenges=challenges,
            lagrange_0=vanishing(y, n) * (self.field(n % self.field.characteristic) * (y - one)) ** -1,
            field=self.field,
        )
        if not check_quotient(self.modules, data, alphas, y, n, common.quotient_chunks):
            logger.error("Algebraic check failed: quotient identity does not hold at y")
            return False

        return True


def verify(public_data: PreprocessedPublicData, proof: PlaceholderProof,
           public_inputs: Optional[List[List[int]]] = None) -> bool:
    """Verify a proof; see Verifier."""
    return Verifier(public_data.constraint_system, public_data.common_data).verify(proof, public_inputs)
