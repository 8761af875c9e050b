"""List polynomial commitment (LPC) over FRI.

Each batch of polynomials is low-degree extended to the coset
g * <omega_N>, N = rows * blowup, and committed with one Merkle tree whose
leaf p holds every batch polynomial at the pair (x_p, -x_p).

proof_eval() opens every registered (polynomial, point) pair by running FRI
on the combined quotient

    Q(x) = sum_k theta^k * (f_i(x) - f_i(z)) / (x - z)

over all pairs k = (i, z). If every claimed f_i(z) is right, Q is a
polynomial of degree < rows and FRI accepts.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import galois
import numpy as np

from commitments.base import CommitmentScheme
from commitments.fri import FRI, FriProof, _in_field
from commitments.params import CommitmentParams
from primitives.field import batch_inverse, byte_size, generator, get_omega
from primitives.hashing import Hasher
from primitives.merkle_tree import MerkleTree, QueryProof
from primitives.ntt import _log2
from primitives.polynomial import coset_domain, evaluate, extend_to_coset, to_coefficients
from primitives.transcript import Transcript

logger = logging.getLogger(__name__)


@dataclass
class LpcProof:
    """Evaluation proof for every committed batch.

    Attributes:
        evaluations: batch -> polynomial -> value at each registered point
        query_proofs: batch -> opening of the batch tree at each FRI query
        fri: Low-degree proof of the combined quotient
    """
    evaluations: Dict[int, List[List[int]]] = field(default_factory=dict)
    query_proofs: Dict[int, List[QueryProof]] = field(default_factory=dict)
    fri: FriProof = field(default_factory=FriProof)


@dataclass
class _Batch:
    evaluations: List[galois.FieldArray] = field(default_factory=list)
    coefficients: List[galois.FieldArray] = field(default_factory=list)
    lde: Optional[List[galois.FieldArray]] = None
    tree: Optional[MerkleTree] = None


class LpcCommitmentScheme(CommitmentScheme):
    """FRI-based batched polynomial commitment."""

    def __init__(self, params: CommitmentParams):
        self.params = params
        self.field = params.field
        self.hasher = Hasher(params.hash_name)
        self.element_size = byte_size(params.field)
        self.fri = FRI(params, self.hasher)

        self._batches: Dict[int, _Batch] = {}
        self._batch_sizes: Dict[int, int] = {}
        self._points: Dict[int, List[List[galois.FieldArray]]] = {}
        self._fixed: set = set()

    # --- Batches ---

    def append_to_batch(self, batch_id: int, polys: Sequence[np.ndarray]) -> None:
        if batch_id in self._fixed:
            raise ValueError(f"Batch {batch_id} is fixed")
        batch = self._batches.setdefault(batch_id, _Batch())
        if batch.tree is not None:
            raise ValueError(f"Batch {batch_id} is already committed")
        for poly in polys:
            if len(poly) != self.params.rows:
                raise ValueError(f"Expected {self.params.rows} evaluations, got {len(poly)}")
            values = self.field(poly)
            batch.evaluations.append(values)
            batch.coefficients.append(to_coefficients(values))
        self._batch_sizes[batch_id] = len(batch.coefficients)

    def commit(self, batch_id: int) -> bytes:
        batch = self._batches[batch_id]
        if batch.tree is not None:
            return batch.tree.get_root()

        n_ext = self.params.lde_size
        half = n_ext // 2
        batch.lde = [
            extend_to_coset(values, n_ext, generator(self.field))
            for values in batch.evaluations
        ]

        leaves = self.field.Zeros((half, 2 * len(batch.lde)))
        for j, lde in enumerate(batch.lde):
            leaves[:, 2 * j] = lde[:half]
            leaves[:, 2 * j + 1] = lde[half:]

        batch.tree = MerkleTree(self.hasher, self.element_size, self.params.merkle_arity)
        batch.tree.merkelize(leaves)
        logger.debug(f"Committed batch {batch_id} with {len(batch.lde)} polynomials")
        return batch.tree.get_root()

    def mark_batch_as_fixed(self, batch_id: int) -> None:
        self._fixed.add(batch_id)

    def fork(self) -> "LpcCommitmentScheme":
        """Fresh scheme sharing only the fixed batches."""
        scheme = LpcCommitmentScheme(self.params)
        for batch_id in self._fixed:
            scheme._batches[batch_id] = self._batches[batch_id]
            scheme._batch_sizes[batch_id] = self._batch_sizes[batch_id]
        scheme._fixed = set(self._fixed)
        return scheme

    def set_batch_size(self, batch_id: int, size: int) -> None:
        self._batch_sizes[batch_id] = size

    def batch_size(self, batch_id: int) -> int:
        return self._batch_sizes.get(batch_id, 0)

    def append_eval_point(self, batch_id: int, poly_index: int, point) -> None:
        if not 0 <= poly_index < self.batch_size(batch_id):
            raise IndexError(f"Batch {batch_id} has no polynomial {poly_index}")
        points = self._points.setdefault(batch_id, [[] for _ in range(self.batch_size(batch_id))])
        points[poly_index].append(self.field(int(point)))

    def _opened_batches(self) -> List[int]:
        return sorted(b for b, size in self._batch_sizes.items() if size > 0 and b in self._points)

    # --- Prover ---

    def proof_eval(self, transcript: Transcript) -> LpcProof:
        """Open every registered point and prove the openings with FRI."""
        batches = self._opened_batches()

        # --- Evaluations ---
        evaluations: Dict[int, List[List[int]]] = {}
        for batch_id in batches:
            batch = self._batches[batch_id]
            evaluations[batch_id] = [
                [int(evaluate(coeffs, z)) for z in points]
                for coeffs, points in zip(batch.coefficients, self._points[batch_id])
            ]
            transcript.put(self.field(_flatten(evaluations[batch_id])))

        theta = transcript.get_field()

        # --- Combined quotient over the LDE domain ---
        xs = coset_domain(self.field, self.params.lde_size)
        inverses: Dict[int, galois.FieldArray] = {}
        combined = self.field.Zeros(self.params.lde_size)
        theta_acc = self.field(1)
        for batch_id in batches:
            batch = self._batches[batch_id]
            for j, points in enumerate(self._points[batch_id]):
                for k, z in enumerate(points):
                    key = int(z)
                    if key not in inverses:
                        inverses[key] = batch_inverse(xs - z)
                    value = self.field(evaluations[batch_id][j][k])
                    combined += theta_acc * (batch.lde[j] - value) * inverses[key]
                    theta_acc *= theta

        # --- FRI ---
        fri_proof, query_indices = self.fri.prove(combined, transcript)

        query_proofs = {
            batch_id: [self._batches[batch_id].tree.get_query_proof(idx) for idx in query_indices]
            for batch_id in batches
        }

        return LpcProof(evaluations=evaluations, query_proofs=query_proofs, fri=fri_proof)

    # --- Verifier ---

    def verify_eval(self, proof: LpcProof, commitments: Dict[int, bytes], transcript: Transcript) -> bool:
        batches = self._opened_batches()

        if not self._check_shape(proof, commitments, batches):
            return False

        for batch_id in batches:
            transcript.put(self.field(_flatten(proof.evaluations[batch_id])))

        theta = transcript.get_field()

        def first_layer(position: int, idx: int) -> Optional[Tuple]:
            return self._combined_pair(proof, commitments, batches, theta, position, idx)

        return self.fri.verify(proof.fri, transcript, first_layer)

    def _combined_pair(self, proof: LpcProof, commitments, batches, theta, position: int, idx: int):
        """Q(x_idx), Q(-x_idx) from the batch openings, or None if an opening fails."""
        x = generator(self.field) * get_omega(self.field, _log2(self.params.lde_size)) ** idx
        sides = [x, -x]
        combined = [self.field(0), self.field(0)]
        theta_acc = self.field(1)

        for batch_id in batches:
            query = proof.query_proofs[batch_id][position]
            tree = MerkleTree(self.hasher, self.element_size, self.params.merkle_arity)
            if not tree.verify_group_proof(commitments[batch_id], query.mp, idx, query.v):
                logger.error(f"Merkle path of batch {batch_id} failed for query {position}")
                return None

            for j, points in enumerate(self._points[batch_id]):
                for k, z in enumerate(points):
                    value = self.field(proof.evaluations[batch_id][j][k])
                    for side in range(2):
                        opened = self.field(query.v[2 * j + side])
                        combined[side] += theta_acc * (opened - value) * (sides[side] - z) ** -1
                    theta_acc *= theta

        return combined[0], combined[1]

    def _check_shape(self, proof: LpcProof, commitments: Dict[int, bytes], batches: List[int]) -> bool:
        for batch_id in batches:
            if batch_id not in commitments:
                logger.error(f"Missing commitment for batch {batch_id}")
                return False
            values = proof.evaluations.get(batch_id)
            points = self._points[batch_id]
            if values is None or len(values) != len(points):
                logger.error(f"Batch {batch_id} has the wrong number of evaluated polynomials")
                return False
            for poly_values, poly_points in zip(values, points):
                if len(poly_values) != len(poly_points) or not _in_field(poly_values, self.field):
                    logger.error(f"Batch {batch_id} has malformed evaluations")
                    return False
            queries = proof.query_proofs.get(batch_id)
            if queries is None or len(queries) != self.params.lambda_:
                logger.error(f"Batch {batch_id} has the wrong number of query openings")
                return False
            width = 2 * self.batch_size(batch_id)
            if any(len(q.v) != width or not _in_field(q.v, self.field) for q in queries):
                logger.error(f"Batch {batch_id} has malformed query openings")
                return False
        if set(proof.evaluations) != set(batches):
            logger.error("Proof opens unexpected batches")
            return False
        return True


def _flatten(values: List[List[int]]) -> List[int]:
    return [v for row in values for v in row]
