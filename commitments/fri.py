"""FRI low-degree test with binary folding.

Layer k holds evaluations of g_k over the coset s^(2^k) * <omega_{N_k}>,
N_k = N / 2^k. Points x and -x sit at indices p and p + N_k/2, so one Merkle
leaf per pair p in [0, N_k/2) stores (g_k(x_p), g_k(-x_p)). Folding with
challenge alpha gives

    g_{k+1}(x^2) = (g_k(x) + g_k(-x)) / 2 + alpha * (g_k(x) - g_k(-x)) / (2x)

and after the last fold the remaining polynomial is sent in the clear.
Layer 0 is not committed here: its values come from the batch commitments of
the caller, supplied to verify() through a callback.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import galois
import numpy as np

from commitments.params import CommitmentParams
from primitives.field import FieldType, batch_inverse, byte_size, generator, get_omega
from primitives.hashing import Hasher
from primitives.merkle_tree import MerkleRoot, MerkleTree, QueryProof
from primitives.ntt import _log2
from primitives.polynomial import coset_to_coefficients, domain_points, evaluate
from primitives.transcript import Transcript

logger = logging.getLogger(__name__)

# --- Type Aliases ---

EvalPoly = galois.FieldArray  # Polynomial in evaluation form over a coset
QueryIndex = int
# (query position, pair index) -> (g_0(x), g_0(-x)) or None when the opening is invalid
FirstLayer = Callable[[int, QueryIndex], Optional[Tuple[galois.FieldArray, galois.FieldArray]]]


@dataclass
class FriProof:
    """FRI proof: layer roots, final polynomial, grinding nonce, and query proofs.

    Attributes:
        layer_roots: Roots of the committed folded layers 1..r-1
        final_pol: Coefficients of the last folded polynomial
        nonce: Proof-of-work nonce (0 when grinding is disabled)
        query_proofs: Openings per committed layer, per query
    """
    layer_roots: List[MerkleRoot] = field(default_factory=list)
    final_pol: List[int] = field(default_factory=list)
    nonce: int = 0
    query_proofs: List[List[QueryProof]] = field(default_factory=list)


class FRI:
    """FRI protocol: folding, commitment, and verification."""

    def __init__(self, params: CommitmentParams, hasher: Hasher):
        self.params = params
        self.hasher = hasher
        self.field: FieldType = params.field
        self.element_size = byte_size(params.field)

    # --- Folding ---

    @staticmethod
    def fold(pol: EvalPoly, challenge, shift) -> EvalPoly:
        """Fold evaluations over shift * <omega_N> into evaluations over shift^2 * <omega_{N/2}>."""
        field_type = type(pol)
        n_out = len(pol) // 2
        lo, hi = pol[:n_out], pol[n_out:]
        xs = domain_points(field_type, len(pol), shift)[:n_out]
        inv_two = field_type(2) ** -1
        return (lo + hi) * inv_two + challenge * (lo - hi) * inv_two * batch_inverse(xs)

    @staticmethod
    def fold_pair(lo, hi, challenge, x):
        """Fold a single pair (g(x), g(-x))."""
        field_type = type(x)
        inv_two = field_type(2) ** -1
        return (lo + hi) * inv_two + challenge * (lo - hi) * inv_two * x ** -1

    def merkelize(self, pol: EvalPoly) -> MerkleTree:
        """Commit to a folded layer, one leaf per (x, -x) pair."""
        half = len(pol) // 2
        leaves = self.field.Zeros((half, 2))
        leaves[:, 0] = pol[:half]
        leaves[:, 1] = pol[half:]
        tree = MerkleTree(self.hasher, self.element_size, self.params.merkle_arity)
        tree.merkelize(leaves)
        return tree

    # --- Prover ---

    def prove(self, polynomial: EvalPoly, transcript: Transcript) -> Tuple[FriProof, List[QueryIndex]]:
        """Generate FRI proof: commit-fold, finalize, grind, query.

        Returns the proof and the sampled pair indices of layer 0, which the
        caller opens in its own commitments.
        """
        cfg = self.params
        n_rounds = cfg.rounds

        # --- Commit-Fold Loop ---
        # Each iteration: derive challenge -> fold -> merkelize -> commit root
        trees: List[MerkleTree] = []
        layer_roots: List[MerkleRoot] = []
        current_pol = polynomial
        shift = generator(self.field)

        for fri_round in range(n_rounds):
            challenge = transcript.get_field()
            current_pol = FRI.fold(current_pol, challenge, shift)
            shift = shift ** 2

            if fri_round < n_rounds - 1:
                tree = self.merkelize(current_pol)
                trees.append(tree)
                layer_roots.append(tree.get_root())
                transcript.put(tree.get_root())

        # --- Finalize ---
        coefficients = coset_to_coefficients(current_pol, shift)
        final_pol = coefficients[:cfg.final_poly_length]
        transcript.put(final_pol)

        # --- Grinding (proof-of-work) ---
        nonce = transcript.grind(cfg.grinding_bits)

        # --- Query Phase ---
        query_indices = self._derive_query_indices(transcript)
        query_proofs = [
            [tree.get_query_proof(self._fold_index(idx, layer + 1)) for idx in query_indices]
            for layer, tree in enumerate(trees)
        ]

        proof = FriProof(
            layer_roots=layer_roots,
            final_pol=[int(c) for c in final_pol],
            nonce=nonce,
            query_proofs=query_proofs,
        )
        return proof, query_indices

    def _derive_query_indices(self, transcript: Transcript) -> List[QueryIndex]:
        """Derive pseudorandom pair indices of layer 0."""
        return transcript.get_permutations(self.params.lambda_, _log2(self.params.lde_size) - 1)

    def _fold_index(self, query_idx: QueryIndex, layer: int) -> int:
        """Map a layer-0 pair index to the pair index at a folded layer."""
        return query_idx % (self.params.lde_size >> (layer + 1))

    # --- Verifier ---

    def verify(self, proof: FriProof, transcript: Transcript, first_layer: FirstLayer) -> bool:
        """Replay the folding challenges and check every query path."""
        cfg = self.params
        n_rounds = cfg.rounds

        if not self._check_shape(proof):
            return False

        challenges = []
        for fri_round in range(n_rounds):
            challenges.append(transcript.get_field())
            if fri_round < n_rounds - 1:
                transcript.put(proof.layer_roots[fri_round])

        final_pol = self.field(proof.final_pol)
        transcript.put(final_pol)

        if not transcript.verify_grinding(proof.nonce, cfg.grinding_bits):
            logger.error("FRI proof-of-work verification failed")
            return False

        query_indices = self._derive_query_indices(transcript)
        for position, idx in enumerate(query_indices):
            pair = first_layer(position, idx)
            if pair is None:
                return False
            if not self._verify_query(proof, position, idx, pair, challenges, final_pol):
                return False

        return True

    def _verify_query(self, proof: FriProof, position: int, idx: QueryIndex, pair, challenges, final_pol) -> bool:
        lo, hi = pair
        p = idx
        size = self.params.lde_size
        shift = generator(self.field)
        n_rounds = len(challenges)

        for fri_round in range(n_rounds):
            x = shift * get_omega(self.field, _log2(size)) ** p
            folded = FRI.fold_pair(lo, hi, challenges[fri_round], x)
            size //= 2
            shift = shift ** 2

            if fri_round < n_rounds - 1:
                half = size // 2
                query = proof.query_proofs[fri_round][position]
                tree = MerkleTree(self.hasher, self.element_size, self.params.merkle_arity)
                if not tree.verify_group_proof(proof.layer_roots[fri_round], query.mp, p % half, query.v):
                    logger.error(f"FRI layer {fri_round + 1} Merkle path failed for query {position}")
                    return False
                if self.field(query.v[p // half]) != folded:
                    logger.error(f"FRI fold mismatch at layer {fri_round + 1} for query {position}")
                    return False
                lo, hi = self.field(query.v[0]), self.field(query.v[1])
                p %= half
            else:
                point = shift * get_omega(self.field, _log2(size)) ** p
                if evaluate(final_pol, point) != folded:
                    logger.error(f"FRI final polynomial mismatch for query {position}")
                    return False

        return True

    def _check_shape(self, proof: FriProof) -> bool:
        cfg = self.params
        n_committed = cfg.rounds - 1
        if len(proof.layer_roots) != n_committed or len(proof.query_proofs) != n_committed:
            logger.error("FRI proof has the wrong number of layers")
            return False
        if len(proof.final_pol) != cfg.final_poly_length or not _in_field(proof.final_pol, self.field):
            logger.error("FRI final polynomial violates the degree bound")
            return False
        for layer in proof.query_proofs:
            if len(layer) != cfg.lambda_:
                logger.error("FRI proof has the wrong number of queries")
                return False
            for query in layer:
                if len(query.v) != 2 or not _in_field(query.v, self.field):
                    logger.error("FRI query opening is malformed")
                    return False
        return True


def _in_field(values, field_type: FieldType) -> bool:
    return all(isinstance(v, (int, np.integer)) and 0 <= v < field_type.characteristic for v in values)
