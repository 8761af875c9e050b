"""Tests for FRI folding and the list polynomial commitment."""

import copy

import numpy as np
import pytest

from commitments.fri import FRI
from commitments.lpc import LpcCommitmentScheme
from commitments.params import CommitmentParams
from primitives.field import FF, BabyBear, generator, get_omega
from primitives.polynomial import domain_points, evaluate, extend_to_coset, to_coefficients, to_evaluations
from primitives.transcript import Transcript


def _setup(params: CommitmentParams, n_polys: int = 3, seed: int = 1):
    """Commit a batch of random polynomials and register two points per polynomial."""
    field = params.field
    polys = [field.Random(params.rows, seed=seed + i) for i in range(n_polys)]
    z = field(987654321)
    points = [z, z * get_omega(field, params.degree_log)]

    scheme = LpcCommitmentScheme(params)
    scheme.append_to_batch(0, polys)
    root = scheme.commit(0)
    scheme.append_eval_points(0, points)
    return scheme, polys, points, root


def _prove(params: CommitmentParams, **kwargs):
    scheme, polys, points, root = _setup(params, **kwargs)
    transcript = Transcript(b"lpc", params.hash_name, params.field)
    transcript.put(root)
    return scheme.proof_eval(transcript), polys, points, root


def _verify(params: CommitmentParams, proof, points, commitments, n_polys: int = 3) -> bool:
    scheme = LpcCommitmentScheme(params)
    scheme.set_batch_size(0, n_polys)
    scheme.append_eval_points(0, points)
    transcript = Transcript(b"lpc", params.hash_name, params.field)
    transcript.put(commitments[0])
    return scheme.verify_eval(proof, commitments, transcript)


class TestFold:
    """Binary folding of coset evaluations."""

    def test_fold_matches_even_odd_split(self) -> None:
        """fold(g)(x^2) = g_even(x^2) + alpha * g_odd(x^2)."""
        n, size = 8, 32
        coeffs = FF.Random(n, seed=7)
        shift = generator(FF)
        alpha = FF(31337)

        layer = extend_to_coset(to_evaluations(coeffs, n), size, shift)
        folded = FRI.fold(layer, alpha, shift)

        expected_coeffs = coeffs[0::2] + alpha * coeffs[1::2]
        points = domain_points(FF, size // 2, shift ** 2)
        for i in range(size // 2):
            assert folded[i] == evaluate(expected_coeffs, points[i])

    def test_fold_pair_matches_fold(self) -> None:
        size = 16
        shift = generator(FF)
        layer = extend_to_coset(FF.Random(4, seed=8), size, shift)
        alpha = FF(5)
        folded = FRI.fold(layer, alpha, shift)
        xs = domain_points(FF, size, shift)
        for p in range(size // 2):
            assert FRI.fold_pair(layer[p], layer[p + size // 2], alpha, xs[p]) == folded[p]


class TestLpc:
    """Batched commitments and evaluation proofs."""

    @pytest.mark.parametrize("fri_rounds", [0, 1, 2])
    @pytest.mark.parametrize("arity", [2, 4])
    def test_honest_proof_verifies(self, fri_rounds: int, arity: int) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8, fri_rounds=fri_rounds, merkle_arity=arity)
        proof, _, points, root = _prove(params)
        assert _verify(params, proof, points, {0: root})

    def test_evaluations_are_correct(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=4)
        proof, polys, points, _ = _prove(params)
        for i, poly in enumerate(polys):
            coeffs = to_coefficients(poly)
            assert proof.evaluations[0][i] == [int(evaluate(coeffs, z)) for z in points]

    def test_final_polynomial_length(self) -> None:
        params = CommitmentParams(degree_log=4, blowup_log=2, lambda_=4, fri_rounds=2)
        proof, _, _, _ = _prove(params)
        assert len(proof.fri.final_pol) == 4
        assert len(proof.fri.layer_roots) == 1

    def test_babybear(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8, field=BabyBear)
        proof, _, points, root = _prove(params)
        assert _verify(params, proof, points, {0: root})

    def test_grinding(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=4, grinding_bits=12)
        proof, _, points, root = _prove(params)
        assert _verify(params, proof, points, {0: root})

        tampered = copy.deepcopy(proof)
        tampered.fri.nonce = -1
        assert not _verify(params, tampered, points, {0: root})

    def test_tampered_evaluation_rejected(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8)
        proof, _, points, root = _prove(params)
        tampered = copy.deepcopy(proof)
        tampered.evaluations[0][1][0] = (tampered.evaluations[0][1][0] + 1) % FF.characteristic
        assert not _verify(params, tampered, points, {0: root})

    def test_tampered_commitment_rejected(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8)
        proof, _, points, root = _prove(params)
        flipped = bytes([root[0] ^ 1]) + root[1:]
        assert not _verify(params, proof, points, {0: flipped})

    def test_tampered_query_value_rejected(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8)
        proof, _, points, root = _prove(params)
        tampered = copy.deepcopy(proof)
        tampered.query_proofs[0][0].v[0] = (tampered.query_proofs[0][0].v[0] + 1) % FF.characteristic
        assert not _verify(params, tampered, points, {0: root})

    def test_tampered_final_polynomial_rejected(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8)
        proof, _, points, root = _prove(params)
        tampered = copy.deepcopy(proof)
        tampered.fri.final_pol[0] = (tampered.fri.final_pol[0] + 1) % FF.characteristic
        assert not _verify(params, tampered, points, {0: root})

    def test_malformed_proof_returns_false(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=8)
        proof, _, points, root = _prove(params)
        tampered = copy.deepcopy(proof)
        tampered.query_proofs[0] = tampered.query_proofs[0][:-1]
        assert not _verify(params, tampered, points, {0: root})

        tampered = copy.deepcopy(proof)
        tampered.evaluations[0][0][0] = FF.characteristic
        assert not _verify(params, tampered, points, {0: root})

    def test_fixed_batch_survives_fork(self) -> None:
        params = CommitmentParams(degree_log=3, blowup_log=2, lambda_=4)
        scheme, _, _, root = _setup(params)
        scheme.mark_batch_as_fixed(0)
        forked = scheme.fork()
        assert forked.batch_size(0) == 3
        assert forked.commit(0) == root
        with pytest.raises(ValueError):
            forked.append_to_batch(0, [FF.Zeros(8)])

    def test_wrong_length_rejected(self) -> None:
        scheme = LpcCommitmentScheme(CommitmentParams(degree_log=3))
        with pytest.raises(ValueError):
            scheme.append_to_batch(0, [FF.Zeros(4)])


class TestParams:
    """Commitment parameter validation."""

    @pytest.mark.parametrize("kwargs", [
        dict(degree_log=0),
        dict(degree_log=3, blowup_log=0),
        dict(degree_log=3, lambda_=0),
        dict(degree_log=3, fri_rounds=4),
        dict(degree_log=3, hash_name="not-a-hash"),
        dict(degree_log=26, blowup_log=2, field=BabyBear),
    ])
    def test_invalid_params_rejected(self, kwargs) -> None:
        with pytest.raises(ValueError):
            CommitmentParams(**kwargs)

    def test_derived_sizes(self) -> None:
        params = CommitmentParams(degree_log=4, blowup_log=3, fri_rounds=3)
        assert params.rows == 16
        assert params.lde_size == 128
        assert params.rounds == 3
        assert params.final_poly_length == 2
        assert CommitmentParams(degree_log=4).rounds == 4
        assert np.log2(CommitmentParams(degree_log=4).lde_size) == 7
