"""Tests for the field, NTT and polynomial helpers."""

import numpy as np
import pytest

from primitives.field import FF, BabyBear, batch_inverse, generator, get_field, get_omega, two_adicity
from primitives.ntt import NTT
from primitives.polynomial import (
    coset_domain,
    coset_to_coefficients,
    domain_points,
    evaluate,
    extend_to_coset,
    lagrange_0,
    lagrange_basis,
    powers,
    to_coefficients,
    to_evaluations,
)


class TestField:
    """Field lookup and roots of unity."""

    @pytest.mark.parametrize("field", [FF, BabyBear])
    @pytest.mark.parametrize("n_bits", [1, 3, 5])
    def test_omega_has_exact_order(self, field, n_bits: int) -> None:
        """omega^(2^n_bits) == 1 and omega^(2^(n_bits-1)) == -1."""
        omega = get_omega(field, n_bits)
        assert omega ** (1 << n_bits) == field(1)
        assert omega ** (1 << (n_bits - 1)) == -field(1)

    def test_two_adicity(self) -> None:
        assert two_adicity(FF) == 32
        assert two_adicity(BabyBear) == 27

    def test_omega_beyond_two_adicity_rejected(self) -> None:
        with pytest.raises(ValueError):
            get_omega(BabyBear, 28)

    def test_get_field(self) -> None:
        assert get_field("Goldilocks") is FF
        assert get_field("babybear") is BabyBear
        with pytest.raises(ValueError):
            get_field("bn254")

    def test_generator_is_not_in_two_adic_subgroup(self) -> None:
        """The coset shift must keep the LDE coset disjoint from the trace domain."""
        g = generator(FF)
        assert g ** (1 << 32) != FF(1)

    @pytest.mark.parametrize("n", [1, 2, 7, 16])
    def test_batch_inverse(self, n: int) -> None:
        values = FF.Random(n, low=1, seed=n)
        inverses = batch_inverse(values)
        assert np.array_equal(values * inverses, FF.Ones(n))


class TestNTT:
    """NTT against direct evaluation."""

    @pytest.mark.parametrize("n_bits", [2, 3, 5])
    def test_ntt_matches_evaluation(self, n_bits: int) -> None:
        """Entry i of the NTT is the polynomial at omega^i."""
        n = 1 << n_bits
        coeffs = FF.Random(n, seed=n_bits)
        evals = NTT(FF, n).ntt(coeffs)
        omega = get_omega(FF, n_bits)
        for i in range(n):
            assert evals[i] == evaluate(coeffs, omega ** i)

    @pytest.mark.parametrize("n_bits", [2, 4])
    def test_intt_inverts_ntt(self, n_bits: int) -> None:
        n = 1 << n_bits
        evals = FF.Random(n, seed=10 + n_bits)
        assert np.array_equal(to_evaluations(to_coefficients(evals), n), evals)

    @pytest.mark.parametrize("field", [FF, BabyBear])
    def test_extend_to_coset_matches_evaluation(self, field) -> None:
        """LDE entry i is the interpolant at g * omega_N^i."""
        n, extended = 4, 16
        evals = field.Random(n, seed=3)
        coeffs = to_coefficients(evals)
        lde = extend_to_coset(evals, extended, generator(field))
        points = coset_domain(field, extended)
        for i in range(extended):
            assert lde[i] == evaluate(coeffs, points[i])

    def test_coset_to_coefficients_recovers_polynomial(self) -> None:
        n, extended = 8, 32
        coeffs = FF.Random(n, seed=4)
        lde = extend_to_coset(to_evaluations(coeffs, n), extended, generator(FF))
        recovered = coset_to_coefficients(lde, generator(FF))
        assert np.array_equal(recovered[:n], coeffs)
        assert np.all(recovered[n:] == 0)

    def test_powers(self) -> None:
        assert [int(v) for v in powers(FF(5), 3)] == [1, 5, 25]
        assert len(powers(FF(5), 0)) == 0


class TestLagrange:
    """Lagrange basis outside the subgroup."""

    def test_lagrange_basis_interpolates(self) -> None:
        """sum_i v_i L_i(z) equals the interpolant of v at z."""
        n = 8
        values = FF.Random(n, seed=5)
        z = FF(123456789)
        basis = lagrange_basis(z, n, n)
        combined = FF(0)
        for value, weight in zip(values, basis):
            combined = combined + value * weight
        assert combined == evaluate(to_coefficients(values), z)

    def test_lagrange_0_matches_basis(self) -> None:
        n = 4
        points = domain_points(FF, 16, generator(FF))
        l0 = lagrange_0(points, n)
        for i in range(3):
            assert l0[i] == lagrange_basis(points[i], n, 1)[0]
