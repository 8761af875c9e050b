"""Abstract polynomial operations.

This module provides protocol-level polynomial operations without exposing
implementation details like NTT/INTT. The protocol layer should use these
abstractions rather than directly invoking NTT primitives.

Polynomials travel in one of two forms:
    - evaluations over the subgroup <omega> (or a coset of it) in natural order
    - coefficients in ascending order (c0, c1, ...)
"""

from typing import List

import galois
import numpy as np

from primitives.field import FieldType, batch_inverse, generator, get_omega
from primitives.ntt import NTT, _log2, _precompute_powers


def to_coefficients(evaluations: np.ndarray) -> np.ndarray:
    """Convert polynomial from evaluation form (over <omega>) to coefficient form."""
    ntt = NTT(type(evaluations), len(evaluations))
    return ntt.intt(evaluations)


def to_evaluations(coefficients: np.ndarray, domain_size: int) -> np.ndarray:
    """Evaluate a coefficient vector over the subgroup of size domain_size."""
    field = type(coefficients)
    assert len(coefficients) <= domain_size, "Polynomial does not fit the domain"
    padded = field.Zeros(domain_size)
    padded[:len(coefficients)] = coefficients
    return NTT(field, domain_size).ntt(padded)


def extend_to_coset(evaluations: np.ndarray, extended_size: int, shift=None) -> np.ndarray:
    """Low-Degree Extension from <omega_n> to shift * <omega_N>.

    Implementation uses:
    1. Convert to coefficients (INTT)
    2. Scale by shift^i and zero-pad
    3. Convert back to evaluations (NTT on larger domain)
    """
    ntt = NTT(type(evaluations), len(evaluations), shift)
    return ntt.extend_pol(evaluations, extended_size)


def coset_to_coefficients(evaluations: np.ndarray, shift=None) -> np.ndarray:
    """Interpolate evaluations over shift * <omega_N> into coefficients."""
    ntt = NTT(type(evaluations), len(evaluations), shift)
    return ntt.coset_intt(evaluations)


def evaluate(coefficients: np.ndarray, point) -> galois.FieldArray:
    """Evaluate polynomial at a single point (Horner)."""
    field = type(coefficients)
    if len(coefficients) == 0:
        return field(0)
    return galois.Poly(coefficients[::-1], field=field)(field(int(point)))


def domain_points(field: FieldType, size: int, shift=None) -> np.ndarray:
    """Points shift * omega^i for i in [0, size)."""
    omega = get_omega(field, _log2(size))
    points = _precompute_powers(omega, size)
    if shift is not None:
        points = points * field(int(shift))
    return points


def coset_domain(field: FieldType, size: int) -> np.ndarray:
    """Points of the default evaluation coset g * <omega_size>."""
    return domain_points(field, size, generator(field))


def powers(base, count: int) -> np.ndarray:
    """[1, base, base^2, ..., base^(count-1)]."""
    return _precompute_powers(base, count)


def vanishing(point, n: int):
    """Z_H(x) = x^n - 1 for the subgroup of size n."""
    return point ** n - type(point)(1)


def lagrange_0(points: np.ndarray, n: int) -> np.ndarray:
    """First Lagrange basis polynomial of <omega_n> at points outside the subgroup.

    L_0(x) = (x^n - 1) / (n * (x - 1))
    """
    field = type(points)
    one = field(1)
    return (points ** n - one) * batch_inverse((points - one) * field(n % field.characteristic))


def lagrange_basis(point, n: int, count: int) -> List:
    """Values L_i(point) for i in [0, count) over <omega_n>.

    L_i(x) = omega^i * (x^n - 1) / (n * (x - omega^i)); point must lie outside the subgroup.
    """
    field = type(point)
    if count == 0:
        return []
    roots = powers(get_omega(field, _log2(n)), count)
    denominators = batch_inverse((point - roots) * field(n % field.characteristic))
    return list(roots * vanishing(point, n) * denominators)
