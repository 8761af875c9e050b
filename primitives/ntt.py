"""Number Theoretic Transform over a galois prime field."""

import galois
import numpy as np

from primitives.field import FieldType, generator

# --- NTT Engine ---


class NTT:
    """NTT engine for polynomial operations over a prime field.

    Evaluations are always in natural order: entry i is the value at
    shift * omega^i, where omega is the primitive root galois picks for
    the transform size.
    """

    def __init__(self, field: FieldType, domain_size: int, shift=None) -> None:
        """Initialize NTT engine for given domain size."""
        assert domain_size > 0, "Domain size must be positive"
        assert (domain_size & (domain_size - 1)) == 0, "Domain size must be power of 2"

        self.field = field
        self.n = domain_size
        self.n_bits = _log2(domain_size)
        self.shift = generator(field) if shift is None else field(int(shift))

        # Coset shift powers (computed lazily)
        self.r: np.ndarray | None = None
        self.r_: np.ndarray | None = None

    def _compute_r(self, N: int) -> None:
        """Compute coset shift arrays r[i] = shift^i and r_[i] = shift^-i."""
        self.r = _precompute_powers(self.shift, N)
        self.r_ = _precompute_powers(self.shift ** -1, N)

    def ntt(self, coeffs: np.ndarray) -> np.ndarray:
        """Forward NTT: coefficients -> evaluations."""
        if coeffs.size == 0:
            return coeffs
        return galois.ntt(self.field(coeffs))

    def intt(self, evals: np.ndarray) -> np.ndarray:
        """Inverse NTT: evaluations -> coefficients."""
        if evals.size == 0:
            return evals
        return galois.intt(self.field(evals))

    def extend_pol(self, src: np.ndarray, n_extended: int) -> np.ndarray:
        """Low-degree extend evaluations on the subgroup to the coset of size n_extended."""
        assert n_extended >= self.n, "Extended size must be >= original size"
        assert n_extended % self.n == 0, "Extended size must be multiple of original size"

        coeffs = self.intt(src)

        if self.r is None or len(self.r) < n_extended:
            self._compute_r(n_extended)

        # Zero-pad, then scale by shift^i so the NTT lands on the coset
        output = self.field.Zeros(n_extended)
        output[:self.n] = coeffs * self.r[:self.n]

        return galois.ntt(output)

    def coset_intt(self, evals: np.ndarray) -> np.ndarray:
        """Inverse NTT for evaluations on the coset shift * <omega>."""
        coeffs = self.intt(evals)

        if self.r_ is None or len(self.r_) < len(coeffs):
            self._compute_r(len(coeffs))

        return coeffs * self.r_[:len(coeffs)]


# --- Helpers ---

def _log2(size: int) -> int:
    """Compute log2 of size (must be power of 2)."""
    assert size != 0
    res = 0
    while size != 1:
        size >>= 1
        res += 1
    return res


def _precompute_powers(base, n: int) -> np.ndarray:
    """Precompute powers: powers[k] = base^k."""
    field = type(base)
    powers = field.Zeros(n)
    if n == 0:
        return powers
    powers[0] = field(1)
    for i in range(1, n):
        powers[i] = powers[i - 1] * base
    return powers
