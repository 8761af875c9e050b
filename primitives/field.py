"""Prime fields used by the proof system.

Uses galois library for all field arithmetic. The protocol never hard-codes a
field: every routine derives the field type from the arrays it receives, so any
galois prime field with a large enough power-of-two subgroup works. Goldilocks
is the default; BabyBear is provided for faster experiments.
"""

from typing import Type

import galois

# --- Field Construction ---

GOLDILOCKS_PRIME = 0xFFFFFFFF00000001
BABYBEAR_PRIME = 0x78000001

FF = galois.GF(GOLDILOCKS_PRIME)
"""Base field GF(p) - Goldilocks prime field (default)."""

BabyBear = galois.GF(BABYBEAR_PRIME)
"""BabyBear prime field GF(15 * 2^27 + 1)."""

FIELDS = {
    "goldilocks": FF,
    "babybear": BabyBear,
}

FieldType = Type[galois.FieldArray]


def get_field(name: str) -> FieldType:
    """Look up a field by its configuration name."""
    try:
        return FIELDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown field '{name}', expected one of {sorted(FIELDS)}") from None


def field_name(field: FieldType) -> str:
    """Inverse of get_field()."""
    for name, candidate in FIELDS.items():
        if candidate is field:
            return name
    raise ValueError(f"Field {field.name} has no registered name")


def generator(field: FieldType) -> galois.FieldArray:
    """Multiplicative generator, used as coset shift and permutation delta."""
    return field.primitive_element


def two_adicity(field: FieldType) -> int:
    """Largest k such that 2^k divides p - 1."""
    order = field.order - 1
    k = 0
    while order % 2 == 0:
        order //= 2
        k += 1
    return k


def get_omega(field: FieldType, n_bits: int) -> galois.FieldArray:
    """Return primitive 2^n_bits-th root of unity.

    Matches the root galois.ntt uses for a transform of that size.
    """
    if n_bits > two_adicity(field):
        raise ValueError(f"{field.name} has no 2^{n_bits}-th root of unity")
    return field.primitive_root_of_unity(1 << n_bits)


def byte_size(field: FieldType) -> int:
    """Number of bytes in the canonical encoding of one element."""
    return (field.characteristic.bit_length() + 7) // 8


# --- Montgomery Batch Inversion ---

def batch_inverse(values):
    """Montgomery batch inversion for any galois array.

    Converts N field inversions into 3N-3 multiplications + 1 inversion.

    Algorithm:
    1. Forward pass: Compute prefix products cumprods[i] = a[0] * a[1] * ... * a[i]
    2. Single inversion: inv_total = cumprods[N-1]^(-1)
    3. Backward pass: Extract individual inverses using cumprods

    Args:
        values: Galois FieldArray to invert (must all be non-zero)

    Returns:
        Galois FieldArray where result[i] = values[i]^(-1)

    Raises:
        ZeroDivisionError: If any element is zero
    """
    n = len(values)
    if n == 0:
        return values
    if n == 1:
        return values ** -1

    field_type = type(values)

    # Forward pass: compute prefix products
    cumprods = field_type.Zeros(n)
    cumprods[0] = values[0]
    for i in range(1, n):
        cumprods[i] = cumprods[i - 1] * values[i]

    inv_total = cumprods[n - 1] ** -1

    # Backward pass: extract individual inverses
    results = field_type.Zeros(n)
    z = inv_total
    for i in range(n - 1, 0, -1):
        results[i] = z * cumprods[i - 1]
        z = z * values[i]
    results[0] = z

    return results
