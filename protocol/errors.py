"""Errors raised by preprocessing and proving.

Verification never raises for a bad proof: commitment failures (Merkle path,
fold or degree mismatch) and algebraic failures (permutation, lookup or
quotient identity) make the verifier return False and log the reason.
"""

from primitives.transcript import TranscriptDesynchronization


class PlaceholderError(Exception):
    """Base class for proof system errors."""


class MalformedConstraintSystem(PlaceholderError, ValueError):
    """Constraint system cannot be preprocessed (bad degree, index or parameters)."""


class InvalidTableDescription(MalformedConstraintSystem):
    """Column or row counts are inconsistent with the constraint system."""


class UnsatisfiedWitness(PlaceholderError):
    """The assignment violates a gate, copy or lookup constraint; proving aborts."""


__all__ = [
    "PlaceholderError",
    "MalformedConstraintSystem",
    "InvalidTableDescription",
    "UnsatisfiedWitness",
    "TranscriptDesynchronization",
]
