"""Commitments - batched polynomial commitment schemes."""

from commitments.base import CommitmentScheme
from commitments.fri import FRI, FriProof
from commitments.lpc import LpcCommitmentScheme, LpcProof
from commitments.params import CommitmentParams

__all__ = [
    "CommitmentScheme",
    "CommitmentParams",
    "FRI",
    "FriProof",
    "LpcCommitmentScheme",
    "LpcProof",
]
