"""Protocol - Placeholder preprocessing, proving and verification.

The prover and verifier live in protocol.prover and protocol.verifier; they
are not re-exported here because the constraint modules they import depend
on protocol.data.
"""

from protocol.common_data import BatchId, CommonData, PolyEntry, VerificationKey
from protocol.data import ProverData, VerifierData
from protocol.errors import (
    InvalidTableDescription,
    MalformedConstraintSystem,
    PlaceholderError,
    TranscriptDesynchronization,
    UnsatisfiedWitness,
)
from protocol.params import PlaceholderParams
from protocol.proof import PlaceholderProof, proof_from_json, proof_to_json

__all__ = [
    # Data
    "BatchId",
    "CommonData",
    "PolyEntry",
    "VerificationKey",
    "ProverData",
    "VerifierData",
    "PlaceholderProof",
    "proof_to_json",
    "proof_from_json",
    # Configuration
    "PlaceholderParams",
    # Errors
    "PlaceholderError",
    "MalformedConstraintSystem",
    "InvalidTableDescription",
    "UnsatisfiedWitness",
    "TranscriptDesynchronization",
]
