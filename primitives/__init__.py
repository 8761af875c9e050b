"""Primitives - Low-level cryptographic and mathematical building blocks."""

from primitives.field import (
    BABYBEAR_PRIME,
    FF,
    GOLDILOCKS_PRIME,
    BabyBear,
    batch_inverse,
    byte_size,
    generator,
    get_field,
    get_omega,
)
from primitives.hashing import Hasher, field_to_bytes
from primitives.merkle_tree import (
    LeafData,
    MerkleRoot,
    MerkleTree,
    QueryProof,
)
from primitives.ntt import NTT
from primitives.transcript import (
    Challenge,
    Transcript,
    TranscriptDesynchronization,
)

__all__ = [
    # Field
    "FF",
    "BabyBear",
    "GOLDILOCKS_PRIME",
    "BABYBEAR_PRIME",
    "batch_inverse",
    "byte_size",
    "generator",
    "get_field",
    "get_omega",
    # Hashing
    "Hasher",
    "field_to_bytes",
    # NTT
    "NTT",
    # Merkle Tree
    "MerkleTree",
    "MerkleRoot",
    "QueryProof",
    "LeafData",
    # Transcript
    "Transcript",
    "Challenge",
    "TranscriptDesynchronization",
]
