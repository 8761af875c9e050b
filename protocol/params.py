"""Proof system configuration."""

import json
from dataclasses import dataclass
from typing import Optional

from commitments.params import CommitmentParams
from primitives.field import FF, FieldType, field_name, get_field
from primitives.hashing import DEFAULT_HASH


@dataclass(frozen=True)
class PlaceholderParams:
    """Circuit-independent proving parameters.

    Attributes:
        blowup_log: log2 of the LPC Reed-Solomon expansion factor
        lambda_: Number of FRI queries
        fri_rounds: FRI folding rounds; 0 folds to a constant polynomial
        grinding_bits: Proof-of-work bits before FRI query sampling
        merkle_arity: Arity of every Merkle tree
        hash_name: hashlib algorithm for commitments and the transcript
        field: galois prime field
        max_quotient_chunks: Upper bound on quotient chunks; 0 derives the
            count from the highest constraint degree. When set, the
            permutation product is split into parts that fit the bound.
        blinding_seed: Seed for the witness padding rows; None draws fresh entropy
    """
    blowup_log: int = 3
    lambda_: int = 20
    fri_rounds: int = 0
    grinding_bits: int = 0
    merkle_arity: int = 2
    hash_name: str = DEFAULT_HASH
    field: FieldType = FF
    max_quotient_chunks: int = 0
    blinding_seed: Optional[int] = None

    def commitment_params(self, degree_log: int) -> CommitmentParams:
        """Commitment parameters for a domain of 2^degree_log rows."""
        return CommitmentParams(
            degree_log=degree_log,
            blowup_log=self.blowup_log,
            lambda_=self.lambda_,
            fri_rounds=self.fri_rounds,
            grinding_bits=self.grinding_bits,
            merkle_arity=self.merkle_arity,
            hash_name=self.hash_name,
            field=self.field,
        )

    @classmethod
    def from_json(cls, path: str) -> "PlaceholderParams":
        """Load parameters from a JSON file."""
        with open(path) as f:
            j = json.load(f)
        return cls.from_dict(j)

    @classmethod
    def from_dict(cls, j: dict) -> "PlaceholderParams":
        """Parse parameters from a camelCase dictionary; missing keys keep their defaults."""
        defaults = cls()
        return cls(
            blowup_log=j.get("blowupBits", defaults.blowup_log),
            lambda_=j.get("nQueries", defaults.lambda_),
            fri_rounds=j.get("friRounds", defaults.fri_rounds),
            grinding_bits=j.get("powBits", defaults.grinding_bits),
            merkle_arity=j.get("merkleTreeArity", defaults.merkle_arity),
            hash_name=j.get("hash", defaults.hash_name),
            field=get_field(j["field"]) if "field" in j else defaults.field,
            max_quotient_chunks=j.get("maxQuotientChunks", defaults.max_quotient_chunks),
            blinding_seed=j.get("blindingSeed", defaults.blinding_seed),
        )

    def to_dict(self) -> dict:
        return {
            "blowupBits": self.blowup_log,
            "nQueries": self.lambda_,
            "friRounds": self.fri_rounds,
            "powBits": self.grinding_bits,
            "merkleTreeArity": self.merkle_arity,
            "hash": self.hash_name,
            "field": field_name(self.field),
            "maxQuotientChunks": self.max_quotient_chunks,
            "blindingSeed": self.blinding_seed,
        }
