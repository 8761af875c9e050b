"""Commitment scheme configuration."""

from dataclasses import dataclass

from primitives.field import FF, FieldType, two_adicity
from primitives.hashing import DEFAULT_HASH, Hasher


@dataclass(frozen=True)
class CommitmentParams:
    """FRI/LPC parameters.

    Attributes:
        degree_log: log2 of the committed polynomials' length (rows_amount)
        blowup_log: log2 of the Reed-Solomon expansion factor
        lambda_: Number of FRI queries
        fri_rounds: Folding rounds; 0 folds all the way to a constant
        grinding_bits: Proof-of-work bits before query sampling (0 disables)
        merkle_arity: Arity of every Merkle tree
        hash_name: hashlib algorithm for Merkle trees and the transcript
        field: galois prime field
    """
    degree_log: int
    blowup_log: int = 3
    lambda_: int = 20
    fri_rounds: int = 0
    grinding_bits: int = 0
    merkle_arity: int = 2
    hash_name: str = DEFAULT_HASH
    field: FieldType = FF

    def __post_init__(self):
        if self.degree_log < 1:
            raise ValueError(f"degree_log must be at least 1, got {self.degree_log}")
        if self.blowup_log < 1:
            raise ValueError(f"blowup_log must be at least 1, got {self.blowup_log}")
        if self.lambda_ < 1:
            raise ValueError(f"lambda_ must be positive, got {self.lambda_}")
        if not 0 <= self.fri_rounds <= self.degree_log:
            raise ValueError(f"fri_rounds must be in [0, {self.degree_log}], got {self.fri_rounds}")
        if not 0 <= self.grinding_bits <= 32:
            raise ValueError(f"grinding_bits must be in [0, 32], got {self.grinding_bits}")
        if self.degree_log + self.blowup_log > two_adicity(self.field):
            raise ValueError(f"{self.field.name} cannot hold an LDE of 2^{self.degree_log + self.blowup_log} points")
        Hasher(self.hash_name)

    @property
    def rows(self) -> int:
        return 1 << self.degree_log

    @property
    def lde_size(self) -> int:
        return 1 << (self.degree_log + self.blowup_log)

    @property
    def rounds(self) -> int:
        """Effective number of FRI folds."""
        return self.fri_rounds or self.degree_log

    @property
    def final_poly_length(self) -> int:
        return self.rows >> self.rounds
