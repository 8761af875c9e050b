"""Commitment scheme interface.

The arguments only ever talk to a commitment scheme through this contract:
polynomials are grouped into batches, each batch is committed to a single
digest, evaluation points are registered per polynomial, and one evaluation
proof covers every batch.
"""

from abc import ABC, abstractmethod
from typing import Dict, Sequence

import numpy as np

from primitives.transcript import Transcript


class CommitmentScheme(ABC):
    """Batch polynomial commitment with evaluation proofs."""

    @abstractmethod
    def append_to_batch(self, batch_id: int, polys: Sequence[np.ndarray]) -> None:
        """Add polynomials (evaluations over the basic domain) to a batch."""

    @abstractmethod
    def commit(self, batch_id: int) -> bytes:
        """Commit to every polynomial of a batch, returning the digest."""

    @abstractmethod
    def mark_batch_as_fixed(self, batch_id: int) -> None:
        """Keep a batch (and its commitment) across proofs."""

    @abstractmethod
    def set_batch_size(self, batch_id: int, size: int) -> None:
        """Declare the number of polynomials in a batch (verifier side)."""

    @abstractmethod
    def append_eval_point(self, batch_id: int, poly_index: int, point) -> None:
        """Request an opening of one polynomial at a point."""

    @abstractmethod
    def proof_eval(self, transcript: Transcript):
        """Evaluate every registered (polynomial, point) pair and prove the evaluations."""

    @abstractmethod
    def verify_eval(self, proof, commitments: Dict[int, bytes], transcript: Transcript) -> bool:
        """Check an evaluation proof against batch commitments. Never raises on bad proofs."""

    def append_eval_points(self, batch_id: int, points: Sequence) -> None:
        """Request openings of every polynomial of a batch at the same points."""
        for poly_index in range(self.batch_size(batch_id)):
            for point in points:
                self.append_eval_point(batch_id, poly_index, point)

    @abstractmethod
    def batch_size(self, batch_id: int) -> int:
        """Number of polynomials in a batch."""
