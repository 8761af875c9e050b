"""Merkle tree commitment over rows of field elements."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import numpy as np

from primitives.hashing import Hasher, field_to_bytes

# --- Type Aliases ---

MerkleRoot = bytes
LeafData = List[int]


# --- Data Classes ---

@dataclass
class QueryProof:
    """Opened leaf row with its authentication path.

    Attributes:
        v: Leaf values at query index (one row of the committed matrix)
        mp: Merkle path - list of sibling digests per level, from leaf to root.
            Each level has (arity - 1) digests.
    """
    v: List[int] = field(default_factory=list)
    mp: List[List[bytes]] = field(default_factory=list)


# --- Merkle Tree ---

class MerkleTree:
    """Variable-arity Merkle tree; leaf i commits to row i of a field matrix."""

    def __init__(self, hasher: Hasher, element_size: int, arity: int = 2):
        if arity not in [2, 3, 4]:
            raise ValueError(f"arity must be 2, 3, or 4, got {arity}")

        self.hasher = hasher
        self.element_size = element_size
        self.arity = arity

        self.height = 0
        self.width = 0
        self.nodes: List[bytes] = []
        self.num_nodes = 0

        # Committed rows, kept so queries can open them
        self.source_data: Optional[List[LeafData]] = None

    # --- Core Operations ---

    def merkelize(self, source: np.ndarray) -> None:
        """Commit to a (height, width) matrix, one leaf per row.

        Levels are stored back to back in ``nodes``, each padded with empty
        digests up to a multiple of the arity.
        """
        if source.ndim != 2:
            raise ValueError(f"Expected 2D leaf matrix, got {source.ndim}D")

        self.height, self.width = source.shape
        self.source_data = [[int(x) for x in row] for row in source]
        self.nodes = [self.hash_leaf(row) for row in self.source_data]

        offset = 0
        for size, padded in self._levels():
            self.nodes.extend([self.hasher.empty_digest()] * (padded - size))
            level = self.nodes[offset:offset + padded]
            self.nodes.extend(
                self.hasher.hash_node(level[j:j + self.arity])
                for j in range(0, padded, self.arity)
            )
            offset += padded
        self.num_nodes = len(self.nodes)

    def hash_leaf(self, leaf_data: LeafData) -> bytes:
        return self.hasher.hash_leaf(field_to_bytes(leaf_data, self.element_size))

    def get_root(self) -> MerkleRoot:
        if self.num_nodes == 0:
            return self.hasher.empty_digest()
        return self.nodes[-1]

    def get_group_proof(self, idx: int) -> List[bytes]:
        """Sibling digests of leaf ``idx``, level by level, flattened."""
        proof: List[bytes] = []
        offset = 0
        for _, padded in self._levels():
            first = idx - idx % self.arity
            proof.extend(
                self.nodes[offset + first + i]
                for i in range(self.arity)
                if first + i != idx
            )
            idx //= self.arity
            offset += padded
        return proof

    def get_query_proof(self, idx: int) -> QueryProof:
        """Opened row ``idx`` together with its authentication path.

        Raises:
            ValueError: If nothing was committed or idx is out of range
        """
        if self.source_data is None:
            raise ValueError("Tree has no committed rows to open")
        if not 0 <= idx < self.height:
            raise ValueError(f"Leaf index {idx} outside [0, {self.height})")

        siblings = self.get_group_proof(idx)
        step = self.arity - 1
        mp = [siblings[i:i + step] for i in range(0, len(siblings), step)]
        return QueryProof(v=list(self.source_data[idx]), mp=mp)

    def verify_group_proof(
        self,
        root: MerkleRoot,
        proof: List[List[bytes]],
        idx: int,
        leaf_data: LeafData,
    ) -> bool:
        """Recompute the root from a leaf and its path."""
        digest = self.hash_leaf(leaf_data)

        for siblings in proof:
            if len(siblings) != self.arity - 1:
                return False
            children = list(siblings)
            children.insert(idx % self.arity, digest)
            digest = self.hasher.hash_node(children)
            idx //= self.arity

        return idx == 0 and digest == root

    # --- Internal Helpers ---

    def _levels(self) -> Iterator[Tuple[int, int]]:
        """(node count, padded node count) for every level below the root."""
        size = self.height
        while size > 1:
            padded = -(-size // self.arity) * self.arity
            yield size, padded
            size = padded // self.arity
