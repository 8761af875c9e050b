"""Hash primitive shared by the transcript and the Merkle trees.

Any algorithm from hashlib works; the protocol only needs a fixed-output,
collision-resistant function. Leaves and internal nodes are domain separated
so a node digest can never be replayed as a leaf.
"""

import hashlib
from typing import Iterable

import numpy as np

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"

DEFAULT_HASH = "sha256"


class Hasher:
    """Thin wrapper over a hashlib constructor."""

    def __init__(self, name: str = DEFAULT_HASH):
        if name not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash '{name}'")
        if name.startswith("shake_"):
            raise ValueError("Variable-length hashes are not supported")
        self.name = name
        self.digest_size = hashlib.new(name).digest_size

    def hash(self, *chunks: bytes) -> bytes:
        h = hashlib.new(self.name)
        for chunk in chunks:
            h.update(chunk)
        return h.digest()

    def hash_leaf(self, data: bytes) -> bytes:
        return self.hash(LEAF_PREFIX, data)

    def hash_node(self, children: Iterable[bytes]) -> bytes:
        return self.hash(NODE_PREFIX, *children)

    def empty_digest(self) -> bytes:
        """Digest used to pad incomplete Merkle levels."""
        return bytes(self.digest_size)


def field_to_bytes(values, width: int) -> bytes:
    """Canonical big-endian encoding of field elements (scalar, array or int list)."""
    if isinstance(values, np.ndarray):
        flat = values.view(np.ndarray).reshape(-1)
    else:
        # object dtype keeps ints above 2^63 exact
        flat = np.asarray(values, dtype=object).reshape(-1)
    return b"".join(int(v).to_bytes(width, "big") for v in flat)
