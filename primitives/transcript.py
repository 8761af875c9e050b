"""
Fiat-Shamir transcript over a hashlib hash.

The transcript absorbs commitments, public inputs and field elements and
produces challenges in a deterministic, pseudorandom manner:

    absorb:   state = H(state || len(data) || data)
    squeeze:  state = H(state), challenge derived from the new state

Every squeeze advances the state, so the same challenge is never returned
twice, and prover and verifier that absorb identical data in identical order
draw identical challenges.
"""

from typing import List, Union

import galois

from primitives.field import FF, FieldType, byte_size
from primitives.hashing import DEFAULT_HASH, Hasher, field_to_bytes

# Extra bytes drawn per field challenge so the modular reduction is near uniform
_WIDE_REDUCTION_BYTES = 16
_NONCE_BYTES = 8

Challenge = galois.FieldArray
Absorbable = Union[bytes, bytearray, int, galois.FieldArray, List]


class TranscriptDesynchronization(AssertionError):
    """Prover and verifier transcripts absorbed different data."""


class Transcript:
    """
    Fiat-Shamir transcript.

    Attributes:
        hasher: Hash primitive used for absorption and squeezing
        field: Field challenges are drawn from
        state: Current digest
    """

    def __init__(self, init: bytes = b"", hash_name: str = DEFAULT_HASH, field: FieldType = FF):
        self.hasher = Hasher(hash_name)
        self.field = field
        self.element_size = byte_size(field)
        self.state = self.hasher.hash(bytes(init))

    def put(self, data: Absorbable) -> None:
        """
        Absorb bytes or field elements.

        Args:
            data: bytes (commitments), or a field element / array / list of ints
        """
        if isinstance(data, (bytes, bytearray)):
            payload = bytes(data)
        else:
            payload = field_to_bytes(data, self.element_size)
        self.state = self.hasher.hash(self.state, len(payload).to_bytes(8, "big"), payload)

    def _squeeze(self, n_bytes: int) -> bytes:
        """Advance the state and expand it to n_bytes of output."""
        self.state = self.hasher.hash(self.state)
        out = b""
        counter = 0
        while len(out) < n_bytes:
            out += self.hasher.hash(self.state, counter.to_bytes(4, "big"))
            counter += 1
        return out[:n_bytes]

    def get_field(self) -> Challenge:
        """Squeeze one field challenge."""
        raw = self._squeeze(self.element_size + _WIDE_REDUCTION_BYTES)
        return self.field(int.from_bytes(raw, "big") % self.field.characteristic)

    def get_fields(self, n: int) -> List[Challenge]:
        """Squeeze n field challenges."""
        return [self.get_field() for _ in range(n)]

    def get_int(self, n_bits: int) -> int:
        """Squeeze an integer in [0, 2^n_bits)."""
        raw = self._squeeze((n_bits + 7) // 8 + 1)
        return int.from_bytes(raw, "big") & ((1 << n_bits) - 1)

    def get_permutations(self, n: int, n_bits: int) -> List[int]:
        """
        Generate n values, each in range [0, 2^n_bits).

        This is used to derive query indices in FRI.
        """
        return [self.get_int(n_bits) for _ in range(n)]

    def get_state(self) -> bytes:
        """Current digest, for comparing prover and verifier transcripts."""
        return self.state

    def expect_state(self, state: bytes) -> None:
        """Debug check that another transcript reached the same state."""
        if state != self.state:
            raise TranscriptDesynchronization(
                f"Transcript state {self.state.hex()} does not match expected {state.hex()}"
            )

    # --- Proof of work ---

    def _pow_value(self, nonce: int) -> int:
        digest = self.hasher.hash(self.state, b"grinding", nonce.to_bytes(_NONCE_BYTES, "big"))
        return int.from_bytes(digest, "big")

    def _pow_ok(self, nonce: int, bits: int) -> bool:
        return self._pow_value(nonce) >> (8 * self.hasher.digest_size - bits) == 0

    def grind(self, bits: int) -> int:
        """Find a nonce whose hash with the current state has `bits` leading zeros, then absorb it."""
        if bits == 0:
            return 0
        nonce = 0
        while not self._pow_ok(nonce, bits):
            nonce += 1
        self.put(nonce.to_bytes(_NONCE_BYTES, "big"))
        return nonce

    def verify_grinding(self, nonce: int, bits: int) -> bool:
        """Check a grinding nonce and absorb it, mirroring grind()."""
        if bits == 0:
            return nonce == 0
        if not 0 <= nonce < 1 << (8 * _NONCE_BYTES) or not self._pow_ok(nonce, bits):
            return False
        self.put(nonce.to_bytes(_NONCE_BYTES, "big"))
        return True
