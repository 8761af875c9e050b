"""Placeholder proof data structures and serialization."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from commitments.fri import FriProof
from commitments.lpc import LpcProof
from primitives.merkle_tree import QueryProof
from protocol.common_data import BatchId

# JSON keys of the committed batches, in round order
BATCH_NAMES = {
    BatchId.VARIABLE_VALUES: "variable_values",
    BatchId.LOOKUP: "lookup_sorted",
    BatchId.PERMUTATION: "permutation",
    BatchId.QUOTIENT: "quotient",
}


# --- Proof Data Structures ---

@dataclass
class PlaceholderProof:
    """Complete proof for one witness.

    Attributes:
        commitments: Merkle root of every committed per-proof batch, keyed by
            BatchId. The fixed batch root is part of the verification key.
            Empty batches are never committed and have no entry.
        challenge: The evaluation point y
        eval_proof: LPC openings of every batch at y * omega^rotation
    """
    commitments: Dict[int, bytes] = field(default_factory=dict)
    challenge: int = 0
    eval_proof: LpcProof = field(default_factory=LpcProof)


# --- JSON Serialization ---

def _query_to_json(query: QueryProof) -> Dict[str, Any]:
    return {
        "v": [str(v) for v in query.v],
        "mp": [[sibling.hex() for sibling in level] for level in query.mp],
    }


def _query_from_json(data: Dict[str, Any]) -> QueryProof:
    return QueryProof(
        v=[int(v) for v in data["v"]],
        mp=[[bytes.fromhex(sibling) for sibling in level] for level in data["mp"]],
    )


def proof_to_json(proof: PlaceholderProof) -> Dict[str, Any]:
    """Convert a proof to a JSON-serializable dictionary.

    Batches appear in round order; integers are written as decimal strings
    and digests as hex.
    """
    j: Dict[str, Any] = {}

    # Commitments
    j["commitments"] = {
        BATCH_NAMES[BatchId(batch_id)]: proof.commitments[batch_id].hex()
        for batch_id in sorted(proof.commitments)
    }
    j["challenge"] = str(proof.challenge)

    # Openings
    lpc = proof.eval_proof
    j["evaluations"] = {
        str(int(batch_id)): [[str(v) for v in values] for values in lpc.evaluations[batch_id]]
        for batch_id in sorted(lpc.evaluations)
    }
    j["queries"] = {
        str(int(batch_id)): [_query_to_json(q) for q in lpc.query_proofs[batch_id]]
        for batch_id in sorted(lpc.query_proofs)
    }

    # FRI
    j["fri"] = {
        "roots": [root.hex() for root in lpc.fri.layer_roots],
        "finalPol": [str(c) for c in lpc.fri.final_pol],
        "nonce": str(lpc.fri.nonce),
        "queries": [[_query_to_json(q) for q in layer] for layer in lpc.fri.query_proofs],
    }
    return j


def proof_from_json(data: Dict[str, Any]) -> PlaceholderProof:
    """Inverse of proof_to_json()."""
    names = {name: batch_id for batch_id, name in BATCH_NAMES.items()}
    commitments = {
        int(names[name]): bytes.fromhex(root) for name, root in data["commitments"].items()
    }

    evaluations: Dict[int, List[List[int]]] = {
        int(batch_id): [[int(v) for v in values] for values in polys]
        for batch_id, polys in data["evaluations"].items()
    }
    query_proofs: Dict[int, List[QueryProof]] = {
        int(batch_id): [_query_from_json(q) for q in queries]
        for batch_id, queries in data["queries"].items()
    }

    fri_data = data["fri"]
    fri = FriProof(
        layer_roots=[bytes.fromhex(root) for root in fri_data["roots"]],
        final_pol=[int(c) for c in fri_data["finalPol"]],
        nonce=int(fri_data["nonce"]),
        query_proofs=[[_query_from_json(q) for q in layer] for layer in fri_data["queries"]],
    )

    return PlaceholderProof(
        commitments=commitments,
        challenge=int(data["challenge"]),
        eval_proof=LpcProof(evaluations=evaluations, query_proofs=query_proofs, fri=fri),
    )


def load_proof_from_json(path: str) -> PlaceholderProof:
    """Load a proof from a JSON file."""
    with open(path) as f:
        data = json.load(f)
    return proof_from_json(data)


def save_proof_to_json(proof: PlaceholderProof, path: str) -> None:
    with open(path, "w") as f:
        json.dump(proof_to_json(proof), f, indent=2)
