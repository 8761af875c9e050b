"""Data structures for constraint and witness module evaluation.

Architecture Overview:
    Constraint modules (constraints/) are written once against a
    ConstraintContext and evaluated twice:

    1. ProverData
       - Every committed polynomial as an array over an evaluation domain
         (the basic domain for witness checks, the quotient coset for T(x))
       - Rotations are array rolls by rotation * extend

    2. VerifierData
       - Opened values at y * omega^rotation, keyed by (name, index, rotation)
       - The Lagrange selector computed directly at y
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

import galois

from primitives.field import FF, FieldType

# Type aliases
Poly = galois.FieldArray  # Evaluations over a domain
Scalar = galois.FieldArray  # 0-d field element


@dataclass
class ProverData:
    """Polynomial data for prover-side constraint evaluation.

    Attributes:
        columns: Evaluations keyed by (name, index)
        challenges: Fiat-Shamir challenges keyed by name
        lagrange_0: First Lagrange polynomial over the same domain
        extend: Rows of the evaluation domain per basic-domain row
        field: galois field of every array
    """
    columns: Dict[Tuple[str, int], Poly] = field(default_factory=dict)
    challenges: Dict[str, Any] = field(default_factory=dict)
    lagrange_0: Poly = None
    extend: int = 1
    field: FieldType = FF


@dataclass
class VerifierData:
    """Opened values for verifier-side constraint evaluation at y.

    Attributes:
        evals: Values keyed by (name, index, rotation)
        challenges: Fiat-Shamir challenges keyed by name
        lagrange_0: L_0(y)
        field: galois field
    """
    evals: Dict[Tuple[str, int, int], Scalar] = field(default_factory=dict)
    challenges: Dict[str, Any] = field(default_factory=dict)
    lagrange_0: Scalar = None
    field: FieldType = FF
