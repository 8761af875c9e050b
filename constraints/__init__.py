"""Constraint evaluation modules.

Each argument of the protocol (permutation, lookup, gates) is a
ConstraintModule evaluated against a ConstraintContext: arrays over a domain
for the prover, openings at the challenge point for the verifier.
"""

from .base import (
    ConstraintContext,
    ConstraintModule,
    ProverConstraintContext,
    VerifierConstraintContext,
    column_name,
    combine_constraints,
)
from .gates import GatesArgument
from .lookup import LookupArgument
from .permutation import PermutationArgument

__all__ = [
    "ConstraintContext",
    "ConstraintModule",
    "ProverConstraintContext",
    "VerifierConstraintContext",
    "column_name",
    "combine_constraints",
    "GatesArgument",
    "LookupArgument",
    "PermutationArgument",
]
