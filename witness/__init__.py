"""Witness generation modules for the grand product arguments."""

from .base import Columns, WitnessModule
from .lookup import LookupWitness, sort_lookup_columns
from .permutation import PermutationWitness

__all__ = [
    "Columns",
    "WitnessModule",
    "LookupWitness",
    "PermutationWitness",
    "sort_lookup_columns",
]
