"""
Integration layer: pairs the harness can drive.
"""

from .reference_pair import (
    PAIR_ADDRESS,
    PairConfig,
    ReferencePair,
    make_reference_pair,
)

__all__ = [
    "PAIR_ADDRESS",
    "PairConfig",
    "ReferencePair",
    "make_reference_pair",
]
