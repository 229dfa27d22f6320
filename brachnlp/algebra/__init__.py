"""Difference operators."""

from brachnlp.algebra.operators import forward_difference, shift_diagonal

__all__ = [
    "forward_difference",
    "shift_diagonal",
]
