"""Finite-difference operators on trajectory samples."""

import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from brachnlp.core.errors import ConfigurationError


def forward_difference(N: int) -> scipy.sparse.csr_matrix:
    """
    Unscaled first-difference stencil of shape (N, N+1).

    Row i computes s[i+1] - s[i]; dividing by dt gives the Euler derivative
    estimate. The 1/dt factor is left out so the operator stays constant.

    Args:
        N: Number of discretization intervals

    Returns:
        Sparse bidiagonal operator with -1 on the diagonal, +1 above it
    """
    if N <= 0:
        raise ConfigurationError(f"number of intervals must be positive, got {N}")
    return scipy.sparse.diags(
        [-np.ones(N), np.ones(N)], [0, 1], shape=(N, N + 1), format="csr"
    )


def shift_diagonal(D, shift: float) -> scipy.sparse.csr_matrix:
    """
    Return D with ``shift`` added to the current-sample diagonal.

    For the friction model this is E = D + kFr dt I, the operator acting on
    the speed samples.
    """
    D = scipy.sparse.csr_matrix(D, dtype=float)
    N = D.shape[0]
    return (D + shift * scipy.sparse.eye(N, D.shape[1], format="csr")).tocsr()


def left_node_diagonal(values: NDArray, n_cols: int) -> scipy.sparse.csr_matrix:
    """diag(values) embedded in an (N, n_cols) block, columns past N are zero."""
    N = values.shape[0]
    return scipy.sparse.diags(values, 0, shape=(N, n_cols), format="csr")
