"""Projection of Jacobian values onto the solver-ordered pattern."""

import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from brachnlp.core.errors import ConfigurationError, StructureMismatchError
from brachnlp.core.pattern import SparsityPattern


def scatter(values: NDArray, slots: NDArray, size: int) -> NDArray:
    """
    Accumulate triplet values into the solver-ordered value vector.

    Several triplets may share a slot (e.g. the difference operator and the
    friction shift on the same diagonal); their values are summed. Declared
    entries without a triplet stay exactly zero.
    """
    G = np.zeros(size)
    np.add.at(G, slots, values)
    return G


def extract(matrix, pattern: SparsityPattern, validate: bool = False) -> NDArray:
    """
    Read a full Jacobian at the pattern coordinates, in pattern order.

    Args:
        matrix: Dense array or scipy sparse matrix of shape ``pattern.shape``
        pattern: Declared nonzero positions
        validate: Also check that every nonzero of ``matrix`` is declared

    Returns:
        Value vector of length ``len(pattern)``

    Raises:
        ConfigurationError: shape mismatch
        StructureMismatchError: nonzero entries outside the pattern (validate only)
    """
    if tuple(matrix.shape) != pattern.shape:
        raise ConfigurationError(
            f"Jacobian has shape {tuple(matrix.shape)}, pattern expects {pattern.shape}"
        )

    if scipy.sparse.issparse(matrix):
        csr = scipy.sparse.csr_matrix(matrix)
        values = np.asarray(csr[pattern.rows, pattern.cols], dtype=float).ravel()
        if validate:
            coo = csr.tocoo()
            nz = coo.data != 0
            pattern.slots(coo.row[nz], coo.col[nz])
        return values

    dense = np.asarray(matrix, dtype=float)
    if validate:
        declared = np.zeros(pattern.shape, dtype=bool)
        declared[pattern.rows, pattern.cols] = True
        r, c = np.nonzero((dense != 0) & ~declared)
        if r.size:
            raise StructureMismatchError(zip(r.tolist(), c.tolist()))
    return dense[pattern.rows, pattern.cols]
