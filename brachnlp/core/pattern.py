"""Declared Jacobian sparsity pattern."""

from dataclasses import dataclass
from functools import cached_property
import numpy as np
import scipy.sparse
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.errors import ConfigurationError, StructureMismatchError


@dataclass(frozen=True, eq=False)
class SparsityPattern:
    """
    Coordinates (iGfun, jGvar) of the declared Jacobian nonzeros.

    The order of the entries is the order in which the solver expects the
    Jacobian values; it is fixed for a whole optimization run.
    """

    rows: NDArray
    cols: NDArray
    shape: tuple[int, int]

    def __post_init__(self):
        rows = np.asarray(self.rows)
        cols = np.asarray(self.cols)
        if rows.ndim != 1 or cols.ndim != 1 or rows.shape != cols.shape:
            raise ConfigurationError(
                f"rows and cols must be 1-D of equal length, got {rows.shape} and {cols.shape}"
            )
        if rows.size and not (
            np.issubdtype(rows.dtype, np.integer) and np.issubdtype(cols.dtype, np.integer)
        ):
            raise ConfigurationError("sparsity coordinates must be integers")
        rows = rows.astype(np.intp)
        cols = cols.astype(np.intp)

        m, n = (int(self.shape[0]), int(self.shape[1]))
        outside = (rows < 0) | (rows >= m) | (cols < 0) | (cols >= n)
        if np.any(outside):
            k = int(np.flatnonzero(outside)[0])
            raise ConfigurationError(
                f"{int(outside.sum())} sparsity entries lie outside the "
                f"{m}x{n} Jacobian, first at ({rows[k]}, {cols[k]})"
            )

        linear = rows * n + cols
        if np.unique(linear).size != linear.size:
            raise ConfigurationError("sparsity pattern contains duplicate entries")

        rows.flags.writeable = False
        cols.flags.writeable = False
        object.__setattr__(self, "rows", rows)
        object.__setattr__(self, "cols", cols)
        object.__setattr__(self, "shape", (m, n))

    def __len__(self) -> int:
        return self.rows.shape[0]

    @classmethod
    def from_linear_index(
        cls, index: ArrayLike, shape: tuple[int, int], order: str = "F"
    ) -> "SparsityPattern":
        """
        Build a pattern from linear indices into the dense Jacobian.

        Args:
            index: Zero-based linear indices, in solver order
            shape: Dense Jacobian shape
            order: "F" for column-major (MATLAB style), "C" for row-major
        """
        index = np.asarray(index)
        size = int(shape[0]) * int(shape[1])
        if np.any((index < 0) | (index >= size)):
            raise ConfigurationError(f"linear index outside a Jacobian of {size} entries")
        rows, cols = np.unravel_index(index.astype(np.intp), shape, order=order)
        return cls(rows=rows, cols=cols, shape=shape)

    def linear_index(self, order: str = "C") -> NDArray:
        return np.ravel_multi_index((self.rows, self.cols), self.shape, order=order)

    def permuted(self, perm: ArrayLike) -> "SparsityPattern":
        """Same entries, reordered so that entry k is the old entry perm[k]."""
        perm = np.asarray(perm)
        if perm.shape != (len(self),) or not np.array_equal(np.sort(perm), np.arange(len(self))):
            raise ConfigurationError("perm must be a permutation of the pattern entries")
        return SparsityPattern(rows=self.rows[perm], cols=self.cols[perm], shape=self.shape)

    @cached_property
    def _sorter(self) -> tuple[NDArray, NDArray]:
        linear = self.linear_index()
        sorter = np.argsort(linear, kind="stable")
        return linear[sorter], sorter

    def slots(self, rows: ArrayLike, cols: ArrayLike) -> NDArray:
        """
        Position of each (row, col) within the pattern.

        Raises:
            StructureMismatchError: if any position is not declared
        """
        rows = np.asarray(rows, dtype=np.intp)
        cols = np.asarray(cols, dtype=np.intp)
        sorted_linear, sorter = self._sorter
        wanted = rows * self.shape[1] + cols

        pos = np.searchsorted(sorted_linear, wanted)
        pos_clipped = np.minimum(pos, max(len(self) - 1, 0))
        if len(self) == 0:
            found = np.zeros(wanted.shape, dtype=bool)
        else:
            found = (pos < len(self)) & (sorted_linear[pos_clipped] == wanted)
        if not np.all(found):
            missing = sorted(set(zip(rows[~found].tolist(), cols[~found].tolist())))
            raise StructureMismatchError(missing)
        return sorter[pos_clipped]

    def to_matrix(self, values: ArrayLike) -> scipy.sparse.csr_matrix:
        """Sparse matrix holding ``values`` at the pattern coordinates."""
        values = np.asarray(values, dtype=float)
        if values.shape != (len(self),):
            raise ConfigurationError(
                f"expected {len(self)} Jacobian values, got shape {values.shape}"
            )
        return scipy.sparse.csr_matrix((values, (self.rows, self.cols)), shape=self.shape)
