"""Analytic constraint Jacobian in triplet form."""

from typing import Optional
import numpy as np
import scipy.sparse
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.config import TranscriptionConfig
from brachnlp.core.errors import DegenerateStepError
from brachnlp.core.layout import DecisionVariables
from brachnlp.transcription.residuals import step_size


class _TripletBuffer:
    """Collects (row, col[, value]) blocks in assembly order."""

    def __init__(self, with_values: bool):
        self.with_values = with_values
        self._rows: list[NDArray] = []
        self._cols: list[NDArray] = []
        self._vals: list[NDArray] = []

    def add(self, rows, cols, values=None) -> None:
        rows, cols = np.broadcast_arrays(
            np.asarray(rows, dtype=np.intp), np.asarray(cols, dtype=np.intp)
        )
        self._rows.append(rows.ravel())
        self._cols.append(cols.ravel())
        if self.with_values:
            self._vals.append(
                np.broadcast_to(np.asarray(values, dtype=float), rows.shape).ravel()
            )

    def arrays(self):
        rows = np.concatenate(self._rows)
        cols = np.concatenate(self._cols)
        if not self.with_values:
            return rows, cols
        return rows, cols, np.concatenate(self._vals)


def _assemble(
    config: TranscriptionConfig,
    variables: Optional[DecisionVariables] = None,
    dt: Optional[float] = None,
) -> _TripletBuffer:
    """
    Block layout (brachistochrone names):

                 x       y       v          theta        tf
        tf       0       0       0            0           1
        dyn_x    D       0     -dt sin       -dt v cos   -f_x/N
        dyn_y    0       D     -dt cos        dt v sin   -f_y/N
        dyn_v    0       0     D + kFr dt     dt sin     -f_v/N
        bcs      single 1 at the pinned first/last sample

    Diagonal blocks occupy the left node of each interval only, so the
    column of the last sample is zero in every state block.
    """
    N = config.N
    layout = config.layout
    dynamics = config.dynamics
    with_values = variables is not None
    buf = _TripletBuffer(with_values)

    if with_values:
        left = variables.left_states
        f = dynamics.f(left, variables.controls)
        F = dynamics.F(left, variables.controls)
        G = dynamics.G(left, variables.controls)
    state_deps = np.asarray(dynamics.state_dependencies, dtype=bool)
    control_deps = np.asarray(dynamics.control_dependencies, dtype=bool)

    D = config.D.tocoo()
    interval = np.arange(N)

    # ∂tf/∂tf
    buf.add(0, layout.tf_index, 1.0)

    for s in range(config.n_states):
        row0 = config.defect_rows(s).start
        rows = row0 + interval

        for r in range(config.n_states):
            col0 = layout.state_offset(r)
            if r == s:
                buf.add(row0 + D.row, col0 + D.col, D.data if with_values else None)
            if state_deps[s, r]:
                buf.add(rows, col0 + interval, -dt * F[s, r] if with_values else None)

        for c in range(config.n_controls):
            if control_deps[s, c]:
                col0 = layout.control_offset(c)
                buf.add(rows, col0 + interval, -dt * G[s, c] if with_values else None)

        # chain rule through dt = (tf - t0)/N
        buf.add(rows, layout.tf_index, -f[s] / N if with_values else None)

    bc_rows = config.boundary_row_offset + np.arange(len(config.boundary_conditions))
    buf.add(bc_rows, config.boundary_columns, 1.0 if with_values else None)

    return buf


def jacobian_structure(config: TranscriptionConfig) -> tuple[NDArray, NDArray]:
    """Row and column of every analytic triplet (duplicates possible)."""
    return _assemble(config).arrays()


def jacobian_triplets(
    z: ArrayLike, config: TranscriptionConfig
) -> tuple[NDArray, NDArray, NDArray]:
    """
    Closed-form Jacobian of the constraint vector at ``z``.

    Triplets come out in the same order as :func:`jacobian_structure`;
    repeated coordinates are meant to be summed.

    Raises:
        ConfigurationError: wrong decision-vector length
        DegenerateStepError: tf <= t0 or non-finite derivatives
    """
    variables = config.layout.unpack(z)
    dt = step_size(variables.tf, config.t0, config.N)
    rows, cols, values = _assemble(config, variables, dt).arrays()

    if not np.all(np.isfinite(values)):
        raise DegenerateStepError(
            "non-finite Jacobian entries", tf=variables.tf, dt=dt
        )
    return rows, cols, values


def jacobian_matrix(z: ArrayLike, config: TranscriptionConfig) -> scipy.sparse.csr_matrix:
    """Sparse Jacobian with duplicate triplets summed."""
    rows, cols, values = jacobian_triplets(z, config)
    return scipy.sparse.coo_matrix(
        (values, (rows, cols)), shape=config.jacobian_shape
    ).tocsr()


def dense_jacobian(z: ArrayLike, config: TranscriptionConfig) -> NDArray:
    """Full dense Jacobian; for validation and small problems only."""
    rows, cols, values = jacobian_triplets(z, config)
    dense = np.zeros(config.jacobian_shape)
    np.add.at(dense, (rows, cols), values)
    return dense
