"""Explicit Euler defects and constraint-vector assembly."""

import numpy as np
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.config import TranscriptionConfig
from brachnlp.core.errors import DegenerateStepError
from brachnlp.core.layout import DecisionVariables


def step_size(tf: float, t0: float, N: int) -> float:
    """
    Uniform step dt = (tf - t0)/N.

    Raises:
        DegenerateStepError: if tf <= t0 or dt is not finite
    """
    dt = (tf - t0) / N
    if not np.isfinite(dt) or dt <= 0.0:
        raise DegenerateStepError(
            f"final time {tf!r} gives non-positive or non-finite step {dt!r} "
            f"(t0={t0!r}, N={N})",
            tf=tf,
            dt=dt,
        )
    return dt


def dynamics_defects(
    variables: DecisionVariables,
    config: TranscriptionConfig,
    dt: float,
) -> NDArray:
    """
    Euler defects for every state and interval:

        defect_s[i] = (D s)[i] - dt f_s(s[:, i], u[:, i])

    dt scales the forcing only; the D s part stays linear in the decision
    vector.

    Returns:
        Defects of shape (n_states, N)
    """
    forcing = config.dynamics.f(variables.left_states, variables.controls)
    differences = (config.D @ variables.states.T).T
    return differences - dt * forcing


def boundary_values(variables: DecisionVariables, config: TranscriptionConfig) -> NDArray:
    """Pinned state samples, one per boundary condition."""
    n_nodes = config.N + 1
    cols = config.boundary_columns
    return variables.states[cols // n_nodes, cols % n_nodes]


def constraint_vector(z: ArrayLike, config: TranscriptionConfig) -> NDArray:
    """
    Full residual vector F in solver order:

        [tf; defects_0; ...; defects_{n-1}; boundary values]

    For the brachistochrone this is
    [tf; dyn_x; dyn_y; dyn_v; x_0; y_0; v_0; x_N; y_N], length 3N+6.

    Raises:
        ConfigurationError: wrong decision-vector length
        DegenerateStepError: tf <= t0 or non-finite residuals
    """
    variables = config.layout.unpack(z)
    dt = step_size(variables.tf, config.t0, config.N)

    F = np.concatenate((
        [variables.tf],
        dynamics_defects(variables, config, dt).ravel(),
        boundary_values(variables, config),
    ))

    if not np.all(np.isfinite(F)):
        bad = np.flatnonzero(~np.isfinite(F))
        raise DegenerateStepError(
            f"{bad.size} non-finite residuals, first at row {int(bad[0])}",
            tf=variables.tf,
            dt=dt,
        )
    return F
