"""Problem data around the transcription: configuration, bounds, initial guess."""

from typing import Mapping, Optional, Sequence
import numpy as np
from numpy.typing import NDArray

from brachnlp.algebra.operators import forward_difference
from brachnlp.core.config import TranscriptionConfig, BRACHISTOCHRONE_BOUNDARY
from brachnlp.core.errors import ConfigurationError
from brachnlp.core.pattern import SparsityPattern
from brachnlp.dynamics.brachistochrone import FrictionBrachistochrone

# Keeps tf strictly above t0 so every bounded trial point has dt > 0.
TF_MARGIN = 1e-6


def brachistochrone(
    N: int,
    kFr: float = 0.0,
    t0: float = 0.0,
    pattern: Optional[SparsityPattern] = None,
) -> TranscriptionConfig:
    """Friction brachistochrone on N forward-difference intervals."""
    return TranscriptionConfig(
        dynamics=FrictionBrachistochrone(kFr),
        N=N,
        t0=t0,
        D=forward_difference(N),
        pattern=pattern,
        boundary_conditions=BRACHISTOCHRONE_BOUNDARY,
    )


def constraint_bounds(
    config: TranscriptionConfig, boundary_values: Sequence[float]
) -> tuple[NDArray, NDArray]:
    """
    Lower/upper bounds (Flow, Fupp) matching the order of the residual vector.

    Defects are equality constraints at zero; boundary rows are pinned to
    ``boundary_values``, one per ``config.boundary_conditions`` entry. The
    objective row is only bounded below by t0.
    """
    boundary_values = np.asarray(boundary_values, dtype=float)
    if boundary_values.shape != (len(config.boundary_conditions),):
        raise ConfigurationError(
            f"expected {len(config.boundary_conditions)} boundary values, "
            f"got shape {boundary_values.shape}"
        )

    n_defects = config.n_states * config.N
    lower = np.concatenate(([config.t0], np.zeros(n_defects), boundary_values))
    upper = np.concatenate(([np.inf], np.zeros(n_defects), boundary_values))
    return lower, upper


def variable_bounds(
    config: TranscriptionConfig,
    state_bounds: Optional[Mapping[str, tuple[float, float]]] = None,
    control_bounds: Optional[Mapping[str, tuple[float, float]]] = None,
    tf_max: float = np.inf,
) -> tuple[NDArray, NDArray]:
    """
    Bounds (xlow, xupp) on the decision vector.

    Unlisted states and controls are free. The final time is bounded below
    by t0 + TF_MARGIN.
    """
    layout = config.layout
    lower = np.full(layout.size, -np.inf)
    upper = np.full(layout.size, np.inf)

    names = config.dynamics.state_names
    for name, (lo, hi) in (state_bounds or {}).items():
        if name not in names:
            raise ConfigurationError(f"unknown state {name!r}")
        sl = layout.state_slice(names.index(name))
        lower[sl], upper[sl] = lo, hi

    names = config.dynamics.control_names
    for name, (lo, hi) in (control_bounds or {}).items():
        if name not in names:
            raise ConfigurationError(f"unknown control {name!r}")
        sl = layout.control_slice(names.index(name))
        lower[sl], upper[sl] = lo, hi

    lower[layout.tf_index] = config.t0 + TF_MARGIN
    upper[layout.tf_index] = tf_max
    if tf_max <= lower[layout.tf_index]:
        raise ConfigurationError(f"tf_max={tf_max} leaves no room above t0={config.t0}")
    return lower, upper


def brachistochrone_bounds(
    config: TranscriptionConfig, tf_max: float = np.inf
) -> tuple[NDArray, NDArray]:
    """Speed non-negative, heading in [-π, π]."""
    return variable_bounds(
        config,
        state_bounds={"v": (0.0, np.inf)},
        control_bounds={"theta": (-np.pi, np.pi)},
        tf_max=tf_max,
    )


def initial_guess(
    config: TranscriptionConfig,
    start: tuple[float, float],
    end: tuple[float, float],
    tf: float,
    v0: float = 0.0,
) -> NDArray:
    """
    Straight line from ``start`` to ``end`` traversed with constant heading
    and uniform acceleration, reaching ``end`` at ``tf``.
    """
    names = config.dynamics.state_names
    if names != ("x", "y", "v") or config.dynamics.control_names != ("theta",):
        raise ConfigurationError("initial_guess needs states (x, y, v) and control theta")
    if tf <= config.t0:
        raise ConfigurationError(f"guess final time {tf} must exceed t0={config.t0}")

    N = config.N
    dx, dy = end[0] - start[0], end[1] - start[1]
    length = np.hypot(dx, dy)
    duration = tf - config.t0

    x = np.linspace(start[0], end[0], N + 1)
    y = np.linspace(start[1], end[1], N + 1)
    # uniform acceleration covering `length`: mean speed length/duration
    v = np.linspace(v0, max(2.0 * length / duration - v0, 0.0), N + 1)
    theta = np.full(N, np.arctan2(dx, dy))

    return config.layout.pack(np.stack([x, y, v]), theta[np.newaxis, :], tf)
