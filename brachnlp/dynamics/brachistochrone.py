"""Point mass sliding under gravity with linear-in-velocity friction."""

import numpy as np
from numpy.typing import NDArray

from brachnlp.core.errors import ConfigurationError


class FrictionBrachistochrone:
    """
    Brachistochrone dynamics with gravity normalized to one, y pointing down:

        ẋ = v sin θ
        ẏ = v cos θ
        v̇ = cos θ - kFr v

    With the explicit Euler defect D s - dt f the speed row becomes
    E v - dt cos θ, where E is D with kFr dt added on the current-sample
    diagonal. For kFr = 0 the speed/speed partial is declared structurally
    zero so that block reduces to D exactly.
    """

    state_names = ("x", "y", "v")
    control_names = ("theta",)

    def __init__(self, kFr: float = 0.0):
        kFr = float(kFr)
        if not np.isfinite(kFr):
            raise ConfigurationError(f"friction coefficient must be finite, got {kFr}")
        self.kFr = kFr

    def __repr__(self) -> str:
        return f"FrictionBrachistochrone(kFr={self.kFr!r})"

    @property
    def state_dependencies(self) -> NDArray:
        deps = np.zeros((3, 3), dtype=bool)
        deps[0, 2] = True                # ẋ depends on v
        deps[1, 2] = True                # ẏ depends on v
        deps[2, 2] = self.kFr != 0.0     # friction
        return deps

    @property
    def control_dependencies(self) -> NDArray:
        return np.ones((3, 1), dtype=bool)

    def f(self, states: NDArray, controls: NDArray) -> NDArray:
        v = states[2]
        theta = controls[0]
        sin_t, cos_t = np.sin(theta), np.cos(theta)
        return np.stack([v * sin_t, v * cos_t, cos_t - self.kFr * v])

    def F(self, states: NDArray, controls: NDArray) -> NDArray:
        theta = controls[0]
        N = theta.shape[0]
        jac = np.zeros((3, 3, N))
        jac[0, 2] = np.sin(theta)
        jac[1, 2] = np.cos(theta)
        jac[2, 2] = -self.kFr
        return jac

    def G(self, states: NDArray, controls: NDArray) -> NDArray:
        v = states[2]
        theta = controls[0]
        sin_t, cos_t = np.sin(theta), np.cos(theta)
        jac = np.empty((3, 1, theta.shape[0]))
        jac[0, 0] = v * cos_t
        jac[1, 0] = -v * sin_t
        jac[2, 0] = -sin_t
        return jac
