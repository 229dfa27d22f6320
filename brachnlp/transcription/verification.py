"""Finite-difference check of the analytic Jacobian."""

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.config import TranscriptionConfig
from brachnlp.transcription.residuals import constraint_vector
from brachnlp.transcription.jacobian import dense_jacobian


@dataclass(frozen=True)
class JacobianCheck:
    max_abs_error: float
    max_rel_error: float
    worst_entry: tuple[int, int]

    def passed(self, tol: float = 1e-6) -> bool:
        return self.max_rel_error <= tol


def finite_difference_jacobian(
    z: ArrayLike, config: TranscriptionConfig, eps: float = 1e-6
) -> NDArray:
    """Central-difference Jacobian of :func:`constraint_vector`."""
    z = np.array(z, dtype=float)
    jac = np.zeros(config.jacobian_shape)

    for j in range(z.shape[0]):
        z_plus = z.copy()
        z_minus = z.copy()
        z_plus[j] += eps
        z_minus[j] -= eps
        jac[:, j] = (
            constraint_vector(z_plus, config) - constraint_vector(z_minus, config)
        ) / (2 * eps)

    return jac


def check_jacobian(
    z: ArrayLike, config: TranscriptionConfig, eps: float = 1e-6
) -> JacobianCheck:
    """
    Compare the analytic Jacobian against central differences.

    Relative errors are taken against max(1, |analytic|) so that exact zeros
    do not blow up the ratio.
    """
    analytic = dense_jacobian(z, config)
    numeric = finite_difference_jacobian(z, config, eps)

    abs_err = np.abs(analytic - numeric)
    rel_err = abs_err / np.maximum(1.0, np.abs(analytic))
    worst = np.unravel_index(np.argmax(rel_err), rel_err.shape)

    return JacobianCheck(
        max_abs_error=float(abs_err.max()),
        max_rel_error=float(rel_err.max()),
        worst_entry=(int(worst[0]), int(worst[1])),
    )
