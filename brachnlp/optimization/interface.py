"""Adapter exposing the transcription to external NLP solvers."""

from typing import Any, Callable, Optional, Sequence
import logging
import numpy as np
import scipy.optimize
import scipy.sparse
from numpy.typing import NDArray

from brachnlp.core.config import TranscriptionConfig
from brachnlp.problem.setup import constraint_bounds, variable_bounds
from brachnlp.transcription.residuals import constraint_vector
from brachnlp.transcription.userfun import evaluate

logger = logging.getLogger(__name__)


class TranscriptionOptimizer:
    """
    Provides J(z), ∇J(z), c(z) and ∂c/∂z to an outer optimizer.

    The objective is the final time, row 0 of the residual vector; the
    remaining rows are constraints. Nothing is cached between calls.
    """

    def __init__(
        self,
        config: TranscriptionConfig,
        boundary_values: Sequence[float],
        bounds: Optional[tuple[NDArray, NDArray]] = None,
    ):
        """
        Initialize the adapter.

        Args:
            config: Run configuration
            boundary_values: Target value per boundary condition
            bounds: Optional (xlow, xupp); tf > t0 only if not provided
        """
        self.config = config
        self.F_lower, self.F_upper = constraint_bounds(config, boundary_values)
        if bounds is None:
            bounds = variable_bounds(config)
        self.x_lower, self.x_upper = (np.asarray(b, dtype=float) for b in bounds)

        pattern = config.sparsity
        self._constraint_entries = pattern.rows > 0

    def objective(self, z: NDArray) -> float:
        return float(np.asarray(z, dtype=float)[self.config.layout.tf_index])

    def gradient(self, z: NDArray) -> NDArray:
        grad = np.zeros(self.config.num_variables)
        grad[self.config.layout.tf_index] = 1.0
        return grad

    def constraints(self, z: NDArray) -> NDArray:
        """Residuals without the objective row."""
        return constraint_vector(z, self.config)[1:]

    def jacobianstructure(self) -> tuple[NDArray, NDArray]:
        """(row, col) of the constraint Jacobian values, objective row dropped."""
        pattern = self.config.sparsity
        keep = self._constraint_entries
        return pattern.rows[keep] - 1, pattern.cols[keep]

    def jacobian(self, z: NDArray) -> NDArray:
        """Constraint Jacobian values in :meth:`jacobianstructure` order."""
        return evaluate(z, self.config).G[self._constraint_entries]

    def jacobian_matrix(self, z: NDArray) -> scipy.sparse.csr_matrix:
        rows, cols = self.jacobianstructure()
        shape = (self.config.num_constraints - 1, self.config.num_variables)
        return scipy.sparse.csr_matrix((self.jacobian(z), (rows, cols)), shape=shape)

    def scipy_interface(self, method: str = "trust-constr") -> tuple[Callable, Callable, Any, Any]:
        """
        Returns (fun, jac, constraints, bounds) for scipy.optimize.minimize.

        Args:
            method: "trust-constr" (sparse NonlinearConstraint) or "SLSQP"
                (dict constraints with dense Jacobians)
        """
        lb, ub = self.F_lower[1:], self.F_upper[1:]

        if method == "trust-constr":
            constraints = scipy.optimize.NonlinearConstraint(
                self.constraints, lb, ub, jac=self.jacobian_matrix
            )
            keep_feasible = np.zeros(self.config.num_variables, dtype=bool)
            keep_feasible[self.config.layout.tf_index] = True
            bounds = scipy.optimize.Bounds(self.x_lower, self.x_upper, keep_feasible=keep_feasible)
        elif method == "SLSQP":
            equality = lb == ub
            constraints = [
                {
                    "type": "eq",
                    "fun": lambda z: self.constraints(z)[equality] - lb[equality],
                    "jac": lambda z: self.jacobian_matrix(z).toarray()[equality],
                },
            ]
            finite_lb = ~equality & np.isfinite(lb)
            if np.any(finite_lb):
                constraints.append({
                    "type": "ineq",
                    "fun": lambda z: self.constraints(z)[finite_lb] - lb[finite_lb],
                    "jac": lambda z: self.jacobian_matrix(z).toarray()[finite_lb],
                })
            bounds = scipy.optimize.Bounds(self.x_lower, self.x_upper)
        else:
            raise ValueError(f"unsupported method {method!r}")

        return self.objective, self.gradient, constraints, bounds

    def solve(
        self, z0: NDArray, method: str = "trust-constr", **options
    ) -> scipy.optimize.OptimizeResult:
        """Run scipy.optimize.minimize from ``z0``."""
        fun, jac, constraints, bounds = self.scipy_interface(method)
        logger.info(
            "Solving with %s: %d variables, %d constraints",
            method, self.config.num_variables, self.config.num_constraints - 1,
        )
        result = scipy.optimize.minimize(
            fun,
            np.asarray(z0, dtype=float),
            jac=jac,
            method=method,
            constraints=constraints,
            bounds=bounds,
            options=options or None,
        )
        logger.info("Solver finished: %s (tf=%.6g)", result.message, result.x[-1])
        return result
