"""Immutable per-run transcription configuration."""

from dataclasses import dataclass
from enum import Enum, auto
from functools import cached_property
from numbers import Integral
from typing import Any, Optional
import logging
import numpy as np
import scipy.sparse
from numpy.typing import NDArray

from brachnlp.core.dynamics import Dynamics
from brachnlp.core.errors import ConfigurationError
from brachnlp.core.layout import DecisionLayout
from brachnlp.core.pattern import SparsityPattern

logger = logging.getLogger(__name__)


class Endpoint(Enum):
    """Which sample of a state trajectory a boundary condition pins."""
    FIRST = auto()
    LAST = auto()


# x(t0), y(t0), v(t0), x(tf), y(tf)
BRACHISTOCHRONE_BOUNDARY = (
    ("x", Endpoint.FIRST),
    ("y", Endpoint.FIRST),
    ("v", Endpoint.FIRST),
    ("x", Endpoint.LAST),
    ("y", Endpoint.LAST),
)


@dataclass(frozen=True, eq=False)
class TranscriptionConfig:
    """
    Everything that stays fixed for one optimization run.

    Built once before the solver starts and passed explicitly to every
    evaluation. Construction validates sizes and checks the sparsity pattern
    against the analytic Jacobian structure, so a successfully built config
    cannot produce a Jacobian entry the solver was not told about.
    """

    dynamics: Dynamics
    N: int
    t0: float
    D: Any                                   # (N, N+1) difference operator
    pattern: Optional[SparsityPattern] = None
    boundary_conditions: tuple[tuple[str, Endpoint], ...] = BRACHISTOCHRONE_BOUNDARY

    def __post_init__(self):
        if isinstance(self.N, bool) or not isinstance(self.N, Integral) or self.N <= 0:
            raise ConfigurationError(f"N must be a positive integer, got {self.N!r}")
        object.__setattr__(self, "N", int(self.N))

        t0 = float(self.t0)
        if not np.isfinite(t0):
            raise ConfigurationError(f"t0 must be finite, got {self.t0!r}")
        object.__setattr__(self, "t0", t0)

        D = scipy.sparse.csr_matrix(self.D, dtype=float, copy=True)
        if D.shape != (self.N, self.N + 1):
            raise ConfigurationError(
                f"difference operator must have shape {(self.N, self.N + 1)}, got {D.shape}"
            )
        if not np.all(np.isfinite(D.data)):
            raise ConfigurationError("difference operator has non-finite entries")
        D.eliminate_zeros()
        D.sort_indices()
        object.__setattr__(self, "D", D)

        names = self.dynamics.state_names
        bcs = tuple(
            (name, Endpoint(endpoint)) for name, endpoint in self.boundary_conditions
        )
        for name, _ in bcs:
            if name not in names:
                raise ConfigurationError(
                    f"boundary condition on unknown state {name!r}; states are {names}"
                )
        object.__setattr__(self, "boundary_conditions", bcs)

        if self.pattern is not None and self.pattern.shape != self.jacobian_shape:
            raise ConfigurationError(
                f"sparsity pattern shape {self.pattern.shape} does not match "
                f"Jacobian shape {self.jacobian_shape}"
            )

        # Raises StructureMismatchError for undeclared entries.
        self.slots

        logger.info(
            "Transcription configured: N=%d, %d variables, %d constraints, "
            "%d declared Jacobian entries",
            self.N, self.num_variables, self.num_constraints, len(self.sparsity),
        )

    @cached_property
    def n_states(self) -> int:
        return len(self.dynamics.state_names)

    @cached_property
    def n_controls(self) -> int:
        return len(self.dynamics.control_names)

    @cached_property
    def layout(self) -> DecisionLayout:
        """Decision-vector codec for this run."""
        return DecisionLayout(self.n_states, self.n_controls, self.N)

    @cached_property
    def num_variables(self) -> int:
        return self.layout.size

    @cached_property
    def num_constraints(self) -> int:
        """Objective row, one defect per state and interval, boundary rows."""
        return 1 + self.n_states * self.N + len(self.boundary_conditions)

    @cached_property
    def jacobian_shape(self) -> tuple[int, int]:
        return (self.num_constraints, self.num_variables)

    def defect_rows(self, i: int) -> slice:
        """Rows of F holding the defects of state i."""
        start = 1 + i * self.N
        return slice(start, start + self.N)

    @cached_property
    def boundary_row_offset(self) -> int:
        return 1 + self.n_states * self.N

    @cached_property
    def boundary_columns(self) -> NDArray:
        """Decision-vector column pinned by each boundary condition."""
        names = self.dynamics.state_names
        cols = []
        for name, endpoint in self.boundary_conditions:
            start = self.layout.state_offset(names.index(name))
            cols.append(start if endpoint is Endpoint.FIRST else start + self.N)
        return np.array(cols, dtype=np.intp)

    @cached_property
    def structure(self) -> tuple[NDArray, NDArray]:
        """
        Coordinates of every analytic Jacobian triplet, in assembly order.

        Positions may repeat where two terms share an entry.
        """
        from brachnlp.transcription.jacobian import jacobian_structure
        return jacobian_structure(self)

    @cached_property
    def sparsity(self) -> SparsityPattern:
        """The declared pattern, or the analytic structure when none was given."""
        if self.pattern is not None:
            return self.pattern
        rows, cols = self.structure
        linear = rows * self.num_variables + cols
        _, first = np.unique(linear, return_index=True)
        keep = np.sort(first)
        return SparsityPattern(rows=rows[keep], cols=cols[keep], shape=self.jacobian_shape)

    @cached_property
    def slots(self) -> NDArray:
        """Pattern position of each analytic triplet."""
        rows, cols = self.structure
        slots = self.sparsity.slots(rows, cols)
        slots.flags.writeable = False
        return slots
