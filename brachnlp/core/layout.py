"""Decision-vector layout and codec."""

from dataclasses import dataclass
from functools import cached_property
import numpy as np
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.errors import ConfigurationError


@dataclass(frozen=True)
class DecisionVariables:
    """Named read-only views into one decision vector."""

    states: NDArray    # (n_states, N+1) node values
    controls: NDArray  # (n_controls, N) interval values
    tf: float          # free final time

    @property
    def left_states(self) -> NDArray:
        """States at the left node of every interval, (n_states, N)."""
        return self.states[:, :-1]


@dataclass(frozen=True)
class DecisionLayout:
    """
    Block layout of the flat decision vector.

    The vector holds every state trajectory (N+1 samples each), then every
    control trajectory (N samples each), then the final time:

        [s_0 | s_1 | ... | u_0 | u_1 | ... | tf]
    """

    n_states: int
    n_controls: int
    N: int

    @cached_property
    def size(self) -> int:
        """Total number of decision variables."""
        return self.n_states * (self.N + 1) + self.n_controls * self.N + 1

    @cached_property
    def tf_index(self) -> int:
        return self.size - 1

    def state_offset(self, i: int) -> int:
        return i * (self.N + 1)

    def control_offset(self, j: int) -> int:
        return self.n_states * (self.N + 1) + j * self.N

    def state_slice(self, i: int) -> slice:
        start = self.state_offset(i)
        return slice(start, start + self.N + 1)

    def control_slice(self, j: int) -> slice:
        start = self.control_offset(j)
        return slice(start, start + self.N)

    def unpack(self, z: ArrayLike) -> DecisionVariables:
        """
        Split a decision vector into state, control and final-time views.

        Args:
            z: Decision vector of length ``size``

        Returns:
            Read-only views; ``z`` itself is never copied or modified when it
            is already a contiguous float array.

        Raises:
            ConfigurationError: if ``z`` is not a vector of length ``size``
        """
        z = np.asarray(z, dtype=float)
        if z.ndim != 1 or z.shape[0] != self.size:
            raise ConfigurationError(
                f"decision vector must have shape ({self.size},), got {z.shape}"
            )

        n_state_vals = self.n_states * (self.N + 1)
        states = z[:n_state_vals].reshape(self.n_states, self.N + 1)
        controls = z[n_state_vals:self.tf_index].reshape(self.n_controls, self.N)
        states.flags.writeable = False
        controls.flags.writeable = False

        return DecisionVariables(
            states=states, controls=controls, tf=float(z[self.tf_index])
        )

    def pack(self, states: ArrayLike, controls: ArrayLike, tf: float) -> NDArray:
        """Inverse of :meth:`unpack`."""
        states = np.asarray(states, dtype=float)
        controls = np.asarray(controls, dtype=float)
        if states.shape != (self.n_states, self.N + 1):
            raise ConfigurationError(
                f"states must have shape {(self.n_states, self.N + 1)}, "
                f"got {states.shape}"
            )
        if controls.shape != (self.n_controls, self.N):
            raise ConfigurationError(
                f"controls must have shape {(self.n_controls, self.N)}, "
                f"got {controls.shape}"
            )
        return np.concatenate((states.ravel(), controls.ravel(), [float(tf)]))
