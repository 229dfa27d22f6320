"""Dynamics protocol consumed by the transcription."""

from typing import Protocol
from numpy.typing import NDArray


class Dynamics(Protocol):
    """
    Right-hand side ṡ = f(s, u) of a system transcribed with explicit Euler.

    All callbacks are vectorized over the N discretization intervals: states
    are passed at the left node of each interval with shape (n_states, N),
    controls with shape (n_controls, N).
    """

    @property
    def state_names(self) -> tuple[str, ...]:
        """Names of the states, each sampled at N+1 nodes."""
        ...

    @property
    def control_names(self) -> tuple[str, ...]:
        """Names of the controls, each sampled once per interval."""
        ...

    @property
    def state_dependencies(self) -> NDArray:
        """Boolean (n_states, n_states): entry [s, r] set when ∂f_s/∂s_r ≢ 0."""
        ...

    @property
    def control_dependencies(self) -> NDArray:
        """Boolean (n_states, n_controls): entry [s, c] set when ∂f_s/∂u_c ≢ 0."""
        ...

    def f(self, states: NDArray, controls: NDArray) -> NDArray:
        """RHS evaluation, shape (n_states, N)."""
        ...

    def F(self, states: NDArray, controls: NDArray) -> NDArray:
        """State Jacobian per interval: ∂f/∂s, shape (n_states, n_states, N)."""
        ...

    def G(self, states: NDArray, controls: NDArray) -> NDArray:
        """Control Jacobian per interval: ∂f/∂u, shape (n_states, n_controls, N)."""
        ...
