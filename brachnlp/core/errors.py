"""Exception hierarchy for transcription defects."""

from typing import Iterable, Optional


class TranscriptionError(Exception):
    """Base class for all brachnlp errors."""


class ConfigurationError(TranscriptionError, ValueError):
    """Caller defect: inconsistent sizes, operators or sparsity data."""


class StructureMismatchError(ConfigurationError):
    """The analytic Jacobian populates entries the sparsity pattern omits."""

    def __init__(self, positions: Iterable[tuple[int, int]], message: Optional[str] = None):
        self.positions = [(int(r), int(c)) for r, c in positions]
        if message is None:
            shown = ", ".join(f"({r}, {c})" for r, c in self.positions[:8])
            more = "" if len(self.positions) <= 8 else f" and {len(self.positions) - 8} more"
            message = (
                f"{len(self.positions)} Jacobian entries are missing from the "
                f"sparsity pattern: {shown}{more}"
            )
        super().__init__(message)


class DegenerateStepError(TranscriptionError, ArithmeticError):
    """Trial point with a non-positive step or non-finite outputs."""

    def __init__(
        self,
        message: str,
        tf: Optional[float] = None,
        dt: Optional[float] = None,
    ):
        self.tf = tf
        self.dt = dt
        super().__init__(message)
