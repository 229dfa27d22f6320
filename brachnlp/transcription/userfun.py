"""Per-call evaluation of residuals and Jacobian values for the NLP solver."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
import logging
from numpy.typing import NDArray, ArrayLike

from brachnlp.core.config import TranscriptionConfig
from brachnlp.core.errors import DegenerateStepError
from brachnlp.transcription.residuals import constraint_vector
from brachnlp.transcription.jacobian import jacobian_triplets, dense_jacobian
from brachnlp.transcription.sparsity import scatter, extract

logger = logging.getLogger(__name__)


class EvaluationStatus(IntEnum):
    """Status handed back to the solver, SNOPT convention."""
    OK = 0
    UNDEFINED = -1  # solver should shorten the step and retry


@dataclass(frozen=True)
class Evaluation:
    """Residual vector and solver-ordered Jacobian values at one trial point."""

    F: NDArray  # (num_constraints,)
    G: NDArray  # (len(config.sparsity),)


@dataclass(frozen=True)
class UserFunResult:
    """Outcome of :func:`user_function`; F and G are None when undefined."""

    status: EvaluationStatus
    F: Optional[NDArray] = None
    G: Optional[NDArray] = None

    @property
    def ok(self) -> bool:
        return self.status == EvaluationStatus.OK


def evaluate(
    z: ArrayLike, config: TranscriptionConfig, validate: bool = False
) -> Evaluation:
    """
    Compute F and G for decision vector ``z``.

    A pure function of (z, config): no state is kept between calls, so
    concurrent calls with different vectors do not interfere.

    Args:
        z: Decision vector, length ``config.num_variables``
        config: Run configuration
        validate: Build the dense Jacobian and extract it through the
            pattern, checking that no nonzero falls outside it. Slow; meant
            for debugging a hand-supplied pattern.

    Returns:
        Evaluation with F in constraint order and G in pattern order

    Raises:
        ConfigurationError: wrong decision-vector length
        StructureMismatchError: undeclared nonzero (validate only)
        DegenerateStepError: tf <= t0 or non-finite values
    """
    F = constraint_vector(z, config)

    if validate:
        G = extract(dense_jacobian(z, config), config.sparsity, validate=True)
    else:
        _, _, values = jacobian_triplets(z, config)
        G = scatter(values, config.slots, len(config.sparsity))

    logger.debug("Evaluated tf=%g, max |F[1:]|=%g", F[0], abs(F[1:]).max(initial=0.0))
    return Evaluation(F=F, G=G)


def user_function(z: ArrayLike, config: TranscriptionConfig) -> UserFunResult:
    """
    Solver callback: like :func:`evaluate`, but a degenerate trial point is
    reported through ``status`` instead of an exception. Configuration
    defects still raise.
    """
    try:
        result = evaluate(z, config)
    except DegenerateStepError as err:
        logger.warning("Undefined trial point: %s", err)
        return UserFunResult(status=EvaluationStatus.UNDEFINED)
    return UserFunResult(status=EvaluationStatus.OK, F=result.F, G=result.G)
