"""Residuals, analytic Jacobian and sparse extraction."""

from brachnlp.transcription.residuals import constraint_vector, dynamics_defects, step_size
from brachnlp.transcription.jacobian import (
    jacobian_structure,
    jacobian_triplets,
    jacobian_matrix,
    dense_jacobian,
)
from brachnlp.transcription.sparsity import extract, scatter
from brachnlp.transcription.userfun import (
    Evaluation,
    EvaluationStatus,
    UserFunResult,
    evaluate,
    user_function,
)

__all__ = [
    "constraint_vector",
    "dynamics_defects",
    "step_size",
    "jacobian_structure",
    "jacobian_triplets",
    "jacobian_matrix",
    "dense_jacobian",
    "extract",
    "scatter",
    "Evaluation",
    "EvaluationStatus",
    "UserFunResult",
    "evaluate",
    "user_function",
]
