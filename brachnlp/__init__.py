"""
brachnlp: direct transcription of the brachistochrone-with-friction problem.

Evaluates, per trial point of an NLP solver:
- the residual vector of the explicit Euler dynamics defects, boundary
  conditions and final-time objective row
- the analytic constraint Jacobian, delivered as values in the order of a
  fixed sparsity pattern
"""

__version__ = "0.1.0"

from brachnlp.core.config import TranscriptionConfig, Endpoint
from brachnlp.core.pattern import SparsityPattern
from brachnlp.dynamics.brachistochrone import FrictionBrachistochrone
from brachnlp.transcription.userfun import evaluate, user_function
from brachnlp.problem.setup import brachistochrone
from brachnlp.optimization.interface import TranscriptionOptimizer

__all__ = [
    "TranscriptionConfig",
    "Endpoint",
    "SparsityPattern",
    "FrictionBrachistochrone",
    "evaluate",
    "user_function",
    "brachistochrone",
    "TranscriptionOptimizer",
]
