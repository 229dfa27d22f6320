"""Core data types: configuration, decision layout, errors."""

from brachnlp.core.config import TranscriptionConfig, Endpoint, BRACHISTOCHRONE_BOUNDARY
from brachnlp.core.dynamics import Dynamics
from brachnlp.core.errors import (
    TranscriptionError,
    ConfigurationError,
    StructureMismatchError,
    DegenerateStepError,
)
from brachnlp.core.layout import DecisionLayout, DecisionVariables
from brachnlp.core.pattern import SparsityPattern

__all__ = [
    "TranscriptionConfig",
    "Endpoint",
    "BRACHISTOCHRONE_BOUNDARY",
    "Dynamics",
    "TranscriptionError",
    "ConfigurationError",
    "StructureMismatchError",
    "DegenerateStepError",
    "DecisionLayout",
    "DecisionVariables",
    "SparsityPattern",
]
