"""Optimization interface for external optimizers."""

from brachnlp.optimization.interface import TranscriptionOptimizer

__all__ = ["TranscriptionOptimizer"]
