"""Problem setup: configurations, bounds and initial guesses."""

from brachnlp.problem.setup import (
    brachistochrone,
    constraint_bounds,
    variable_bounds,
    brachistochrone_bounds,
    initial_guess,
)

__all__ = [
    "brachistochrone",
    "constraint_bounds",
    "variable_bounds",
    "brachistochrone_bounds",
    "initial_guess",
]
