"""Concrete dynamics models."""

from brachnlp.dynamics.brachistochrone import FrictionBrachistochrone

__all__ = ["FrictionBrachistochrone"]
