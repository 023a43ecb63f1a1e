"""Feature preprocessing.

This package declares which columns are predictors and how they are encoded
before model fitting.
"""

from poketype.features.recipe import FeatureRecipe

__all__ = [
    "FeatureRecipe",
]
