"""Common interface for the model families.

Every family turns a hyperparameter dict into a scikit-learn compatible
estimator. Fitting wraps that estimator in a Pipeline behind the feature
recipe and label-encodes the outcome, so all three families produce the same
kind of artifact and can be tuned by the same grid search.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import LabelEncoder

from poketype.features.recipe import FeatureRecipe
from poketype.utils.constants import RANDOM_SEED


@dataclass(frozen=True)
class FittedModel:
    """Immutable result of fitting one configuration.

    Attributes:
        family: Model family name.
        params: Hyperparameters the model was fitted with.
        pipeline: Fitted preprocessing + estimator pipeline.
        classes: Labels, in the column order of predict_proba.

    """

    family: str
    params: Dict[str, Any]
    pipeline: Pipeline
    classes: np.ndarray

    @property
    def feature_names(self) -> np.ndarray:
        return self.pipeline.named_steps["preprocess"].get_feature_names_out()

    @property
    def estimator(self) -> Any:
        return self.pipeline.named_steps["model"]


class TypeModel(ABC):
    """A model family that can be fitted for a given grid point.

    Attributes:
        recipe: Feature recipe applied before the estimator.
        random_state: Seed passed to every stochastic estimator.
        n_jobs: Threads used by a single estimator.

    """

    family: str = ""
    tunable: tuple = ()

    def __init__(
        self,
        recipe: Optional[FeatureRecipe] = None,
        random_state: int = RANDOM_SEED,
        n_jobs: int = 1,
    ):
        self.recipe = recipe if recipe is not None else FeatureRecipe()
        self.random_state = random_state
        self.n_jobs = n_jobs

    @abstractmethod
    def make_estimator(self, params: Dict[str, Any]) -> Any:
        """Build an unfitted estimator for the given hyperparameters."""

    def fit(self, train: pd.DataFrame, params: Dict[str, Any]) -> FittedModel:
        """Fit recipe and estimator on train with the given hyperparameters.

        Args:
            train: Rows to fit on, including the target column.
            params: Hyperparameter values keyed by tunable name.

        Returns:
            FittedModel artifact.

        """
        encoder = LabelEncoder()
        y = encoder.fit_transform(self.recipe.outcome(train))

        pipeline = Pipeline(
            steps=[
                ("preprocess", self.recipe.make_preprocessor()),
                ("model", self.make_estimator(params)),
            ]
        )
        pipeline.fit(train[self.recipe.predictors], y)

        return FittedModel(
            family=self.family,
            params=dict(params),
            pipeline=pipeline,
            classes=encoder.classes_,
        )

    def predict_proba(self, artifact: FittedModel, data: pd.DataFrame) -> np.ndarray:
        """Predict class probabilities.

        Returns:
            Probabilities, shape (n_samples, n_classes), columns ordered as
            artifact.classes.

        """
        return artifact.pipeline.predict_proba(data[self.recipe.predictors])

    def predict(self, artifact: FittedModel, data: pd.DataFrame) -> np.ndarray:
        """Predict the most probable label for each row."""
        proba = self.predict_proba(artifact, data)
        return artifact.classes[np.argmax(proba, axis=1)]

    def feature_importance(self, artifact: FittedModel) -> pd.Series:
        """Importance per encoded feature, highest first.

        Raises:
            AttributeError: If the estimator exposes no importances.

        """
        scores = artifact.estimator.feature_importances_
        return pd.Series(
            scores, index=artifact.feature_names, name="importance"
        ).sort_values(ascending=False)

    def describe(self) -> Dict[str, Any]:
        """Fixed settings that, with the grid point, determine a fit."""
        return {
            "family": self.family,
            "random_state": self.random_state,
            "predictors": list(self.recipe.predictors),
            "categorical": list(self.recipe.categorical),
            "target": self.recipe.target,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(random_state={self.random_state})"
