"""Feature recipe: one-hot categorical predictors, standardize numeric ones.

The recipe is declared once and turned into a scikit-learn ColumnTransformer.
All statistics (category levels, means, standard deviations) are learned from
the data passed to fit() and reused unchanged by transform(). Inside grid
search the preprocessor is part of each fold's pipeline, so validation rows
never influence the statistics applied to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.exceptions import NotFittedError
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from poketype.utils.constants import (
    CATEGORICAL_PREDICTORS,
    PREDICTORS,
    TARGET,
)


@dataclass
class FeatureRecipe:
    """Declares predictors, target and their preprocessing.

    Attributes:
        predictors: All predictor columns.
        categorical: Subset of predictors that are one-hot encoded.
        target: Label column.

    """

    predictors: List[str] = field(default_factory=lambda: list(PREDICTORS))
    categorical: List[str] = field(
        default_factory=lambda: list(CATEGORICAL_PREDICTORS)
    )
    target: str = TARGET

    def __post_init__(self):
        unknown = [col for col in self.categorical if col not in self.predictors]
        if unknown:
            raise ValueError(f"Categorical columns {unknown} are not predictors")
        self._preprocessor: Optional[ColumnTransformer] = None

    @property
    def numeric(self) -> List[str]:
        return [col for col in self.predictors if col not in self.categorical]

    @property
    def n_predictors(self) -> int:
        return len(self.predictors)

    def make_preprocessor(self) -> ColumnTransformer:
        """Build an unfitted ColumnTransformer for this recipe."""
        return ColumnTransformer(
            transformers=[
                (
                    "cat",
                    OneHotEncoder(handle_unknown="ignore", sparse_output=False),
                    self.categorical,
                ),
                ("num", StandardScaler(), self.numeric),
            ],
            remainder="drop",
            verbose_feature_names_out=False,
        )

    def fit(self, train: pd.DataFrame) -> "FeatureRecipe":
        """Learn encoding levels and scaling statistics from train."""
        self._preprocessor = self.make_preprocessor().fit(train[self.predictors])
        return self

    def _check_fitted(self) -> ColumnTransformer:
        if self._preprocessor is None:
            raise NotFittedError("FeatureRecipe.fit() must be called first")
        return self._preprocessor

    def transform(self, data: pd.DataFrame) -> pd.DataFrame:
        """Apply the frozen transformation to data."""
        preprocessor = self._check_fitted()
        values = preprocessor.transform(data[self.predictors])
        return pd.DataFrame(
            values, columns=self.feature_names_out(), index=data.index
        )

    def feature_names_out(self) -> List[str]:
        return list(self._check_fitted().get_feature_names_out())

    def outcome(self, data: pd.DataFrame) -> np.ndarray:
        return data[self.target].astype(str).to_numpy()
