"""XGBoost model for type prediction.

Gradient boosted decision trees with a fixed depth. Only the number of
boosting rounds is tuned.
"""

from typing import Any, Dict, Optional

from xgboost import XGBClassifier

from poketype.features.recipe import FeatureRecipe
from poketype.models.base import TypeModel
from poketype.utils.constants import (
    BOOST_LEARNING_RATE,
    BOOST_TREE_DEPTH,
    RANDOM_SEED,
)


class XGBoostModel(TypeModel):
    """XGBoost gradient boosting model for type prediction.

    This model sequentially builds trees where each tree corrects the errors
    of the previous ensemble:

        F_m(x) = F_{m-1}(x) + eta * h_m(x)

    where h_m is the m-th tree and eta is the learning rate. Each added tree
    already adapts to the current residuals, so only the ensemble size is
    searched; depth and learning rate stay fixed.

    Attributes:
        tree_depth: Maximum depth of each tree.
        learning_rate: Step size shrinkage (eta).

    Tunable:
        trees: Number of boosting rounds.

    """

    family = "xgboost"
    tunable = ("trees",)

    def __init__(
        self,
        recipe: Optional[FeatureRecipe] = None,
        random_state: int = RANDOM_SEED,
        n_jobs: int = 1,
        tree_depth: int = BOOST_TREE_DEPTH,
        learning_rate: float = BOOST_LEARNING_RATE,
    ):
        super().__init__(recipe=recipe, random_state=random_state, n_jobs=n_jobs)
        self.tree_depth = tree_depth
        self.learning_rate = learning_rate

    def make_estimator(self, params: Dict[str, Any]) -> XGBClassifier:
        return XGBClassifier(
            n_estimators=int(params["trees"]),
            max_depth=self.tree_depth,
            learning_rate=self.learning_rate,
            random_state=self.random_state,
            n_jobs=self.n_jobs,
            tree_method="hist",
            eval_metric="mlogloss",
        )

    def describe(self) -> Dict[str, Any]:
        return {
            **super().describe(),
            "tree_depth": self.tree_depth,
            "learning_rate": self.learning_rate,
        }
