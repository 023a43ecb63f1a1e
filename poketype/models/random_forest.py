"""Random Forest model for type prediction.

Ensemble baseline using sklearn's RandomForestClassifier. Provides feature
importance for the final report.
"""

from typing import Any, Dict

from sklearn.ensemble import RandomForestClassifier as SKRandomForestClassifier

from poketype.models.base import TypeModel


class RandomForest(TypeModel):
    """Random Forest ensemble model for type prediction.

    Each tree is trained on a bootstrap sample, considering a random subset
    of mtry features at every split, and predictions are averaged:

        P(type_k | features) = (1/T) * sum_t P_t(type_k | features)

    where T is the number of trees and P_t is the prediction from tree t.

    Tunable:
        mtry: Features sampled at each split.
        trees: Number of trees in the forest.
        min_n: Minimum rows in a node for it to be split further.

    """

    family = "random_forest"
    tunable = ("mtry", "trees", "min_n")

    def make_estimator(self, params: Dict[str, Any]) -> SKRandomForestClassifier:
        return SKRandomForestClassifier(
            n_estimators=int(params["trees"]),
            max_features=int(params["mtry"]),
            min_samples_split=int(params["min_n"]),
            random_state=self.random_state,
            n_jobs=self.n_jobs,
            bootstrap=True,
        )
