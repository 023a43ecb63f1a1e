"""Decision tree model for type prediction.

Single pruned tree using sklearn's DecisionTreeClassifier. The only tuned
hyperparameter is the cost-complexity pruning strength.
"""

from typing import Any, Dict

from sklearn.tree import DecisionTreeClassifier

from poketype.models.base import TypeModel


class DecisionTree(TypeModel):
    """Cost-complexity pruned classification tree.

    Minimal cost-complexity pruning removes the subtree whose removal costs
    the least impurity per leaf until the penalty

        R_alpha(T) = R(T) + alpha * |leaves(T)|

    is minimised, so larger cost_complexity values give smaller trees.

    Tunable:
        cost_complexity: Pruning strength alpha.

    """

    family = "decision_tree"
    tunable = ("cost_complexity",)

    def make_estimator(self, params: Dict[str, Any]) -> DecisionTreeClassifier:
        return DecisionTreeClassifier(
            ccp_alpha=float(params["cost_complexity"]),
            random_state=self.random_state,
        )
