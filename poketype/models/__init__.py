"""Models for type prediction.

Three tree-based families sharing the TypeModel interface:
- DecisionTree: single pruned tree
- RandomForest: bagged ensemble, source of the feature-importance ranking
- XGBoostModel: gradient boosted trees
"""

from poketype.models.base import FittedModel, TypeModel
from poketype.models.decision_tree import DecisionTree
from poketype.models.random_forest import RandomForest
from poketype.models.xgboost import XGBoostModel

MODEL_CLASSES = {
    DecisionTree.family: DecisionTree,
    RandomForest.family: RandomForest,
    XGBoostModel.family: XGBoostModel,
}

__all__ = [
    "FittedModel",
    "TypeModel",
    "DecisionTree",
    "RandomForest",
    "XGBoostModel",
    "MODEL_CLASSES",
]
