"""Tests for the three model families."""

import dataclasses

import numpy as np
import pytest

from poketype.dataio import load_model, save_model
from poketype.models import (
    MODEL_CLASSES,
    DecisionTree,
    FittedModel,
    RandomForest,
    XGBoostModel,
)
from poketype.utils.constants import TYPE_LABELS

from conftest import TEST_CONSTANTS

SMALL_PARAMS = {
    "decision_tree": {"cost_complexity": 0.01},
    "random_forest": {"mtry": 3, "trees": 25, "min_n": 5},
    "xgboost": {"trees": 15},
}


def _model(family):
    return MODEL_CLASSES[family](random_state=TEST_CONSTANTS.RANDOM_SEED)


class TestModels:
    """Shared TypeModel behaviour."""

    @pytest.mark.parametrize("family", sorted(MODEL_CLASSES))
    def test_fit_predict_proba(self, family, train, holdout):
        model = _model(family)
        artifact = model.fit(train, SMALL_PARAMS[family])
        proba = model.predict_proba(artifact, holdout)

        assert isinstance(artifact, FittedModel)
        assert artifact.family == family
        assert list(artifact.classes) == sorted(TYPE_LABELS)
        assert proba.shape == (len(holdout), len(TYPE_LABELS))
        np.testing.assert_allclose(proba.sum(axis=1), 1.0, rtol=1e-5)

        print(f"[PASS] {family} predicts {proba.shape} probabilities")

    @pytest.mark.parametrize("family", sorted(MODEL_CLASSES))
    def test_predict_labels(self, family, train, holdout):
        model = _model(family)
        artifact = model.fit(train, SMALL_PARAMS[family])
        predictions = model.predict(artifact, holdout)

        assert len(predictions) == len(holdout)
        assert set(predictions) <= set(TYPE_LABELS)

    @pytest.mark.parametrize("family", sorted(MODEL_CLASSES))
    def test_determinism(self, family, train, holdout):
        """Same seed, same data, same predictions."""
        first = _model(family)
        second = _model(family)

        p1 = first.predict_proba(first.fit(train, SMALL_PARAMS[family]), holdout)
        p2 = second.predict_proba(second.fit(train, SMALL_PARAMS[family]), holdout)

        np.testing.assert_allclose(p1, p2)

    def test_artifact_is_immutable(self, train):
        artifact = _model("decision_tree").fit(train, SMALL_PARAMS["decision_tree"])
        with pytest.raises(dataclasses.FrozenInstanceError):
            artifact.family = "random_forest"

    def test_artifact_roundtrip(self, tmp_path, train, holdout):
        model = _model("random_forest")
        artifact = model.fit(train, SMALL_PARAMS["random_forest"])
        path = tmp_path / "random_forest.joblib"

        save_model(artifact, path)
        loaded = load_model(path)

        np.testing.assert_allclose(
            model.predict_proba(artifact, holdout),
            model.predict_proba(loaded, holdout),
        )


class TestDecisionTree:
    def test_pruning_strength(self, train):
        model = DecisionTree()
        light = model.fit(train, {"cost_complexity": 0.001})
        heavy = model.fit(train, {"cost_complexity": 0.1})

        assert heavy.estimator.get_n_leaves() < light.estimator.get_n_leaves()
        assert heavy.estimator.ccp_alpha == 0.1

    def test_feature_importance_sorted(self, train):
        model = DecisionTree()
        artifact = model.fit(train, {"cost_complexity": 0.001})
        importance = model.feature_importance(artifact)
        assert importance.is_monotonic_decreasing


class TestRandomForest:
    def test_hyperparameters_mapped(self, train):
        artifact = RandomForest(random_state=1).fit(
            train, {"mtry": 4, "trees": 30, "min_n": 7}
        )
        estimator = artifact.estimator

        assert estimator.max_features == 4
        assert estimator.n_estimators == 30
        assert estimator.min_samples_split == 7
        assert estimator.random_state == 1

    def test_feature_importance(self, train):
        model = RandomForest()
        artifact = model.fit(train, SMALL_PARAMS["random_forest"])
        importance = model.feature_importance(artifact)

        assert set(importance.index) == set(artifact.feature_names)
        assert importance.sum() == pytest.approx(1.0)
        assert importance.is_monotonic_decreasing


class TestXGBoost:
    def test_fixed_depth(self, train):
        model = XGBoostModel()
        artifact = model.fit(train, {"trees": 12})

        assert artifact.estimator.max_depth == 4
        assert artifact.estimator.n_estimators == 12

    def test_describe_includes_fixed_settings(self):
        description = XGBoostModel(tree_depth=3).describe()
        assert description["tree_depth"] == 3
        assert description["family"] == "xgboost"
        assert description["random_state"] == TEST_CONSTANTS.RANDOM_SEED
