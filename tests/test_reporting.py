"""Tests for ranking, importance aggregation, the text report and figures."""

import numpy as np
import pandas as pd
import pytest

from poketype.models import RandomForest
from poketype.reporting import (
    aggregate_importance,
    correlation_matrix,
    format_report,
    plot_correlation_matrix,
    plot_feature_importance,
    plot_tuning_curve,
    rank_models,
    rf_importance,
    save_report,
)
from poketype.tuning import TuningResult
from poketype.utils.constants import NUMERIC_PREDICTORS, PREDICTORS

TEST_AUC = {"decision_tree": 0.617, "random_forest": 0.683, "xgboost": 0.671}


def _tuning_result():
    grid = [
        {"mtry": m, "trees": t} for m in (2, 4) for t in (20, 160)
    ]
    records = [
        {"config": i, **point, "fold": f"Fold{f:02d}", "auc": 0.6 + 0.01 * i + 0.001 * f}
        for i, point in enumerate(grid)
        for f in (1, 2, 3)
    ]
    return TuningResult(family="random_forest", grid=grid, fold_metrics=pd.DataFrame(records))


class TestRanking:
    def test_rank_models(self):
        ranking = rank_models(TEST_AUC)

        assert list(ranking["model"]) == ["random_forest", "xgboost", "decision_tree"]
        assert list(ranking["rank"]) == [1, 2, 3]
        assert ranking["test_auc"].iloc[0] == pytest.approx(0.683)


class TestImportance:
    def test_aggregate_importance(self):
        importance = pd.Series(
            {
                "attack": 0.3,
                "generation_1": 0.05,
                "generation_2": 0.1,
                "legendary_False": 0.02,
                "legendary_True": 0.03,
                "speed": 0.5,
            }
        )

        grouped = aggregate_importance(importance)

        assert list(grouped.index) == ["speed", "attack", "generation", "legendary"]
        assert grouped["generation"] == pytest.approx(0.15)
        assert grouped["legendary"] == pytest.approx(0.05)
        assert grouped.sum() == pytest.approx(importance.sum())

    def test_rf_importance_covers_predictors(self, train):
        model = RandomForest()
        artifact = model.fit(train, {"mtry": 3, "trees": 25, "min_n": 5})

        importance = rf_importance(model, artifact)

        assert set(importance.index) == set(PREDICTORS)
        assert importance.sum() == pytest.approx(1.0)
        assert importance.is_monotonic_decreasing


class TestCorrelation:
    def test_correlation_matrix(self, pokemon):
        corr = correlation_matrix(pokemon)

        assert list(corr.columns) == NUMERIC_PREDICTORS
        assert "total" not in corr.columns
        np.testing.assert_allclose(np.diag(corr), 1.0)
        np.testing.assert_allclose(corr.to_numpy(), corr.to_numpy().T)

    def test_excluded_columns_dropped(self, pokemon):
        corr = correlation_matrix(pokemon, columns=["hp", "total", "number"])
        assert list(corr.columns) == ["hp"]


class TestReport:
    def test_format_report(self):
        text = format_report(
            rank_models(TEST_AUC),
            best_params={
                "decision_tree": {"cost_complexity": 0.0129},
                "random_forest": {"mtry": 4, "trees": 160, "min_n": 7},
                "xgboost": {"trees": 670},
            },
            importance=pd.Series({"speed": 0.3, "special_attack": 0.2}),
            cv_auc={"random_forest": 0.7},
            n_train=364,
            n_test=94,
        )

        assert "364 train / 94 test" in text
        assert "1. Random forest" in text
        assert "mtry=4, trees=160, min_n=7" in text
        assert "CV AUC: 0.7000" in text
        assert "speed" in text
        assert text.strip().endswith("(test AUC 0.6830)")

    def test_save_report(self, tmp_path):
        path = save_report("hello", tmp_path / "reports")
        assert path.read_text() == "hello"


class TestFigures:
    def test_plot_correlation_matrix(self, tmp_path, pokemon):
        path = plot_correlation_matrix(pokemon, tmp_path)
        assert path.exists() and path.stat().st_size > 0

    def test_plot_tuning_curve(self, tmp_path):
        path = plot_tuning_curve(_tuning_result(), tmp_path)
        assert path.name == "tuning_random_forest.png"
        assert path.exists()

    def test_plot_feature_importance(self, tmp_path):
        importance = pd.Series({"speed": 0.5, "attack": 0.3, "hp": 0.2})
        path = plot_feature_importance(importance, tmp_path)
        assert path.exists()
