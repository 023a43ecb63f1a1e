"""Reporting: model ranking, feature importance and figures.

Figures:
- Correlation matrix of the numeric battle stats
- Tuning curves (mean cross-validated AUC per hyperparameter value)
- Random forest variable importance
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from poketype.dataio import save_text
from poketype.features.recipe import FeatureRecipe
from poketype.models.base import FittedModel, TypeModel
from poketype.tuning import TuningResult
from poketype.utils.constants import (
    EXCLUDED_FROM_CORRELATION,
    NUMERIC_PREDICTORS,
    TOP_K_IMPORTANCE,
)

# Configure plotting
plt.style.use("seaborn-v0_8-paper")
sns.set_palette("husl")
plt.rcParams["figure.dpi"] = 150
plt.rcParams["savefig.dpi"] = 300
plt.rcParams["font.size"] = 10
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 12

logger = logging.getLogger(__name__)

MODEL_LABELS = {
    "decision_tree": "Decision tree",
    "random_forest": "Random forest",
    "xgboost": "Boosted trees (XGBoost)",
}


def rank_models(test_auc: Dict[str, float]) -> pd.DataFrame:
    """Rank model families by test-set AUC, best first."""
    ranking = pd.DataFrame(
        {"model": list(test_auc.keys()), "test_auc": list(test_auc.values())}
    )
    ranking = ranking.sort_values("test_auc", ascending=False, kind="mergesort")
    ranking = ranking.reset_index(drop=True)
    ranking.insert(0, "rank", np.arange(1, len(ranking) + 1))
    return ranking


def aggregate_importance(
    importance: pd.Series, recipe: Optional[FeatureRecipe] = None
) -> pd.Series:
    """Sum one-hot column importances back onto their source predictor."""
    if recipe is None:
        recipe = FeatureRecipe()

    def source(column: str) -> str:
        for cat in recipe.categorical:
            if column.startswith(f"{cat}_"):
                return cat
        return column

    grouped = importance.groupby(importance.index.map(source)).sum()
    return grouped.sort_values(ascending=False).rename("importance")


def rf_importance(model: TypeModel, artifact: FittedModel) -> pd.Series:
    """Importance of each predictor in a fitted random forest, highest first."""
    return aggregate_importance(model.feature_importance(artifact), model.recipe)


def correlation_matrix(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Pearson correlation between the numeric battle stats.

    Row index and total-stat columns are never included.
    """
    if columns is None:
        columns = NUMERIC_PREDICTORS
    columns = [c for c in columns if c not in EXCLUDED_FROM_CORRELATION]
    return df[columns].astype(float).corr()


def format_report(
    ranking: pd.DataFrame,
    best_params: Dict[str, Dict],
    importance: Optional[pd.Series] = None,
    cv_auc: Optional[Dict[str, float]] = None,
    n_train: Optional[int] = None,
    n_test: Optional[int] = None,
) -> str:
    """Render the comparison as a plain-text report."""
    report_lines = []
    report_lines.append("=" * 80)
    report_lines.append("POKEMON PRIMARY TYPE: MODEL COMPARISON")
    report_lines.append("=" * 80)

    if n_train is not None and n_test is not None:
        report_lines.append(f"\nRows: {n_train} train / {n_test} test")

    report_lines.append("\n## Test AUC ranking (macro one-vs-rest)\n")
    for _, row in ranking.iterrows():
        label = MODEL_LABELS.get(row["model"], row["model"])
        line = f"{int(row['rank'])}. {label:25s} | Test AUC: {row['test_auc']:.4f}"
        if cv_auc and row["model"] in cv_auc:
            line += f" | CV AUC: {cv_auc[row['model']]:.4f}"
        report_lines.append(line)

    report_lines.append("\n## Selected hyperparameters\n")
    for model, params in best_params.items():
        values = ", ".join(f"{k}={_format_value(v)}" for k, v in params.items())
        report_lines.append(f"{MODEL_LABELS.get(model, model):25s} | {values}")

    if importance is not None:
        report_lines.append("\n## Random forest variable importance\n")
        for i, (feature, score) in enumerate(importance.items(), start=1):
            report_lines.append(f"{i:2d}. {feature:20s} {score:.4f}")

    best = ranking.iloc[0]
    report_lines.append(
        f"\nBest model: {MODEL_LABELS.get(best['model'], best['model'])} "
        f"(test AUC {best['test_auc']:.4f})"
    )
    return "\n".join(report_lines)


def _format_value(value) -> str:
    if isinstance(value, float):
        return f"{value:.4g}"
    return str(value)


def save_report(text: str, output_dir: Path, filename: str = "type_comparison.txt") -> Path:
    report_path = Path(output_dir) / filename
    save_text(text, report_path)
    logger.info(f"Report saved to: {report_path}")
    return report_path


def plot_correlation_matrix(df: pd.DataFrame, output_dir: Path) -> Path:
    """Heatmap of the battle-stat correlation matrix."""
    corr = correlation_matrix(df)

    fig, ax = plt.subplots(figsize=(6, 5))
    sns.heatmap(
        corr, annot=True, fmt=".2f", cmap="coolwarm", vmin=-1, vmax=1, square=True, ax=ax
    )
    ax.set_title("Correlation between battle stats")

    return _save(fig, Path(output_dir) / "correlation_matrix.png")


def plot_tuning_curve(result: TuningResult, output_dir: Path) -> Path:
    """Mean CV AUC against each tuned hyperparameter.

    One panel per parameter. With several parameters, each panel shows the
    AUC averaged over the other parameters and the best AUC reached at
    each value.
    """
    ranked = result.ranked
    names = list(result.grid[0].keys())

    fig, axes = plt.subplots(1, len(names), figsize=(4.5 * len(names), 3.5), squeeze=False)
    for ax, name in zip(axes[0], names):
        curve = ranked.groupby(name)["mean_auc"].agg(["mean", "max"]).reset_index()
        ax.plot(curve[name], curve["mean"], marker="o", label="mean over others")
        if len(names) > 1:
            ax.plot(curve[name], curve["max"], marker=".", linestyle="--", label="best")
            ax.legend()
        if name == "cost_complexity":
            ax.set_xscale("log")
        ax.set_xlabel(name)
        ax.set_ylabel("Mean CV AUC")
        ax.grid(True, alpha=0.3)

    fig.suptitle(f"Tuning: {MODEL_LABELS.get(result.family, result.family)}")
    return _save(fig, Path(output_dir) / f"tuning_{result.family}.png")


def plot_feature_importance(
    importance: pd.Series, output_dir: Path, top_k: int = TOP_K_IMPORTANCE
) -> Path:
    """Horizontal bar chart of the top_k most important features."""
    top = importance.head(top_k).iloc[::-1]

    fig, ax = plt.subplots(figsize=(6, 0.35 * len(top) + 1.5))
    ax.barh(top.index, top.values)
    ax.set_xlabel("Importance")
    ax.set_title("Random forest variable importance")

    return _save(fig, Path(output_dir) / "variable_importance.png")


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Saved figure: {path}")
    return path
