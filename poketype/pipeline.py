"""End-to-end experiment: load, split, tune three model families, compare.

Stages run in order:
1. Load and filter the CSV
2. Stratified train/test split
3. Stratified cross-validation folds on the training set
4. Grid search per model family, refit of the best configuration
5. Test-set AUC, ranking and random forest importance
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from poketype.dataio import load_pokemon, save_model
from poketype.features.recipe import FeatureRecipe
from poketype.models import MODEL_CLASSES, FittedModel, TypeModel, XGBoostModel
from poketype.reporting import (
    format_report,
    plot_correlation_matrix,
    plot_feature_importance,
    plot_tuning_curve,
    rank_models,
    rf_importance,
    save_report,
)
from poketype.splitting import Fold, stratified_folds, stratified_split
from poketype.tuning import (
    GridSpec,
    TuningCache,
    TuningResult,
    build_grid,
    evaluate,
    finalize_and_fit,
    select_best,
    tune,
)
from poketype.utils.config import Settings, settings as default_settings
from poketype.utils.constants import (
    BOOST_LEARNING_RATE,
    BOOST_TREE_DEPTH,
    RANDOM_SEED,
)
from poketype.utils.model_config import MODEL_FAMILIES, ModelConfig, model_config

logger = logging.getLogger(__name__)


@dataclass
class ModelRun:
    """Everything produced for one model family."""

    model: TypeModel
    tuning: TuningResult
    best_params: Dict[str, Any]
    artifact: FittedModel
    test_auc: float

    @property
    def cv_auc(self) -> float:
        return float(self.tuning.ranked.iloc[0]["mean_auc"])


@dataclass
class ExperimentResult:
    """Outcome of a full experiment run."""

    data: pd.DataFrame
    train: pd.DataFrame
    test: pd.DataFrame
    folds: List[Fold]
    runs: Dict[str, ModelRun] = field(default_factory=dict)
    importance: Optional[pd.Series] = None

    @property
    def test_auc(self) -> Dict[str, float]:
        return {name: run.test_auc for name, run in self.runs.items()}

    @property
    def ranking(self) -> pd.DataFrame:
        return rank_models(self.test_auc)

    def report(self) -> str:
        return format_report(
            self.ranking,
            best_params={name: run.best_params for name, run in self.runs.items()},
            importance=self.importance,
            cv_auc={name: run.cv_auc for name, run in self.runs.items()},
            n_train=len(self.train),
            n_test=len(self.test),
        )


def build_model(
    family: str,
    recipe: Optional[FeatureRecipe] = None,
    random_state: int = RANDOM_SEED,
    config: Optional[ModelConfig] = None,
) -> TypeModel:
    """Instantiate a model family with its fixed settings from config."""
    if family not in MODEL_CLASSES:
        raise ValueError(f"Unknown model family '{family}'")
    if config is None:
        config = model_config

    if family == XGBoostModel.family:
        xgb = config.xgboost
        return XGBoostModel(
            recipe=recipe,
            random_state=random_state,
            tree_depth=int(xgb.get("tree_depth", BOOST_TREE_DEPTH)),
            learning_rate=float(xgb.get("learning_rate", BOOST_LEARNING_RATE)),
        )
    return MODEL_CLASSES[family](recipe=recipe, random_state=random_state)


def build_model_grid(
    family: str, n_predictors: int, config: Optional[ModelConfig] = None
) -> List[Dict[str, Any]]:
    """Feasible grid points for a model family."""
    if config is None:
        config = model_config
    spec = GridSpec.from_config(config.grid(family))
    return build_grid(spec, n_predictors=n_predictors)


def run_model(
    model: TypeModel,
    grid: List[Dict[str, Any]],
    train: pd.DataFrame,
    test: pd.DataFrame,
    folds: List[Fold],
    n_jobs: int = 1,
    cache: Optional[TuningCache] = None,
) -> ModelRun:
    """Tune, refit and evaluate one model family."""
    tuning = tune(model, grid, train, folds, n_jobs=n_jobs, cache=cache)
    best_params = select_best(tuning)
    artifact = finalize_and_fit(model, best_params, train)
    test_auc = evaluate(model, artifact, test)
    logger.info(f"{model.family}: test AUC {test_auc:.4f}")
    return ModelRun(
        model=model,
        tuning=tuning,
        best_params=best_params,
        artifact=artifact,
        test_auc=test_auc,
    )


def run_experiment(
    data: Optional[pd.DataFrame] = None,
    data_file: Optional[Path] = None,
    families: Optional[List[str]] = None,
    run_settings: Optional[Settings] = None,
    config: Optional[ModelConfig] = None,
    use_cache: Optional[bool] = None,
    save_outputs: bool = False,
    make_figures: bool = False,
) -> ExperimentResult:
    """Run the full comparison.

    Args:
        data: Already loaded dataset. If None, data_file is loaded.
        data_file: CSV to load. If None, uses settings.
        families: Model families to run. If None, all three.
        run_settings: Settings to use. If None, the global settings.
        config: Model configuration. If None, the global model config.
        use_cache: Memoize tuning results on disk. If None, uses settings.
        save_outputs: Save the report and fitted models.
        make_figures: Render figures into the figures directory.

    Returns:
        ExperimentResult with every stage's output.

    """
    s = run_settings if run_settings is not None else default_settings
    if families is None:
        families = list(MODEL_FAMILIES)
    if use_cache is None:
        use_cache = s.use_tuning_cache

    if data is None:
        data = load_pokemon(data_file if data_file is not None else s.data_file)

    recipe = FeatureRecipe()
    train, test = stratified_split(data, prop=s.train_prop, seed=s.random_seed)
    folds = stratified_folds(train, k=s.n_folds, seed=s.random_seed)
    cache = TuningCache(s.cache_dir) if use_cache else None

    result = ExperimentResult(data=data, train=train, test=test, folds=folds)
    for family in families:
        model = build_model(family, recipe=recipe, random_state=s.random_seed, config=config)
        grid = build_model_grid(family, recipe.n_predictors, config=config)
        result.runs[family] = run_model(
            model, grid, train, test, folds, n_jobs=s.n_jobs, cache=cache
        )

    rf = result.runs.get("random_forest")
    if rf is not None:
        result.importance = rf_importance(rf.model, rf.artifact)

    if save_outputs:
        save_report(result.report(), s.reports_dir)
        for family, run in result.runs.items():
            save_model(run.artifact, s.artifacts_dir / f"{family}.joblib")

    if make_figures:
        plot_correlation_matrix(data, s.figures_dir)
        for run in result.runs.values():
            plot_tuning_curve(run.tuning, s.figures_dir)
        if result.importance is not None:
            plot_feature_importance(result.importance, s.figures_dir)

    return result
