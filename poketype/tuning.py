"""Grid search with cross-validation over any TypeModel.

Grid points are enumerated up front from a GridSpec, infeasible points are
dropped before any fitting, and every (grid point, fold) pair is fitted and
scored independently. Fold-level AUC records are then averaged per grid
point and ranked.
"""

import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import joblib
import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.metrics import roc_auc_score

from poketype.dataio import load_parquet, save_parquet
from poketype.models.base import FittedModel, TypeModel
from poketype.splitting import Fold

logger = logging.getLogger(__name__)

# Hyperparameters whose value cannot exceed the number of predictors
PREDICTOR_BOUNDED_PARAMS = ("mtry",)


@dataclass(frozen=True)
class ParamRange:
    """Inclusive range of one hyperparameter.

    Attributes:
        name: Hyperparameter name.
        low: Lower bound.
        high: Upper bound.
        levels: Number of evenly spaced values.
        integer: Round values to integers (duplicates are dropped).
        transform: "log10" to space values evenly in log10 space.

    """

    name: str
    low: float
    high: float
    levels: int
    integer: bool = False
    transform: Optional[str] = None

    def values(self) -> List[Any]:
        if self.transform == "log10":
            points = np.logspace(np.log10(self.low), np.log10(self.high), self.levels)
        elif self.transform is None:
            points = np.linspace(self.low, self.high, self.levels)
        else:
            raise ValueError(f"Unknown transform '{self.transform}' for {self.name}")

        if not self.integer:
            return [float(v) for v in points]

        seen = []
        for v in np.round(points).astype(int):
            if int(v) not in seen:
                seen.append(int(v))
        return seen


@dataclass(frozen=True)
class GridSpec:
    """Regular grid over one or more hyperparameters."""

    params: tuple

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "GridSpec":
        """Build a GridSpec from a models.yaml grid section.

        Example section:
            levels: 8
            params:
              trees: {range: [20, 1000], integer: true}

        """
        default_levels = config.get("levels")
        ranges = []
        for name, spec in config["params"].items():
            low, high = spec["range"]
            levels = spec.get("levels", default_levels)
            if levels is None:
                raise ValueError(f"No levels given for grid parameter '{name}'")
            ranges.append(
                ParamRange(
                    name=name,
                    low=low,
                    high=high,
                    levels=int(levels),
                    integer=bool(spec.get("integer", False)),
                    transform=spec.get("transform"),
                )
            )
        return cls(params=tuple(ranges))

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.params]


def build_grid(spec: GridSpec, n_predictors: Optional[int] = None) -> List[Dict[str, Any]]:
    """Enumerate every point of a regular grid.

    The last parameter varies fastest. Points whose predictor-bounded
    parameters exceed n_predictors are removed here so they are never fitted.

    Args:
        spec: Grid definition.
        n_predictors: Number of predictors available to the model.

    Returns:
        List of grid points as dicts.

    """
    names = spec.names
    grid = [
        dict(zip(names, combo))
        for combo in itertools.product(*(p.values() for p in spec.params))
    ]

    if n_predictors is not None:
        feasible = [
            point
            for point in grid
            if all(
                point[name] <= n_predictors
                for name in PREDICTOR_BOUNDED_PARAMS
                if name in point
            )
        ]
        if len(feasible) < len(grid):
            logger.info(
                f"Dropped {len(grid) - len(feasible)} grid points exceeding "
                f"{n_predictors} predictors"
            )
        grid = feasible

    return grid


def multiclass_auc(
    y_true: Sequence[str], proba: np.ndarray, classes: Sequence[str]
) -> float:
    """Macro-averaged one-vs-rest ROC AUC.

    Classes that are absent from y_true (or make up all of it) have no
    defined AUC and are left out of the average.

    Args:
        y_true: True labels.
        proba: Probabilities, shape (n_samples, n_classes).
        classes: Labels in the column order of proba.

    Raises:
        ValueError: If y_true contains labels not in classes, or no class
            has a defined AUC.

    """
    y_true = np.asarray(y_true)
    classes = np.asarray(classes)

    unknown = np.setdiff1d(np.unique(y_true), classes)
    if len(unknown):
        raise ValueError(f"Labels {unknown.tolist()} were not seen during fitting")

    scores = []
    for k, label in enumerate(classes):
        positive = y_true == label
        if positive.all() or not positive.any():
            continue
        scores.append(roc_auc_score(positive, proba[:, k]))

    if not scores:
        raise ValueError("AUC is undefined: y_true holds fewer than two classes")
    return float(np.mean(scores))


def _fit_and_score(
    model: TypeModel,
    config: int,
    params: Dict[str, Any],
    train: pd.DataFrame,
    fold: Fold,
) -> Dict[str, Any]:
    fit_part, validation_part = fold.split(train)
    artifact = model.fit(fit_part, params)

    y_val = model.recipe.outcome(validation_part)
    seen = np.isin(y_val, artifact.classes)
    if not seen.all():
        # Labels missing from the fitting part cannot be scored on this fold
        logger.debug(
            f"{fold.name}: skipping {int((~seen).sum())} validation rows with "
            f"labels {np.unique(y_val[~seen]).tolist()} unseen during fitting"
        )
        validation_part, y_val = validation_part[seen], y_val[seen]

    auc = multiclass_auc(
        y_val, model.predict_proba(artifact, validation_part), artifact.classes
    )
    return {"config": config, **params, "fold": fold.name, "auc": auc}


class TuningCache:
    """Memoizes fold-level tuning metrics on disk.

    Entries are keyed by a hash of everything that determines the metrics:
    the model family and its fixed settings, the grid, the fold assignment,
    and the training data itself.
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)

    def key(
        self,
        model: TypeModel,
        grid: List[Dict[str, Any]],
        folds: List[Fold],
        train: pd.DataFrame,
    ) -> str:
        columns = model.recipe.predictors + [model.recipe.target]
        data_hash = joblib.hash(
            pd.util.hash_pandas_object(train[columns], index=True).to_numpy()
        )
        fold_assignment = [
            (f.fold_id, f.train_index.tolist(), f.validation_index.tolist())
            for f in folds
        ]
        return joblib.hash(
            (model.describe(), grid, fold_assignment, data_hash)
        )

    def path(self, model: TypeModel, key: str) -> Path:
        return self.cache_dir / f"{model.family}_{key}.parquet"

    def load(self, model: TypeModel, key: str) -> Optional[pd.DataFrame]:
        path = self.path(model, key)
        if not path.exists():
            return None
        logger.info(f"Using cached tuning results from {path}")
        return load_parquet(path)

    def save(self, model: TypeModel, key: str, fold_metrics: pd.DataFrame) -> None:
        save_parquet(fold_metrics, self.path(model, key))


@dataclass
class TuningResult:
    """Outcome of a grid search.

    Attributes:
        family: Model family that was tuned.
        grid: Grid points, in enumeration order.
        fold_metrics: One row per (config, fold) with its AUC.
        ranked: One row per config with mean_auc, std_err and n_folds,
            best first.

    """

    family: str
    grid: List[Dict[str, Any]]
    fold_metrics: pd.DataFrame
    ranked: pd.DataFrame = field(init=False)

    def __post_init__(self):
        self.ranked = summarize(self.fold_metrics, self.grid)

    def show_best(self, n: int = 5) -> pd.DataFrame:
        return self.ranked.head(n)


def summarize(fold_metrics: pd.DataFrame, grid: List[Dict[str, Any]]) -> pd.DataFrame:
    """Average fold AUCs per grid point and rank them.

    Ties on mean AUC keep grid enumeration order.
    """
    stats = fold_metrics.groupby("config")["auc"].agg(["mean", "std", "count"])
    stats = stats.rename(columns={"mean": "mean_auc", "count": "n_folds"})
    stats["std_err"] = stats["std"] / np.sqrt(stats["n_folds"])

    params = pd.DataFrame(grid)
    params.index.name = "config"
    ranked = params.join(stats[["mean_auc", "std_err", "n_folds"]], how="inner")
    ranked = ranked.reset_index().sort_values(
        ["mean_auc", "config"], ascending=[False, True], kind="mergesort"
    )
    return ranked.reset_index(drop=True)


def tune(
    model: TypeModel,
    grid: List[Dict[str, Any]],
    train: pd.DataFrame,
    folds: List[Fold],
    n_jobs: int = 1,
    cache: Optional[TuningCache] = None,
) -> TuningResult:
    """Cross-validate every grid point and rank by mean AUC.

    Args:
        model: Model family to tune.
        grid: Grid points from build_grid().
        train: Training set the folds index into.
        folds: Cross-validation folds.
        n_jobs: Parallel workers over (grid point, fold) pairs.
        cache: Optional on-disk memoization.

    Returns:
        TuningResult with fold-level and ranked metrics.

    Raises:
        ValueError: If grid or folds is empty.

    """
    if not grid:
        raise ValueError(f"Empty grid for {model.family}")
    if not folds:
        raise ValueError("No folds to tune on")

    key = None
    fold_metrics = None
    if cache is not None:
        key = cache.key(model, grid, folds, train)
        fold_metrics = cache.load(model, key)

    if fold_metrics is None:
        logger.info(
            f"Tuning {model.family}: {len(grid)} configs x {len(folds)} folds "
            f"= {len(grid) * len(folds)} fits"
        )
        records = Parallel(n_jobs=n_jobs)(
            delayed(_fit_and_score)(model, config, params, train, fold)
            for config, params in enumerate(grid)
            for fold in folds
        )
        fold_metrics = pd.DataFrame.from_records(records)
        if cache is not None:
            cache.save(model, key, fold_metrics)

    result = TuningResult(family=model.family, grid=grid, fold_metrics=fold_metrics)
    best = result.ranked.iloc[0]
    logger.info(
        f"Best {model.family}: {select_best(result)} "
        f"(mean AUC {best['mean_auc']:.4f})"
    )
    return result


def select_best(result: TuningResult) -> Dict[str, Any]:
    """Grid point with the highest mean AUC (first in grid order on ties)."""
    config = int(result.ranked.iloc[0]["config"])
    return dict(result.grid[config])


def finalize_and_fit(
    model: TypeModel, params: Dict[str, Any], train: pd.DataFrame
) -> FittedModel:
    """Refit the chosen configuration on the whole training set."""
    logger.info(f"Refitting {model.family} on {len(train)} rows with {params}")
    return model.fit(train, params)


def evaluate(model: TypeModel, artifact: FittedModel, test: pd.DataFrame) -> float:
    """Macro one-vs-rest AUC of a fitted model on held-out data."""
    return multiclass_auc(
        model.recipe.outcome(test),
        model.predict_proba(artifact, test),
        artifact.classes,
    )
