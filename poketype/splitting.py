"""Stratified train/test splitting and cross-validation folds.

Both operations take an explicit seed; no global random state is touched.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import StratifiedKFold

from poketype.dataio import DataError
from poketype.utils.constants import N_FOLDS, RANDOM_SEED, TARGET, TRAIN_SPLIT

logger = logging.getLogger(__name__)


class InsufficientFoldDataWarning(UserWarning):
    """A label has fewer rows than the requested number of folds."""


@dataclass(frozen=True)
class Fold:
    """One cross-validation partition of the training set.

    Attributes:
        fold_id: Zero-based fold number.
        train_index: Positional indices of the rows used for fitting.
        validation_index: Positional indices of the held-out rows.

    """

    fold_id: int
    train_index: np.ndarray
    validation_index: np.ndarray

    @property
    def name(self) -> str:
        return f"Fold{self.fold_id + 1:02d}"

    def split(self, data: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Return the (fit, validation) frames for this fold."""
        return data.iloc[self.train_index], data.iloc[self.validation_index]


def _stratum_train_size(n: int, prop: float) -> int:
    """Rows of a stratum that go to the training set.

    A stratum with at least two rows always contributes to both sides.
    """
    if n < 2:
        return n
    return int(min(max(np.floor(n * prop), 1), n - 1))


def stratified_split(
    df: pd.DataFrame,
    prop: float = TRAIN_SPLIT,
    strata: str = TARGET,
    seed: int = RANDOM_SEED,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split df into train and test sets, sampling within each stratum.

    Each stratum contributes floor(n * prop) rows to the training set, so
    label proportions in both subsets follow those of df. The original row
    index is preserved.

    Args:
        df: Dataset to split.
        prop: Fraction of each stratum assigned to the training set.
        strata: Column whose values define the strata.
        seed: Seed for the sampling generator.

    Returns:
        Tuple of (train, test) DataFrames.

    Raises:
        ValueError: If prop is not strictly between 0 and 1.

    """
    if not 0 < prop < 1:
        raise ValueError(f"prop must be in (0, 1), got {prop}")

    rng = np.random.default_rng(seed)
    positions = np.arange(len(df))
    labels = df[strata].to_numpy()

    train_positions: List[np.ndarray] = []
    for label in pd.unique(labels):
        members = positions[labels == label]
        n_train = _stratum_train_size(len(members), prop)
        train_positions.append(rng.choice(members, size=n_train, replace=False))

    is_train = np.zeros(len(df), dtype=bool)
    if train_positions:
        is_train[np.concatenate(train_positions)] = True

    train, test = df[is_train], df[~is_train]
    logger.info(f"Split {len(df)} rows into {len(train)} train / {len(test)} test")
    return train, test


def stratified_folds(
    train: pd.DataFrame,
    k: int = N_FOLDS,
    strata: str = TARGET,
    seed: int = RANDOM_SEED,
) -> List[Fold]:
    """Build k stratified cross-validation folds over the training set.

    Every row appears in exactly one validation set. Labels with fewer than
    k rows trigger an InsufficientFoldDataWarning; their rows are spread over
    as many folds as they can fill.

    Raises:
        DataError: If no label has at least k rows.

    """
    counts = train[strata].value_counts()
    counts = counts[counts > 0]
    if len(counts) and (counts < k).all():
        raise DataError(
            f"Cannot build {k} folds: every label has fewer than {k} rows "
            f"({counts.to_dict()})"
        )

    small = counts[counts < k]
    if len(small):
        message = (
            f"Labels {small.index.tolist()} have fewer than {k} rows; "
            f"some validation folds will not contain them"
        )
        logger.warning(message)
        warnings.warn(message, InsufficientFoldDataWarning, stacklevel=2)

    splitter = StratifiedKFold(n_splits=k, shuffle=True, random_state=seed)
    y = train[strata].astype(str).to_numpy()

    with warnings.catch_warnings():
        # Already reported above as InsufficientFoldDataWarning
        warnings.filterwarnings("ignore", message=".*least populated class.*")
        return [
            Fold(fold_id=i, train_index=fit_idx, validation_index=val_idx)
            for i, (fit_idx, val_idx) in enumerate(
                splitter.split(np.zeros(len(y)), y)
            )
        ]
