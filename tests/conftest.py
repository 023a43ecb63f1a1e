"""Shared test data and constants.

The synthetic dataset mirrors the real file's raw headers and its primary
type counts (458 rows across the six kept types), plus rows of other types
that the loader must filter out.
"""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from poketype.dataio import load_pokemon
from poketype.splitting import stratified_folds, stratified_split


@dataclass(frozen=True)
class TestConstants:
    """Constants used across test suites."""

    __test__ = False

    RANDOM_SEED: int = 608
    N_KEPT_ROWS: int = 458
    N_TRAIN: int = 364
    N_TEST: int = 94
    SMALL_FOLDS: int = 3
    PROPORTION_TOLERANCE: float = 0.05
    FLOAT_TOLERANCE: float = 1e-8


TEST_CONSTANTS = TestConstants()

# Primary type counts of the six kept types in the reference dataset
TYPE_COUNTS = {
    "Water": 112,
    "Normal": 98,
    "Grass": 70,
    "Bug": 69,
    "Psychic": 57,
    "Fire": 52,
}
OTHER_TYPE_COUNTS = {"Dragon": 32, "Rock": 44}

# Per-type offsets on (hp, attack, defense, sp. atk, sp. def, speed)
TYPE_PROFILES = {
    "Water": (5, 0, 5, 5, 5, 0),
    "Normal": (15, 5, -5, -10, -5, 5),
    "Grass": (0, -5, 0, 10, 5, -5),
    "Bug": (-15, -5, 0, -15, -10, -5),
    "Psychic": (0, -15, -10, 30, 20, 10),
    "Fire": (0, 15, -5, 15, 0, 10),
    "Dragon": (20, 30, 10, 15, 10, 10),
    "Rock": (0, 15, 35, -10, 0, -15),
}
STAT_HEADERS = ["HP", "Attack", "Defense", "Sp. Atk", "Sp. Def", "Speed"]


def make_raw_pokemon(seed: int = 0, include_other_types: bool = True) -> pd.DataFrame:
    """Build a raw frame with the original CSV's headers."""
    rng = np.random.default_rng(seed)
    counts = dict(TYPE_COUNTS)
    if include_other_types:
        counts.update(OTHER_TYPE_COUNTS)

    types = np.concatenate([[t] * n for t, n in counts.items()])
    types = types[rng.permutation(len(types))]
    n = len(types)

    offsets = np.array([TYPE_PROFILES[t] for t in types])
    stats = np.clip(np.round(rng.normal(70, 20, size=(n, 6)) + offsets), 5, 200)
    stats = stats.astype(int)

    df = pd.DataFrame(stats, columns=STAT_HEADERS)
    df.insert(0, "#", np.arange(1, n + 1))
    df.insert(1, "Name", [f"Mon{i:03d}" for i in range(n)])
    df.insert(2, "Type 1", types)
    df.insert(3, "Type 2", np.where(rng.random(n) < 0.4, "Flying", None))
    df.insert(4, "Total", stats.sum(axis=1))
    df["Generation"] = rng.integers(1, 7, size=n)
    df["Legendary"] = rng.random(n) < 0.08
    return df


@pytest.fixture(scope="session")
def raw_pokemon() -> pd.DataFrame:
    return make_raw_pokemon()


@pytest.fixture(scope="session")
def pokemon_csv(tmp_path_factory, raw_pokemon) -> Path:
    path = tmp_path_factory.mktemp("data") / "pokemon.csv"
    raw_pokemon.to_csv(path, index=False)
    return path


@pytest.fixture(scope="session")
def pokemon(pokemon_csv) -> pd.DataFrame:
    return load_pokemon(pokemon_csv)


@pytest.fixture(scope="session")
def train_test(pokemon):
    return stratified_split(pokemon, seed=TEST_CONSTANTS.RANDOM_SEED)


@pytest.fixture(scope="session")
def train(train_test) -> pd.DataFrame:
    return train_test[0]


@pytest.fixture(scope="session")
def holdout(train_test) -> pd.DataFrame:
    return train_test[1]


@pytest.fixture(scope="session")
def folds(train):
    return stratified_folds(train, seed=TEST_CONSTANTS.RANDOM_SEED)


@pytest.fixture(scope="session")
def small_folds(train):
    return stratified_folds(
        train, k=TEST_CONSTANTS.SMALL_FOLDS, seed=TEST_CONSTANTS.RANDOM_SEED
    )
