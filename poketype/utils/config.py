"""Configuration management with type-safe dataclasses.

This module provides application configuration using dataclasses and environment
variables. All configuration is immutable and type-checked.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from poketype.utils.constants import N_FOLDS, RANDOM_SEED, TRAIN_SPLIT

load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent.parent


@dataclass(frozen=True)
class PathConfig:
    """Filesystem paths.

    Attributes:
        data_raw_dir: Directory holding the input CSV.
        artifacts_dir: Directory for trained models.
        reports_dir: Directory for text reports.
        figures_dir: Directory for rendered figures.
        cache_dir: Directory for memoized tuning results.
        configs_dir: Directory for configuration files.

    """

    data_raw_dir: Path = PROJECT_ROOT / "data" / "raw"
    artifacts_dir: Path = PROJECT_ROOT / "output" / "models"
    reports_dir: Path = PROJECT_ROOT / "output" / "reports"
    figures_dir: Path = PROJECT_ROOT / "output" / "figures"
    cache_dir: Path = PROJECT_ROOT / "output" / "cache"
    configs_dir: Path = PROJECT_ROOT / "configs"


@dataclass(frozen=True)
class Settings:
    """Main application settings.

    All settings loaded from environment variables with sensible defaults.
    """

    # Input
    data_file: Path

    # Experiment
    random_seed: int
    train_prop: float
    n_folds: int

    # Execution
    n_jobs: int
    use_tuning_cache: bool

    # Paths
    paths: PathConfig

    @property
    def artifacts_dir(self) -> Path:
        return self.paths.artifacts_dir

    @property
    def reports_dir(self) -> Path:
        return self.paths.reports_dir

    @property
    def figures_dir(self) -> Path:
        return self.paths.figures_dir

    @property
    def cache_dir(self) -> Path:
        return self.paths.cache_dir


def load_settings() -> Settings:
    """Load settings from environment variables."""
    paths = PathConfig()
    return Settings(
        data_file=Path(
            os.getenv("POKEMON_CSV", str(paths.data_raw_dir / "pokemon.csv"))
        ),
        random_seed=int(os.getenv("RANDOM_SEED", str(RANDOM_SEED))),
        train_prop=float(os.getenv("TRAIN_PROP", str(TRAIN_SPLIT))),
        n_folds=int(os.getenv("N_FOLDS", str(N_FOLDS))),
        n_jobs=int(os.getenv("N_JOBS", "1")),
        use_tuning_cache=os.getenv("USE_TUNING_CACHE", "true").lower() == "true",
        paths=paths,
    )


# Global settings instance
settings = load_settings()


def ensure_directories() -> None:
    """Create necessary output directories if they don't exist."""
    settings.paths.artifacts_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.reports_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.figures_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.cache_dir.mkdir(parents=True, exist_ok=True)
