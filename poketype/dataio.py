"""Data I/O operations for the type classifier.

This module centralizes all filesystem operations including reading the
Pokémon CSV, parquet and JSON files, and model artifacts. No other modules
should perform direct filesystem I/O.
"""

import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional

import joblib
import pandas as pd

from poketype.utils.config import settings
from poketype.utils.constants import (
    CATEGORICAL_PREDICTORS,
    COLUMN_ALIASES,
    NUMERIC_PREDICTORS,
    REQUIRED_COLUMNS,
    TARGET,
    TYPE_LABELS,
)

logger = logging.getLogger(__name__)


class DataError(Exception):
    """Raised when the input data cannot be loaded or is unusable."""


class DataFileNotFoundError(DataError, FileNotFoundError):
    """Raised when the input file does not exist."""


class SchemaError(DataError):
    """Raised when required columns are missing from the input."""


def normalize_column_name(name: str) -> str:
    """Normalize a raw header to lowercase snake_case.

    Examples:
        >>> normalize_column_name("Sp. Atk")
        'special_attack'
        >>> normalize_column_name("Type 1")
        'type_1'
        >>> normalize_column_name("#")
        'number'

    """
    snake = re.sub(r"[^0-9a-z]+", "_", str(name).strip().lower()).strip("_")
    return COLUMN_ALIASES.get(snake, snake)


def normalize_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of df with normalized column names."""
    return df.rename(columns=normalize_column_name)


def validate_columns(df: pd.DataFrame, required: Iterable[str] = REQUIRED_COLUMNS) -> None:
    """Check that all required columns are present.

    Raises:
        SchemaError: If any required column is missing.

    """
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing required columns: {missing} (found: {list(df.columns)})"
        )


def _parse_legendary(values: pd.Series) -> pd.Series:
    if values.dtype == bool:
        return values
    mapping = {"true": True, "false": False, "1": True, "0": False}
    parsed = values.astype(str).str.strip().str.lower().map(mapping)
    if parsed.isna().any():
        bad = sorted(values[parsed.isna()].astype(str).unique())
        raise DataError(f"Unrecognized legendary values: {bad}")
    return parsed.astype(bool)


def filter_types(df: pd.DataFrame, labels: Optional[List[str]] = None) -> pd.DataFrame:
    """Keep only rows whose primary type is one of the given labels."""
    if labels is None:
        labels = TYPE_LABELS
    return df[df[TARGET].isin(labels)].copy()


def coerce_types(df: pd.DataFrame, labels: Optional[List[str]] = None) -> pd.DataFrame:
    """Cast stat columns to numbers and the remaining model columns to categoricals.

    The target's categories are fixed to the label set so that every subset
    carries the same category order.

    Raises:
        DataError: If a stat column holds non-numeric values.

    """
    if labels is None:
        labels = TYPE_LABELS

    df = df.copy()
    for col in NUMERIC_PREDICTORS:
        try:
            df[col] = pd.to_numeric(df[col], errors="raise")
        except (ValueError, TypeError) as e:
            raise DataError(f"Column '{col}' has non-numeric values: {e}") from e
    df[TARGET] = pd.Categorical(df[TARGET], categories=labels)
    df["legendary"] = _parse_legendary(df["legendary"])
    for col in CATEGORICAL_PREDICTORS:
        df[col] = df[col].astype("category")
    return df


def read_csv(file_path: Path) -> pd.DataFrame:
    """Read a CSV file into a DataFrame.

    Raises:
        DataFileNotFoundError: If file does not exist.
        DataError: If the file cannot be read or parsed.

    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataFileNotFoundError(f"CSV file not found: {file_path}")
    try:
        return pd.read_csv(file_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataError(f"Could not parse {file_path}: {e}") from e
    except OSError as e:
        raise DataError(f"Could not read {file_path}: {e}") from e


def load_pokemon(
    file_path: Optional[Path] = None, labels: Optional[List[str]] = None
) -> pd.DataFrame:
    """Load the Pokémon CSV and prepare it for modelling.

    Args:
        file_path: Path to the CSV. If None, uses settings.
        labels: Primary types to keep. If None, uses the six fixed labels.

    Returns:
        DataFrame with normalized column names, restricted to the label set,
        with type_1, generation and legendary as categoricals.

    Raises:
        DataFileNotFoundError: If the file is missing.
        SchemaError: If required columns are missing.
        DataError: If the file is malformed.

    """
    if file_path is None:
        file_path = settings.data_file

    raw = read_csv(file_path)
    df = normalize_column_names(raw)
    validate_columns(df)

    n_raw = len(df)
    df = coerce_types(filter_types(df, labels), labels)
    if df.empty:
        raise DataError(f"No rows left after filtering to types {labels or TYPE_LABELS}")

    logger.info(f"Loaded {n_raw} rows from {file_path}, kept {len(df)} after filtering")
    return df


def load_parquet(file_path: Path) -> pd.DataFrame:
    """Load a parquet file into a DataFrame.

    Raises:
        FileNotFoundError: If file does not exist.

    """
    if not file_path.exists():
        raise FileNotFoundError(f"Parquet file not found: {file_path}")
    return pd.read_parquet(file_path)


def save_parquet(df: pd.DataFrame, file_path: Path) -> None:
    """Save a DataFrame to parquet format."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(file_path, index=False)


def save_text(text: str, file_path: Path) -> None:
    """Write a text report."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(text)


def load_model(model_path: Path) -> Any:
    """Load a trained model from disk.

    Raises:
        FileNotFoundError: If model file does not exist.

    """
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    return joblib.load(model_path)


def save_model(model: Any, model_path: Path) -> None:
    """Save a trained model to disk."""
    model_path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, model_path)
