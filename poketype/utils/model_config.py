"""Model configuration loader from YAML files.

configs/models.yaml holds one section per model family: its search grid and,
for boosted trees, the fixed tree depth and learning rate. Seed, split and
fold settings live in poketype.utils.config and are not read from here.

Usage:
    from poketype.utils.model_config import model_config

    rf_grid = model_config.grid("random_forest")
    depth = model_config.xgboost["tree_depth"]
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml
except ImportError:
    raise ImportError(
        "PyYAML is required for model configuration. "
        "Install it with: pip install pyyaml"
    )

PROJECT_ROOT = Path(__file__).parent.parent.parent

MODEL_FAMILIES = ("decision_tree", "random_forest", "xgboost")


class ModelConfig:
    """Per-family grids and fixed settings from YAML.

    Environment variables XGB_TREE_DEPTH and XGB_LEARNING_RATE override the
    boosted-tree settings.
    """

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            config_path = PROJECT_ROOT / "configs" / "models.yaml"
        else:
            config_path = Path(config_path)

        self._config_path = config_path
        self._config = self._load_config()
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load and check the YAML file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file is empty or has sections other than
                model families

        """
        if not self._config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self._config_path}"
            )

        with open(self._config_path, "r") as f:
            config = yaml.safe_load(f)

        if config is None:
            raise ValueError(f"Empty configuration file: {self._config_path}")

        unknown = sorted(set(config) - set(MODEL_FAMILIES))
        if unknown:
            raise ValueError(
                f"Unknown sections {unknown} in {self._config_path}; "
                f"expected only {list(MODEL_FAMILIES)}"
            )

        return config

    def _apply_env_overrides(self) -> None:
        if "xgboost" in self._config:
            if "XGB_TREE_DEPTH" in os.environ:
                self._config["xgboost"]["tree_depth"] = int(
                    os.environ["XGB_TREE_DEPTH"]
                )
            if "XGB_LEARNING_RATE" in os.environ:
                self._config["xgboost"]["learning_rate"] = float(
                    os.environ["XGB_LEARNING_RATE"]
                )

    def grid(self, model_name: str) -> Dict[str, Any]:
        """Get the raw grid definition for a model family.

        Raises:
            KeyError: If the model family has no grid section.

        """
        section = self._config.get(model_name, {})
        if "grid" not in section:
            raise KeyError(f"No grid defined for model '{model_name}'")
        return section["grid"]

    @property
    def xgboost(self) -> Dict[str, Any]:
        """Fixed boosted-tree settings."""
        return self._config.get("xgboost", {})


# Global configuration instance
model_config = ModelConfig()
