"""Experiment constants and fixed column definitions.

This module centralizes all hardcoded values used by the type-classification
pipeline.
"""

# Reproducibility
RANDOM_SEED = 608

# Target and the six labels kept after filtering
TARGET = "type_1"
TYPE_LABELS = ["Bug", "Fire", "Grass", "Normal", "Water", "Psychic"]

# Predictors
NUMERIC_PREDICTORS = [
    "hp",
    "attack",
    "defense",
    "special_attack",
    "special_defense",
    "speed",
]
CATEGORICAL_PREDICTORS = ["generation", "legendary"]
PREDICTORS = NUMERIC_PREDICTORS + CATEGORICAL_PREDICTORS

REQUIRED_COLUMNS = ["name", TARGET] + CATEGORICAL_PREDICTORS + NUMERIC_PREDICTORS

# Raw header spellings that snake_case alone does not map onto our names
COLUMN_ALIASES = {
    "": "number",
    "sp_atk": "special_attack",
    "sp_def": "special_defense",
    "type1": "type_1",
    "type2": "type_2",
}

# Columns present in the raw file but left out of the correlation analysis
EXCLUDED_FROM_CORRELATION = ["number", "total"]

# Train share of the train/test split
TRAIN_SPLIT = 0.8

# Cross-validation
N_FOLDS = 10

# Boosted trees are tuned on ensemble size only
BOOST_TREE_DEPTH = 4
BOOST_LEARNING_RATE = 0.3

# Reporting
TOP_K_IMPORTANCE = 15
