"""Pokémon primary-type classification from battle stats.

Compares a pruned decision tree, a random forest and gradient boosted trees,
each tuned by stratified cross-validation on macro one-vs-rest AUC.
"""

__version__ = "0.1.0"
