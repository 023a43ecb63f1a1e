#!/usr/bin/env python3
"""Compare decision tree, random forest and boosted trees on Pokémon types.

Usage:
    python experiments/run_type_comparison.py
    python experiments/run_type_comparison.py --data data/raw/pokemon.csv --n-jobs 4
    python experiments/run_type_comparison.py --no-cache --figures
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path.cwd()))

import argparse
import dataclasses
import logging
import time

from poketype.pipeline import run_experiment
from poketype.utils.config import ensure_directories, settings

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--data", type=Path, default=None, help="Input CSV")
    parser.add_argument("--n-jobs", type=int, default=None, help="Parallel fits")
    parser.add_argument(
        "--no-cache", action="store_true", help="Ignore cached tuning results"
    )
    parser.add_argument("--figures", action="store_true", help="Render figures")
    return parser.parse_args()


def main():
    args = parse_args()

    run_settings = settings
    if args.data is not None:
        run_settings = dataclasses.replace(run_settings, data_file=args.data)
    if args.n_jobs is not None:
        run_settings = dataclasses.replace(run_settings, n_jobs=args.n_jobs)

    print("=" * 80)
    print("POKEMON PRIMARY TYPE: TREE MODEL COMPARISON")
    print("=" * 80)
    print(f"\nData: {run_settings.data_file}")
    print(
        f"Seed: {run_settings.random_seed} | Train prop: {run_settings.train_prop} "
        f"| Folds: {run_settings.n_folds}"
    )
    print("Models: decision tree, random forest, boosted trees (XGBoost)\n")

    ensure_directories()
    start_time = time.time()

    result = run_experiment(
        run_settings=run_settings,
        use_cache=False if args.no_cache else None,
        save_outputs=True,
        make_figures=args.figures,
    )

    print(f'\n{"="*80}')
    print(f"ALL MODELS COMPLETED in {time.time() - start_time:.1f}s")
    print("=" * 80)

    for family, run in result.runs.items():
        print(f"\n{family} - top configurations by mean CV AUC:")
        print(run.tuning.show_best(5).to_string(index=False))

    print("\n" + result.report())


if __name__ == "__main__":
    main()
