#!/usr/bin/env python3
"""
CLI‑обёртка над движком родословных.

Примеры:
    python -m herdbook.main --pedigree herd.csv --animal R12 --mode recommend
    python -m herdbook.main --pedigree herd.csv --animal R12 --mode tree --generations 5
    python -m herdbook.main --pedigree herd.csv --mode plan --solver milp --out plan.csv
"""
from __future__ import annotations
import argparse

import pandas as pd

from .model import plan_matings
from .pedigree import get_pedigree_data, pedigree_frame
from .population import Population
from .recommend import (
    MatingOptions,
    generate_mating_recommendations,
    recommendations_frame,
    tier_counts,
)


def _load_population(path: str) -> Population:
    # всё читаем строками, чтобы числовые id не превратились в float
    return Population.from_frame(pd.read_csv(path, dtype=str))


def _parse(argv=None):
    p = argparse.ArgumentParser("herdbook")
    p.add_argument("--pedigree", required=True,
                   help="CSV с колонками id, sex, status, mother_id, father_id[, breed, name]")
    p.add_argument("--animal", default=None, help="id животного (для recommend и tree)")
    p.add_argument("--mode", choices=["recommend", "tree", "plan"], default="recommend")
    p.add_argument("--generations", type=int, default=4, help="глубина дерева")
    p.add_argument("--max_inbreeding", type=float, default=0.0625,
                   help="максимально допустимый F потомка")
    p.add_argument("--min_generations", type=int, default=3,
                   help="минимум поколений до общего предка (только в причинах)")
    p.add_argument("--preferred_breed", action="append", default=[],
                   help="предпочтительная порода, можно несколько раз")
    p.add_argument("--solver", choices=["greedy", "milp"], default="greedy")
    p.add_argument("--male_quota_frac", type=float, default=0.10)
    p.add_argument("--out", default="herdbook_result.csv")

    return p.parse_args(argv)


def run(args) -> pd.DataFrame:
    population = _load_population(args.pedigree)
    options = MatingOptions(
        max_inbreeding_coefficient=args.max_inbreeding,
        min_generations_from_common_ancestor=args.min_generations,
        preferred_breeds=tuple(args.preferred_breed),
    )

    if args.mode == "plan":
        return plan_matings(population, solver=args.solver,
                            male_quota_frac=args.male_quota_frac, options=options)

    individual = population.get(args.animal)
    if individual is None:
        raise ValueError(f"Animal {args.animal!r} not found in {args.pedigree}")

    if args.mode == "tree":
        return pedigree_frame(get_pedigree_data(individual, population, args.generations))

    recs = generate_mating_recommendations(individual, population, options)
    counts = tier_counts(recs)
    print("  ".join(f"{tier}: {n}" for tier, n in counts.items()))
    return recommendations_frame(recs)


def main(argv=None):
    args = _parse(argv)

    df = run(args)

    df.to_csv(args.out, index=False)
    print(f"✅  Saved {len(df)} rows → {args.out}")


if __name__ == "__main__":
    main()
