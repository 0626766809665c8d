"""
План спариваний для всего стада. Два решателя:
    * greedy – каждая самка берёт лучшего самца со свободной квотой
    * milp   – максимум суммарного score (PuLP + CBC)
"""
from __future__ import annotations
import logging
import math
from typing import Literal

import numpy as np
import pandas as pd
import pulp
from numba import njit
from tqdm import tqdm

from .coefficients import make_coefficient_fns
from .population import Population, Sex
from .recommend import MatingOptions, generate_mating_recommendations

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
LOGGER = logging.getLogger(__name__)

PAIR_COLUMNS = ["female_id", "male_id", "inbreeding", "relationship", "diversity", "tier", "score"]


@njit(cache=True)
def _filter_pairs_numba(inbreeding: np.ndarray, threshold: float) -> np.ndarray:
    keep = []
    for i in range(inbreeding.shape[0]):
        if inbreeding[i] <= threshold:
            keep.append(i)
    return np.asarray(keep, dtype=np.int64)


def build_candidate_pairs(population: Population, options: MatingOptions | None = None) -> pd.DataFrame:
    """Формирует таблицу допустимых пар (female_id, male_id, …, score)."""
    if options is None:
        options = MatingOptions()
    session = make_coefficient_fns(population)
    females = [ind for ind in population if ind.sex == Sex.FEMALE and ind.is_breeding]

    rows = []
    for female in tqdm(females, desc="females"):
        for rec in generate_mating_recommendations(female, population, options, session=session):
            rows.append((
                female.id,
                rec.partner.id,
                rec.inbreeding_coefficient,
                rec.relationship_coefficient,
                rec.genetic_diversity_score,
                rec.tier.value,
                rec.tier.rank + rec.genetic_diversity_score,
            ))
    pairs = pd.DataFrame(rows, columns=PAIR_COLUMNS)
    if pairs.empty:
        return pairs

    keep = _filter_pairs_numba(
        pairs["inbreeding"].to_numpy(dtype=np.float64),
        options.max_inbreeding_coefficient,
    )
    return pairs.iloc[keep].reset_index(drop=True)


def plan_matings(
    population: Population,
    solver: Literal["greedy", "milp"] = "greedy",
    male_quota_frac: float = 0.10,
    options: MatingOptions | None = None,
) -> pd.DataFrame:
    LOGGER.info("🔍  Building feasible (female, male) pairs …")
    pairs = build_candidate_pairs(population, options)
    n_females = sum(1 for ind in population if ind.sex == Sex.FEMALE and ind.is_breeding)
    quota = max(1, math.ceil(male_quota_frac * n_females))

    if solver == "greedy":
        plan = _solve_greedy(pairs, quota)
    elif solver == "milp":
        plan = _solve_milp(pairs, quota)
    else:
        raise ValueError(f"Unknown solver: {solver!r}")

    unassigned = n_females - len(plan)
    if unassigned:
        LOGGER.warning("⚠️  %d breeding females left without a feasible male", unassigned)
    return plan


# --------------------------------------------------------------------------- #
# 1. Greedy
# --------------------------------------------------------------------------- #
def _solve_greedy(pairs: pd.DataFrame, quota: int) -> pd.DataFrame:
    LOGGER.info("⚡  Greedy solver (quota %d) …", quota)
    male_load = {m: 0 for m in pairs["male_id"].unique()}
    # female → [male…] по убыванию score
    ranked = {
        female_id: list(group.sort_values("score", ascending=False, kind="stable")["male_id"])
        for female_id, group in pairs.groupby("female_id", sort=True)
    }

    assignment = {}
    for female_id, males in ranked.items():
        for male_id in males:
            if male_load[male_id] < quota:
                assignment[female_id] = male_id
                male_load[male_id] += 1
                break
        else:
            LOGGER.debug("No free male for female %s", female_id)

    return pd.DataFrame(
        {"female_id": list(assignment.keys()), "male_id": list(assignment.values())},
        columns=["female_id", "male_id"],
    )


# --------------------------------------------------------------------------- #
# 2. MILP
# --------------------------------------------------------------------------- #
def _solve_milp(pairs: pd.DataFrame, quota: int) -> pd.DataFrame:
    if pairs.empty:
        return pd.DataFrame(columns=["female_id", "male_id"])

    LOGGER.info("🧮  Building MILP (quota %d) …", quota)
    prob = pulp.LpProblem("female_male_assignment", pulp.LpMaximize)

    # переменные x[female,male] ∈ {0,1}
    keys = list(pairs[["female_id", "male_id"]].itertuples(index=False, name=None))
    x = pulp.LpVariable.dicts("x", keys, lowBound=0, upBound=1, cat="Binary")

    prob += pulp.lpSum(r.score * x[(r.female_id, r.male_id)] for r in pairs.itertuples())

    # каждая самка – не более чем с одним самцом
    LOGGER.info("➕  Female constraints …")
    for female_id, g in tqdm(pairs.groupby("female_id"), desc="females"):
        prob += pulp.lpSum(x[(female_id, m)] for m in g["male_id"]) <= 1

    LOGGER.info("➕  Male constraints (quota %d) …", quota)
    for male_id, g in tqdm(pairs.groupby("male_id"), desc="males"):
        prob += pulp.lpSum(x[(f, male_id)] for f in g["female_id"]) <= quota

    LOGGER.info("🚀  Solving MILP (CBC) …")
    prob.solve(pulp.PULP_CBC_CMD(msg=False))

    LOGGER.info("✅  Status: %s, objective = %.3f",
                pulp.LpStatus[prob.status], pulp.value(prob.objective))

    chosen = sorted((f, m) for (f, m), var in x.items() if var.value() is not None and var.value() > 0.5)
    return pd.DataFrame(chosen, columns=["female_id", "male_id"])
