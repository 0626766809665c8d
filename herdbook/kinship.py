"""
Точный инбридинг по табличному методу (Henderson, 1976).

Аддитивная матрица родства A: A_ij = 2 · f(i,j), A_ii = 1 + F_i.
В отличие от ``coefficients`` учитывает каждый путь через общего предка,
поэтому заметно дороже: O(n²) памяти. По умолчанию нигде не используется,
это отдельный режим по явному выбору.
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable

import numpy as np
import pandas as pd
from numba import njit

from .ancestry import parents_first
from .population import Individual, Population

LOGGER = logging.getLogger(__name__)


@njit(cache=True)
def _fill_additive_matrix(mother_idx: np.ndarray, father_idx: np.ndarray) -> np.ndarray:
    n = mother_idx.shape[0]
    A = np.zeros((n, n), dtype=np.float64)
    for i in range(n):
        mi = mother_idx[i]
        fi = father_idx[i]
        # родитель обязан стоять раньше потомка, иначе считаем его неизвестным
        if mi >= i:
            mi = -1
        if fi >= i:
            fi = -1

        if mi < 0 and fi < 0:
            A[i, i] = 1.0
        elif mi < 0 or fi < 0:
            parent = mi if mi >= 0 else fi
            A[i, i] = 1.0
            for j in range(i):
                A[i, j] = 0.5 * A[parent, j]
                A[j, i] = A[i, j]
        else:
            for j in range(i):
                A[i, j] = 0.5 * (A[mi, j] + A[fi, j])
                A[j, i] = A[i, j]
            A[i, i] = 1.0 + 0.5 * A[mi, fi]
    return A


def build_additive_matrix(population: Population, ids: Iterable[str] | None = None) -> pd.DataFrame:
    """
    Возвращает аддитивную матрицу родства A.

    Матрица всегда считается по всему поголовью (иначе теряются родители
    вне выборки), а ``ids`` лишь задают вырезаемую подматрицу.
    """
    # ребро, замыкающее цикл, не соблюдается – ядро трактует такого родителя как неизвестного
    order = [ind.id for ind in parents_first(population, population)]
    idx: Dict[str, int] = {a: i for i, a in enumerate(order)}
    mother_idx = np.full(len(order), -1, dtype=np.int64)
    father_idx = np.full(len(order), -1, dtype=np.int64)
    for i, aid in enumerate(order):
        ind = population.get(aid)
        mother_idx[i] = idx.get(ind.mother_id, -1)
        father_idx[i] = idx.get(ind.father_id, -1)

    LOGGER.info("🧬  Additive matrix for %d animals …", len(order))
    A = pd.DataFrame(_fill_additive_matrix(mother_idx, father_idx), index=order, columns=order)
    if ids is None:
        return A.loc[[ind.id for ind in population], [ind.id for ind in population]]
    ids = list(ids)
    return A.loc[ids, ids]


def exact_inbreeding_coefficients(population: Population) -> pd.Series:
    """F_i = A_ii − 1 для каждого животного, в порядке поголовья."""
    A = build_additive_matrix(population)
    return pd.Series(np.diag(A.to_numpy()) - 1.0, index=A.index, name="inbreeding")


def exact_relationship(a: Individual, b: Individual, population: Population) -> float:
    """Аддитивное родство A_ab (соответствует числителю R по Райту)."""
    A = build_additive_matrix(population, [a.id, b.id])
    return float(A.loc[a.id, b.id])
