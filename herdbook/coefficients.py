"""
Инбридинг (F) и коэффициент родства (R) по общим предкам.

    F(x)   = Σ 0.5^(n_m + n_f + 1) · (1 + F(A))
    R(a,b) = Σ 0.5^(n_a + n_b)     · (1 + F(A))

где A пробегает *множество* общих предков, а n – кратчайшие пути до A.
Это приближение формулы Райта: несколько разных путей к одному предку
дают один вклад, а не по вкладу на путь. Точный табличный метод – в
``kinship.build_additive_matrix``.

Все вычисления внутри одного вызова верхнего уровня идут через сессию
``make_coefficient_fns`` с мемоизацией; между вызовами кэш не живёт.
"""
from __future__ import annotations
import logging
import math
from functools import lru_cache
from typing import Callable, Dict, NamedTuple, Set, Tuple

from .ancestry import UNREACHABLE, get_ancestors, get_path_length, parents_first
from .population import Individual, Population

LOGGER = logging.getLogger(__name__)

DECIMALS = 4
CLOSE_RELATIONSHIP = 0.125

# верхние границы (не включительно) для уровней риска
RISK_LEVELS = (
    (0.0313, "low"),
    (0.0625, "moderate"),
    (0.125, "high"),
)


class CoefficientSession(NamedTuple):
    ancestors: Callable[..., Dict[str, int]]
    path_length: Callable[[Individual, Individual], int]
    common_ancestors: Callable[[Individual, Individual], Dict[str, Tuple[int, int]]]
    inbreeding: Callable[[Individual], float]
    offspring_inbreeding: Callable[[Individual, Individual], float]
    relationship: Callable[[Individual, Individual], float]


def make_coefficient_fns(population: Population, max_generations: int = 10) -> CoefficientSession:
    """
    Возвращает набор функций с общим кэшем для одного снимка поголовья.

    Ключи кэша – сами ``Individual`` (frozen dataclass), поэтому
    синтетический потомок не смешивается с реальными животными.
    """
    f_cache: Dict[Individual, float] = {}
    in_progress = set()
    warmed: Set[str] = set()

    @lru_cache(maxsize=None)
    def ancestors(individual: Individual, depth: int = max_generations) -> Dict[str, int]:
        return get_ancestors(individual, population, depth)

    @lru_cache(maxsize=None)
    def path_length(descendant: Individual, ancestor: Individual) -> int:
        return get_path_length(descendant, ancestor, population)

    @lru_cache(maxsize=None)
    def common_ancestors(a: Individual, b: Individual) -> Dict[str, Tuple[int, int]]:
        # id общего предка → (путь от a, путь от b); недостижимые пропускаем
        anc_b = ancestors(b)
        common = {}
        for anc_id in ancestors(a):
            if anc_id not in anc_b:
                continue
            ancestor = population.get(anc_id)
            path_a = path_length(a, ancestor)
            path_b = path_length(b, ancestor)
            if path_a == UNREACHABLE or path_b == UNREACHABLE:
                continue
            common[anc_id] = (path_a, path_b)
        return common

    def _sum_contributions(a: Individual, b: Individual, extra: int) -> Tuple[float, bool]:
        total = 0.0
        tainted = False
        for anc_id, (path_a, path_b) in common_ancestors(a, b).items():
            f_anc, anc_tainted = _inbreeding(population.get(anc_id))
            tainted = tainted or anc_tainted
            total += 0.5 ** (path_a + path_b + extra) * (1 + f_anc)
        return _round(total), tainted

    def _inbreeding(individual: Individual) -> Tuple[float, bool]:
        # (F, задело ли вычисление разрыв цикла); такие F зависят от того,
        # кто сейчас в стеке, и в кэш не попадают
        if individual in f_cache:
            return f_cache[individual], False
        mother, father = population.parents_of(individual)
        if mother is None or father is None:
            f_cache[individual] = 0.0
            return 0.0, False
        if individual in in_progress:
            # только при циклических данных: особь оказалась собственным предком
            LOGGER.warning("⚠️  Cyclic pedigree through %s, its F counted as 0", individual.id)
            return 0.0, True
        in_progress.add(individual)
        try:
            value, tainted = _sum_contributions(mother, father, extra=1)
        finally:
            in_progress.discard(individual)
        if not tainted:
            f_cache[individual] = value
        return value, tainted

    def _warm(individual: Individual) -> None:
        # F предков считаем от старших к младшим, чтобы рекурсия ниже
        # упиралась в кэш, а не в предел глубины стека
        roots = [p for p in population.parents_of(individual) if p is not None]
        for ancestor in parents_first(roots, population, warmed):
            _inbreeding(ancestor)

    def inbreeding(individual: Individual) -> float:
        _warm(individual)
        return _inbreeding(individual)[0]

    def offspring_inbreeding(mother: Individual, father: Individual) -> float:
        _warm(mother)
        _warm(father)
        return _sum_contributions(mother, father, extra=1)[0]

    def relationship(a: Individual, b: Individual) -> float:
        if is_parent_of(a, b) or is_parent_of(b, a):
            return 0.5
        _warm(a)
        _warm(b)
        return _sum_contributions(a, b, extra=0)[0]

    return CoefficientSession(
        ancestors=ancestors,
        path_length=path_length,
        common_ancestors=common_ancestors,
        inbreeding=inbreeding,
        offspring_inbreeding=offspring_inbreeding,
        relationship=relationship,
    )


def _round(value: float) -> float:
    # половина округляется вверх: 0.03125 → 0.0313
    scale = 10 ** DECIMALS
    return math.floor(value * scale + 0.5) / scale


def is_parent_of(parent: Individual, child: Individual) -> bool:
    return parent.id in (child.mother_id, child.father_id)


def calculate_inbreeding_coefficient(individual: Individual, population: Population) -> float:
    """F особи; 0, если хотя бы один родитель неизвестен."""
    return make_coefficient_fns(population).inbreeding(individual)


def calculate_relationship_coefficient(a: Individual, b: Individual, population: Population) -> float:
    """R(a, b); 0.5 для пары родитель–потомок, 0 без общих предков."""
    return make_coefficient_fns(population).relationship(a, b)


def inbreeding_risk_level(coefficient: float) -> str:
    if coefficient == 0:
        return "none"
    for upper, level in RISK_LEVELS:
        if coefficient < upper:
            return level
    return "very_high"
