"""
Подбор партнёров для спаривания.

Кандидат допускается, если он другого пола, в статусе REPRO и не является
прямым родственником (родитель, потомок, полный или полусибс). Затем для
каждого считаются F будущего потомка, R пары и разнообразие предков, и по
ним выставляется уровень рекомендации.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

import pandas as pd

from .coefficients import (
    CLOSE_RELATIONSHIP,
    CoefficientSession,
    is_parent_of,
    make_coefficient_fns,
)
from .population import Individual, Population, Sex, Status

LOGGER = logging.getLogger(__name__)

DIVERSITY_GENERATIONS = 4


class Tier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    NOT_RECOMMENDED = "not_recommended"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]


_TIER_RANK = {
    Tier.EXCELLENT: 4,
    Tier.GOOD: 3,
    Tier.ACCEPTABLE: 2,
    Tier.NOT_RECOMMENDED: 1,
}


@dataclass
class MatingOptions:
    max_inbreeding_coefficient: float = 0.0625  # 6.25 %
    # только попадает в причины, кандидатов не отсекает
    min_generations_from_common_ancestor: int = 3
    preferred_breeds: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self):
        # одна порода строкой – это одна порода, а не набор символов
        if isinstance(self.preferred_breeds, str):
            self.preferred_breeds = (self.preferred_breeds,)
        else:
            self.preferred_breeds = tuple(self.preferred_breeds)


@dataclass
class MatingRecommendation:
    partner: Individual
    inbreeding_coefficient: float
    relationship_coefficient: float
    genetic_diversity_score: float
    tier: Tier
    reasons: List[str] = field(default_factory=list)


def is_directly_related(a: Individual, b: Individual) -> bool:
    """Родитель/потомок или общий известный родитель (полные и полусибсы)."""
    if is_parent_of(a, b) or is_parent_of(b, a):
        return True
    if a.mother_id is not None and a.mother_id == b.mother_id:
        return True
    if a.father_id is not None and a.father_id == b.father_id:
        return True
    return False


def _opposite_sex(a: Individual, b: Individual) -> bool:
    return {a.sex, b.sex} == {Sex.FEMALE, Sex.MALE}


def _is_candidate(individual: Individual, candidate: Individual) -> bool:
    return (
        candidate.id != individual.id
        and _opposite_sex(individual, candidate)
        and candidate.is_breeding
        and not is_directly_related(individual, candidate)
    )


def _diversity_score(individual: Individual, partner: Individual, session: CoefficientSession) -> float:
    anc_1 = session.ancestors(individual, DIVERSITY_GENERATIONS)
    anc_2 = session.ancestors(partner, DIVERSITY_GENERATIONS)
    if not anc_1 and not anc_2:
        return 1.0
    shared = len(anc_1.keys() & anc_2.keys())
    return max(0.0, 1 - 2 * shared / (len(anc_1) + len(anc_2)))


def _synthetic_offspring(individual: Individual, partner: Individual) -> Individual:
    mother, father = (individual, partner) if individual.sex == Sex.FEMALE else (partner, individual)
    return Individual(
        id=f"{mother.id}×{father.id}",
        sex=Sex.UNKNOWN,
        status=Status.GROW,
        mother_id=mother.id,
        father_id=father.id,
    )


def _score_partner(
    individual: Individual,
    partner: Individual,
    options: MatingOptions,
    session: CoefficientSession,
) -> MatingRecommendation:
    inbreeding = session.inbreeding(_synthetic_offspring(individual, partner))
    relationship = session.relationship(individual, partner)
    diversity = _diversity_score(individual, partner, session)

    reasons: List[str] = []
    concerns = False
    tier = Tier.EXCELLENT

    # порядок проверок важен: дальше уровень можно только понизить
    if inbreeding > options.max_inbreeding_coefficient:
        tier = Tier.NOT_RECOMMENDED
        reasons.append(f"High inbreeding risk ({inbreeding * 100:.2f}%)")
        concerns = True
    elif inbreeding > options.max_inbreeding_coefficient * 0.5:
        tier = Tier.ACCEPTABLE
        reasons.append(f"Moderate inbreeding risk ({inbreeding * 100:.2f}%)")
        concerns = True

    if relationship > CLOSE_RELATIONSHIP:
        if tier == Tier.EXCELLENT:
            tier = Tier.GOOD
        reasons.append(f"Close relationship ({relationship * 100:.2f}%)")
        concerns = True

    if diversity > 0.8:
        reasons.append("Excellent genetic diversity")
    elif diversity > 0.6:
        reasons.append("Good genetic diversity")
    elif diversity > 0.4:
        reasons.append("Moderate genetic diversity")
    else:
        reasons.append("Limited genetic diversity")
        if tier == Tier.EXCELLENT:
            tier = Tier.GOOD
        concerns = True

    common = session.common_ancestors(individual, partner)
    if common:
        closest = min(max(paths) for paths in common.values())
        if closest < options.min_generations_from_common_ancestor:
            reasons.append(f"Common ancestor {closest} generation(s) back")

    if partner.breed is not None and partner.breed in options.preferred_breeds:
        reasons.append("Preferred breed")

    if not concerns:
        reasons.append("No specific genetic concerns identified")

    LOGGER.debug("%s × %s: F=%.4f R=%.4f D=%.3f → %s",
                 individual.id, partner.id, inbreeding, relationship, diversity, tier.value)

    return MatingRecommendation(
        partner=partner,
        inbreeding_coefficient=inbreeding,
        relationship_coefficient=relationship,
        genetic_diversity_score=diversity,
        tier=tier,
        reasons=reasons,
    )


def generate_mating_recommendations(
    individual: Individual,
    population: Population,
    options: Optional[MatingOptions] = None,
    session: Optional[CoefficientSession] = None,
    **kwargs,
) -> List[MatingRecommendation]:
    """
    Отсортированный список партнёров: уровень по убыванию, затем
    разнообразие предков по убыванию.

    Параметры можно передать как ``MatingOptions`` или именованными
    аргументами с теми же именами.
    """
    if options is None:
        options = MatingOptions(**kwargs)
    elif kwargs:
        raise ValueError("Pass either options or keyword arguments, not both")
    if session is None:
        session = make_coefficient_fns(population)

    candidates = [c for c in population if _is_candidate(individual, c)]
    LOGGER.debug("Scoring %d candidate partners for %s", len(candidates), individual.id)

    recommendations = [_score_partner(individual, c, options, session) for c in candidates]
    return sorted(
        recommendations,
        key=lambda r: (r.tier.rank, r.genetic_diversity_score),
        reverse=True,
    )


def recommendations_frame(recommendations: Sequence[MatingRecommendation]) -> pd.DataFrame:
    rows = [
        {
            "partner_id": rec.partner.id,
            "partner_name": rec.partner.name,
            "breed": rec.partner.breed,
            "inbreeding_coefficient": rec.inbreeding_coefficient,
            "relationship_coefficient": rec.relationship_coefficient,
            "genetic_diversity_score": rec.genetic_diversity_score,
            "recommendation": rec.tier.value,
            "reasons": "; ".join(rec.reasons),
        }
        for rec in recommendations
    ]
    return pd.DataFrame(rows, columns=[
        "partner_id", "partner_name", "breed", "inbreeding_coefficient",
        "relationship_coefficient", "genetic_diversity_score",
        "recommendation", "reasons",
    ])


def tier_counts(recommendations: Sequence[MatingRecommendation]) -> Dict[str, int]:
    counts = {tier.value: 0 for tier in Tier}
    for rec in recommendations:
        counts[rec.tier.value] += 1
    return counts
