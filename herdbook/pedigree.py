"""Дерево родословной для печати / экспорта."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

import pandas as pd

from .coefficients import CoefficientSession, inbreeding_risk_level, make_coefficient_fns
from .population import Individual, Population


@dataclass
class PedigreeNode:
    individual: Individual
    generation: int
    inbreeding_coefficient: float
    mother: Optional["PedigreeNode"] = None
    father: Optional["PedigreeNode"] = None

    @property
    def risk_level(self) -> str:
        return inbreeding_risk_level(self.inbreeding_coefficient)

    def iter_nodes(self, position: str = "") -> Iterator[Tuple[str, "PedigreeNode"]]:
        """Обход в глубину: (путь от корня вида "MF", узел)."""
        yield position, self
        if self.mother is not None:
            yield from self.mother.iter_nodes(position + "M")
        if self.father is not None:
            yield from self.father.iter_nodes(position + "F")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.individual.id,
            "name": self.individual.name,
            "generation": self.generation,
            "inbreeding_coefficient": self.inbreeding_coefficient,
            "risk_level": self.risk_level,
            "mother": self.mother.to_dict() if self.mother is not None else None,
            "father": self.father.to_dict() if self.father is not None else None,
        }


def get_pedigree_data(
    individual: Individual,
    population: Population,
    generations: int = 4,
    session: CoefficientSession | None = None,
) -> PedigreeNode:
    """
    Рекурсивно строит дерево от ``individual`` (поколение 0).

    Отсутствующая ветка означает либо неизвестного родителя, либо
    достигнутый предел ``generations``.
    """
    if session is None:
        session = make_coefficient_fns(population)

    def _build(current: Individual, generation: int) -> PedigreeNode:
        node = PedigreeNode(
            individual=current,
            generation=generation,
            inbreeding_coefficient=session.inbreeding(current),
        )
        if generation < generations:
            mother, father = population.parents_of(current)
            if mother is not None:
                node.mother = _build(mother, generation + 1)
            if father is not None:
                node.father = _build(father, generation + 1)
        return node

    return _build(individual, 0)


def pedigree_frame(root: PedigreeNode) -> pd.DataFrame:
    """Плоская таблица узлов дерева (одна строка на узел)."""
    rows = [
        {
            "id": node.individual.id,
            "name": node.individual.name,
            "generation": node.generation,
            "position": position,
            "sex": node.individual.sex.value,
            "breed": node.individual.breed,
            "inbreeding_coefficient": node.inbreeding_coefficient,
            "risk_level": node.risk_level,
        }
        for position, node in root.iter_nodes()
    ]
    return pd.DataFrame(rows)
