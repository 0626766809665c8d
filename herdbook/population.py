"""
Снимок поголовья: животные и таблица id → животное.

Движок только читает эти данные; создаёт и меняет записи внешний учёт.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import pandas as pd


class Sex(str, Enum):
    FEMALE = "F"
    MALE = "M"
    UNKNOWN = "U"


class Status(str, Enum):
    REPRODUCER = "REPRO"
    GROW = "GROW"
    RETIRED = "RETIRED"
    DEAD = "DEAD"
    CONSUMED = "CONSUMED"


@dataclass(frozen=True)
class Individual:
    id: str
    sex: Sex = Sex.UNKNOWN
    status: Status = Status.REPRODUCER
    mother_id: Optional[str] = None
    father_id: Optional[str] = None
    breed: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        # допускаем "F" / "REPRO" строками
        object.__setattr__(self, "sex", Sex(self.sex))
        object.__setattr__(self, "status", Status(self.status))

    @property
    def is_breeding(self) -> bool:
        return self.status == Status.REPRODUCER


FRAME_COLUMNS = ["id", "sex", "status", "mother_id", "father_id", "breed", "name"]


def _clean(value) -> Optional[str]:
    # NaN / None / "" → нет значения
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, float) and value.is_integer():
        # числовые id, испорченные NaN-колонкой: 12.0 → "12"
        value = int(value)
    value = str(value).strip()
    return value or None


class Population:
    """Упорядоченный набор животных с уникальными id."""

    def __init__(self, individuals: Iterable[Individual] = ()):
        self._items: List[Individual] = list(individuals)
        self._by_id: Dict[str, Individual] = {}
        for ind in self._items:
            if ind.id in self._by_id:
                raise ValueError(f"Duplicate individual id: {ind.id!r}")
            self._by_id[ind.id] = ind

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._items)

    def __contains__(self, animal_id) -> bool:
        return animal_id in self._by_id

    def __repr__(self) -> str:
        return f"<Population with {len(self)} individuals>"

    def get(self, animal_id: Optional[str]) -> Optional[Individual]:
        if animal_id is None:
            return None
        return self._by_id.get(animal_id)

    def parents_of(self, individual: Individual) -> Tuple[Optional[Individual], Optional[Individual]]:
        """(мать, отец); None, если родитель не указан или отсутствует в поголовье."""
        return self.get(individual.mother_id), self.get(individual.father_id)

    # ------------------------------------------------------------------ #
    # pandas
    # ------------------------------------------------------------------ #
    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "Population":
        """
        Строит снимок из таблицы ``id, sex, status, mother_id, father_id``
        (+ необязательные ``breed``, ``name``).
        """
        individuals = []
        for row in frame.to_dict("records"):
            individuals.append(
                Individual(
                    id=_clean(row["id"]),
                    sex=Sex(_clean(row.get("sex")) or Sex.UNKNOWN.value),
                    status=Status(_clean(row.get("status")) or Status.REPRODUCER.value),
                    mother_id=_clean(row.get("mother_id")),
                    father_id=_clean(row.get("father_id")),
                    breed=_clean(row.get("breed")),
                    name=_clean(row.get("name")),
                )
            )
        return cls(individuals)

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for ind in self._items:
            row = asdict(ind)
            row["sex"] = ind.sex.value
            row["status"] = ind.status.value
            rows.append(row)
        return pd.DataFrame(rows, columns=FRAME_COLUMNS)
