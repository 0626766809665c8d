"""
Обход предков по ссылкам мать/отец.

Данные о родителях могут содержать циклы (ошибки учёта), поэтому каждый
обход держит множество посещённых id и не полагается на ацикличность графа.
"""
from __future__ import annotations
from collections import deque
from typing import Dict, Iterable, List, Set

from .population import Individual, Population

UNREACHABLE = -1


def get_ancestors(
    individual: Individual,
    population: Population,
    max_generations: int = 10,
) -> Dict[str, int]:
    """
    Все различные предки ``individual`` не дальше ``max_generations`` шагов.

    Возвращает ``{id предка: минимальное число шагов}`` в порядке обнаружения
    (обход в ширину, поэтому первое попадание = минимальное расстояние).
    Сама особь в результат не входит, даже если цикл ведёт обратно к ней.
    """
    ancestors: Dict[str, int] = {}
    visited = {individual.id}
    queue = deque([(individual, 0)])

    while queue:
        current, generation = queue.popleft()
        if generation >= max_generations:
            continue
        for parent in population.parents_of(current):
            if parent is None or parent.id in visited:
                continue
            visited.add(parent.id)
            ancestors[parent.id] = generation + 1
            queue.append((parent, generation + 1))

    return ancestors


def get_path_length(
    descendant: Individual,
    ancestor: Individual,
    population: Population,
) -> int:
    """Кратчайшее число шагов от потомка до предка или ``UNREACHABLE``."""
    if descendant.id == ancestor.id:
        return 0

    visited = {descendant.id}
    queue = deque([(descendant, 0)])
    while queue:
        current, distance = queue.popleft()
        for parent in population.parents_of(current):
            if parent is None:
                continue
            if parent.id == ancestor.id:
                return distance + 1
            if parent.id not in visited:
                visited.add(parent.id)
                queue.append((parent, distance + 1))

    return UNREACHABLE


def parents_first(
    roots: Iterable[Individual],
    population: Population,
    placed: Set[str] | None = None,
) -> List[Individual]:
    """
    Корни и все их предки в порядке «родители раньше потомков» (итеративный DFS).

    ``placed`` – id, уже выданные раньше; они и их предки пропускаются, а
    новые id добавляются туда же. На циклических данных ребро, замыкающее
    цикл, просто не соблюдается.
    """
    if placed is None:
        placed = set()
    order: List[Individual] = []
    entered = set()
    for root in roots:
        stack = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            if node.id in placed:
                continue
            if expanded:
                placed.add(node.id)
                order.append(node)
                continue
            if node.id in entered:
                continue
            entered.add(node.id)
            stack.append((node, True))
            for parent in population.parents_of(node):
                if parent is not None and parent.id not in entered:
                    stack.append((parent, False))
    return order
