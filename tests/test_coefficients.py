import numpy as np

from herdbook.coefficients import (
    calculate_inbreeding_coefficient,
    calculate_relationship_coefficient,
    inbreeding_risk_level,
    make_coefficient_fns,
)
from herdbook.pedigree import get_pedigree_data
from herdbook.population import Individual, Population
from .fixtures import family, herd


def test_unknown_parent_gives_zero():
    assert calculate_inbreeding_coefficient(family.get("unrelated1"), family) == 0
    # известна только мать
    assert calculate_inbreeding_coefficient(family.get("gf1"), family) == 0
    # родитель указан, но в поголовье отсутствует
    orphan = Individual("orphan", sex="F", mother_id="nobody", father_id="ggf1")
    assert calculate_inbreeding_coefficient(orphan, family) == 0


def test_empty_population():
    assert calculate_inbreeding_coefficient(family.get("offspring1"), Population()) == 0


def test_unrelated_parents():
    assert calculate_inbreeding_coefficient(family.get("offspring1"), family) == 0


def test_half_sib_parents():
    # gm1 и gf1 – полусибсы через ggm1
    assert np.isclose(calculate_inbreeding_coefficient(family.get("mother1"), family), 0.125)


def test_full_sib_parents():
    child = Individual("PP", sex="F", mother_id="P1", father_id="P2")
    pop = Population(list(herd) + [child])
    assert np.isclose(calculate_inbreeding_coefficient(child, pop), 0.25)


def test_shared_great_grandparent():
    pop = Population([
        Individual("GG", sex="F"),
        Individual("MM", sex="F", mother_id="GG"),
        Individual("FM", sex="F", mother_id="GG"),
        Individual("M", sex="F", mother_id="MM"),
        Individual("F", sex="M", mother_id="FM"),
        Individual("X", sex="F", mother_id="M", father_id="F"),
    ])
    # 0.5^(2+2+1) = 0.03125, округление до 4 знаков вверх
    assert calculate_inbreeding_coefficient(pop.get("X"), pop) == 0.0313


def test_inbred_common_ancestor_raises_contribution():
    # mother1 инбредна (F = 0.125); её потомки от полных сибсов получают (1 + F)
    pop = Population(list(family) + [
        Individual("s1", sex="F", mother_id="mother1", father_id="father1"),
        Individual("s2", sex="M", mother_id="mother1", father_id="father1"),
        Individual("x", sex="F", mother_id="s1", father_id="s2"),
    ])
    # mother1: 0.5^3 · 1.125, father1: 0.5^3, остальные предки глубже
    f = calculate_inbreeding_coefficient(pop.get("x"), pop)
    assert f > 0.25
    assert f < 0.5


def test_cyclic_data_terminates():
    pop = Population([
        Individual("X", sex="F", mother_id="M", father_id="P"),
        Individual("M", sex="F", mother_id="X"),
        Individual("P", sex="M", mother_id="X"),
    ])
    f = calculate_inbreeding_coefficient(pop.get("X"), pop)
    assert 0 <= f < 1


def test_relationship_parent_child():
    off, mother = family.get("offspring1"), family.get("mother1")
    assert calculate_relationship_coefficient(off, mother, family) == 0.5
    assert calculate_relationship_coefficient(mother, off, family) == 0.5


def test_relationship_unrelated():
    rel = calculate_relationship_coefficient(family.get("offspring1"), family.get("unrelated1"), family)
    assert rel == 0


def test_relationship_half_sibs():
    rel = calculate_relationship_coefficient(family.get("gm1"), family.get("gf1"), family)
    assert np.isclose(rel, 0.25)


def test_relationship_through_ancestor_sets_only():
    # gm1 не входит в собственный набор предков, поэтому считаются только ggm1 и ggf1
    rel = calculate_relationship_coefficient(family.get("offspring1"), family.get("gm1"), family)
    assert np.isclose(rel, 0.125)


def test_session_matches_uncached():
    session = make_coefficient_fns(family)
    for ind in family:
        assert session.inbreeding(ind) == calculate_inbreeding_coefficient(ind, family)
    a, b = family.get("gm1"), family.get("gf1")
    assert session.relationship(a, b) == calculate_relationship_coefficient(a, b, family)
    assert session.common_ancestors(a, b) == {"ggm1": (1, 1)}


# замкнутая родословная: X – мать M, P и Q, и при этом дочь M и P
cyclic = Population([
    Individual("X", sex="F", mother_id="M", father_id="P"),
    Individual("M", sex="F", mother_id="X", father_id="Q"),
    Individual("P", sex="M", mother_id="X", father_id="Q"),
    Individual("Q", sex="M", mother_id="X", father_id="M"),
])


def test_session_matches_uncached_on_cyclic_pedigree():
    standalone = {ind.id: calculate_inbreeding_coefficient(ind, cyclic) for ind in cyclic}
    session = make_coefficient_fns(cyclic)
    for ind in cyclic:
        assert session.inbreeding(ind) == standalone[ind.id]

    tree = get_pedigree_data(cyclic.get("X"), cyclic, 2)
    for _, node in tree.iter_nodes():
        assert node.inbreeding_coefficient == standalone[node.individual.id]


def _chain(n):
    # брат × сестра в каждом поколении
    individuals = [Individual("f0", sex="F"), Individual("m0", sex="M")]
    for g in range(1, n):
        individuals.append(Individual(f"f{g}", sex="F", mother_id=f"f{g - 1}", father_id=f"m{g - 1}"))
        individuals.append(Individual(f"m{g}", sex="M", mother_id=f"f{g - 1}", father_id=f"m{g - 1}"))
    return Population(individuals)


def test_long_full_sib_line():
    line = _chain(600)
    assert np.isclose(calculate_inbreeding_coefficient(line.get("f599"), line), 0.5)
    rel = calculate_relationship_coefficient(line.get("f599"), line.get("m599"), line)
    assert rel > 0.5


def test_risk_levels():
    assert inbreeding_risk_level(0) == "none"
    assert inbreeding_risk_level(0.02) == "low"
    assert inbreeding_risk_level(0.05) == "moderate"
    assert inbreeding_risk_level(0.1) == "high"
    assert inbreeding_risk_level(0.25) == "very_high"
