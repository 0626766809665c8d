"""Мини‑родословные для юнит‑тестов."""
import pandas as pd

from herdbook.population import Individual, Population

# Четыре поколения; gm1 и gf1 – полусибсы через ggm1, их дочь mother1 инбредна.
family = Population([
    Individual("ggm1", sex="F", status="DEAD"),
    Individual("ggf1", sex="M", status="DEAD"),
    Individual("gm1", sex="F", status="RETIRED", mother_id="ggm1", father_id="ggf1"),
    Individual("gf1", sex="M", status="RETIRED", mother_id="ggm1"),
    Individual("mother1", sex="F", status="REPRO", mother_id="gm1", father_id="gf1"),
    Individual("father1", sex="M", status="REPRO"),
    Individual("offspring1", sex="F", status="GROW", mother_id="mother1", father_id="father1"),
    Individual("unrelated1", sex="M", status="REPRO", breed="Rex"),
])

# Стадо для подбора пар:
#   P1, P2 – полные сибсы (G1 × G2); P4 – полусибс P1 по отцу G2
#   C1 = P4 × P3, C2 = P1 × P3
herd = Population([
    Individual("G1", sex="F", status="REPRO"),
    Individual("G2", sex="M", status="REPRO"),
    Individual("G3", sex="F", status="DEAD"),
    Individual("G4", sex="M", status="DEAD"),
    Individual("P1", sex="F", status="REPRO", mother_id="G1", father_id="G2"),
    Individual("P2", sex="M", status="REPRO", mother_id="G1", father_id="G2"),
    Individual("P3", sex="M", status="REPRO", mother_id="G3", father_id="G4"),
    Individual("P4", sex="F", status="REPRO", mother_id="G3", father_id="G2"),
    Individual("C1", sex="M", status="REPRO", mother_id="P4", father_id="P3"),
    Individual("C2", sex="F", status="REPRO", mother_id="P1", father_id="P3"),
    Individual("X", sex="M", status="REPRO", breed="Rex"),
    Individual("Y", sex="M", status="GROW"),
])

pedigree = pd.DataFrame(
    [
        {"id": "G1", "mother_id": None, "father_id": None},
        {"id": "P1", "mother_id": "G1", "father_id": None},
        {"id": "P2", "mother_id": "G1", "father_id": None},
        {"id": "A",  "mother_id": "P1", "father_id": None},
        {"id": "B",  "mother_id": "P2", "father_id": None},
    ]
)
