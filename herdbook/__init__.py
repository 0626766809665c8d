"""Родословные, инбридинг и подбор пар для племенного стада."""
from .ancestry import UNREACHABLE, get_ancestors, get_path_length
from .coefficients import (
    calculate_inbreeding_coefficient,
    calculate_relationship_coefficient,
    inbreeding_risk_level,
    make_coefficient_fns,
)
from .pedigree import PedigreeNode, get_pedigree_data, pedigree_frame
from .population import Individual, Population, Sex, Status
from .recommend import (
    MatingOptions,
    MatingRecommendation,
    Tier,
    generate_mating_recommendations,
)
