"""
bruvo_pipeline

Bruvo's genetic distance for microsatellite genotypes of any ploidy, with
missing-allele handling and a pairwise batch layer for whole populations.
"""

__version__ = "0.1.0"

from bruvo_pipeline.core import (
    BruvoError,
    PermutationTable,
    bruvo_distance,
    generate_permutations,
    permutation_table,
    resolve_distance,
)
from bruvo_pipeline.models import DistanceResult, GenotypeResult
from bruvo_pipeline.analysis import DistanceCalculator, bruvo_population_distance, pairwise_allele_distance

__all__ = [
    "BruvoError",
    "PermutationTable",
    "bruvo_distance",
    "generate_permutations",
    "permutation_table",
    "resolve_distance",
    "DistanceResult",
    "GenotypeResult",
    "DistanceCalculator",
    "bruvo_population_distance",
    "pairwise_allele_distance",
]
