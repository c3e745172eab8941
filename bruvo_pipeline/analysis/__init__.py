from .pairwise import (
    average_over_loci,
    bruvo_population_distance,
    pair_indices,
    pairwise_allele_distance,
    results_to_array,
)
from .frequency import pairwise_allele_diffs, pairwise_covar
from .distance import DISTANCE_REGISTRY, DistanceCalculator

__all__ = [
    "average_over_loci",
    "bruvo_population_distance",
    "pair_indices",
    "pairwise_allele_distance",
    "results_to_array",
    "pairwise_allele_diffs",
    "pairwise_covar",
    "DISTANCE_REGISTRY",
    "DistanceCalculator",
]
