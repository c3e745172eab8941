"""
bruvo_pipeline/core

Bruvo's distance for one pair of genotypes at one locus: permutation tables,
the allele cost matrix, the minimum-cost allele assignment and the
missing-allele resolver.
"""

from .errors import (
    BruvoError,
    InvalidGenotypeError,
    InvalidPloidyError,
    MalformedPermutationTableError,
    MissingAlleleError,
    ReductionUnderflowError,
)
from .permutations import (
    MAX_PLOIDY,
    PermutationTable,
    generate_permutations,
    permutation_table,
    validate_permutation_table,
)
from .allele_matrix import MISSING_ALLELE, allele_distance_matrix
from .assignment import min_assignment
from .resolver import bruvo_distance, resolve_distance

__all__ = [
    "BruvoError",
    "InvalidGenotypeError",
    "InvalidPloidyError",
    "MalformedPermutationTableError",
    "MissingAlleleError",
    "ReductionUnderflowError",
    "MAX_PLOIDY",
    "PermutationTable",
    "generate_permutations",
    "permutation_table",
    "validate_permutation_table",
    "MISSING_ALLELE",
    "allele_distance_matrix",
    "min_assignment",
    "bruvo_distance",
    "resolve_distance",
]
