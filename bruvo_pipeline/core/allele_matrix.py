# bruvo_pipeline/core/allele_matrix.py

from typing import Sequence, Tuple
import numpy as np

from bruvo_pipeline.core.errors import InvalidGenotypeError, InvalidPloidyError, MissingAlleleError

MISSING_ALLELE = 0


def as_genotype_pair(genotype_a: Sequence[int], genotype_b: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    a = np.asarray(genotype_a)
    b = np.asarray(genotype_b)

    for geno in (a, b):
        if geno.ndim != 1:
            raise InvalidGenotypeError(f"Genotype must be one-dimensional, got shape {geno.shape}.")
        if geno.size and not np.issubdtype(geno.dtype, np.integer):
            if not np.all(np.equal(np.mod(geno, 1), 0)):
                raise InvalidGenotypeError(f"Alleles must be whole repeat counts, got {geno.tolist()}.")

    if a.size == 0 or b.size == 0:
        raise InvalidPloidyError("Ploidy must be at least 1.")
    if a.size != b.size:
        raise InvalidPloidyError(f"Ploidy mismatch: {a.size} vs {b.size} alleles.")

    a = a.astype(np.int64)
    b = b.astype(np.int64)
    if (a < 0).any() or (b < 0).any():
        raise InvalidGenotypeError("Allele repeat counts cannot be negative.")
    return a, b


def cost_matrix(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    # Row i is allele a[i], column j is allele b[j].
    return 1.0 - np.power(2.0, -np.abs(a[:, None] - b[None, :]).astype(float))


def allele_distance_matrix(genotype_a: Sequence[int], genotype_b: Sequence[int]) -> np.ndarray:
    """
    Stepwise-mutation cost between every allele of two fully observed
    genotypes: ``1 - 2 ** -|a_i - b_j|``.
    """
    a, b = as_genotype_pair(genotype_a, genotype_b)
    if (a == MISSING_ALLELE).any() or (b == MISSING_ALLELE).any():
        raise MissingAlleleError("Allele distance matrix requires fully observed genotypes.")
    return cost_matrix(a, b)
