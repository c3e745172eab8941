# bruvo_pipeline/core/resolver.py

"""
Bruvo's distance between two genotypes at one microsatellite locus.

Alleles are repeat counts (allele size divided by the marker repeat unit);
``0`` marks an allele that was not observed. When only one genotype has gaps,
the contribution of the first gap is imputed with one of three models:

- infinite allele (default): every comparison against a missing allele costs 1
- genome addition (``add``): the gap takes each of the genotype's own other
  alleles in turn
- genome loss (``loss``): the gap takes each allele of the other genotype in
  turn, and the completed pair is resolved again

With both flags set the two model averages are averaged.
"""

import logging
from typing import Sequence, Tuple, Union
import numpy as np

from bruvo_pipeline.core.allele_matrix import MISSING_ALLELE, as_genotype_pair, cost_matrix
from bruvo_pipeline.core.assignment import min_assignment
from bruvo_pipeline.core.errors import MissingAlleleError, ReductionUnderflowError
from bruvo_pipeline.core.permutations import PermutationTable, as_permutation_table, generate_permutations
from bruvo_pipeline.models.result import DistanceResult

logger = logging.getLogger(__name__)

TableLike = Union[PermutationTable, Sequence[int]]


def bruvo_distance(genotype_a: Sequence[int], genotype_b: Sequence[int], table: TableLike) -> float:
    """Distance between two fully observed genotypes."""
    a, b = as_genotype_pair(genotype_a, genotype_b)
    if (a == MISSING_ALLELE).any() or (b == MISSING_ALLELE).any():
        raise MissingAlleleError(
            "bruvo_distance requires fully observed genotypes; use resolve_distance for missing alleles."
        )
    table = as_permutation_table(table, a.size)
    return min_assignment(table, cost_matrix(a, b)) / a.size


def resolve_distance(
    genotype_a: Sequence[int],
    genotype_b: Sequence[int],
    table: TableLike,
    loss: bool = False,
    add: bool = False
) -> DistanceResult:
    """Distance between two genotypes, handling missing alleles."""
    a, b = as_genotype_pair(genotype_a, genotype_b)
    table = as_permutation_table(table, a.size)
    return _resolve(np.vstack([a, b]), table, bool(loss), bool(add))


def _resolve(genos: np.ndarray, table: PermutationTable, loss: bool, add: bool) -> DistanceResult:
    p = genos.shape[1]
    z0, z1 = (int(n) for n in (genos == MISSING_ALLELE).sum(axis=1))

    if z0 == p or z1 == p:
        logger.debug("All alleles missing in one genotype; distance undefined.")
        return DistanceResult.undefined()

    if z0 == 0 and z1 == 0:
        return DistanceResult.finite(min_assignment(table, cost_matrix(genos[0], genos[1])) / p)

    if z0 > 0 and z1 > 0:
        reduced, reduced_table = _drop_shared_gaps(genos, z0, z1)
        logger.debug(f"Both genotypes missing alleles ({z0}, {z1}); reducing ploidy {p} -> {reduced.shape[1]}.")
        return _resolve(reduced, reduced_table, loss, add)

    return DistanceResult.finite(_impute_one_side(genos, table, loss, add))


def _drop_shared_gaps(genos: np.ndarray, z0: int, z1: int) -> Tuple[np.ndarray, PermutationTable]:
    """Remove the first ``min(z0, z1)`` gaps from each genotype."""
    p = genos.shape[1]
    shared = min(z0, z1)
    reduction = p - shared
    if reduction <= 0:
        raise ReductionUnderflowError(
            f"Cannot reduce ploidy {p} by {shared} shared missing alleles."
        )

    reduced = np.empty((2, reduction), dtype=genos.dtype)
    for row in range(2):
        keep = np.ones(p, dtype=bool)
        keep[np.flatnonzero(genos[row] == MISSING_ALLELE)[:shared]] = False
        reduced[row] = genos[row, keep]

    return reduced, generate_permutations(reduction)


def _overwrite(matrix: np.ndarray, miss_row: int, target: int, source: int) -> None:
    # Genotype 0 alleles are rows, genotype 1 alleles are columns.
    if miss_row == 0:
        matrix[target, :] = matrix[source, :]
    else:
        matrix[:, target] = matrix[:, source]


def _impute_one_side(genos: np.ndarray, table: PermutationTable, loss: bool, add: bool) -> float:
    p = genos.shape[1]
    miss_row = 0 if (genos[0] == MISSING_ALLELE).any() else 1
    full_row = 1 - miss_row
    gaps = np.flatnonzero(genos[miss_row] == MISSING_ALLELE)
    gap = int(gaps[0])
    matrix = cost_matrix(genos[0], genos[1])

    if not loss and not add:
        for idx in gaps:
            if miss_row == 0:
                matrix[idx, :] = 1.0
            else:
                matrix[:, idx] = 1.0
        return min_assignment(table, matrix) / p

    genome_add_sum = 0.0
    genome_loss_sum = 0.0

    if add:
        for donor in range(p):
            if donor == gap:
                continue
            _overwrite(matrix, miss_row, gap, donor)
            genome_add_sum += min_assignment(table, matrix)
        genome_add_sum /= p - 1

    if loss:
        patched = genos.copy()
        for allele in genos[full_row]:
            patched[miss_row, gap] = allele
            # Undo the per-allele normalization of the nested call.
            genome_loss_sum += _resolve(patched, table, loss, add).value * p
        genome_loss_sum /= p

    n_models = int(loss) + int(add)
    return (genome_add_sum + genome_loss_sum) / (p * n_models)
