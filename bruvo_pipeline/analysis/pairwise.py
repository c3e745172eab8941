# bruvo_pipeline/analysis/pairwise.py

"""
Bruvo's distance over every pair of individuals in a population.

A population is an ``n x (loci * ploidy)`` matrix of repeat counts with one
column per allele; columns ``[k * ploidy, (k + 1) * ploidy)`` hold locus ``k``.
Results are ``DistanceResult`` objects in pair order ``(0, 1), (0, 2), ...,
(n - 2, n - 1)``, one column per locus.
"""

import itertools
import logging
import threading
from concurrent.futures import CancelledError, ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple
import numpy as np

from bruvo_pipeline.core.errors import BruvoError, InvalidGenotypeError, InvalidPloidyError
from bruvo_pipeline.core.permutations import (
    PermutationTable,
    as_permutation_table,
    permutation_table,
    validate_permutation_table,
)
from bruvo_pipeline.core.resolver import resolve_distance
from bruvo_pipeline.models.result import DistanceResult

logger = logging.getLogger(__name__)


def _check_population(population, ploidy: int) -> np.ndarray:
    pop = np.asarray(population)
    if pop.ndim != 2:
        raise InvalidGenotypeError(f"Population matrix must be two-dimensional, got shape {pop.shape}.")
    if ploidy < 1 or pop.shape[1] % ploidy != 0:
        raise InvalidPloidyError(
            f"Population matrix has {pop.shape[1]} allele columns, not a multiple of ploidy {ploidy}."
        )
    return pop


def _resolve_cell(a: np.ndarray, b: np.ndarray, table: PermutationTable, loss: bool, add: bool) -> DistanceResult:
    try:
        return resolve_distance(a, b, table, loss=loss, add=add)
    except (BruvoError, MemoryError) as e:
        logger.warning(f"Comparison {a.tolist()} vs {b.tolist()} failed: {e}")
        return DistanceResult.error(str(e) or type(e).__name__)


def _resolve_row(
    locus: np.ndarray,
    i: int,
    table: PermutationTable,
    loss: bool,
    add: bool,
    cancel_event: Optional[threading.Event]
) -> List[DistanceResult]:
    row = []
    for j in range(i + 1, locus.shape[0]):
        if cancel_event is not None and cancel_event.is_set():
            raise CancelledError()
        row.append(_resolve_cell(locus[i], locus[j], table, loss, add))
    return row


def _place_row(out: np.ndarray, start: int, row: List[DistanceResult]) -> None:
    for offset, result in enumerate(row):
        out[start + offset] = result


def pair_indices(n: int) -> List[Tuple[int, int]]:
    return list(itertools.combinations(range(n), 2))


def pairwise_allele_distance(
    population: Sequence[Sequence[int]],
    ploidy: int,
    table: Optional[PermutationTable] = None,
    loss: bool = False,
    add: bool = False,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None
) -> np.ndarray:
    """
    Distances between all individuals at a single locus.

    ``population`` is ``n x ploidy``. Returns an object array of length
    ``n * (n - 1) / 2``. A failing comparison becomes ``DistanceResult.error``
    and does not affect the others. Setting ``cancel_event`` stops the batch
    with ``concurrent.futures.CancelledError``.
    """
    locus = _check_population(population, ploidy)
    if locus.shape[1] != ploidy:
        raise InvalidPloidyError(
            f"Locus matrix has {locus.shape[1]} allele columns, expected {ploidy}."
        )

    if table is None:
        table = permutation_table(ploidy)
    else:
        table = as_permutation_table(table, ploidy)
        validate_permutation_table(table)

    n = locus.shape[0]
    out = np.empty(n * (n - 1) // 2, dtype=object)
    offsets = [i * n - i * (i + 1) // 2 for i in range(n)]

    if not max_workers or max_workers == 1 or n < 3:
        for i in range(n - 1):
            _place_row(out, offsets[i], _resolve_row(locus, i, table, loss, add, cancel_event))
        return out

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(_resolve_row, locus, i, table, loss, add, cancel_event): i
            for i in range(n - 1)
        }
        try:
            for future in as_completed(futures):
                i = futures[future]
                _place_row(out, offsets[i], future.result())
        except CancelledError:
            for future in futures:
                future.cancel()
            raise

    if cancel_event is not None and cancel_event.is_set():
        raise CancelledError()
    return out


def bruvo_population_distance(
    population: Sequence[Sequence[int]],
    ploidy: int,
    table: Optional[PermutationTable] = None,
    loss: bool = False,
    add: bool = False,
    max_workers: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None
) -> np.ndarray:
    """Pairwise distances for every locus; shape ``(n * (n - 1) / 2, loci)``."""
    pop = _check_population(population, ploidy)
    n_loci = pop.shape[1] // ploidy
    n = pop.shape[0]
    out = np.empty((n * (n - 1) // 2, n_loci), dtype=object)

    for k in range(n_loci):
        locus = pop[:, k * ploidy:(k + 1) * ploidy]
        out[:, k] = pairwise_allele_distance(
            locus, ploidy, table=table, loss=loss, add=add,
            max_workers=max_workers, cancel_event=cancel_event
        )
        statuses = [r.status for r in out[:, k]]
        logger.info(
            f"Locus {k}: {statuses.count('finite')} finite, "
            f"{statuses.count('undefined')} undefined, {statuses.count('error')} failed comparisons."
        )

    return out


def results_to_array(results: np.ndarray) -> np.ndarray:
    """Float view of a result array; undefined and failed cells become NaN."""
    results = np.asarray(results, dtype=object)
    return np.vectorize(lambda r: r.to_float(), otypes=[float])(results) if results.size else results.astype(float)


def average_over_loci(results: np.ndarray) -> np.ndarray:
    """
    Mean over the locus axis, skipping undefined and failed cells. Rows with
    no finite locus are NaN.
    """
    values = results_to_array(results)
    if values.ndim == 1:
        values = values[:, None]
    finite = ~np.isnan(values)
    counts = finite.sum(axis=1)
    sums = np.where(finite, values, 0.0).sum(axis=1)
    with np.errstate(invalid="ignore", divide="ignore"):
        return np.where(counts > 0, sums / np.maximum(counts, 1), np.nan)
