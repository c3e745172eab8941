# bruvo_pipeline/analysis/frequency.py

from typing import Sequence
import numpy as np


def pairwise_covar(values: Sequence[float]) -> np.ndarray:
    """
    Root product ``sqrt(v_i * v_j)`` for every pair ``i < j``, e.g. of
    per-locus variances. Returns a vector of length ``n * (n - 1) / 2``.
    """
    v = np.asarray(values, dtype=float).reshape(-1)
    i, j = np.triu_indices(v.size, k=1)
    return np.sqrt(v[i] * v[j])


def pairwise_allele_diffs(freq_matrix) -> np.ndarray:
    """
    Absolute allele-count difference between every pair of rows.

    ``freq_matrix`` is individuals x alleles at a single locus and should hold
    whole counts (scale dosages up first, e.g. by ploidy); each column
    difference is truncated to an integer. A pair where either row contains
    NaN scores 0.
    """
    m = np.asarray(freq_matrix, dtype=float)
    if m.ndim != 2:
        raise ValueError(f"Frequency matrix must be two-dimensional, got shape {m.shape}.")

    i, j = np.triu_indices(m.shape[0], k=1)
    diffs = np.abs(m[i] - m[j])
    unobserved = np.isnan(diffs).any(axis=1)
    totals = np.trunc(np.where(np.isnan(diffs), 0.0, diffs)).sum(axis=1)
    totals[unobserved] = 0
    return totals.astype(np.int64)
