# bruvo_pipeline/core/assignment.py

import numpy as np

from bruvo_pipeline.core.errors import InvalidPloidyError
from bruvo_pipeline.core.permutations import PermutationTable


def min_assignment(table: PermutationTable, matrix: np.ndarray) -> float:
    """
    Smallest total cost over all allele pairings.

    Each permutation block ``perm`` pairs row ``perm[k]`` with column ``k``;
    the result is the minimum of ``sum(matrix[perm[k], k])`` over all blocks.
    The sum is not normalized by ploidy.
    """
    matrix = np.asarray(matrix, dtype=float)
    p = table.ploidy
    if matrix.shape != (p, p):
        raise InvalidPloidyError(
            f"Distance matrix shape {matrix.shape} does not match ploidy {p}."
        )

    costs = matrix[table.blocks, np.arange(p)].sum(axis=1)
    return float(costs.min())
