# bruvo_pipeline/core/permutations.py

from dataclasses import dataclass
from functools import lru_cache
from math import factorial
from typing import List, Sequence, Union
import numpy as np

from bruvo_pipeline.core.errors import InvalidPloidyError, MalformedPermutationTableError

# 8! * 8 indices is ~320k entries; one more allele multiplies that by ten.
MAX_PLOIDY = 8


@dataclass(frozen=True)
class PermutationTable:
    """
    All orderings of allele indices for one ploidy.

    ``blocks`` has shape ``(p!, p)``; row ``b`` is one permutation of
    ``range(p)``. The array is read-only so a table can be shared between
    threads and cached per ploidy.
    """
    ploidy: int
    blocks: np.ndarray

    @property
    def flat(self) -> np.ndarray:
        return self.blocks.reshape(-1)

    def __len__(self) -> int:
        return self.blocks.shape[0]

    @classmethod
    def from_flat(cls, flat: Sequence[int], ploidy: int) -> "PermutationTable":
        check_ploidy(ploidy)
        values = np.asarray(flat, dtype=np.intp).reshape(-1)
        if values.size % ploidy != 0:
            raise MalformedPermutationTableError(
                f"Permutation table of length {values.size} is not a multiple of ploidy {ploidy}."
            )
        blocks = values.reshape(-1, ploidy).copy()
        blocks.setflags(write=False)
        table = cls(ploidy=ploidy, blocks=blocks)
        validate_permutation_table(table)
        return table


def check_ploidy(ploidy: int, max_ploidy: int = MAX_PLOIDY) -> int:
    if isinstance(ploidy, bool) or not isinstance(ploidy, (int, np.integer)):
        raise InvalidPloidyError(f"Ploidy must be an integer, got {ploidy!r}.")
    if ploidy < 1:
        raise InvalidPloidyError(f"Ploidy must be at least 1, got {ploidy}.")
    if ploidy > max_ploidy:
        raise InvalidPloidyError(
            f"Ploidy {ploidy} exceeds the supported maximum of {max_ploidy}."
        )
    return int(ploidy)


def _permute(alleles: List[int], i: int, out: np.ndarray, cursor: int) -> int:
    # Returns the next free block index.
    if i == len(alleles) - 1:
        out[cursor] = alleles
        return cursor + 1

    for j in range(i, len(alleles)):
        alleles[i], alleles[j] = alleles[j], alleles[i]
        cursor = _permute(alleles, i + 1, out, cursor)
        alleles[i], alleles[j] = alleles[j], alleles[i]
    return cursor


def generate_permutations(ploidy: int, max_ploidy: int = MAX_PLOIDY) -> PermutationTable:
    """Enumerate every permutation of ``range(ploidy)`` by backtracking swaps."""
    ploidy = check_ploidy(ploidy, max_ploidy)
    n_blocks = factorial(ploidy)
    out = np.empty((n_blocks, ploidy), dtype=np.intp)

    written = _permute(list(range(ploidy)), 0, out, 0)
    if written != n_blocks:
        raise MalformedPermutationTableError(
            f"Generated {written} permutations for ploidy {ploidy}, expected {n_blocks}."
        )

    out.setflags(write=False)
    return PermutationTable(ploidy=ploidy, blocks=out)


@lru_cache(maxsize=None)
def _cached_table(ploidy: int) -> PermutationTable:
    return generate_permutations(ploidy)


def permutation_table(ploidy: int, max_ploidy: int = MAX_PLOIDY) -> PermutationTable:
    """Shared, cached table for ``ploidy``."""
    return _cached_table(check_ploidy(ploidy, max_ploidy))


def validate_permutation_table(table: PermutationTable) -> None:
    p = table.ploidy
    blocks = table.blocks
    if blocks.ndim != 2 or blocks.shape[1] != p:
        raise MalformedPermutationTableError(
            f"Permutation blocks must have width {p}, got shape {blocks.shape}."
        )
    if blocks.shape[0] != factorial(p):
        raise MalformedPermutationTableError(
            f"Expected {factorial(p)} permutation blocks for ploidy {p}, got {blocks.shape[0]}."
        )
    if not np.array_equal(np.sort(blocks, axis=1), np.broadcast_to(np.arange(p), blocks.shape)):
        raise MalformedPermutationTableError("Every block must be a permutation of range(ploidy).")
    if np.unique(blocks, axis=0).shape[0] != blocks.shape[0]:
        raise MalformedPermutationTableError("Permutation blocks must be distinct.")


def as_permutation_table(table: Union[PermutationTable, Sequence[int]], ploidy: int) -> PermutationTable:
    """Accept a ``PermutationTable`` or a flat ``p * p!`` index sequence."""
    if isinstance(table, PermutationTable):
        if table.ploidy != ploidy:
            raise MalformedPermutationTableError(
                f"Permutation table is for ploidy {table.ploidy}, genotypes have ploidy {ploidy}."
            )
        return table
    return PermutationTable.from_flat(table, ploidy)
