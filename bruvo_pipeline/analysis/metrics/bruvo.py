# bruvo_pipeline/analysis/metrics/bruvo.py

from bruvo_pipeline.analysis.metrics.base import BaseDistanceMetric
from bruvo_pipeline.analysis.pairwise import pair_indices, pairwise_allele_distance
from bruvo_pipeline.config.global_config import GlobalConfig
from bruvo_pipeline.config.marker_config import MarkerConfig
from bruvo_pipeline.core.allele_matrix import MISSING_ALLELE
from bruvo_pipeline.core.errors import BruvoError, InvalidGenotypeError, InvalidPloidyError
from bruvo_pipeline.core.permutations import check_ploidy, permutation_table
from bruvo_pipeline.core.resolver import resolve_distance
from bruvo_pipeline.models.genotype import GenotypeResult
from bruvo_pipeline.models.result import DistanceResult
from typing import List, Optional
import numpy as np


def to_repeat_count(allele_size: float, repeat_unit: int) -> int:
    """Convert an allele size to its repeat count using the marker repeat unit."""
    count = int(round(allele_size / repeat_unit))
    if count <= MISSING_ALLELE:
        raise InvalidGenotypeError(
            f"Allele size {allele_size} is below half the repeat unit {repeat_unit}."
        )
    return count


class BruvoDistanceMetric(BaseDistanceMetric):
    name = "bruvo"

    def __init__(
        self,
        debug: bool = False,
        genome_add: bool = False,
        genome_loss: bool = False,
        global_config: Optional[GlobalConfig] = None
    ):
        super().__init__(debug=debug)
        self.genome_add = genome_add
        self.genome_loss = genome_loss
        self.global_config = global_config or GlobalConfig()

    def ploidy_for(self, marker_cfg: MarkerConfig) -> int:
        ploidy = marker_cfg.effective_ploidy(self.global_config)
        return check_ploidy(ploidy, self.global_config.max_ploidy)

    def repeat_counts(self, geno: Optional[GenotypeResult], marker_cfg: MarkerConfig) -> np.ndarray:
        """
        Repeat counts for one genotype padded with the missing sentinel up to
        the marker ploidy.
        """
        ploidy = self.ploidy_for(marker_cfg)
        counts = np.full(ploidy, MISSING_ALLELE, dtype=np.int64)
        if geno is None or not geno.is_valid:
            return counts

        repeat_unit = marker_cfg.repeat_unit or 1
        observed = sorted(to_repeat_count(a, repeat_unit) for a in geno.observed_alleles())
        if len(observed) > ploidy:
            raise InvalidPloidyError(
                f"Marker '{marker_cfg.marker}': {len(observed)} alleles called for ploidy {ploidy}."
            )
        counts[:len(observed)] = observed
        return counts

    def compute(
        self,
        geno1: Optional[GenotypeResult],
        geno2: Optional[GenotypeResult],
        marker_cfg: MarkerConfig
    ) -> DistanceResult:
        table = permutation_table(self.ploidy_for(marker_cfg), self.global_config.max_ploidy)
        g1 = self.repeat_counts(geno1, marker_cfg)
        g2 = self.repeat_counts(geno2, marker_cfg)

        result = resolve_distance(g1, g2, table, loss=self.genome_loss, add=self.genome_add)
        if result.is_finite:
            self.log(f"{marker_cfg.marker}: Bruvo({g1.tolist()} vs {g2.tolist()}) = {result.value:.4f}")
        else:
            self.log(f"{marker_cfg.marker}: Bruvo({g1.tolist()} vs {g2.tolist()}) is {result.status}")
        return result

    def compute_locus(
        self,
        genotypes: List[Optional[GenotypeResult]],
        marker_cfg: MarkerConfig
    ) -> np.ndarray:
        n_pairs = len(genotypes) * (len(genotypes) - 1) // 2
        try:
            ploidy = self.ploidy_for(marker_cfg)
            table = permutation_table(ploidy, self.global_config.max_ploidy)
        except BruvoError as e:
            self.log(f"{marker_cfg.marker}: {e}")
            results = np.empty(n_pairs, dtype=object)
            for k in range(n_pairs):
                results[k] = DistanceResult.error(str(e))
            return results

        population = np.full((len(genotypes), ploidy), MISSING_ALLELE, dtype=np.int64)
        rejected = {}
        for i, geno in enumerate(genotypes):
            try:
                population[i] = self.repeat_counts(geno, marker_cfg)
            except BruvoError as e:
                rejected[i] = str(e)
                self.log(str(e))

        results = pairwise_allele_distance(
            population, ploidy, table=table,
            loss=self.genome_loss, add=self.genome_add,
            max_workers=self.global_config.max_workers
        )
        for k, (i, j) in enumerate(pair_indices(len(genotypes))):
            if i in rejected or j in rejected:
                results[k] = DistanceResult.error(rejected.get(i) or rejected[j])

        statuses = [r.status for r in results]
        self.log(
            f"{marker_cfg.marker}: {statuses.count('finite')} finite, "
            f"{statuses.count('undefined')} undefined, {statuses.count('error')} failed of {len(results)} pairs"
        )
        return results
