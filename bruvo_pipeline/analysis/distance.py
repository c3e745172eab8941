# bruvo_pipeline/analysis/distance.py

from bruvo_pipeline.analysis.metrics.bruvo import BruvoDistanceMetric
from bruvo_pipeline.analysis.metrics.base import BaseDistanceMetric
from bruvo_pipeline.analysis.pairwise import average_over_loci, pair_indices
from bruvo_pipeline.config.distance_config import DistanceConfig
from bruvo_pipeline.config.global_config import GlobalConfig
from bruvo_pipeline.config.marker_config import MarkerConfig
from bruvo_pipeline.models.genotype import GenotypeResult
from typing import Dict, List, Optional
import logging
import pandas as pd
import numpy as np

logger = logging.getLogger(__name__)

# Metric registry
DISTANCE_REGISTRY = {
    "bruvo": BruvoDistanceMetric,
}


class DistanceCalculator:
    def __init__(
        self,
        genotype_matrix: Dict[str, Dict[str, GenotypeResult]],
        marker_configs: Dict[str, MarkerConfig],
        global_config: Optional[GlobalConfig] = None
    ):
        self.genotypes = genotype_matrix  # sample -> marker -> GenotypeResult
        self.marker_configs = marker_configs
        self.global_config = global_config or GlobalConfig()
        self.samples = sorted(genotype_matrix.keys())
        self.debug_logs = []
        self.included_markers = []
        self.locus_results: Dict[str, np.ndarray] = {}

    def build_metric(self, config: DistanceConfig) -> BaseDistanceMetric:
        metric_cls = DISTANCE_REGISTRY.get(config.metric)
        if not metric_cls:
            raise ValueError(f"Unknown distance metric: {config.metric}")
        return metric_cls(
            debug=config.debug_mode,
            genome_add=config.genome_add,
            genome_loss=config.genome_loss,
            global_config=self.global_config
        )

    def compute_matrix(self, config: DistanceConfig) -> pd.DataFrame:
        """
        Sample x sample Bruvo distance averaged over the markers each pair
        could be compared at. Markers where either genotype is missing or
        failed do not count towards the average; a pair with no comparable
        marker is NaN.
        """
        metric = self.build_metric(config)
        self.included_markers = self._eligible_markers(config)
        self.locus_results = {}

        for marker in self.included_markers:
            genotypes = [self._confident_genotype(s, marker, config) for s in self.samples]
            self.locus_results[marker] = metric.compute_locus(genotypes, self.marker_configs[marker])

        dist_matrix = pd.DataFrame(np.nan, index=self.samples, columns=self.samples)
        for s in self.samples:
            dist_matrix.at[s, s] = 0.0

        if self.locus_results:
            stacked = np.column_stack([self.locus_results[m] for m in self.included_markers])
            averages = average_over_loci(stacked)
            for k, (i, j) in enumerate(pair_indices(len(self.samples))):
                s1, s2 = self.samples[i], self.samples[j]
                dist_matrix.at[s1, s2] = averages[k]
                dist_matrix.at[s2, s1] = averages[k]

        n_missing = int(dist_matrix.isna().to_numpy().sum() // 2)
        if n_missing:
            logger.info(f"{n_missing} sample pairs share no comparable marker; distance left as NaN.")

        self.debug_logs = metric.get_logs()
        return dist_matrix

    def _confident_genotype(self, sample: str, marker: str, config: DistanceConfig) -> Optional[GenotypeResult]:
        geno = self.genotypes[sample].get(marker)
        if geno is None or geno.confidence < config.min_confidence:
            return None
        return geno

    def _eligible_markers(self, config: DistanceConfig) -> List[str]:
        markers = sorted(
            {m for g in self.genotypes.values() for m in g} & set(self.marker_configs)
        )
        filtered = []

        for marker in markers:
            sample_count = sum(
                1 for s in self.samples if self._confident_genotype(s, marker, config) is not None
            )
            if sample_count < config.min_sample_count:
                logger.debug(f"Skipping marker {marker}: {sample_count} confident samples.")
                continue
            filtered.append(marker)

        return filtered

    def get_debug_log(self) -> str:
        return "\n".join(self.debug_logs)

    def get_included_markers(self) -> List[str]:
        return self.included_markers
