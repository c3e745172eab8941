# bruvo_pipeline/analysis/metrics/base.py

from abc import ABC, abstractmethod
from bruvo_pipeline.models.genotype import GenotypeResult
from bruvo_pipeline.models.result import DistanceResult
from bruvo_pipeline.config.marker_config import MarkerConfig
from typing import List, Optional
import numpy as np


class BaseDistanceMetric(ABC):
    name: str

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.logs = []

    @abstractmethod
    def compute(
        self,
        geno1: Optional[GenotypeResult],
        geno2: Optional[GenotypeResult],
        marker_cfg: MarkerConfig
    ) -> DistanceResult:
        ...

    def compute_locus(
        self,
        genotypes: List[Optional[GenotypeResult]],
        marker_cfg: MarkerConfig
    ) -> np.ndarray:
        """All pairs ``i < j`` at one marker, in row-major pair order."""
        n = len(genotypes)
        out = np.empty(n * (n - 1) // 2, dtype=object)
        k = 0
        for i in range(n - 1):
            for j in range(i + 1, n):
                out[k] = self.compute(genotypes[i], genotypes[j], marker_cfg)
                k += 1
        return out

    def log(self, msg: str):
        if self.debug:
            self.logs.append(msg)

    def get_logs(self):
        return self.logs
