from .genotype import GenotypeResult
from .result import DistanceResult

__all__ = ["GenotypeResult", "DistanceResult"]
