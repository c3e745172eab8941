from .base import BaseDistanceMetric
from .bruvo import BruvoDistanceMetric

__all__ = ["BaseDistanceMetric", "BruvoDistanceMetric"]
