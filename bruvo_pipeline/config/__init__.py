from .global_config import GlobalConfig
from .marker_config import MarkerConfig
from .distance_config import DistanceConfig

__all__ = ["GlobalConfig", "MarkerConfig", "DistanceConfig"]
