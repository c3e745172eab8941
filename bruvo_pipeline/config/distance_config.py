# bruvo_pipeline/config/distance_config.py

from pydantic import BaseModel, Field
from typing import Literal


class DistanceConfig(BaseModel):
    metric: Literal["bruvo"] = "bruvo"
    genome_add: bool = False
    genome_loss: bool = False
    min_confidence: float = Field(0.8, ge=0.0, le=1.0)
    min_sample_count: int = Field(2, ge=1)
    debug_mode: bool = False
