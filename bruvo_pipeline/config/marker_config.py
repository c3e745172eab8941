# bruvo_pipeline/config/marker_config.py

from pydantic import BaseModel, model_validator
from typing import Optional, Dict, Any
from bruvo_pipeline.config.global_config import GlobalConfig


class MarkerConfig(BaseModel):
    marker: str
    repeat_unit: Optional[int] = None
    ploidy: Optional[int] = None
    overrides: Optional[Dict[str, Any]] = None

    def merged_with_global(self, global_cfg: GlobalConfig) -> Dict[str, Any]:
        """
        Effective configuration for this marker: the global values, replaced by
        any matching ``overrides`` and by an explicit marker ploidy.
        """
        base = global_cfg.model_dump()
        if self.overrides:
            for key, value in self.overrides.items():
                if key in base:
                    base[key] = value
        if self.ploidy is not None:
            base["ploidy"] = self.ploidy
        return base

    def effective_ploidy(self, global_cfg: GlobalConfig) -> int:
        return int(self.merged_with_global(global_cfg)["ploidy"])

    @model_validator(mode="after")
    def validate_required_fields(self) -> "MarkerConfig":
        if not self.marker:
            raise ValueError("Marker name is required.")
        if self.repeat_unit is not None and self.repeat_unit <= 0:
            raise ValueError(f"Marker '{self.marker}': repeat_unit must be positive.")
        if self.ploidy is not None and self.ploidy < 1:
            raise ValueError(f"Marker '{self.marker}': ploidy must be at least 1.")
        return self
