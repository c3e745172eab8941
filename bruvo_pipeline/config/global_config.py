# bruvo_pipeline/config/global_config.py

from pydantic import BaseModel, Field, model_validator
from typing import Optional

from bruvo_pipeline.core.permutations import MAX_PLOIDY


class GlobalConfig(BaseModel):
    ploidy: int = Field(2, ge=1)
    max_ploidy: int = Field(MAX_PLOIDY, ge=1)
    max_workers: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def validate_ploidy(self) -> "GlobalConfig":
        if self.ploidy > self.max_ploidy:
            raise ValueError(f"ploidy {self.ploidy} exceeds max_ploidy {self.max_ploidy}.")
        return self
