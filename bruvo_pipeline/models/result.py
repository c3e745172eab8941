# bruvo_pipeline/models/result.py

from dataclasses import dataclass
from typing import Literal, Optional
import math

Status = Literal["finite", "undefined", "error"]


@dataclass(frozen=True)
class DistanceResult:
    """
    Outcome of one genotype comparison at one locus.

    ``undefined`` means one genotype had no observed alleles. ``error`` marks a
    comparison that was rejected; the batch layer records it instead of
    aborting. Neither carries a numeric value.
    """
    status: Status
    value: Optional[float] = None
    message: Optional[str] = None

    @classmethod
    def finite(cls, value: float) -> "DistanceResult":
        return cls(status="finite", value=float(value))

    @classmethod
    def undefined(cls) -> "DistanceResult":
        return cls(status="undefined")

    @classmethod
    def error(cls, message: str) -> "DistanceResult":
        return cls(status="error", message=message)

    @property
    def is_finite(self) -> bool:
        return self.status == "finite"

    @property
    def is_undefined(self) -> bool:
        return self.status == "undefined"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    def to_float(self) -> float:
        return self.value if self.is_finite else math.nan

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "value": self.value,
            "message": self.message
        }
