from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Union

Allele = Union[int, float, str, None]


@dataclass
class GenotypeResult:
    marker: str
    alleles: List[Allele]
    confidence: float = 1.0
    is_valid: bool = True
    qc_flags: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def observed_alleles(self) -> List[float]:
        """Allele sizes that were actually called; blanks, NA and 0 are skipped."""
        observed = []
        for allele in self.alleles:
            if allele is None:
                continue
            try:
                size = float(allele)
            except (TypeError, ValueError):
                continue
            if size != size or size <= 0:  # NaN or missing sentinel
                continue
            observed.append(size)
        return observed

    @staticmethod
    def from_dict(data: dict) -> "GenotypeResult":
        return GenotypeResult(
            marker=data["marker"],
            alleles=list(data.get("alleles", [])),
            confidence=float(data.get("confidence", 1.0)),
            is_valid=bool(data.get("is_valid", True)),
            qc_flags=data.get("qc_flags", []),
            metadata=data.get("metadata", {})
        )
