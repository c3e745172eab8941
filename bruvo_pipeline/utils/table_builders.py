# bruvo_pipeline/utils/table_builders

from typing import Dict, List
import numpy as np
import pandas as pd

from bruvo_pipeline.analysis.pairwise import pair_indices
from bruvo_pipeline.models.genotype import GenotypeResult


def build_genotype_results_df(genotypes: Dict[str, Dict[str, GenotypeResult]]) -> pd.DataFrame:
    rows = []

    for sample_id, markers in genotypes.items():
        for marker, genotype in markers.items():
            rows.append({
                "Sample": sample_id,
                "Marker": marker,
                "Genotype": "/".join(map(str, genotype.alleles)),
                "Confidence": genotype.confidence,
                "QC Flags": "; ".join(genotype.qc_flags),
            })

    return pd.DataFrame(rows, columns=["Sample", "Marker", "Genotype", "Confidence", "QC Flags"])


def build_pairwise_df(samples: List[str], locus_results: Dict[str, np.ndarray]) -> pd.DataFrame:
    """One row per sample pair and marker with the comparison status, distance and any failure message."""
    rows = []
    pairs = pair_indices(len(samples))

    for marker, results in locus_results.items():
        for (i, j), result in zip(pairs, results):
            rows.append({
                "sample_1": samples[i],
                "sample_2": samples[j],
                "marker": marker,
                "distance": result.to_float(),
                **result.to_dict(),
            })

    return pd.DataFrame(rows, columns=["sample_1", "sample_2", "marker", "status", "distance", "message"])
