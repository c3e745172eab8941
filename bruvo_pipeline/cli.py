#!/usr/bin/env python3

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from bruvo_pipeline.analysis.distance import DistanceCalculator
from bruvo_pipeline.config import DistanceConfig, GlobalConfig, MarkerConfig
from bruvo_pipeline.models.genotype import GenotypeResult
from bruvo_pipeline.utils.table_builders import build_genotype_results_df, build_pairwise_df

logger = logging.getLogger(__name__)


def parse_marker_config(json_path: str) -> Dict[str, MarkerConfig]:
    with open(json_path) as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("Marker config JSON must be a list of marker definitions.")

    markers = [MarkerConfig(**entry) for entry in raw]
    return {m.marker: m for m in markers}


def parse_genotypes(json_path: str) -> Dict[str, Dict[str, GenotypeResult]]:
    """
    Read ``{sample: {marker: genotype}}`` where a genotype is either a
    ``GenotypeResult`` dict or a bare list of allele sizes.
    """
    with open(json_path) as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("Genotype JSON must map sample names to marker genotypes.")

    genotypes = {}
    for sample, markers in raw.items():
        genotypes[sample] = {}
        for marker, entry in markers.items():
            if isinstance(entry, list):
                entry = {"marker": marker, "alleles": entry}
            else:
                entry = {"marker": marker, **entry}
            genotypes[sample][marker] = GenotypeResult.from_dict(entry)
    return genotypes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute Bruvo's distance between microsatellite genotypes.")
    parser.add_argument("genotypes", type=str, help="Path to genotypes (JSON)")
    parser.add_argument("--markers", required=True, help="Path to marker config (JSON)")
    parser.add_argument("--ploidy", type=int, default=2, help="Default ploidy for markers without one")
    parser.add_argument("--add", action="store_true", help="Use the genome addition model for missing alleles")
    parser.add_argument("--loss", action="store_true", help="Use the genome loss model for missing alleles")
    parser.add_argument("--min-confidence", type=float, default=0.0, help="Ignore genotype calls below this confidence")
    parser.add_argument("--min-samples", type=int, default=2, help="Skip markers called in fewer samples")
    parser.add_argument("--workers", type=int, default=None, help="Threads for pairwise comparisons")
    parser.add_argument("--pairs", help="Optional path to write per-marker pairwise results as CSV")
    parser.add_argument("--genotype-table", help="Optional path to write the parsed genotype calls as CSV")
    parser.add_argument("--output", help="Optional path to write the distance matrix as CSV")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    for path in (args.genotypes, args.markers):
        if not os.path.exists(path):
            logger.error(f"File not found: {path}")
            return 1

    try:
        marker_configs = parse_marker_config(args.markers)
        genotypes = parse_genotypes(args.genotypes)
        global_cfg = GlobalConfig(ploidy=args.ploidy, max_workers=args.workers)
        distance_cfg = DistanceConfig(
            genome_add=args.add,
            genome_loss=args.loss,
            min_confidence=args.min_confidence,
            min_sample_count=args.min_samples,
        )
        calculator = DistanceCalculator(genotypes, marker_configs, global_config=global_cfg)
        matrix = calculator.compute_matrix(distance_cfg)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1

    logger.info(f"Markers used: {', '.join(calculator.get_included_markers()) or 'none'}")

    if args.genotype_table:
        build_genotype_results_df(genotypes).to_csv(args.genotype_table, index=False)

    if args.pairs:
        build_pairwise_df(calculator.samples, calculator.locus_results).to_csv(args.pairs, index=False)

    if args.output:
        matrix.to_csv(args.output)
        logger.info(f"Output written to: {args.output}")
    else:
        matrix.to_csv(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
