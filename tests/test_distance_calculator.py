import numpy as np
import pytest

from bruvo_pipeline.analysis.distance import DistanceCalculator
from bruvo_pipeline.analysis.metrics.bruvo import BruvoDistanceMetric, to_repeat_count
from bruvo_pipeline.config import DistanceConfig, GlobalConfig, MarkerConfig
from bruvo_pipeline.core.errors import InvalidGenotypeError
from bruvo_pipeline.models.genotype import GenotypeResult
from bruvo_pipeline.utils.table_builders import build_genotype_results_df, build_pairwise_df


def _geno(marker, alleles, confidence=1.0):
    return GenotypeResult(marker=marker, alleles=alleles, confidence=confidence)


@pytest.fixture
def markers():
    return {
        "M1": MarkerConfig(marker="M1", repeat_unit=2),
        "M2": MarkerConfig(marker="M2", repeat_unit=4),
        "M3": MarkerConfig(marker="M3", repeat_unit=2),
    }


@pytest.fixture
def genotypes():
    return {
        "S1": {"M1": _geno("M1", [200, 206]), "M2": _geno("M2", [152, 160]), "M3": _geno("M3", [100, 102])},
        "S2": {"M1": _geno("M1", ["200", "206"]), "M2": _geno("M2", [152, 164])},
        "S3": {"M1": _geno("M1", []), "M2": _geno("M2", [152, 160])},
    }


def test_matrix_averages_comparable_markers(genotypes, markers):
    calc = DistanceCalculator(genotypes, markers)

    matrix = calc.compute_matrix(DistanceConfig())

    assert list(matrix.index) == ["S1", "S2", "S3"]
    assert matrix.at["S1", "S2"] == pytest.approx(0.125)
    assert matrix.at["S1", "S3"] == pytest.approx(0.0)
    assert matrix.at["S2", "S3"] == pytest.approx(0.25)
    assert np.allclose(matrix.to_numpy(), matrix.to_numpy().T)
    assert np.all(np.diag(matrix.to_numpy()) == 0.0)


def test_marker_needs_enough_samples(genotypes, markers):
    calc = DistanceCalculator(genotypes, markers)
    calc.compute_matrix(DistanceConfig())

    assert calc.get_included_markers() == ["M1", "M2"]


def test_low_confidence_calls_are_missing(genotypes, markers):
    genotypes["S3"]["M2"] = _geno("M2", [152, 160], confidence=0.5)
    calc = DistanceCalculator(genotypes, markers)

    matrix = calc.compute_matrix(DistanceConfig(min_confidence=0.8))

    assert np.isnan(matrix.at["S1", "S3"])
    assert np.isnan(matrix.at["S3", "S2"])
    assert matrix.at["S1", "S2"] == pytest.approx(0.125)


def test_partial_genotype_uses_missing_allele_models(markers):
    genotypes = {
        "S1": {"M1": _geno("M1", [200])},
        "S2": {"M1": _geno("M1", [200, 206])},
    }
    calc = DistanceCalculator(genotypes, markers)

    infinite = calc.compute_matrix(DistanceConfig()).at["S1", "S2"]
    combined = calc.compute_matrix(DistanceConfig(genome_add=True, genome_loss=True)).at["S1", "S2"]

    # [100, 0] vs [100, 103]: the gap costs 1 under the infinite model.
    assert infinite == pytest.approx(0.5)
    assert 0.0 <= combined <= infinite


def test_extra_alleles_fail_only_their_pairs(genotypes, markers):
    genotypes["S3"]["M1"] = _geno("M1", [200, 204, 206])
    calc = DistanceCalculator(genotypes, markers)

    matrix = calc.compute_matrix(DistanceConfig())
    statuses = [r.status for r in calc.locus_results["M1"]]

    assert statuses == ["finite", "error", "error"]
    assert matrix.at["S1", "S2"] == pytest.approx(0.125)
    assert matrix.at["S1", "S3"] == pytest.approx(0.0)


def test_threaded_calculator_matches(genotypes, markers):
    serial = DistanceCalculator(genotypes, markers).compute_matrix(DistanceConfig())
    threaded = DistanceCalculator(genotypes, markers, global_config=GlobalConfig(max_workers=2)) \
        .compute_matrix(DistanceConfig())

    np.testing.assert_allclose(serial.to_numpy(), threaded.to_numpy())


def test_debug_log(genotypes, markers):
    calc = DistanceCalculator(genotypes, markers)
    calc.compute_matrix(DistanceConfig(debug_mode=True))

    assert "M2: 3 finite" in calc.get_debug_log()


def test_metric_single_comparison(markers):
    metric = BruvoDistanceMetric()

    result = metric.compute(_geno("M2", [152, 160]), _geno("M2", [152, 164]), markers["M2"])
    missing = metric.compute(_geno("M2", [152, 160]), None, markers["M2"])

    assert result.value == pytest.approx(0.25)
    assert missing.is_undefined


def test_repeat_counts_pad_missing(markers):
    metric = BruvoDistanceMetric(global_config=GlobalConfig(ploidy=4))

    counts = metric.repeat_counts(_geno("M2", [160, None, "NA", 152]), markers["M2"])

    assert counts.tolist() == [38, 40, 0, 0]


def test_pairwise_table(genotypes, markers):
    calc = DistanceCalculator(genotypes, markers)
    calc.compute_matrix(DistanceConfig())

    df = build_pairwise_df(calc.samples, calc.locus_results)

    assert len(df) == 6
    row = df[(df["marker"] == "M1") & (df["sample_2"] == "S3")].iloc[0]
    assert row["status"] == "undefined"
    assert np.isnan(row["distance"])
    assert df["message"].isna().all()


def test_genotype_table(genotypes):
    df = build_genotype_results_df(genotypes)

    assert len(df) == 7
    assert df[(df["Sample"] == "S1") & (df["Marker"] == "M1")]["Genotype"].iloc[0] == "200/206"


def test_marker_override_ploidy_used_by_metric():
    markers = {"M4": MarkerConfig(marker="M4", repeat_unit=1, overrides={"ploidy": 4})}
    genotypes = {
        "S1": {"M4": _geno("M4", [20, 23, 24])},
        "S2": {"M4": _geno("M4", [20, 24, 26, 43])},
    }
    calc = DistanceCalculator(genotypes, markers)

    matrix = calc.compute_matrix(DistanceConfig())

    assert calc.locus_results["M4"][0].is_finite
    assert matrix.loc["S1", "S2"] == pytest.approx(0.46875)


def test_locus_above_max_ploidy_fails_only_that_locus():
    markers = {
        "M1": MarkerConfig(marker="M1", repeat_unit=2),
        "M9": MarkerConfig(marker="M9", repeat_unit=2, ploidy=9),
    }
    genotypes = {
        "S1": {"M1": _geno("M1", [200, 206]), "M9": _geno("M9", [200, 206])},
        "S2": {"M1": _geno("M1", [200, 204]), "M9": _geno("M9", [200, 204])},
        "S3": {"M1": _geno("M1", [200, 206]), "M9": _geno("M9", [202])},
    }
    calc = DistanceCalculator(genotypes, markers)

    matrix = calc.compute_matrix(DistanceConfig())

    assert all(r.is_error for r in calc.locus_results["M9"])
    assert matrix.loc["S1", "S2"] == pytest.approx(0.25)
    assert matrix.loc["S1", "S3"] == pytest.approx(0.0)

    df = build_pairwise_df(calc.samples, calc.locus_results)
    failed = df[df["marker"] == "M9"]
    assert (failed["status"] == "error").all()
    assert failed["message"].str.contains("exceeds").all()


def test_allele_below_half_repeat_unit_rejected():
    with pytest.raises(InvalidGenotypeError):
        to_repeat_count(1, 4)
    assert to_repeat_count(3, 4) == 1


def test_allele_rounding_to_zero_fails_only_that_sample(markers):
    genotypes = {
        "S1": {"M2": _geno("M2", [152, 160])},
        "S2": {"M2": _geno("M2", [1, 160])},
        "S3": {"M2": _geno("M2", [152, 164])},
    }
    calc = DistanceCalculator(genotypes, markers)

    calc.compute_matrix(DistanceConfig())
    s1_s2, s1_s3, s2_s3 = calc.locus_results["M2"]

    assert s1_s2.is_error and s2_s3.is_error
    assert s1_s3.value == pytest.approx(0.25)
