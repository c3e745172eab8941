import pytest
from pydantic import ValidationError

from bruvo_pipeline.config import DistanceConfig, GlobalConfig, MarkerConfig


def test_global_defaults():
    cfg = GlobalConfig()

    assert cfg.ploidy == 2
    assert cfg.max_ploidy == 8
    assert cfg.max_workers is None


def test_ploidy_above_ceiling_rejected():
    with pytest.raises(ValidationError):
        GlobalConfig(ploidy=9)


def test_marker_ploidy_override():
    marker = MarkerConfig(marker="SSR1", repeat_unit=2, ploidy=4)

    assert marker.effective_ploidy(GlobalConfig()) == 4
    assert MarkerConfig(marker="SSR2", repeat_unit=2).effective_ploidy(GlobalConfig(ploidy=3)) == 3


def test_marker_overrides_merge_known_keys():
    marker = MarkerConfig(marker="SSR1", repeat_unit=2, overrides={"ploidy": 6, "unknown": 1})
    merged = marker.merged_with_global(GlobalConfig())

    assert merged["ploidy"] == 6
    assert "unknown" not in merged


@pytest.mark.parametrize("kwargs", [{"repeat_unit": 0}, {"repeat_unit": 2, "ploidy": 0}])
def test_invalid_marker_rejected(kwargs):
    with pytest.raises(ValidationError):
        MarkerConfig(marker="SSR1", **kwargs)


def test_distance_config_only_knows_bruvo():
    with pytest.raises(ValidationError):
        DistanceConfig(metric="nei")
    assert DistanceConfig().metric == "bruvo"


def test_effective_ploidy_follows_overrides():
    marker = MarkerConfig(marker="SSR1", repeat_unit=2, overrides={"ploidy": 4})

    assert marker.effective_ploidy(GlobalConfig()) == 4
    assert MarkerConfig(marker="SSR9", ploidy=9).effective_ploidy(GlobalConfig()) == 9
