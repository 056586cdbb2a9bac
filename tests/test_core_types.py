import pytest

from image_toolbox.core_types import (
    ColorBucket,
    PaletteColor,
    coerce_to_rgb_tuple,
    hex_to_rgb,
    rgb_to_hex,
    round_half_up,
)


def test_hex_round_trip():
    for rgb in [(0, 0, 0), (255, 255, 255), (1, 128, 254), (171, 205, 239)]:
        assert hex_to_rgb(rgb_to_hex(rgb)) == rgb


def test_rgb_to_hex_is_uppercase():
    assert rgb_to_hex((171, 205, 239)) == "#ABCDEF"
    assert rgb_to_hex((0, 15, 16)) == "#000F10"


def test_hex_to_rgb_accepts_short_and_lowercase():
    assert hex_to_rgb("#fa0") == (255, 170, 0)
    assert hex_to_rgb("  #ABcdEF ") == (171, 205, 239)


@pytest.mark.parametrize("bad", ["ABCDEF", "#ABCD", "#GGGGGG", ""])
def test_hex_to_rgb_rejects_malformed(bad):
    with pytest.raises(ValueError):
        hex_to_rgb(bad)


def test_round_half_up_rounds_halves_toward_positive():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(1.49) == 1
    assert round_half_up(254.5) == 255


def test_coerce_clamps_channels():
    assert coerce_to_rgb_tuple([300, -5, 10]) == (255, 0, 10)


def test_palette_color_from_rgb():
    c = PaletteColor.from_rgb((0, 255, 16))
    assert c.hex == "#00FF10"
    assert c.rgb == (0, 255, 16)
    assert c.to_dict() == {"hex": "#00FF10", "r": 0, "g": 255, "b": 16}


def test_color_bucket_mean_rounds_half_up():
    bucket = ColorBucket(key=(96, 96, 96), sum_r=205, sum_g=200, sum_b=201, count=2)
    assert bucket.mean() == (103, 100, 101)


def test_empty_bucket_has_no_mean():
    with pytest.raises(ValueError):
        ColorBucket(key=(0, 0, 0), sum_r=0, sum_g=0, sum_b=0, count=0).mean()
