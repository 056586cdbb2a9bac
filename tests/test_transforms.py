import pytest

from image_toolbox.errors import UnsupportedFormat
from image_toolbox.image_io import sniff_mime_type
from image_toolbox.transforms import (
    bounded_dimensions,
    compress_image,
    convert_format,
    fit_dimensions,
    generate_favicons,
    resize_image,
)


def test_fit_dimensions():
    assert fit_dimensions(400, 200, 100, None, True) == (100, 50)
    assert fit_dimensions(400, 200, None, 50, True) == (100, 50)
    assert fit_dimensions(400, 200, 100, 100, True) == (100, 50)
    assert fit_dimensions(200, 400, 100, 100, True) == (50, 100)
    assert fit_dimensions(400, 200, 100, 100, False) == (100, 100)
    assert fit_dimensions(400, 200, None, None, True) == (400, 200)


def test_bounded_dimensions():
    assert bounded_dimensions(1000, 500, 400, None) == (400, 200)
    assert bounded_dimensions(1000, 500, None, 100) == (200, 100)
    assert bounded_dimensions(1000, 500, 400, 100) == (200, 100)
    assert bounded_dimensions(100, 50, 400, 400) == (100, 50)


def test_resize_image(solid, png_bytes, decode_rgba):
    result = resize_image(png_bytes(solid(20, 40, (5, 5, 5))), width=10)
    assert (result.width, result.height) == (10, 5)
    assert decode_rgba(result.data).shape == (5, 10, 4)
    assert result.url.startswith("data:image/png;base64,")


def test_resize_image_to_jpeg(solid, png_bytes):
    result = resize_image(
        png_bytes(solid(20, 40, (5, 5, 5))),
        width=8,
        height=8,
        preserve_aspect_ratio=False,
        mime_type="image/jpeg",
    )
    assert (result.width, result.height) == (8, 8)
    assert sniff_mime_type(result.data) == "image/jpeg"


def test_compress_image_reports_sizes(noise_png):
    result = compress_image(noise_png, quality=0.5, max_width=32)
    assert (result.width, result.height) == (32, 32)
    assert result.original_size == len(noise_png)
    assert result.compressed_size == len(result.data)
    assert sniff_mime_type(result.data) == "image/jpeg"


def test_compress_quality_is_clamped(noise_png):
    lowest = compress_image(noise_png, quality=0.1)
    below = compress_image(noise_png, quality=0.0)
    assert below.data == lowest.data


def test_compress_rejects_lossless_target(noise_png):
    with pytest.raises(UnsupportedFormat):
        compress_image(noise_png, mime_type="image/png")


def test_convert_format(noise_png):
    result = convert_format(noise_png, "image/webp")
    assert result.extension == "webp"
    assert result.mime_type == "image/webp"
    assert sniff_mime_type(result.data) == "image/webp"

    assert convert_format(noise_png, "image/jpeg").extension == "jpg"


def test_convert_rejects_svg_and_unknown_targets(noise_png):
    with pytest.raises(UnsupportedFormat):
        convert_format(b"<svg xmlns='http://www.w3.org/2000/svg'></svg>", "image/png")
    with pytest.raises(UnsupportedFormat):
        convert_format(noise_png, "image/avif")


def test_favicons_sizes(solid, png_bytes, decode_rgba):
    results = generate_favicons(png_bytes(solid(10, 10, (0, 0, 255))), sizes=(16, 32))
    assert [r.size for r in results] == [16, 32]
    for r in results:
        assert decode_rgba(r.data).shape == (r.size, r.size, 4)
        assert r.url.startswith("data:image/png;base64,")


def test_favicon_padding_ring_and_centering(solid, png_bytes, decode_rgba):
    src = png_bytes(solid(10, 20, (0, 0, 255)))  # 20 wide, 10 tall
    (fav,) = generate_favicons(src, sizes=[32], background_color="#FF0000", padding=4)
    out = decode_rgba(fav.data)

    assert tuple(out[0, 0]) == (255, 0, 0, 255)  # padding ring
    assert out[5, 6, 3] == 0  # inner area the image does not cover
    # image fitted to 24x12 at (4, 10)
    centre = out[16, 16].astype(int)
    assert abs(centre[2] - 255) <= 2 and centre[0] <= 2 and centre[3] >= 253


def test_favicon_padding_is_capped_at_half_size(solid, png_bytes, decode_rgba):
    (fav,) = generate_favicons(
        png_bytes(solid(4, 4, (0, 0, 255))), sizes=[16], background_color="#00FF00", padding=100
    )
    out = decode_rgba(fav.data)
    assert (out[..., 1] == 255).all()
    assert (out[..., 3] == 255).all()


def test_favicon_rejects_bad_arguments(solid, png_bytes):
    data = png_bytes(solid(4, 4, (0, 0, 255)))
    with pytest.raises(ValueError):
        generate_favicons(data, sizes=[])
    with pytest.raises(ValueError):
        generate_favicons(data, sizes=[0])
    with pytest.raises(ValueError):
        generate_favicons(data, background_color="red")
