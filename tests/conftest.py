import io

import numpy as np
import pytest
from PIL import Image


def _solid(height, width, rgb, alpha=255):
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[..., :3] = rgb
    img[..., 3] = alpha
    return img


def _to_png(arr):
    buf = io.BytesIO()
    Image.fromarray(np.ascontiguousarray(arr)).save(buf, format="PNG")
    return buf.getvalue()


def _decode(data):
    with Image.open(io.BytesIO(data)) as im:
        return np.array(im.convert("RGBA"), dtype=np.uint8)


@pytest.fixture
def solid():
    """solid(h, w, (r, g, b), alpha=255) -> uint8 (H, W, 4)."""
    return _solid


@pytest.fixture
def png_bytes():
    """png_bytes(arr) -> PNG-encoded bytes of an RGBA or RGB array."""
    return _to_png


@pytest.fixture
def decode_rgba():
    """decode_rgba(bytes) -> uint8 (H, W, 4)."""
    return _decode


@pytest.fixture
def noise_png():
    rng = np.random.default_rng(0)
    arr = rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8)
    return _to_png(arr)
