import numpy as np
import pytest


def make_image(height, width, channels, seed=0):
    """
    A synthetic photo-like image that exercises every chunk type: smooth
    gradients (DIFF/LUMA), noise (RGB), flat runs longer than 62 pixels (RUN),
    a small recurring palette (INDEX) and, with 4 channels, alpha changes (RGBA).
    """
    rng = np.random.default_rng(seed)

    steps = rng.integers(-4, 5, size=(height, width, 3))
    img = np.empty((height, width, channels), dtype=np.uint8)
    img[..., :3] = (np.cumsum(steps, axis=1) + rng.integers(0, 256, size=3)) % 256

    if width > 8:
        noise = width // 4
        img[:, :noise, :3] = rng.integers(0, 256, size=(height, noise, 3))
    if height > 2:
        img[height // 2, :] = img[height // 2, 0]
    if width > 4:
        palette = rng.integers(0, 256, size=(3, 3))
        for x in range(0, width, 3):
            img[0, x, :3] = palette[x % 3]

    if channels == 4:
        img[..., 3] = 255
        if width > 8:
            img[: height // 3, width // 2 :, 3] = rng.integers(
                0, 256, size=(height // 3, width - width // 2)
            )
    return img


@pytest.fixture(params=[3, 4], ids=["rgb", "rgba"])
def channels(request):
    return request.param


@pytest.fixture
def image(channels):
    return make_image(24, 150, channels)
