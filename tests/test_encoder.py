import numpy as np
import pytest

from qoicodec import QOI, PixelGrid, QOIDecoder, QOIEncodeError, QOIEncoder

END = b"\x00\x00\x00\x00\x00\x00\x00\x01"


def chunks(pixels, channels=4):
    """Encode a single row of pixels and return only the chunk stream."""
    data = bytes(v for px in pixels for v in px[:channels])
    desc = {"width": len(pixels), "height": 1, "channels": channels, "colorspace": 0}
    encoded = QOIEncoder.encode(data, desc)

    assert encoded[:14] == QOI.pack_header(len(pixels), 1, channels)
    assert encoded[-8:] == END
    return encoded[14:-8]


def test_two_identical_red_pixels():
    red = (255, 0, 0, 255)
    encoded = QOIEncoder.encode(bytes(red * 2), {"width": 2, "height": 1, "channels": 4})

    # DIFF from the opaque black start pixel (red -1 wraps to 255), then a run of 1
    assert encoded == QOI.pack_header(2, 1, 4) + b"\x5a" + bytes([0xC0 | 0]) + END
    assert len(encoded) == 24

    decoded = QOIDecoder.decode(encoded)
    assert decoded.get_pixel(0, 0) == red
    assert decoded.get_pixel(1, 0) == red


def test_pixels_equal_to_start_pixel_are_a_run():
    encoded = QOIEncoder.encode(bytes((0, 0, 0, 255) * 2), {"width": 2, "height": 1, "channels": 4})

    assert encoded == QOI.pack_header(2, 1, 4) + b"\xc1" + END
    assert len(encoded) == 23


@pytest.mark.parametrize("n, expected", [(62, b"\xfd"), (63, b"\xfd\xc0"), (130, b"\xfd\xfd\xc5")])
def test_run_bounds(n, expected):
    stream = chunks([(0, 0, 0, 255)] * n)
    assert stream == expected
    assert len(stream) == -(-n // 62)


def test_long_run_decodes_to_exact_count():
    px = (9, 9, 9, 255)
    n = 200
    grid = QOIDecoder.decode(QOIEncoder.encode(bytes(px * n), {"width": n, "height": 1, "channels": 4}))
    assert grid.width == n
    assert all(grid.get_pixel(x, 0) == px for x in range(n))


def test_run_is_flushed_before_a_new_pixel():
    stream = chunks([(0, 0, 0, 255), (0, 0, 0, 255), (1, 1, 1, 255)])
    assert stream == b"\xc1\x7f"


def test_repeat_after_luma_is_a_run_not_an_index():
    # The repeated pixel sits in the cache, but equality with the previous pixel wins
    stream = chunks([(136, 77, 31), (138, 77, 29), (138, 77, 29), (139, 76, 28)], channels=3)
    assert stream == bytes.fromhex("fe884d1f a0a6 c0 75")


def test_index_takes_priority_over_diff():
    a = (10, 10, 10, 255)
    b = (11, 10, 10, 255)
    assert QOI.hash(*a) != QOI.hash(*b)

    # a: LUMA, b: DIFF, a again: INDEX although DIFF (-1, 0, 0) would fit too
    assert chunks([a, b, a]) == bytes([0xAA, 0x88, 0x7A, QOI.hash(*a)])


@pytest.mark.parametrize(
    "pixel, expected",
    [
        ((1, 1, 1, 255), b"\x7f"),  # DIFF, upper bound
        ((254, 254, 254, 255), b"\x40"),  # DIFF, lower bound via wraparound
        ((2, 0, 0, 255), b"\xa0\xa8"),  # red +2 falls through to LUMA
        ((31, 31, 31, 255), b"\xbf\x88"),  # LUMA, green upper bound
        ((224, 224, 224, 255), b"\x80\x88"),  # LUMA, green -32
        ((38, 31, 24, 255), b"\xbf\xf1"),  # LUMA, dr-dg = 7, db-dg = -7
        ((32, 32, 32, 255), b"\xfe\x20\x20\x20"),  # green +32 needs RGB
        ((100, 0, 0, 255), b"\xfe\x64\x00\x00"),  # dr-dg out of range
        ((1, 2, 3, 4), b"\xff\x01\x02\x03\x04"),  # alpha changed
    ],
)
def test_chunk_selection(pixel, expected):
    assert chunks([pixel]) == expected


def test_rgb_input_has_opaque_alpha():
    # (1, 1, 1) with implied alpha 255 is a DIFF from the start pixel, never RGBA
    assert chunks([(1, 1, 1)], channels=3) == b"\x7f"


def test_encode_image_accepts_arrays_and_grids():
    img = np.zeros((2, 3, 3), dtype=np.uint8)
    img[1, 2] = (200, 100, 50)
    assert QOIEncoder.encode_image(img) == QOIEncoder.encode_image(PixelGrid(img))


def test_encode_image_colorspace():
    img = np.zeros((1, 1, 4), dtype=np.uint8)
    assert QOIEncoder.encode_image(img)[13] == 0
    assert QOIEncoder.encode_image(PixelGrid(img, colorspace=1))[13] == 1
    assert QOIEncoder.encode_image(img, colorspace=1)[13] == 1


@pytest.mark.parametrize(
    "data, desc",
    [
        (b"\x00" * 3, {"width": -1, "height": 1, "channels": 3}),
        (b"\x00" * 3, {"width": 1, "height": 1, "channels": 2}),
        (b"\x00" * 3, {"width": 1, "height": 1, "channels": 3, "colorspace": 3}),
        (b"\x00" * 4, {"width": 1, "height": 1, "channels": 3}),
        (b"\x00" * 3, {"height": 1, "channels": 3}),
    ],
)
def test_encode_rejects_bad_description(data, desc):
    with pytest.raises(QOIEncodeError):
        QOIEncoder.encode(data, desc)
