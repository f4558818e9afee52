#! Our QOI codec is pure Python while Pillow and the qoi package are C, so the timings are not a fair race.
#! They are here to show the size/speed trade-off, and to spot regressions in our own encode/decode.

import argparse
import io
import time

import numpy as np
from PIL import Image

import qoi as OfficialQOI
from qoicodec import PixelGrid, QOIDecoder, QOIEncoder, load_image

INPUT_IMAGE = "fruits.png"


def _timed(func, *args, **kwargs):
    start_time = time.perf_counter()
    result = func(*args, **kwargs)
    return result, (time.perf_counter() - start_time) * 1000


def time_compare(pixel_data: np.ndarray) -> dict:
    """Encode/decode pixel_data with each codec and return {name: (bytes, encode ms, decode ms)}."""
    results = {}

    grid = PixelGrid(pixel_data)
    encoded, encode_ms = _timed(QOIEncoder.encode_image, grid)
    decoded, decode_ms = _timed(QOIDecoder.decode, encoded)
    assert decoded == grid, "Our QOI round trip does not match the original!"
    results["qoicodec"] = (len(encoded), encode_ms, decode_ms)

    official, encode_ms = _timed(OfficialQOI.encode, np.ascontiguousarray(pixel_data))
    _, decode_ms = _timed(OfficialQOI.decode, official)
    results["qoi (C)"] = (len(official), encode_ms, decode_ms)

    # Encode to PNG in C using Pillow
    buffer = io.BytesIO()
    image = Image.fromarray(pixel_data)
    _, encode_ms = _timed(image.save, buffer, format="PNG")
    png = buffer.getvalue()
    _, decode_ms = _timed(lambda: Image.open(io.BytesIO(png)).load())
    results["png (Pillow)"] = (len(png), encode_ms, decode_ms)

    return results


def main(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark QOI encode/decode.")
    parser.add_argument("input", nargs="?", default=INPUT_IMAGE, help="Input image path")
    args = parser.parse_args(argv)

    pixel_data, desc = load_image(args.input)
    print(
        f"Loaded image {args.input}: {desc['width']}x{desc['height']} Channels: {desc['channels']}"
    )
    print(f"Original {args.input} {pixel_data.nbytes} bytes")

    for name, (size, encode_ms, decode_ms) in time_compare(pixel_data).items():
        print(
            f"{name:>14}: {size:>10} bytes  encode {encode_ms:9.1f} ms  decode {decode_ms:9.1f} ms"
        )


if __name__ == "__main__":
    main()
