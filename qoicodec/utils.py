import os

import numpy as np
from PIL import Image

from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .image import PixelGrid

RAW_EXTENSIONS = ("dng", "cr2", "nef", "arw", "raw")


def load_image(filepath: str) -> tuple[np.ndarray, dict]:
    """
    Read an image file into a (height, width, 3|4) uint8 array and its description.

    Camera RAW files go through rawpy's default demosaicing; everything else
    through Pillow. Only RGBA sources keep an alpha channel.
    """
    if os.path.splitext(filepath)[1].lower().lstrip(".") in RAW_EXTENSIONS:
        import rawpy

        with rawpy.imread(filepath) as raw:
            img = Image.fromarray(raw.postprocess())
    else:
        img = Image.open(filepath)

    grid = PixelGrid.from_image(img)
    return grid.pixels, grid.description()


def write_qoi(image, filepath: str) -> int:
    """Encode a PixelGrid (or numpy array) and write it to filepath. Returns the byte count."""
    encoded = QOIEncoder.encode_image(image)
    with open(filepath, "wb") as f:
        f.write(encoded)
    return len(encoded)


def read_qoi(filepath: str, use_end_marker: bool = True) -> PixelGrid:
    with open(filepath, "rb") as f:
        content = f.read()
    return QOIDecoder.decode(content, use_end_marker=use_end_marker)


def show_qoi(filepath: str) -> PixelGrid:
    """Decode a QOI file and open it in the platform image viewer."""
    grid = read_qoi(filepath)
    grid.to_image().show(title=filepath)
    return grid
