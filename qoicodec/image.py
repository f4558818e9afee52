import numpy as np
from PIL import Image

from .errors import QOIEncodeError


class PixelGrid:
    """
    A width x height raster of RGB or RGBA pixels backed by a numpy array.

    The array has shape (height, width, channels) and dtype uint8, so rows are
    stored top to bottom and ``tobytes()`` yields the interleaved row-major
    layout the codec works on.
    """

    def __init__(self, pixels, colorspace: int = 0):
        pixels = np.asarray(pixels)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise QOIEncodeError(
                f"PixelGrid: Expected an array of shape (height, width, 3|4), got {pixels.shape}"
            )
        if pixels.dtype != np.uint8:
            # Casting would wrap or truncate values, which is not lossless
            raise QOIEncodeError(f"PixelGrid: Expected uint8 pixel data, got {pixels.dtype}")

        self.pixels = pixels
        self.colorspace = colorspace

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 4, colorspace: int = 0):
        return cls(np.zeros((height, width, channels), dtype=np.uint8), colorspace)

    @classmethod
    def frombytes(cls, data, description: dict):
        array = np.frombuffer(data, dtype=np.uint8).reshape(
            description["height"], description["width"], description["channels"]
        )
        return cls(array, description.get("colorspace", 0))

    @classmethod
    def from_image(cls, img: Image.Image, colorspace: int = 0):
        if img.mode != "RGBA":
            img = img.convert("RGB")
        return cls(np.array(img), colorspace)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    def get_pixel(self, x: int, y: int) -> tuple:
        """Return (r, g, b, a); alpha is always 255 on a 3-channel grid."""
        px = self.pixels[y, x]
        if self.channels == 3:
            return int(px[0]), int(px[1]), int(px[2]), 255
        return int(px[0]), int(px[1]), int(px[2]), int(px[3])

    def set_pixel(self, x: int, y: int, pixel) -> None:
        # Alpha is dropped on a 3-channel grid
        self.pixels[y, x] = pixel[: self.channels]

    def description(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "colorspace": self.colorspace,
        }

    def tobytes(self) -> bytes:
        return np.ascontiguousarray(self.pixels).tobytes()

    def to_image(self) -> Image.Image:
        # Pillow infers RGB or RGBA from the last axis
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    def __eq__(self, other):
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(
            self.pixels, other.pixels
        )

    def __repr__(self):
        return f"PixelGrid({self.width}x{self.height}, channels={self.channels}, colorspace={self.colorspace})"
