import struct
from enum import IntEnum

from .errors import QOIDecodeError, QOIHeaderError


class Tag(IntEnum):
    """Chunk tags. The 8-bit tags share the 0b11 prefix with RUN."""

    INDEX = 0x00  # 00xxxxxx
    DIFF = 0x40  # 01xxxxxx
    LUMA = 0x80  # 10xxxxxx
    RUN = 0xC0  # 11xxxxxx
    RGB = 0xFE  # 11111110
    RGBA = 0xFF  # 11111111


class QOI:
    # QOI Constants
    QOI_MASK_2 = 0xC0
    QOI_HEADER_SIZE = 14
    QOI_MAGIC = b"qoif"
    QOI_END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"
    QOI_END_MARKER_SIZE = 8
    QOI_INDEX_SIZE = 64
    QOI_RUN_MAX = 62

    START_PIXEL = (0, 0, 0, 255)  # opaque black
    EMPTY_PIXEL = (0, 0, 0, 0)  # transparent black

    @staticmethod
    def hash(r, g, b, a):
        """Calculates the index position for the color array."""
        return (r * 3 + g * 5 + b * 7 + a * 11) % 64

    @staticmethod
    def wrap_delta(current, previous):
        """Byte-wrapped difference of two channel values, as a signed 8-bit int."""
        d = (current - previous) & 0xFF
        return d - 256 if d > 127 else d

    @classmethod
    def tag_of(cls, byte):
        """
        Classify the first byte of a chunk.

        The full-byte tags must be tested before the 2-bit mask, otherwise
        RGB and RGBA would be read as RUN.
        """
        if not 0 <= byte <= 0xFF:
            raise QOIDecodeError(f"QOI.decode: Invalid chunk byte {byte!r}")

        if byte == Tag.RGB:
            return Tag.RGB
        if byte == Tag.RGBA:
            return Tag.RGBA
        return Tag(byte & cls.QOI_MASK_2)

    @classmethod
    def pack_header(cls, width, height, channels, colorspace=0):
        # Magic(4), Width(4), Height(4), Channels(1), Colorspace(1)
        return cls.QOI_MAGIC + struct.pack(">IIBB", width, height, channels, colorspace)

    @classmethod
    def unpack_header(cls, data) -> dict:
        """
        Parse and validate the 14-byte header.

        :param data: The whole QOI file; it must be long enough to hold the
                     header and the end marker.
        :return: Description dictionary with width, height, channels and colorspace.
        """
        if len(data) < cls.QOI_HEADER_SIZE + cls.QOI_END_MARKER_SIZE:
            raise QOIHeaderError("QOI.decode: File too short for header")

        # > : Big Endian
        # 4s: 4-byte string (magic)
        # I : unsigned int (4 bytes)
        # B : unsigned char (1 byte)
        magic, width, height, channels, colorspace = struct.unpack(
            ">4sIIBB", bytes(data[: cls.QOI_HEADER_SIZE])
        )

        if magic != cls.QOI_MAGIC:
            raise QOIHeaderError("QOI.decode: The signature of the QOI file is invalid")

        if channels not in (3, 4):
            raise QOIHeaderError(
                "QOI.decode: The number of channels declared in the file is invalid"
            )

        if colorspace not in (0, 1):
            raise QOIHeaderError(
                "QOI.decode: The colorspace declared in the file is invalid"
            )

        return {
            "width": width,
            "height": height,
            "channels": channels,
            "colorspace": colorspace,
        }


class CodecState:
    """
    Everything one encode or decode pass carries from pixel to pixel.

    Both sides must evolve ``index`` identically: an INDEX chunk is only
    meaningful if the decoder's cache holds the same pixel the encoder saw.
    """

    __slots__ = ("prev", "index", "run", "pos", "pixel_pos")

    def __init__(self, pos=0):
        self.prev = QOI.START_PIXEL
        self.index = [QOI.EMPTY_PIXEL] * QOI.QOI_INDEX_SIZE
        self.run = 0
        self.pos = pos  # byte cursor
        self.pixel_pos = 0

    @staticmethod
    def slot_of(pixel):
        return QOI.hash(*pixel)

    def cached(self, pixel):
        return self.index[QOI.hash(*pixel)] == pixel

    def remember(self, pixel):
        self.index[QOI.hash(*pixel)] = pixel
