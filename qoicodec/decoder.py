import numpy as np

from .errors import QOIDecodeError
from .image import PixelGrid
from .qoi import QOI, CodecState, Tag


def _payload(data, state: CodecState, size: int, end: int):
    """Consume ``size`` payload bytes, refusing to read past the end index."""
    start = state.pos
    if start + size > end:
        raise QOIDecodeError("QOI.decode: Chunk is truncated by the end of the stream")
    state.pos += size
    return data[start : start + size]


def _read_rgb(b1, data, state, end):
    r, g, b = _payload(data, state, 3, end)
    return (r, g, b, state.prev[3])


def _read_rgba(b1, data, state, end):
    r, g, b, a = _payload(data, state, 4, end)
    return (r, g, b, a)


def _read_index(b1, data, state, end):
    return state.index[b1 & 0x3F]


def _read_diff(b1, data, state, end):
    # 2-bit differences with a bias of 2
    r, g, b, a = state.prev
    return (
        (r + ((b1 >> 4) & 0x03) - 2) & 0xFF,
        (g + ((b1 >> 2) & 0x03) - 2) & 0xFF,
        (b + (b1 & 0x03) - 2) & 0xFF,
        a,
    )


def _read_luma(b1, data, state, end):
    (b2,) = _payload(data, state, 1, end)
    dg = (b1 & 0x3F) - 32
    dr_dg = ((b2 >> 4) & 0x0F) - 8
    db_dg = (b2 & 0x0F) - 8

    r, g, b, a = state.prev
    return (
        (r + dg + dr_dg) & 0xFF,
        (g + dg) & 0xFF,
        (b + dg + db_dg) & 0xFF,
        a,
    )


_READERS = {
    Tag.RGB: _read_rgb,
    Tag.RGBA: _read_rgba,
    Tag.INDEX: _read_index,
    Tag.DIFF: _read_diff,
    Tag.LUMA: _read_luma,
}


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) files into pixel grids.
    """

    @staticmethod
    def find_end(data, use_end_marker: bool = True) -> int:
        """
        Index of the first byte after the chunk stream.

        With ``use_end_marker`` the end marker is searched backward from the
        end of the data, so trailing padding is tolerated. Otherwise the
        marker is assumed to occupy the last 8 bytes.
        """
        end = len(data) - QOI.QOI_END_MARKER_SIZE
        if not use_end_marker:
            return end

        marker = QOI.QOI_END_MARKER
        for start in range(end, QOI.QOI_HEADER_SIZE - 1, -1):
            if data[start + 7] == 0x01 and bytes(data[start : start + 8]) == marker:
                return start
        # No marker at all: fall back to the declared length
        return end

    @staticmethod
    def decode(file_data, use_end_marker: bool = True) -> PixelGrid:
        """
        Decode a QOI file given as a bytes/bytearray object.

        :param file_data: Bytes containing the QOI file.
        :param use_end_marker: Search for the end marker instead of trusting the
                               input length. Tolerates trailing bytes after the image.
        :return: PixelGrid with 3 channels if the header declares 3, else 4.
        """
        description = QOI.unpack_header(file_data)
        width = description["width"]
        height = description["height"]
        channels = description["channels"]

        total_pixels = width * height
        end = QOIDecoder.find_end(file_data, use_end_marker)

        # A chunk byte yields at most one run of 62 pixels
        if total_pixels > (end - QOI.QOI_HEADER_SIZE) * QOI.QOI_RUN_MAX:
            raise QOIDecodeError("QOI.decode: Incomplete image")

        result = bytearray(total_pixels * channels)
        state = CodecState(pos=QOI.QOI_HEADER_SIZE)

        while state.pos < end:
            b1 = file_data[state.pos]
            state.pos += 1
            tag = QOI.tag_of(b1)

            if tag is Tag.RUN:
                # The previous pixel is repeated; the cache is left untouched
                count = (b1 & 0x3F) + 1
                QOIDecoder._write(result, state, state.prev, channels, total_pixels, count)
                continue

            reader = _READERS.get(tag)
            if reader is None:
                raise QOIDecodeError(
                    "QOI.decode: Failed to decode QOI image. Invalid byte encountered."
                )

            px = reader(b1, file_data, state, end)
            if tag is not Tag.INDEX:
                # An indexed pixel already lives in its slot
                state.remember(px)
            state.prev = px
            QOIDecoder._write(result, state, px, channels, total_pixels)

        if state.pixel_pos < total_pixels:
            raise QOIDecodeError("QOI.decode: Incomplete image")

        array = np.frombuffer(result, dtype=np.uint8).reshape(height, width, channels)
        return PixelGrid(array, description["colorspace"])

    @staticmethod
    def _write(result, state, px, channels, total_pixels, count=1):
        if state.pixel_pos + count > total_pixels:
            raise QOIDecodeError(
                "QOI.decode: Chunk stream writes past the declared image size"
            )

        write_pos = state.pixel_pos * channels
        value = bytes(px[:channels])
        result[write_pos : write_pos + count * channels] = value * count
        state.pixel_pos += count
