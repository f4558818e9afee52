import numpy as np

from .errors import QOIEncodeError
from .image import PixelGrid
from .qoi import QOI, CodecState, Tag


def _op_run(run):
    return Tag.RUN | (run - 1)


def _op_diff(dr, dg, db):
    return Tag.DIFF | ((dr + 2) << 4) | ((dg + 2) << 2) | (db + 2)


def _op_luma(dg, dr_dg, db_dg):
    return Tag.LUMA | (dg + 32), ((dr_dg + 8) << 4) | (db_dg + 8)


class QOIEncoder:
    @staticmethod
    def _validate(color_data, description: dict) -> tuple:
        width = description.get("width")
        height = description.get("height")
        channels = description.get("channels")
        colorspace = description.get("colorspace", 0)

        if width is None or not (0 <= width < 4294967296):
            raise QOIEncodeError("QOI.encode: Invalid description.width")

        if height is None or not (0 <= height < 4294967296):
            raise QOIEncodeError("QOI.encode: Invalid description.height")

        if channels not in (3, 4):
            raise QOIEncodeError(
                "QOI.encode: Invalid description.channels, must be 3 or 4"
            )

        if colorspace not in (0, 1):
            raise QOIEncodeError(
                "QOI.encode: Invalid description.colorspace, must be 0 or 1"
            )

        if len(color_data) != width * height * channels:
            raise QOIEncodeError("QOI.encode: The length of colorData is incorrect")

        return width, height, channels, colorspace

    @staticmethod
    def encode(color_data, description: dict) -> bytes:
        """
        Encode a QOI file.

        :param color_data: Bytes-like object (bytes, bytearray, list of ints) containing
                           interleaved RGB or RGBA pixel data in row-major order.
        :param description: Dictionary containing 'width', 'height', 'channels' and
                            optionally 'colorspace' (defaults to 0, sRGB with linear alpha).
        :return: bytes object containing the QOI file content.
        """
        if isinstance(color_data, np.ndarray):
            # numpy uint8 scalars would wrap inside the hash arithmetic
            color_data = color_data.tobytes()

        width, height, channels, colorspace = QOIEncoder._validate(
            color_data, description
        )

        # Dynamic extension is simpler here than sizing for the worst case.
        result = bytearray(QOI.pack_header(width, height, channels, colorspace))

        state = CodecState()
        last_offset = len(color_data) - channels

        # --- Pixel Loop ---
        for i in range(0, len(color_data), channels):
            r = color_data[i]
            g = color_data[i + 1]
            b = color_data[i + 2]
            a = color_data[i + 3] if channels == 4 else 255
            px = (r, g, b, a)

            if px == state.prev:
                state.run += 1
                # If we hit max run length (62) or it's the very last pixel
                if state.run == QOI.QOI_RUN_MAX or i == last_offset:
                    result.append(_op_run(state.run))
                    state.run = 0
                continue

            # If we were in a run, end it before processing the new pixel
            if state.run > 0:
                result.append(_op_run(state.run))
                state.run = 0

            if state.cached(px):
                result.append(Tag.INDEX | state.slot_of(px))
                state.prev = px
                continue

            state.remember(px)
            prev_r, prev_g, prev_b, prev_a = state.prev

            if a != prev_a:
                result.append(Tag.RGBA)
                result.extend(px)
                state.prev = px
                continue

            vr = QOI.wrap_delta(r, prev_r)
            vg = QOI.wrap_delta(g, prev_g)
            vb = QOI.wrap_delta(b, prev_b)
            vg_r = vr - vg
            vg_b = vb - vg

            if -2 <= vr <= 1 and -2 <= vg <= 1 and -2 <= vb <= 1:
                result.append(_op_diff(vr, vg, vb))
            elif -32 <= vg <= 31 and -8 <= vg_r <= 7 and -8 <= vg_b <= 7:
                result.extend(_op_luma(vg, vg_r, vg_b))
            else:
                # Alpha is unchanged, so it is omitted
                result.append(Tag.RGB)
                result.extend((r, g, b))

            state.prev = px

        # --- End Marker ---
        result.extend(QOI.QOI_END_MARKER)

        return bytes(result)

    @staticmethod
    def encode_image(image, colorspace: int = None) -> bytes:
        """
        Encode a PixelGrid, or a numpy array of shape (height, width, 3|4).

        :param colorspace: Overrides the grid's colorspace tag when given.
        """
        if not isinstance(image, PixelGrid):
            image = PixelGrid(np.asarray(image))

        description = image.description()
        if colorspace is not None:
            description["colorspace"] = colorspace

        return QOIEncoder.encode(image.tobytes(), description)
