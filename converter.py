import argparse
import sys

from qoicodec import PixelGrid, QOIDecoder, QOIEncoder, QOIError, load_image, show_qoi
from qoicodec.qoi import QOI

INPUT_IMAGE = "fruits.png"
OUTPUT_QOI = "fruits.qoi"


def png_to_qoi(png_path, qoi_path):
    pixel_data, desc = load_image(png_path)
    grid = PixelGrid(pixel_data, desc["colorspace"])

    encoded = QOIEncoder.encode_image(grid)

    with open(qoi_path, "wb") as f:
        f.write(encoded)
    print(
        f"Converted {png_path} ({grid.width}x{grid.height}, {grid.channels} channels) "
        f"to {qoi_path}: {len(encoded)} bytes"
    )


def qoi_to_png(qoi_path, png_path, use_end_marker=True):
    with open(qoi_path, "rb") as f:
        content = f.read()

    decoded = QOIDecoder.decode(content, use_end_marker=use_end_marker)
    decoded.to_image().save(png_path)
    print(f"Converted {qoi_path} to {png_path}")


def qoi_info(qoi_path):
    with open(qoi_path, "rb") as f:
        desc = QOI.unpack_header(f.read())
    print(
        f"{qoi_path}: {desc['width']}x{desc['height']} "
        f"Channels: {desc['channels']} Colorspace: {desc['colorspace']}"
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert images to and from the QOI (Quite OK Image) format.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_encode = sub.add_parser("encode", help="Encode an image to QOI")
    p_encode.add_argument(
        "input", nargs="?", default=INPUT_IMAGE, help="Input image path (any format Pillow supports, or camera RAW)"
    )
    p_encode.add_argument("output", nargs="?", default=OUTPUT_QOI, help="Output .qoi path")

    p_decode = sub.add_parser("decode", help="Decode a QOI file to another image format")
    p_decode.add_argument("input", help="Input .qoi path")
    p_decode.add_argument("output", help="Output image path (e.g., .png)")
    p_decode.add_argument(
        "--trust-length",
        action="store_true",
        help="Assume the end marker is in the last 8 bytes instead of searching for it",
    )

    p_show = sub.add_parser("show", help="Display a QOI file")
    p_show.add_argument("input", help="Input .qoi path")

    p_info = sub.add_parser("info", help="Print the header of a QOI file")
    p_info.add_argument("input", help="Input .qoi path")

    return parser


def main(argv=None) -> int:
    args = _build_arg_parser().parse_args(argv)

    try:
        if args.command == "encode":
            png_to_qoi(args.input, args.output)
        elif args.command == "decode":
            qoi_to_png(args.input, args.output, use_end_marker=not args.trust_length)
        elif args.command == "show":
            grid = show_qoi(args.input)
            print(f"Showing {args.input}: {grid!r}")
        elif args.command == "info":
            qoi_info(args.input)
    except QOIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
