from .decoder import QOIDecoder
from .encoder import QOIEncoder
from .errors import QOIDecodeError, QOIEncodeError, QOIError, QOIHeaderError
from .image import PixelGrid
from .qoi import QOI, CodecState, Tag
from .utils import load_image, read_qoi, show_qoi, write_qoi

__version__ = "0.2.0"

__all__ = [
    "QOIEncoder",
    "QOIDecoder",
    "QOI",
    "Tag",
    "CodecState",
    "PixelGrid",
    "QOIError",
    "QOIHeaderError",
    "QOIDecodeError",
    "QOIEncodeError",
    "load_image",
    "read_qoi",
    "write_qoi",
    "show_qoi",
]
