class QOIError(ValueError):
    """Base class for every error raised by the codec."""


class QOIHeaderError(QOIError):
    """The input is too short, has the wrong magic, or declares invalid fields."""


class QOIDecodeError(QOIError):
    """The chunk stream cannot be replayed into the declared pixel grid."""


class QOIEncodeError(QOIError):
    """The pixel data does not match its description."""
