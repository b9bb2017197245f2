"""QR symbol rendering backed by the ``qrcode`` library and Pillow."""

import base64
import io

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError
from PIL import Image

from ..core.logging_config import get_logger
from ..core.validate import (
    DEFAULT_DARK_COLOR,
    DEFAULT_ERROR_LEVEL,
    DEFAULT_LIGHT_COLOR,
    DEFAULT_MARGIN,
)

logger = get_logger(__name__)

ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

# Pixels per module before the final resize
BOX_SIZE = 10


class EncodingError(Exception):
    """QR encoding failed."""

    def __init__(self, reason: str, original: Exception | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.original = original


class QREncoder:
    """Renders text to square PNG QR codes."""

    def __init__(self, box_size: int = BOX_SIZE) -> None:
        self.box_size = box_size

    def encode(
        self,
        text: str,
        width: int,
        margin: int = DEFAULT_MARGIN,
        error_correction_level: str = DEFAULT_ERROR_LEVEL,
        dark_color: str = DEFAULT_DARK_COLOR,
        light_color: str = DEFAULT_LIGHT_COLOR,
    ) -> bytes:
        """
        Encode text as a PNG QR code.

        Args:
            text: Payload
            width: Output edge length in pixels
            margin: Quiet zone in modules
            error_correction_level: L, M, Q or H
            dark_color: Module color (#RRGGBB)
            light_color: Background color (#RRGGBB)

        Returns:
            PNG bytes

        Raises:
            EncodingError: If the payload cannot be encoded
        """
        level = ERROR_LEVELS.get(error_correction_level)
        if level is None:
            raise EncodingError(f"Unknown error correction level: {error_correction_level}")

        qr = qrcode.QRCode(
            version=None,
            error_correction=level,
            box_size=self.box_size,
            border=margin,
        )
        try:
            qr.add_data(text)
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            # Past version 40 some qrcode releases raise ValueError from check_version
            raise EncodingError(
                f"Failed to generate QR code: data too long for error correction level "
                f"{error_correction_level}",
                e,
            ) from e

        try:
            image = qr.make_image(fill_color=dark_color, back_color=light_color).get_image()
        except (ValueError, TypeError) as e:
            raise EncodingError(f"Failed to generate QR code: {e}", e) from e

        image = image.convert("RGB").resize((width, width), Image.Resampling.NEAREST)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG", optimize=True)
        png = buffer.getvalue()

        logger.debug("qr_encoded", version=qr.version, width=width, size_bytes=len(png))
        return png


def to_data_url(image: bytes, mime_type: str = "image/png") -> str:
    """Wrap image bytes in a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(image).decode('ascii')}"
