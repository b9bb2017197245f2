"""Tests for the QR encoder."""

import base64
import io

import pytest
import qrcode
from PIL import Image
from qrcode.exceptions import DataOverflowError

from qrgen.encoding.qr import EncodingError, QREncoder, to_data_url

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def encoder():
    return QREncoder()


def _open(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png))


@pytest.mark.unit
def test_encode_png(encoder):
    """Output is a PNG of the requested width."""
    png = encoder.encode("Hello World", 300)

    assert png.startswith(PNG_SIGNATURE)
    image = _open(png)
    assert image.format == "PNG"
    assert image.size == (300, 300)


@pytest.mark.unit
@pytest.mark.parametrize("width", [50, 123, 2000])
def test_encode_widths(encoder, width):
    """Any width in range is honoured."""
    assert _open(encoder.encode("data", width)).size == (width, width)


@pytest.mark.unit
def test_encode_colors(encoder):
    """Custom colors reach the rendered image."""
    png = encoder.encode("data", 100, margin=4, dark_color="#FF0000", light_color="#00FF00")
    image = _open(png).convert("RGB")

    # Top-left pixel sits in the quiet zone
    assert image.getpixel((0, 0)) == (0, 255, 0)
    assert (255, 0, 0) in {color for _, color in image.getcolors(maxcolors=1024)}


@pytest.mark.unit
def test_encode_deterministic(encoder):
    """Identical requests render identical bytes."""
    assert encoder.encode("same", 200, 2, "Q") == encoder.encode("same", 200, 2, "Q")


@pytest.mark.unit
def test_error_level_changes_output(encoder):
    """Different error correction levels give different symbols."""
    assert encoder.encode("data", 300, error_correction_level="L") != encoder.encode(
        "data", 300, error_correction_level="H"
    )


@pytest.mark.unit
def test_overflow_raises(encoder):
    """Payloads beyond symbol capacity fail with a reason."""
    with pytest.raises(EncodingError) as exc_info:
        encoder.encode("x" * 4000, 300, error_correction_level="H")

    assert "data too long for error correction level H" in exc_info.value.reason
    assert exc_info.value.original is not None


@pytest.mark.unit
@pytest.mark.parametrize("level", ["L", "M", "Q", "H"])
def test_overflow_reason_every_level(encoder, level):
    """Overflow at any level names the level instead of a library message."""
    with pytest.raises(EncodingError) as exc_info:
        encoder.encode("x" * 4000, 300, error_correction_level=level)

    assert exc_info.value.reason == (
        f"Failed to generate QR code: data too long for error correction level {level}"
    )
    assert "Invalid version" not in exc_info.value.reason


@pytest.mark.unit
def test_overflow_error_from_library(encoder, mocker):
    """DataOverflowError from the fitting step is reported the same way."""
    mocker.patch.object(qrcode.QRCode, "make", side_effect=DataOverflowError())

    with pytest.raises(EncodingError, match="data too long for error correction level M"):
        encoder.encode("data", 300)


@pytest.mark.unit
def test_unknown_level(encoder):
    """Unknown levels are rejected before encoding."""
    with pytest.raises(EncodingError, match="Unknown error correction level"):
        encoder.encode("data", 300, error_correction_level="Z")


@pytest.mark.unit
def test_to_data_url():
    """Data URLs are base64 PNG."""
    url = to_data_url(PNG_SIGNATURE)

    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == PNG_SIGNATURE
