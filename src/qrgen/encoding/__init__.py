"""QR encoding backends."""

from .qr import QREncoder, EncodingError, to_data_url

__all__ = ["QREncoder", "EncodingError", "to_data_url"]
