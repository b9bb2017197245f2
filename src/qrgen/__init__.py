"""QRGen - QR code generation service with an in-memory response cache."""

__version__ = "1.2.0"
