"""Handlers for QR generation requests."""

from .qr import QRHandler, GenerationResult, BatchReport, request_key

__all__ = ["QRHandler", "GenerationResult", "BatchReport", "request_key"]
