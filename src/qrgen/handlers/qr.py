"""QR generation handler."""

import asyncio
import functools
from dataclasses import dataclass, field
from typing import Any, Iterable

from returns.pipeline import is_successful

from ..cache.fingerprint import fingerprint
from ..cache.store import QRCacheStore, RequestMetadata
from ..core.logging_config import get_logger
from ..core.validate import MAX_DATA_LENGTH, QRRequest, build_request, validate_batch_item
from ..encoding.qr import EncodingError, QREncoder, to_data_url
from ..monitoring.metrics import MetricsCollector


logger = get_logger(__name__)

POPULAR_REQUESTS: tuple[dict[str, str], ...] = (
    {"data": "https://example.com", "size": "300x300"},
    {"data": "Hello World", "size": "300x300"},
    {"data": "https://github.com", "size": "300x300"},
    {"data": "Contact Info", "size": "400x400"},
)


@dataclass(frozen=True)
class GenerationResult:
    """Encoded QR code plus where it came from."""

    image: bytes
    key: str
    cache_hit: bool

    @property
    def data_url(self) -> str:
        return to_data_url(self.image)


@dataclass
class BatchReport:
    """Outcome of a batch request."""

    processed: int = 0
    results: list[dict[str, Any]] = field(default_factory=list)
    errors: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        report: dict[str, Any] = {
            "success": True,
            "processed": self.processed,
            "successful": len(self.results),
            "failed": len(self.errors),
            "results": self.results,
        }
        if self.errors:
            report["errors"] = self.errors
        return report


def request_key(request: QRRequest) -> str:
    """Cache key for a validated request."""
    return fingerprint(
        request.data,
        request.dimensions,
        margin=request.margin,
        error_correction_level=request.error_correction_level,
        dark_color=request.color,
        light_color=request.bgcolor,
    )


class QRHandler:
    """Serves QR codes from the cache, encoding on a miss."""

    def __init__(
        self,
        store: QRCacheStore,
        encoder: QREncoder,
        metrics: MetricsCollector,
        cache_enabled: bool = True,
    ) -> None:
        self.store = store
        self.encoder = encoder
        self.metrics = metrics
        self.cache_enabled = cache_enabled

    async def generate(self, request: QRRequest) -> GenerationResult:
        """
        Produce the PNG for a validated request.

        Raises:
            EncodingError: If the payload cannot be encoded
        """
        key = request_key(request)

        if self.cache_enabled:
            cached = self.store.lookup_or_miss(key)
            if cached is not None:
                self.metrics.record_cache_hit()
                logger.debug("cache_hit", key=key, access_count=cached.metadata.access_count)
                return GenerationResult(image=cached.image, key=key, cache_hit=True)
            self.metrics.record_cache_miss()

        # Encoding is CPU bound; keep it off the event loop
        loop = asyncio.get_running_loop()
        encode = functools.partial(
            self.encoder.encode,
            request.data,
            request.width,
            request.margin,
            request.error_correction_level,
            request.color,
            request.bgcolor,
        )
        try:
            with self.metrics.measure_duration(self.metrics.record_generation):
                image = await loop.run_in_executor(None, encode)
        except EncodingError as e:
            self.metrics.record_error("encoding_error", "qr_handler")
            logger.error("encoding_failed", key=key, error=e.reason)
            raise

        if self.cache_enabled:
            self.store.store(
                key,
                image,
                RequestMetadata(
                    size=request.dimensions,
                    error_correction_level=request.error_correction_level,
                    dark_color=request.color,
                    light_color=request.bgcolor,
                ),
            )
            self.metrics.update_cache(self.store.current_stats())

        logger.info("qr_generated", key=key, size=request.dimensions, size_bytes=len(image))
        return GenerationResult(image=image, key=key, cache_hit=False)

    async def generate_batch(
        self, items: list[Any], max_data_length: int = MAX_DATA_LENGTH
    ) -> BatchReport:
        """Validate and encode every batch entry concurrently, reporting per-item errors."""
        report = BatchReport(processed=len(items))

        async def run(index: int, item: Any) -> None:
            validated = validate_batch_item(item, max_data_length)
            if not is_successful(validated):
                failure = validated.failure()
                report.errors.append({"index": index, "error": failure.message, "request": item})
                return

            request = validated.unwrap()
            try:
                result = await self.generate(request)
            except EncodingError as e:
                report.errors.append({"index": index, "error": e.reason, "request": item})
                return

            report.results.append(
                {
                    "index": index,
                    "success": True,
                    "cached": result.cache_hit,
                    "data": {
                        "url": result.data_url,
                        "size": request.dimensions,
                        "content": request.data,
                    },
                }
            )

        await asyncio.gather(*(run(index, item) for index, item in enumerate(items)))
        report.results.sort(key=lambda r: r["index"])
        report.errors.sort(key=lambda r: r["index"])
        return report

    async def preload(self, requests: Iterable[dict[str, Any]] = POPULAR_REQUESTS) -> int:
        """Warm the cache with commonly requested codes; returns how many were stored."""
        warmed = 0
        for raw in requests:
            request = build_request(raw["data"], raw.get("size"), raw.get("options"))
            try:
                result = await self.generate(request)
            except EncodingError as e:
                logger.warning("preload_failed", data=request.data[:50], error=e.reason)
                continue
            if not result.cache_hit:
                warmed += 1
        logger.info("cache_preloaded", entries=warmed)
        return warmed
