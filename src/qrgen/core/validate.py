"""Input validation and sanitisation for QR generation requests."""

import re
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from returns.result import Result, Success, Failure
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError


# Validation limits
MAX_DATA_LENGTH = 4000
MIN_DIMENSION = 50
MAX_DIMENSION = 2000
MIN_MARGIN = 0
MAX_MARGIN = 10

DEFAULT_SIZE = "300x300"
DEFAULT_MARGIN = 1
DEFAULT_ERROR_LEVEL = "M"
DEFAULT_DARK_COLOR = "#000000"
DEFAULT_LIGHT_COLOR = "#FFFFFF"
ERROR_LEVELS = ("L", "M", "Q", "H")

SIZE_PATTERN = re.compile(r"^(\d+)x(\d+)$", re.IGNORECASE)
HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)
_SCRIPT_PATTERN = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]*>")

ErrorLevel = Literal["L", "M", "Q", "H"]


class ValidationError(Exception):
    """Validation failed."""

    pass


@dataclass(frozen=True)
class ValidationResult:
    """Validation error with details (for Result pattern)."""

    message: str
    field: str | None = None
    value: Any | None = None


def strip_markup(text: str) -> str:
    """Remove HTML tags (and script bodies) from user-supplied text."""
    return _TAG_PATTERN.sub("", _SCRIPT_PATTERN.sub("", text))


def normalize_color(value: Any, default: str) -> str:
    """Accept colors with or without '#', falling back to ``default`` when invalid."""
    if not isinstance(value, str) or not value.strip():
        return default
    color = value.strip()
    if not color.startswith("#"):
        color = "#" + color
    if not HEX_COLOR_PATTERN.match(color):
        return default
    return color.upper()


def parse_size(size: str | None) -> tuple[int, int] | None:
    """Parse a WIDTHxHEIGHT descriptor, returning None when malformed."""
    if not size or not isinstance(size, str):
        return None
    match = SIZE_PATTERN.match(size.strip())
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def validate_size(size: str) -> tuple[int, int]:
    """
    Validate a size descriptor.

    Raises:
        ValidationError: If the format or the bounds are wrong
    """
    dimensions = parse_size(size)
    if dimensions is None:
        raise ValidationError('Size must be in format "WIDTHxHEIGHT" (e.g., "300x300")')

    width, height = dimensions
    if width < MIN_DIMENSION or height < MIN_DIMENSION:
        raise ValidationError(f"Minimum size is {MIN_DIMENSION}x{MIN_DIMENSION} pixels")
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        raise ValidationError(f"Maximum size is {MAX_DIMENSION}x{MAX_DIMENSION} pixels")
    return dimensions


class QRRequest(BaseModel):
    """Validated, sanitised QR generation request."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid", frozen=True)

    data: str = Field(min_length=1)
    size: str | None = None
    margin: int = DEFAULT_MARGIN
    error_correction_level: ErrorLevel = DEFAULT_ERROR_LEVEL
    color: str = DEFAULT_DARK_COLOR
    bgcolor: str = DEFAULT_LIGHT_COLOR

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: str, info: ValidationInfo) -> str:
        """Strip markup and enforce the payload length limit."""
        max_length = MAX_DATA_LENGTH
        if info.context:
            max_length = info.context.get("max_data_length", MAX_DATA_LENGTH)

        cleaned = strip_markup(v)
        if not cleaned.strip():
            raise ValueError("Data cannot be empty")
        if len(cleaned) > max_length:
            raise ValueError(f"Data is too long. Maximum length is {max_length} characters")
        return cleaned

    @field_validator("size")
    @classmethod
    def validate_size_field(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        try:
            width, height = validate_size(v)
        except ValidationError as e:
            raise ValueError(str(e)) from e
        return f"{width}x{height}"

    @field_validator("margin", mode="before")
    @classmethod
    def coerce_margin(cls, v: Any) -> int:
        """Out-of-range or unparseable margins fall back to the default."""
        try:
            margin = int(v)
        except (TypeError, ValueError):
            return DEFAULT_MARGIN
        if margin < MIN_MARGIN or margin > MAX_MARGIN:
            return DEFAULT_MARGIN
        return margin

    @field_validator("error_correction_level", mode="before")
    @classmethod
    def coerce_error_level(cls, v: Any) -> str:
        level = str(v).strip().upper() if v is not None else ""
        return level if level in ERROR_LEVELS else DEFAULT_ERROR_LEVEL

    @field_validator("color", mode="before")
    @classmethod
    def coerce_color(cls, v: Any) -> str:
        return normalize_color(v, DEFAULT_DARK_COLOR)

    @field_validator("bgcolor", mode="before")
    @classmethod
    def coerce_bgcolor(cls, v: Any) -> str:
        return normalize_color(v, DEFAULT_LIGHT_COLOR)

    @property
    def dimensions(self) -> str:
        """Effective WIDTHxHEIGHT descriptor."""
        return self.size or DEFAULT_SIZE

    @property
    def width(self) -> int:
        return parse_size(self.dimensions)[0]  # type: ignore[index]

    def options(self) -> dict[str, Any]:
        """Effective rendering options, as echoed back to clients."""
        return {
            "margin": self.margin,
            "errorCorrectionLevel": self.error_correction_level,
            "color": self.color,
            "bgcolor": self.bgcolor,
        }


def describe_validation_error(error: PydanticValidationError) -> str:
    """Human-readable message for the first pydantic error."""
    first = error.errors()[0]
    original = first.get("ctx", {}).get("error")
    if original is not None:
        return str(original)
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


def build_request(
    data: Any,
    size: Any = None,
    options: Mapping[str, Any] | None = None,
    max_data_length: int = MAX_DATA_LENGTH,
) -> QRRequest:
    """
    Build a validated request from loosely typed input.

    Args:
        data: Payload to encode
        size: Optional WIDTHxHEIGHT descriptor
        options: margin / errorCorrectionLevel (or el) / color / bgcolor
        max_data_length: Payload length limit

    Raises:
        ValidationError: If the request is invalid
    """
    if data is None or data == "":
        raise ValidationError("Data parameter is required")
    if not isinstance(data, str):
        raise ValidationError("Data must be a string")
    if size is not None and not isinstance(size, str):
        raise ValidationError("Size must be a string")

    options = options or {}
    payload: dict[str, Any] = {"data": data, "size": size}
    if options.get("margin") not in (None, ""):
        payload["margin"] = options["margin"]
    level = options.get("el") or options.get("errorCorrectionLevel")
    if level:
        payload["error_correction_level"] = level
    if options.get("color"):
        payload["color"] = options["color"]
    if options.get("bgcolor"):
        payload["bgcolor"] = options["bgcolor"]

    try:
        return QRRequest.model_validate(payload, context={"max_data_length": max_data_length})
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e)) from e


def validate_batch_item(
    item: Any, max_data_length: int = MAX_DATA_LENGTH
) -> Result[QRRequest, ValidationResult]:
    """
    Validate one batch entry (Result pattern version).

    Args:
        item: Raw ``{"data", "size", "options"}`` mapping
        max_data_length: Payload length limit

    Returns:
        Result holding the validated request or the validation error
    """
    if not isinstance(item, Mapping):
        return Failure(ValidationResult("Batch entry must be an object", value=item))

    options = item.get("options") or {}
    if not isinstance(options, Mapping):
        return Failure(ValidationResult("Options must be an object", field="options"))

    try:
        return Success(build_request(item.get("data"), item.get("size"), options, max_data_length))
    except ValidationError as e:
        return Failure(ValidationResult(str(e), value=item.get("data")))
