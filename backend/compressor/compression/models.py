"""Compression request/response models."""
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from compressor.compression.errors import ValidationError


class MediaCategory(str, Enum):
    VIDEO = "video"
    IMAGE = "image"
    AUDIO = "audio"
    UNKNOWN = "unknown"


class CompressionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CompressionLevel":
        """Case-insensitive lookup; blank means medium."""
        if isinstance(value, CompressionLevel):
            return value
        if value is None or not value.strip():
            return cls.MEDIUM
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError("Invalid compression level. Use: low, medium, or high") from None


class SupportedFormats:
    IMAGE_OUTPUT = ["jpeg", "png", "webp", "avif"]
    IMAGE_OUTPUT_LABELS = ["JPEG", "PNG", "WebP", "AVIF"]
    LEVELS = [level.value for level in CompressionLevel]


@dataclass
class CompressionRequest:
    """What the caller hands to the service for one upload."""

    file_content: BinaryIO
    original_filename: str
    content_type: Optional[str] = None
    compression_level: CompressionLevel = CompressionLevel.MEDIUM
    output_format: Optional[str] = None
    max_width: Optional[int] = None
    max_height: Optional[int] = None


@dataclass
class CompressionJob:
    """Per-call working state. Owned by a single compress() call."""

    request: CompressionRequest
    category: MediaCategory
    level: CompressionLevel
    token: str
    input_path: Path
    output_path: Path
    output_extension: str


@dataclass(frozen=True)
class CompressionResult:
    success: bool
    original_filename: str
    compressed_filename: str
    original_size: int  # bytes
    compressed_size: int  # bytes
    compression_ratio: float
    space_saved_percentage: float
    processing_time_ms: int
    output_path: str
    file_type: str
    width: Optional[int] = None
    height: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)
