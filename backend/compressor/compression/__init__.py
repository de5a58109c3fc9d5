from .service import CompressionService, get_compression_service
from .models import CompressionLevel, CompressionRequest, CompressionResult, MediaCategory

__all__ = [
    "CompressionService",
    "get_compression_service",
    "CompressionLevel",
    "CompressionRequest",
    "CompressionResult",
    "MediaCategory",
]
