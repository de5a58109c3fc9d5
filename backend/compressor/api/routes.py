"""API routes for upload, compression, download and cleanup."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from compressor.compression.errors import ValidationError
from compressor.compression.models import CompressionLevel, CompressionRequest, MediaCategory
from compressor.compression.service import CompressionService, get_compression_service

logger = logging.getLogger("compressor.api")
router = APIRouter(prefix="/api", tags=["compressor"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/file/compress")
def compress_file(
    file: UploadFile = File(...),
    compression_level: str = Form("medium", alias="compressionLevel"),
    output_format: Optional[str] = Form(None, alias="outputFormat"),
    max_width: Optional[int] = Form(None, alias="maxWidth", gt=0),
    max_height: Optional[int] = Form(None, alias="maxHeight", gt=0),
    svc: CompressionService = Depends(get_compression_service),
):
    """Compress one uploaded video or image and return size statistics.

    Runs in the threadpool: the ffmpeg call blocks until the encode finishes.
    """
    if file.size == 0:
        raise ValidationError("File is empty")
    category = svc.classify(file.content_type, file.filename)
    if category == MediaCategory.UNKNOWN:
        raise ValidationError(
            f"Unsupported file type. Supported: {', '.join(svc.supported_categories())} files only"
        )
    level = CompressionLevel.parse(compression_level)

    result = svc.compress(
        CompressionRequest(
            file_content=file.file,
            original_filename=file.filename or "",
            content_type=file.content_type,
            compression_level=level,
            output_format=output_format,
            max_width=max_width,
            max_height=max_height,
        )
    )
    return result.to_dict()


@router.get("/file/download/{filename}")
def download_file(filename: str, svc: CompressionService = Depends(get_compression_service)):
    path = svc.get_output(filename)
    if path is None:
        raise HTTPException(404, "File not found")
    return FileResponse(path, filename=filename, media_type="application/octet-stream")


@router.delete("/file/cleanup/{filename}")
def cleanup_file(filename: str, svc: CompressionService = Depends(get_compression_service)):
    deleted = svc.delete_output(filename)
    return {
        "success": deleted,
        "message": "File deleted successfully" if deleted else "File not found",
    }


@router.get("/file/status")
def service_status(svc: CompressionService = Depends(get_compression_service)):
    return svc.capabilities()
