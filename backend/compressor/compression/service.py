"""Compression service: stage upload, run ffmpeg, report statistics, clean up."""
import logging
import time
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from compressor.config import CompressorSettings
from compressor.compression.classifier import classify, supported_categories
from compressor.compression.commands import build_command
from compressor.compression.errors import (
    EncodingError,
    StagingError,
    UploadTooLargeError,
    ValidationError,
)
from compressor.compression.models import (
    CompressionJob,
    CompressionLevel,
    CompressionRequest,
    CompressionResult,
    MediaCategory,
    SupportedFormats,
)
from compressor.compression.naming import resolve_names
from compressor.compression.runner import run_encoder

logger = logging.getLogger("compressor.service")

CHUNK_SIZE = 1024 * 1024


class CompressionService:
    """Runs one compression per call. Holds configuration only, no per-job state."""

    def __init__(self, settings: Optional[CompressorSettings] = None):
        self.settings = settings or CompressorSettings.from_env()
        logger.info(
            "CompressionService initialized (encoder=%s, upload_dir=%s, output_dir=%s)",
            self.settings.encoder_path, self.settings.upload_dir, self.settings.output_dir,
        )

    def ensure_directories(self) -> None:
        try:
            self.settings.upload_dir.mkdir(parents=True, exist_ok=True)
            self.settings.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Could not create working directories: %s", e)
            raise StagingError(f"Could not create working directories: {e}") from e

    def classify(self, content_type: Optional[str], filename: Optional[str]) -> MediaCategory:
        return classify(content_type, filename, support_audio=self.settings.support_audio)

    def supported_categories(self) -> list[str]:
        return supported_categories(self.settings.support_audio)

    def _max_upload_bytes(self, category: MediaCategory) -> int:
        if category == MediaCategory.IMAGE:
            return self.settings.max_image_bytes
        if category == MediaCategory.AUDIO:
            return self.settings.max_audio_bytes
        return self.settings.max_video_bytes

    def _prepare_job(self, request: CompressionRequest) -> CompressionJob:
        category = self.classify(request.content_type, request.original_filename)
        if category == MediaCategory.UNKNOWN:
            raise ValidationError(
                f"Unsupported file type. Supported: {', '.join(self.supported_categories())} files only"
            )
        level = CompressionLevel.parse(request.compression_level)
        for name, value in (("maxWidth", request.max_width), ("maxHeight", request.max_height)):
            if value is not None and value <= 0:
                raise ValidationError(f"{name} must be a positive integer")
        names = resolve_names(request.original_filename, category, request.output_format)
        return CompressionJob(
            request=request,
            category=category,
            level=level,
            token=names.token,
            input_path=(self.settings.upload_dir / names.input_name).absolute(),
            output_path=(self.settings.output_dir / names.output_name).absolute(),
            output_extension=names.output_extension,
        )

    def _stage_upload(self, job: CompressionJob) -> int:
        """Copy the upload stream to the job's input path. Returns bytes written."""
        max_bytes = self._max_upload_bytes(job.category)
        total = 0
        try:
            with open(job.input_path, "wb") as f:
                while chunk := job.request.file_content.read(CHUNK_SIZE):
                    total += len(chunk)
                    if total > max_bytes:
                        raise UploadTooLargeError(
                            f"File too large (max {max_bytes // (1024 * 1024)} MB for {job.category.value})"
                        )
                    f.write(chunk)
        except OSError as e:
            logger.error("Failed to save upload to %s: %s", job.input_path, e)
            raise StagingError(f"Failed to save uploaded file: {e}") from e
        if total == 0:
            raise ValidationError("File is empty")
        logger.info("File saved to %s (%s bytes)", job.input_path, total)
        return total

    def _scaling_bounds(self, job: CompressionJob) -> tuple[Optional[int], Optional[int]]:
        max_width, max_height = job.request.max_width, job.request.max_height
        if job.category != MediaCategory.IMAGE:
            return None, None
        if not self.settings.support_scaling and (max_width or max_height):
            logger.info("Scaling disabled; ignoring maxWidth=%s maxHeight=%s", max_width, max_height)
            return None, None
        return max_width, max_height

    @staticmethod
    def _probe_dimensions(path: Path) -> tuple[Optional[int], Optional[int]]:
        try:
            with Image.open(path) as img:
                return img.width, img.height
        except (UnidentifiedImageError, OSError) as e:
            logger.debug("Could not read dimensions of %s: %s", path.name, e)
            return None, None

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)

    def compress(self, request: CompressionRequest) -> CompressionResult:
        """Compress one uploaded file. Raises a CompressionError subclass on failure."""
        start = time.monotonic()
        self.ensure_directories()
        job = self._prepare_job(request)
        logger.info(
            "Compressing %s as %s (level=%s, output=%s)",
            request.original_filename, job.category.value, job.level.value, job.output_path.name,
        )
        try:
            original_size = self._stage_upload(job)
            max_width, max_height = self._scaling_bounds(job)
            cmd = build_command(
                self.settings.encoder_path,
                str(job.input_path),
                str(job.output_path),
                job.category,
                job.level,
                max_width,
                max_height,
                strip_audio=self.settings.strip_audio_from_video,
            )
            run = run_encoder(
                cmd,
                timeout=self.settings.encoder_timeout,
                max_output_chars=self.settings.max_diagnostic_chars,
            )
            if not run.ok:
                raise EncodingError(
                    f"File compression failed (exit code {run.returncode})",
                    diagnostics=run.output,
                    exit_code=run.returncode,
                )
            if not job.output_path.is_file():
                raise EncodingError(
                    f"FFmpeg completed but output file was not created: {job.output_path.name}",
                    diagnostics=run.output,
                    exit_code=run.returncode,
                )
            compressed_size = job.output_path.stat().st_size
        except Exception as e:
            if isinstance(e, ValidationError):
                logger.warning("Rejected %s: %s", request.original_filename, e)
            else:
                logger.exception("Compression failed for %s", request.original_filename)
            self._remove(job.input_path)
            self._remove(job.output_path)
            raise

        self._remove(job.input_path)
        width = height = None
        if job.category == MediaCategory.IMAGE:
            width, height = self._probe_dimensions(job.output_path)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Compression completed. Original: %s bytes, Compressed: %s bytes (%s ms)",
            original_size, compressed_size, elapsed_ms,
        )
        return CompressionResult(
            success=True,
            original_filename=request.original_filename,
            compressed_filename=job.output_path.name,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_ratio=compressed_size / original_size,
            space_saved_percentage=(original_size - compressed_size) / original_size * 100,
            processing_time_ms=elapsed_ms,
            output_path=str(job.output_path),
            file_type=job.category.value,
            width=width,
            height=height,
        )

    def _output_file(self, file_name: str) -> Optional[Path]:
        """Resolve a bare file name inside the output directory, or None."""
        if not file_name or file_name in (".", "..") or Path(file_name).name != file_name or "\\" in file_name:
            return None
        if "\x00" in file_name:
            return None
        try:
            output_dir = self.settings.output_dir.resolve()
            path = (output_dir / file_name).resolve()
        except (ValueError, OSError) as e:
            logger.warning("Could not resolve output name %r: %s", file_name, e)
            return None
        if path.parent != output_dir:
            return None
        return path

    def get_output(self, file_name: str) -> Optional[Path]:
        path = self._output_file(file_name)
        found = path is not None and path.is_file()
        logger.info("Looking for file %s, exists: %s", file_name, found)
        return path if found else None

    def delete_output(self, file_name: str) -> bool:
        """True only if a file was actually removed."""
        path = self._output_file(file_name)
        if path is None:
            return False
        try:
            path.unlink()
            deleted = True
        except FileNotFoundError:
            deleted = False
        except OSError as e:
            logger.error("Error deleting file %s: %s", file_name, e)
            return False
        logger.info("File deletion result for %s: %s", file_name, deleted)
        return deleted

    def capabilities(self) -> dict:
        return {
            "service": "FFmpeg File Compressor",
            "status": "running",
            "timestamp": int(time.time() * 1000),
            "supported_types": self.supported_categories(),
            "supported_image_formats": SupportedFormats.IMAGE_OUTPUT_LABELS,
            "compression_levels": SupportedFormats.LEVELS,
            "scaling": self.settings.support_scaling,
        }


# Singleton
_compression_service: Optional[CompressionService] = None


def get_compression_service() -> CompressionService:
    global _compression_service
    if _compression_service is None:
        _compression_service = CompressionService()
    return _compression_service
