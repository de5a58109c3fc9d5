"""Application configuration. Loads from environment and .env file."""
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

DEFAULT_WORK_DIR = Path(tempfile.gettempdir()) / "ffmpeg-compressor"

# Supported input extensions (lowercase, with dot)
VIDEO_EXTENSIONS = {".mp4", ".avi", ".mov", ".mkv", ".webm", ".flv", ".wmv"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tiff", ".avif"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a"}

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:5173,http://127.0.0.1:5173"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("compressor")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_mb(name: str, default: int) -> int:
    return int(os.getenv(name, str(default))) * 1024 * 1024


@dataclass(frozen=True)
class CompressorSettings:
    """Everything the compression service needs; passed in rather than read globally."""

    upload_dir: Path
    output_dir: Path
    encoder_path: str = "ffmpeg"
    support_audio: bool = False
    support_scaling: bool = True
    strip_audio_from_video: bool = True
    encoder_timeout: Optional[float] = 600.0  # seconds; None = wait forever
    max_diagnostic_chars: int = 8000
    max_image_bytes: int = 20 * 1024 * 1024
    max_video_bytes: int = 500 * 1024 * 1024
    max_audio_bytes: int = 100 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "CompressorSettings":
        timeout = float(os.getenv("ENCODER_TIMEOUT_SECONDS", "600"))
        return cls(
            upload_dir=Path(os.getenv("UPLOAD_DIR", str(DEFAULT_WORK_DIR / "uploads"))),
            output_dir=Path(os.getenv("OUTPUT_DIR", str(DEFAULT_WORK_DIR / "compressed"))),
            encoder_path=os.getenv("FFMPEG_PATH", "ffmpeg"),
            support_audio=_env_bool("SUPPORT_AUDIO", False),
            support_scaling=_env_bool("SUPPORT_SCALING", True),
            strip_audio_from_video=_env_bool("STRIP_AUDIO_FROM_VIDEO", True),
            encoder_timeout=timeout if timeout > 0 else None,
            max_diagnostic_chars=int(os.getenv("MAX_DIAGNOSTIC_CHARS", "8000")),
            max_image_bytes=_env_mb("MAX_IMAGE_SIZE_MB", 20),
            max_video_bytes=_env_mb("MAX_VIDEO_SIZE_MB", 500),
            max_audio_bytes=_env_mb("MAX_AUDIO_SIZE_MB", 100),
        )
