"""Translate a category + compression level into an ffmpeg argument list."""
from pathlib import PurePath
from typing import Optional

from compressor.compression.errors import InternalInvariantError
from compressor.compression.models import CompressionLevel, MediaCategory

VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"

# level -> (crf, preset); lower crf = better quality
VIDEO_SETTINGS = {
    CompressionLevel.LOW: ("28", "fast"),
    CompressionLevel.MEDIUM: ("23", "medium"),
    CompressionLevel.HIGH: ("18", "slow"),
}

# output extension -> (ffmpeg option, level -> value)
IMAGE_QUALITY = {
    # qscale: lower = better
    ".jpg": ("-q:v", {CompressionLevel.LOW: "8", CompressionLevel.MEDIUM: "5", CompressionLevel.HIGH: "2"}),
    # zlib effort: higher = smaller/slower
    ".png": ("-compression_level", {CompressionLevel.LOW: "1", CompressionLevel.MEDIUM: "6", CompressionLevel.HIGH: "9"}),
    # libwebp quality: higher = better
    ".webp": ("-quality", {CompressionLevel.LOW: "60", CompressionLevel.MEDIUM: "75", CompressionLevel.HIGH: "90"}),
    # av1 crf: lower = better
    ".avif": ("-crf", {CompressionLevel.LOW: "35", CompressionLevel.MEDIUM: "28", CompressionLevel.HIGH: "20"}),
}
IMAGE_QUALITY[".jpeg"] = IMAGE_QUALITY[".jpg"]

AUDIO_BITRATES = {
    CompressionLevel.LOW: "128k",
    CompressionLevel.MEDIUM: "192k",
    CompressionLevel.HIGH: "320k",
}


def scale_filter(max_width: Optional[int] = None, max_height: Optional[int] = None) -> Optional[str]:
    """ffmpeg scale expression bounding the frame; None when no bound is given."""
    if max_width is not None and max_height is not None:
        return f"scale={max_width}:{max_height}:force_original_aspect_ratio=decrease"
    if max_width is not None:
        return f"scale={max_width}:-1"
    if max_height is not None:
        return f"scale=-1:{max_height}"
    return None


def _video_args(level: CompressionLevel, strip_audio: bool) -> list[str]:
    crf, preset = VIDEO_SETTINGS[level]
    args = ["-c:v", VIDEO_CODEC]
    if strip_audio:
        args.append("-an")
    else:
        args += ["-c:a", AUDIO_CODEC]
    args += ["-crf", crf, "-preset", preset]
    return args


def _image_args(
    output_path: str,
    level: CompressionLevel,
    max_width: Optional[int],
    max_height: Optional[int],
) -> list[str]:
    args: list[str] = []
    vf = scale_filter(max_width, max_height)
    if vf:
        args += ["-vf", vf]
    quality = IMAGE_QUALITY.get(PurePath(output_path).suffix.lower())
    if quality:
        option, values = quality
        args += [option, values[level]]
    return args


def build_command(
    encoder_path: str,
    input_path: str,
    output_path: str,
    category: MediaCategory,
    level: CompressionLevel,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    strip_audio: bool = True,
) -> list[str]:
    """Build ``[encoder, -i, input, <codec args>, -y, output]``."""
    level = CompressionLevel.parse(level)
    cmd = [encoder_path, "-i", str(input_path)]
    if category == MediaCategory.VIDEO:
        cmd += _video_args(level, strip_audio)
    elif category == MediaCategory.IMAGE:
        cmd += _image_args(str(output_path), level, max_width, max_height)
    elif category == MediaCategory.AUDIO:
        cmd += ["-b:a", AUDIO_BITRATES[level]]
    else:
        raise InternalInvariantError(f"Unsupported file type: {getattr(category, 'value', category)}")
    cmd += ["-y", str(output_path)]
    return cmd
