"""Map an upload's declared content type / filename to a media category."""
from pathlib import PurePath
from typing import Optional

from compressor.config import AUDIO_EXTENSIONS, IMAGE_EXTENSIONS, VIDEO_EXTENSIONS
from compressor.compression.models import MediaCategory


def classify(
    content_type: Optional[str],
    filename: Optional[str],
    support_audio: bool = False,
) -> MediaCategory:
    """Declared content type wins; the extension is only a fallback."""
    if content_type:
        ct = content_type.strip().lower()
        if ct.startswith("video/"):
            return MediaCategory.VIDEO
        if ct.startswith("image/"):
            return MediaCategory.IMAGE
        if support_audio and ct.startswith("audio/"):
            return MediaCategory.AUDIO

    ext = PurePath(filename or "").suffix.lower()
    if ext in VIDEO_EXTENSIONS:
        return MediaCategory.VIDEO
    if ext in IMAGE_EXTENSIONS:
        return MediaCategory.IMAGE
    if support_audio and ext in AUDIO_EXTENSIONS:
        return MediaCategory.AUDIO
    return MediaCategory.UNKNOWN


def supported_categories(support_audio: bool = False) -> list[str]:
    categories = [MediaCategory.VIDEO.value, MediaCategory.IMAGE.value]
    if support_audio:
        categories.insert(1, MediaCategory.AUDIO.value)
    return categories
