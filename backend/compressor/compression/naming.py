"""Generate the per-job input/output file names."""
import re
import uuid
from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from compressor.compression.models import MediaCategory

DEFAULT_INPUT_EXTENSION = ".mp4"
DEFAULT_IMAGE_EXTENSION = ".jpg"

IMAGE_FORMAT_EXTENSIONS = {
    "jpeg": ".jpg",
    "jpg": ".jpg",
    "png": ".png",
    "webp": ".webp",
    "avif": ".avif",
}

_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass(frozen=True)
class JobNames:
    token: str
    input_name: str
    output_name: str
    output_extension: str


def input_extension(filename: Optional[str]) -> str:
    """Extension of the uploaded name, or .mp4 when missing or not a plain suffix."""
    ext = PurePath(filename or "").suffix
    if not _SAFE_EXTENSION.match(ext):
        return DEFAULT_INPUT_EXTENSION
    return ext


def output_extension(category: MediaCategory, in_ext: str, output_format: Optional[str] = None) -> str:
    # Images are always re-encoded to a concrete target format.
    if category == MediaCategory.IMAGE:
        if output_format:
            return IMAGE_FORMAT_EXTENSIONS.get(output_format.strip().lower(), DEFAULT_IMAGE_EXTENSION)
        return DEFAULT_IMAGE_EXTENSION
    return in_ext


def new_token() -> str:
    return str(uuid.uuid4())


def resolve_names(
    original_filename: Optional[str],
    category: MediaCategory,
    output_format: Optional[str] = None,
) -> JobNames:
    token = new_token()
    in_ext = input_extension(original_filename)
    out_ext = output_extension(category, in_ext, output_format)
    return JobNames(
        token=token,
        input_name=f"input_{token}{in_ext}",
        output_name=f"compressed_{token}{out_ext}",
        output_extension=out_ext,
    )
