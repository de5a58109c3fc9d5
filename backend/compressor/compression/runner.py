"""Run the external encoder and capture what it prints."""
import logging
import subprocess
import threading
from collections import deque
from dataclasses import dataclass
from typing import IO, Optional, Sequence

from compressor.compression.errors import EncoderTimeoutError, EncoderUnavailableError

logger = logging.getLogger("compressor.runner")

READ_CHUNK = 8192


@dataclass(frozen=True)
class EncoderRun:
    output: str  # stdout and stderr, interleaved
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def truncate_output(text: str, limit: Optional[int], dropped: int = 0) -> str:
    """Keep the tail; ffmpeg prints the actual error last."""
    if limit and len(text) > limit:
        dropped += len(text) - limit
        text = text[-limit:]
    if not dropped:
        return text
    return f"...[{dropped} chars truncated]\n{text}"


class OutputTail:
    """Holds only the most recent ``limit`` characters of a stream."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit
        self.chunks: deque = deque()
        self.size = 0
        self.dropped = 0

    def add(self, chunk: str) -> None:
        self.chunks.append(chunk)
        self.size += len(chunk)
        if not self.limit:
            return
        while len(self.chunks) > 1 and self.size - len(self.chunks[0]) >= self.limit:
            old = self.chunks.popleft()
            self.size -= len(old)
            self.dropped += len(old)

    def consume(self, stream: IO[str]) -> None:
        with stream:
            # readline splits on \r too (universal newlines), so ffmpeg progress lines stay short
            for chunk in iter(lambda: stream.readline(READ_CHUNK), ""):
                self.add(chunk)

    def text(self) -> str:
        return truncate_output("".join(self.chunks), self.limit, self.dropped)


def run_encoder(
    args: Sequence[str],
    timeout: Optional[float] = None,
    max_output_chars: Optional[int] = None,
) -> EncoderRun:
    """Block until the encoder exits. Non-zero exit is returned, not raised."""
    logger.debug("Running: %s", " ".join(args))
    try:
        proc = subprocess.Popen(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except FileNotFoundError:
        logger.error("Encoder not found: %s. Install ffmpeg or set FFMPEG_PATH.", args[0])
        raise EncoderUnavailableError(f"Encoder not installed or not found: {args[0]}") from None

    tail = OutputTail(max_output_chars)
    reader = threading.Thread(target=tail.consume, args=(proc.stdout,), daemon=True)
    reader.start()
    try:
        returncode = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
        reader.join(timeout=5)
        logger.error("Encoder timed out after %ss", timeout)
        raise EncoderTimeoutError(
            f"Encoder did not finish within {timeout} seconds",
            diagnostics=tail.text(),
        ) from None
    reader.join()
    if returncode != 0:
        logger.warning("Encoder exited with code %s", returncode)
    return EncoderRun(output=tail.text(), returncode=returncode)
