from __future__ import annotations

import json
import stat
import sys
from pathlib import Path

import pytest

from compressor.compression.service import CompressionService
from compressor.config import CompressorSettings

# Stand-ins for ffmpeg: each reads "-i <input>" and treats the last argument as the output.
_HEADER = f"#!{sys.executable}\nimport json, os, sys, time\nargs = sys.argv[1:]\n"

_LOG_ARGS = """
log = os.environ.get("FAKE_ENCODER_LOG")
if log:
    with open(log, "w") as f:
        json.dump(args, f)
"""

HALVING_ENCODER = _HEADER + _LOG_ARGS + """
src = args[args.index("-i") + 1]
dst = args[-1]
with open(src, "rb") as f:
    data = f.read()
with open(dst, "wb") as f:
    f.write(data[: max(1, len(data) // 2)])
print("frame=    1 fps=0.0 q=-1.0 Lsize=       1kB")
"""

FAILING_ENCODER = _HEADER + """
with open(args[-1], "wb") as f:
    f.write(b"partial")
print("Input #0, matroska,webm")
sys.stderr.write("Invalid data found when processing input\\n")
sys.exit(1)
"""

SILENT_ENCODER = _HEADER + """
print("nothing written")
"""

SLOW_ENCODER = _HEADER + """
print("starting", flush=True)
time.sleep(30)
"""


def _write_script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def halving_encoder(tmp_path: Path) -> Path:
    return _write_script(tmp_path / "fake_ffmpeg", HALVING_ENCODER)


@pytest.fixture
def failing_encoder(tmp_path: Path) -> Path:
    return _write_script(tmp_path / "failing_ffmpeg", FAILING_ENCODER)


@pytest.fixture
def silent_encoder(tmp_path: Path) -> Path:
    return _write_script(tmp_path / "silent_ffmpeg", SILENT_ENCODER)


@pytest.fixture
def slow_encoder(tmp_path: Path) -> Path:
    return _write_script(tmp_path / "slow_ffmpeg", SLOW_ENCODER)


@pytest.fixture
def encoder_log(tmp_path: Path, monkeypatch) -> Path:
    """File the halving encoder writes its argv to."""
    log = tmp_path / "encoder_args.json"
    monkeypatch.setenv("FAKE_ENCODER_LOG", str(log))
    return log


@pytest.fixture
def read_encoder_args(encoder_log: Path):
    def _read() -> list[str]:
        return json.loads(encoder_log.read_text())

    return _read


@pytest.fixture
def make_settings(tmp_path: Path, halving_encoder: Path):
    def _make(**overrides) -> CompressorSettings:
        values = {
            "upload_dir": tmp_path / "uploads",
            "output_dir": tmp_path / "compressed",
            "encoder_path": str(halving_encoder),
            "encoder_timeout": 30.0,
        }
        values.update(overrides)
        return CompressorSettings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> CompressorSettings:
    return make_settings()


@pytest.fixture
def service(settings: CompressorSettings) -> CompressionService:
    return CompressionService(settings)
