import pytest

from compressor.compression.commands import build_command, scale_filter
from compressor.compression.errors import InternalInvariantError
from compressor.compression.models import CompressionLevel, MediaCategory

LOW, MEDIUM, HIGH = CompressionLevel.LOW, CompressionLevel.MEDIUM, CompressionLevel.HIGH


def _value_after(cmd, flag):
    return cmd[cmd.index(flag) + 1]


def _video(level, **kw):
    return build_command("ffmpeg", "/up/in.mp4", "/out/out.mp4", MediaCategory.VIDEO, level, **kw)


def _image(out, level, **kw):
    return build_command("ffmpeg", "/up/in.png", out, MediaCategory.IMAGE, level, **kw)


@pytest.mark.parametrize("level, crf, preset", [
    (LOW, "28", "fast"),
    (MEDIUM, "23", "medium"),
    (HIGH, "18", "slow"),
])
def test_video_levels(level, crf, preset):
    cmd = _video(level)
    assert _value_after(cmd, "-c:v") == "libx264"
    assert _value_after(cmd, "-crf") == crf
    assert _value_after(cmd, "-preset") == preset


def test_video_level_accepts_plain_strings():
    assert _value_after(_video("HIGH"), "-crf") == "18"


def test_video_strips_audio_by_default():
    cmd = _video(MEDIUM)
    assert "-an" in cmd
    assert "-c:a" not in cmd


def test_video_reencodes_audio_when_not_stripping():
    cmd = _video(MEDIUM, strip_audio=False)
    assert "-an" not in cmd
    assert _value_after(cmd, "-c:a") == "aac"


def test_video_ignores_scaling():
    assert "-vf" not in _video(LOW, max_width=640)


def test_command_frame():
    cmd = _video(LOW)
    assert cmd[:3] == ["ffmpeg", "-i", "/up/in.mp4"]
    assert cmd[-2:] == ["-y", "/out/out.mp4"]


@pytest.mark.parametrize("out, flag, values", [
    ("/out/o.jpg", "-q:v", ("8", "5", "2")),
    ("/out/o.jpeg", "-q:v", ("8", "5", "2")),
    ("/out/o.png", "-compression_level", ("1", "6", "9")),
    ("/out/o.webp", "-quality", ("60", "75", "90")),
    ("/out/o.avif", "-crf", ("35", "28", "20")),
])
def test_image_quality_by_output_format(out, flag, values):
    for level, expected in zip((LOW, MEDIUM, HIGH), values):
        cmd = _image(out, level)
        assert _value_after(cmd, flag) == expected
        assert cmd[-2:] == ["-y", out]


def test_image_unknown_output_extension_has_no_quality_flag():
    cmd = _image("/out/o.bmp", HIGH)
    assert cmd == ["ffmpeg", "-i", "/up/in.png", "-y", "/out/o.bmp"]


def test_no_scale_filter_without_bounds():
    assert "-vf" not in _image("/out/o.jpg", MEDIUM)


def test_scale_filter_width_only():
    cmd = _image("/out/o.avif", HIGH, max_width=800)
    assert _value_after(cmd, "-vf") == "scale=800:-1"
    # filter comes before quality arguments
    assert cmd.index("-vf") < cmd.index("-crf")
    assert _value_after(cmd, "-crf") == "20"


def test_scale_filter_height_only():
    assert _value_after(_image("/out/o.jpg", LOW, max_height=600), "-vf") == "scale=-1:600"


def test_scale_filter_both_bounds_decrease_only():
    cmd = _image("/out/o.webp", MEDIUM, max_width=1920, max_height=1080)
    assert _value_after(cmd, "-vf") == "scale=1920:1080:force_original_aspect_ratio=decrease"


def test_scale_filter_helper():
    assert scale_filter() is None
    assert scale_filter(100, None) == "scale=100:-1"


@pytest.mark.parametrize("level, bitrate", [(LOW, "128k"), (MEDIUM, "192k"), (HIGH, "320k")])
def test_audio_bitrates(level, bitrate):
    cmd = build_command("ffmpeg", "/up/in.mp3", "/out/o.mp3", MediaCategory.AUDIO, level)
    assert _value_after(cmd, "-b:a") == bitrate


def test_unknown_category_is_an_internal_error():
    with pytest.raises(InternalInvariantError):
        build_command("ffmpeg", "/up/in", "/out/o", MediaCategory.UNKNOWN, MEDIUM)
