import json
import subprocess
import pytest
from pathlib import Path

import media_table.probing.mediainfo as mediainfo_module
from media_table.exceptions import ProbeError, ToolNotFoundError
from media_table.probing import tools
from media_table.probing.factory import create_probe
from media_table.probing.ffprobe import (
    FFProbeProbe, bit_depth, format_duration, format_fps, format_size, record_from_probe,
)
from media_table.probing.mediainfo import LibMediaInfoProbe, MediaInfoCLIProbe, parse_inform_line
from media_table import config


@pytest.fixture
def fake_which(monkeypatch):
    """Pretends every tool is installed under /usr/bin."""
    monkeypatch.setattr(tools.shutil, "which", lambda name: f"/usr/bin/{name}")


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


# --- Tool discovery ---

def test_locate_tool_missing_on_path(monkeypatch):
    monkeypatch.setattr(tools.shutil, "which", lambda name: None)
    with pytest.raises(ToolNotFoundError, match="mediainfo is not installed"):
        tools.locate_tool("mediainfo")

def test_locate_tool_explicit_path(tmp_path):
    exe = tmp_path / "mediainfo"
    exe.write_text("#!/bin/sh\n")
    with pytest.raises(ToolNotFoundError, match="not found at"):
        tools.locate_tool(str(exe))

    exe.chmod(0o755)
    assert tools.locate_tool(str(exe)) == str(exe)


# --- mediainfo template output ---

def test_parse_inform_line_exact():
    line = "movie.mkv|1.45 GiB|01:32:10.120|23.976|2 150 kb/s|1920x1080|AVC|High@L4.1|8 bits|AAC 2ch\n"
    assert parse_inform_line(line) == [
        "movie.mkv", "1.45 GiB", "01:32:10.120", "23.976", "2 150 kb/s",
        "1920x1080", "AVC", "High@L4.1", "8 bits", "AAC 2ch",
    ]

def test_parse_inform_line_pads_short_output():
    fields = parse_inform_line("song.flac|20 MiB|00:03:12.000|")
    assert len(fields) == len(config.COLUMNS)
    assert fields[:3] == ["song.flac", "20 MiB", "00:03:12.000"]
    assert fields[3:] == [""] * 7

def test_parse_inform_line_folds_extra_fields_into_audio():
    fields = parse_inform_line("a.mkv|1 GiB|00:01:00.000|25|5 Mb/s|1280x720|HEVC|Main|10 bits|AAC 2ch|AC-3 6ch")
    assert len(fields) == 10
    assert fields[-1] == "AAC 2ch, AC-3 6ch"

def test_cli_probe_invokes_mediainfo_with_template(monkeypatch, fake_which, tmp_path):
    media = tmp_path / "movie.mkv"
    media.write_bytes(b"data")
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return completed("movie.mkv|4 MiB|00:00:10.000|25.000|3 000 kb/s|1280x720|AVC|Main|8 bits|AAC 2ch\n")

    monkeypatch.setattr(mediainfo_module.subprocess, "run", fake_run)

    probe = MediaInfoCLIProbe("mediainfo", config.DEFAULT_TEMPLATE)
    rec = probe.probe(media)

    assert calls[0][0] == "/usr/bin/mediainfo"
    assert calls[0][1] == f"--Inform=file://{config.DEFAULT_TEMPLATE.resolve()}"
    assert calls[0][2] == str(media)
    assert rec.path == media
    assert rec.bitrate == "3 000 kb/s"
    assert rec.audio == "AAC 2ch"

def test_cli_probe_errors(monkeypatch, fake_which, tmp_path):
    probe = MediaInfoCLIProbe()

    monkeypatch.setattr(mediainfo_module.subprocess, "run", lambda cmd, **kw: completed(returncode=1, stderr="boom"))
    with pytest.raises(ProbeError, match="boom"):
        probe.probe(tmp_path / "x.mkv")

    monkeypatch.setattr(mediainfo_module.subprocess, "run", lambda cmd, **kw: completed("\n\n"))
    with pytest.raises(ProbeError, match="no output"):
        probe.probe(tmp_path / "x.mkv")

def test_cli_probe_requires_template(fake_which, tmp_path):
    with pytest.raises(ToolNotFoundError, match="template"):
        MediaInfoCLIProbe("mediainfo", tmp_path / "missing.tmpl")

def test_bundled_template_has_ten_columns():
    text = config.DEFAULT_TEMPLATE.read_text(encoding="utf-8")
    body = [line.split(";", 1)[1] for line in text.splitlines() if line.startswith(("General;", "Video;"))]
    # General + Video sections carry nine separators; audio is the tenth field
    assert sum(part.count("|") for part in body) == 9


# --- libmediainfo (pymediainfo) ---

class MockMediaInfo:
    outputs = {}

    @classmethod
    def can_parse(cls):
        return True

    @classmethod
    def parse(cls, path, output=None):
        cls.last_output_arg = output
        return cls.outputs.get(path, "")

def test_libmediainfo_renders_template(monkeypatch, tmp_path):
    monkeypatch.setattr(mediainfo_module, "MediaInfo", MockMediaInfo)
    media = tmp_path / "clip.mp4"
    MockMediaInfo.outputs = {str(media): "clip.mp4|1 MiB|00:00:05.000|30.000|1 600 kb/s|640x360|AVC|Baseline|8 bits|\n"}

    probe = LibMediaInfoProbe(config.DEFAULT_TEMPLATE)
    rec = probe.probe(media)

    assert MockMediaInfo.last_output_arg == config.DEFAULT_TEMPLATE.read_text(encoding="utf-8")
    assert rec.resolution == "640x360"
    assert rec.audio == ""

def test_libmediainfo_unavailable(monkeypatch):
    monkeypatch.setattr(mediainfo_module, "MediaInfo", None)
    with pytest.raises(ToolNotFoundError, match="libmediainfo"):
        LibMediaInfoProbe()


# --- ffprobe ---

FFPROBE_JSON = {
    "streams": [
        {"codec_type": "video", "codec_name": "hevc", "profile": "Main 10", "width": 3840,
         "height": 2160, "r_frame_rate": "24000/1001", "pix_fmt": "yuv420p10le"},
        {"codec_type": "audio", "codec_name": "eac3", "channels": 6, "bit_rate": "640000"},
    ],
    "format": {"filename": "x.mkv", "size": "5368709120", "duration": "5025.5", "bit_rate": "25000000"},
}

def test_ffprobe_formatters():
    assert format_size("512") == "512 B"
    assert format_size("2048") == "2.00 KB"
    assert format_size(str(3 * 1024 ** 2)) == "3.00 MB"
    assert format_size(None) == ""
    assert format_duration("59.9") == "00:59"
    assert format_duration("3725") == "01:02:05"
    assert format_fps("30000/1001") == "29.97"
    assert format_fps("0/0") == ""
    assert bit_depth("yuv420p10le") == "10bit"
    assert bit_depth("yuv444p12le") == "12bit"
    assert bit_depth(None) == "8bit"

def test_record_from_probe():
    rec = record_from_probe(Path("/media/x.mkv"), FFPROBE_JSON)
    assert rec.row() == [
        "x.mkv", "5.00 GB", "01:23:45", "23.98", "25.00 Mbps",
        "3840x2160", "hevc", "Main 10", "10bit", "6CH 640k",
    ]

def test_record_from_probe_audio_only():
    data = {"streams": [{"codec_type": "audio", "channels": 2}], "format": {"size": "100", "duration": "10"}}
    rec = record_from_probe(Path("song.mp3"), data)
    assert rec.fps == rec.bitrate == rec.resolution == rec.depth == ""
    assert rec.audio == "2CH"

def test_ffprobe_probe_runs_json_command(monkeypatch, fake_which, tmp_path):
    import media_table.probing.ffprobe as ffprobe_module
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return completed(json.dumps(FFPROBE_JSON))

    monkeypatch.setattr(ffprobe_module.subprocess, "run", fake_run)
    rec = FFProbeProbe().probe(tmp_path / "x.mkv")

    assert calls[0][:5] == ["/usr/bin/ffprobe", "-v", "quiet", "-print_format", "json"]
    assert rec.format == "hevc"

    monkeypatch.setattr(ffprobe_module.subprocess, "run", lambda cmd, **kw: completed("not json"))
    with pytest.raises(ProbeError, match="invalid JSON"):
        FFProbeProbe().probe(tmp_path / "x.mkv")


# --- Factory ---

def test_create_probe_by_backend(fake_which):
    assert create_probe("mediainfo").backend == "mediainfo"
    assert create_probe("ffprobe").backend == "ffprobe"
    with pytest.raises(ValueError):
        create_probe("exiftool")
