"""
ffprobe backend.

ffprobe has no template language, so the JSON report is reduced to the
same ten columns the mediainfo template produces.
"""
import json
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

from .. import config
from ..exceptions import ProbeError
from ..models import MediaRecord
from .tools import locate_tool

KB = 1024
MB = KB * 1024
GB = MB * 1024


def format_size(size: Any) -> str:
    try:
        num = int(size)
    except (TypeError, ValueError):
        return ""
    if num >= GB:
        return f"{num / GB:.2f} GB"
    if num >= MB:
        return f"{num / MB:.2f} MB"
    if num >= KB:
        return f"{num / KB:.2f} KB"
    return f"{num} B"


def format_duration(duration: Any) -> str:
    try:
        secs = float(duration)
    except (TypeError, ValueError):
        return ""
    hours, rem = divmod(int(secs), 3600)
    minutes, seconds = divmod(rem, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_fps(rate: Optional[str]) -> str:
    """'24000/1001' -> '23.98'"""
    if not rate or "/" not in rate:
        return ""
    num, _, den = rate.partition("/")
    try:
        n, d = float(num), float(den)
    except ValueError:
        return ""
    if d == 0:
        return ""
    return f"{n / d:.2f}"


def format_bitrate(bit_rate: Any) -> str:
    try:
        bps = float(bit_rate)
    except (TypeError, ValueError):
        return ""
    return f"{bps / 1_000_000:.2f} Mbps"


def bit_depth(pix_fmt: Optional[str]) -> str:
    if pix_fmt and "p10" in pix_fmt:
        return "10bit"
    if pix_fmt and "p12" in pix_fmt:
        return "12bit"
    return "8bit"


def format_audio(stream: Dict[str, Any]) -> str:
    text = f"{stream.get('channels') or 0}CH"
    try:
        text += f" {float(stream['bit_rate']) / 1000:.0f}k"
    except (KeyError, TypeError, ValueError):
        pass
    return text


def record_from_probe(path: Path, data: Dict[str, Any]) -> MediaRecord:
    fmt = data.get("format") or {}
    streams = data.get("streams") or []
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    audio = next((s for s in streams if s.get("codec_type") == "audio"), None)

    values = [
        path.name,
        format_size(fmt.get("size")),
        format_duration(fmt.get("duration")),
    ]

    if video is not None:
        values += [
            format_fps(video.get("r_frame_rate")),
            # Container bitrate is more reliable than the stream's
            format_bitrate(fmt.get("bit_rate")),
            f"{video.get('width') or 0}x{video.get('height') or 0}",
            video.get("codec_name") or "",
            video.get("profile") or "",
            bit_depth(video.get("pix_fmt")),
        ]
    else:
        values += [""] * 6

    values.append(format_audio(audio) if audio is not None else "")
    return MediaRecord.from_fields(path, values)


class FFProbeProbe:
    backend = "ffprobe"

    def __init__(self, binary: str = config.DEFAULT_FFPROBE_BIN):
        self.binary = locate_tool(binary, "ffprobe")

    def probe(self, path: Path) -> MediaRecord:
        cmd = [
            self.binary, "-v", "quiet", "-print_format", "json",
            "-show_format", "-show_streams", str(path),
        ]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise ProbeError(f"Could not run {self.binary}: {e}") from e

        if proc.returncode != 0:
            raise ProbeError(f"ffprobe failed ({proc.returncode}): {proc.stderr.strip()}")

        try:
            data = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(f"ffprobe returned invalid JSON: {e}") from e
        return record_from_probe(path, data)
