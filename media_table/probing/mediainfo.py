import logging
import subprocess
from pathlib import Path
from typing import Any, List, Optional

from .. import config
from ..exceptions import ProbeError, ToolNotFoundError
from ..models import MediaRecord
from .tools import locate_tool

# Type hint 'Any' keeps type checkers quiet about "None" having no attribute "parse"
MediaInfo: Any = None
try:
    from pymediainfo import MediaInfo
except ImportError:
    MediaInfo = None

FIELD_SEP = "|"


def parse_inform_line(line: str) -> List[str]:
    """
    Splits one line of template output into exactly ten fields.

    Short lines are padded with empty strings. Surplus pieces (several
    video streams, a stray '|' in a tag) are folded into the audio column.
    """
    parts = [p.strip() for p in line.rstrip("\r\n").split(FIELD_SEP)]
    width = len(config.COLUMNS)
    if len(parts) < width:
        parts.extend([""] * (width - len(parts)))
    elif len(parts) > width:
        tail = [p for p in parts[width - 1:] if p]
        parts = parts[:width - 1] + [", ".join(tail)]
    return parts


def first_line(output: str) -> Optional[str]:
    for line in output.splitlines():
        if line.strip():
            return line
    return None


class MediaInfoCLIProbe:
    """
    Runs the mediainfo binary with an inform template:
        mediainfo --Inform=file://<template> <file>
    """
    backend = "mediainfo"

    def __init__(self, binary: str = config.DEFAULT_MEDIAINFO_BIN,
                 template: Path = config.DEFAULT_TEMPLATE):
        self.binary = locate_tool(binary, "mediainfo")
        self.template = Path(template).expanduser().resolve()
        if not self.template.is_file():
            raise ToolNotFoundError(f"Inform template not found: {self.template}")

    def probe(self, path: Path) -> MediaRecord:
        cmd = [self.binary, f"--Inform=file://{self.template}", str(path)]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
        except OSError as e:
            raise ProbeError(f"Could not run {self.binary}: {e}") from e

        if proc.returncode != 0:
            raise ProbeError(f"mediainfo failed ({proc.returncode}): {proc.stderr.strip()}")

        line = first_line(proc.stdout)
        if line is None:
            raise ProbeError("mediainfo produced no output")
        return MediaRecord.from_fields(path, parse_inform_line(line))


class LibMediaInfoProbe:
    """
    Renders the same inform template in-process through pymediainfo,
    for hosts that have libmediainfo but not the command line tool.
    """
    backend = "libmediainfo"

    def __init__(self, template: Path = config.DEFAULT_TEMPLATE):
        if MediaInfo is None or not MediaInfo.can_parse():
            raise ToolNotFoundError(f"libmediainfo is not available. {config.INSTALL_HINTS['libmediainfo']}")
        template = Path(template).expanduser()
        try:
            self.template_text = template.read_text(encoding="utf-8")
        except OSError as e:
            raise ToolNotFoundError(f"Inform template not found: {template}") from e

    def probe(self, path: Path) -> MediaRecord:
        try:
            output = MediaInfo.parse(str(path), output=self.template_text)
        except Exception as e:
            raise ProbeError(f"MediaInfo.parse failed: {e}") from e

        line = first_line(output or "")
        if line is None:
            raise ProbeError("libmediainfo produced no output")
        logging.debug(f"libmediainfo line for {path}: {line}")
        return MediaRecord.from_fields(path, parse_inform_line(line))
