from pathlib import Path
from typing import Optional, Union

from .. import config
from .ffprobe import FFProbeProbe
from .mediainfo import LibMediaInfoProbe, MediaInfoCLIProbe

Probe = Union[MediaInfoCLIProbe, LibMediaInfoProbe, FFProbeProbe]


def create_probe(backend: str,
                 mediainfo_bin: str = config.DEFAULT_MEDIAINFO_BIN,
                 ffprobe_bin: str = config.DEFAULT_FFPROBE_BIN,
                 template: Optional[Path] = None) -> Probe:
    """Builds the probe for a backend. Raises ToolNotFoundError if its tool is missing."""
    template = template or config.DEFAULT_TEMPLATE
    if backend == "mediainfo":
        return MediaInfoCLIProbe(mediainfo_bin, template)
    if backend == "libmediainfo":
        return LibMediaInfoProbe(template)
    if backend == "ffprobe":
        return FFProbeProbe(ffprobe_bin)
    raise ValueError(f"Unknown backend: {backend}")
