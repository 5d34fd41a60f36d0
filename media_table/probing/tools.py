"""
Locating the external inspection binaries.
"""
import logging
import os
import shutil
from pathlib import Path

from .. import config
from ..exceptions import ToolNotFoundError


def locate_tool(name_or_path: str, tool: str = "") -> str:
    """
    Resolves a tool to an executable path.

    An explicit path ('/usr/bin/mediainfo') must exist and be executable;
    a bare name ('mediainfo') is looked up on PATH.
    """
    tool = tool or Path(name_or_path).stem
    hint = config.INSTALL_HINTS.get(tool, "")

    if os.sep in name_or_path or (os.altsep and os.altsep in name_or_path):
        path = Path(name_or_path).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            logging.debug(f"Using {tool} at {path}")
            return str(path)
        raise ToolNotFoundError(f"{tool} is not installed or not found at {path}. {hint}".strip())

    found = shutil.which(name_or_path)
    if found is None:
        raise ToolNotFoundError(f"{tool} is not installed (no '{name_or_path}' on PATH). {hint}".strip())
    logging.debug(f"Using {tool} at {found}")
    return found
