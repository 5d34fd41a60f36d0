"""
User configuration: defaults and filter aliases from a TOML file.

    [defaults]
    backend = "ffprobe"
    sort = "bitrate"
    direction = "desc"
    bitrate_threshold = 20.0
    # highlight = false   turns highlighting off

    [aliases]
    big = ["size:>:4GB"]
    hq = ["bitrate:>:20", "depth:10"]

Aliases are used on the command line as '--filter @hq'.
"""
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from . import config
from .exceptions import ConfigError


@dataclass
class Settings:
    backend: str = config.DEFAULT_BACKEND
    sort: Optional[str] = None
    direction: str = "asc"
    filename_length: int = config.DEFAULT_FILENAME_LENGTH
    bitrate_threshold: Optional[float] = config.DEFAULT_BITRATE_THRESHOLD
    color: bool = True
    cache: bool = True
    cache_db: Path = config.DEFAULT_CACHE_DB
    mediainfo_bin: str = config.DEFAULT_MEDIAINFO_BIN
    ffprobe_bin: str = config.DEFAULT_FFPROBE_BIN
    template: Path = config.DEFAULT_TEMPLATE
    style: str = "box"
    aliases: Dict[str, List[str]] = field(default_factory=dict)


def _as_path(s: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(s)))


def _expect(d: Dict[str, Any], key: str, typ, default):
    if key not in d:
        return default
    v = d[key]
    name = typ.__name__ if isinstance(typ, type) else "/".join(t.__name__ for t in typ)
    # bool is an int subclass; keep them apart
    if isinstance(v, bool) and typ is not bool:
        raise ConfigError(f"Expected {name} for 'defaults.{key}', got: bool")
    if not isinstance(v, typ):
        raise ConfigError(f"Expected {name} for 'defaults.{key}', got: {type(v).__name__}")
    return v


def _expect_choice(d: Dict[str, Any], key: str, choices: Iterable[str], default):
    v = _expect(d, key, str, default)
    if v is not default and v not in choices:
        raise ConfigError(f"'defaults.{key}' must be one of {', '.join(choices)}, got: {v!r}")
    return v


def load_toml(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config is not valid UTF-8: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"TOML parse error in {path}: {e}") from e


def parse_settings(root: Dict[str, Any]) -> Settings:
    defaults = root.get("defaults", {})
    if not isinstance(defaults, dict):
        raise ConfigError("[defaults] must be a table")
    s = Settings()

    s.backend = _expect_choice(defaults, "backend", config.BACKENDS, s.backend)
    s.sort = _expect_choice(defaults, "sort", config.COLUMNS, s.sort)
    s.direction = _expect_choice(defaults, "direction", ("asc", "desc"), s.direction)
    s.style = _expect_choice(defaults, "style", config.STYLES, s.style)
    s.filename_length = _expect(defaults, "filename_length", int, s.filename_length)
    if s.filename_length < 5:
        raise ConfigError("'defaults.filename_length' must be at least 5")

    threshold = _expect(defaults, "bitrate_threshold", (int, float), s.bitrate_threshold)
    s.bitrate_threshold = None if threshold is None else float(threshold)
    if not _expect(defaults, "highlight", bool, True):
        s.bitrate_threshold = None

    s.color = _expect(defaults, "color", bool, s.color)
    s.cache = _expect(defaults, "cache", bool, s.cache)
    s.mediainfo_bin = _expect(defaults, "mediainfo_bin", str, s.mediainfo_bin)
    s.ffprobe_bin = _expect(defaults, "ffprobe_bin", str, s.ffprobe_bin)
    if "cache_db" in defaults:
        s.cache_db = _as_path(_expect(defaults, "cache_db", str, ""))
    if "template" in defaults:
        s.template = _as_path(_expect(defaults, "template", str, ""))

    aliases = root.get("aliases", {})
    if not isinstance(aliases, dict):
        raise ConfigError("[aliases] must be a table")
    for name, value in aliases.items():
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
            raise ConfigError(f"Alias '{name}' must be a string or a list of strings")
        s.aliases[name] = list(value)

    return s


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Loads settings from 'path', or from the default location if it exists.
    An explicitly given file must exist.
    """
    if path is None:
        path = config.DEFAULT_CONFIG_PATH
        if not path.is_file():
            return Settings()
    return parse_settings(load_toml(Path(path).expanduser()))


def expand_filters(exprs: Iterable[str], aliases: Dict[str, List[str]]) -> List[str]:
    """Replaces '@name' entries with the filters of that alias."""
    expanded: List[str] = []
    for expr in exprs:
        if expr.startswith("@"):
            name = expr[1:]
            if name not in aliases:
                raise ConfigError(f"Unknown filter alias: @{name}")
            expanded.extend(aliases[name])
        else:
            expanded.append(expr)
    return expanded
