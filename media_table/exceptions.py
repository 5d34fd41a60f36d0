"""
Custom exception hierarchy for media-table.

Probe failures are per-file and never stop a run; everything else
propagates up to the command line entry point.
"""


class MediaTableError(Exception):
    """Base exception for all media-table errors."""
    pass


class ToolNotFoundError(MediaTableError):
    """Raised when the external inspection tool is missing or not executable."""
    pass


class ProbeError(MediaTableError):
    """Raised when a single file cannot be inspected."""
    pass


class CacheError(MediaTableError):
    """Raised when the probe cache cannot be opened or updated."""
    pass


class FilterError(MediaTableError):
    """Raised when a filter expression is malformed."""
    pass


class ConfigError(MediaTableError):
    """Raised when the configuration file is missing or invalid."""
    pass
