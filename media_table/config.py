"""
Configuration constants for media-table.
"""
from pathlib import Path

# --- Columns ---
COLUMNS = (
    'filename', 'size', 'duration', 'fps', 'bitrate',
    'resolution', 'format', 'profile', 'depth', 'audio',
)
HEADERS = (
    'Filename', 'Size', 'Duration', 'FPS', 'Bitrate',
    'Resolution', 'Format', 'Profile', 'Depth', 'Audio',
)
NUMERIC_COLUMNS = {'size', 'duration', 'fps', 'bitrate'}
TEXT_COLUMNS = set(COLUMNS) - NUMERIC_COLUMNS

# Column index lookup, so callers never hard-code positions
COLUMN_INDEX = {name: i for i, name in enumerate(COLUMNS)}

# --- File Type Definitions ---
VIDEO_EXTS = {
    '.mp4', '.mkv', '.avi', '.mov', '.wmv', '.flv', '.webm', '.m4v', '.mpg',
    '.mpeg', '.m2v', '.3gp', '.3g2', '.mxf', '.ts', '.mts', '.m2ts', '.vob',
    '.ogv', '.qt', '.rm', '.rmvb', '.asf',
}
AUDIO_EXTS = {'.mp3', '.wav', '.flac', '.m4a', '.aac', '.ogg', '.wma', '.opus'}
MEDIA_EXTS = VIDEO_EXTS | AUDIO_EXTS

# --- Backends ---
BACKENDS = ('mediainfo', 'libmediainfo', 'ffprobe')
DEFAULT_BACKEND = 'mediainfo'
DEFAULT_MEDIAINFO_BIN = 'mediainfo'
DEFAULT_FFPROBE_BIN = 'ffprobe'

# Template shipped next to the package, mediainfo --Inform syntax
DEFAULT_TEMPLATE = Path(__file__).parent / 'templates' / 'mediainfo.tmpl'

INSTALL_HINTS = {
    'mediainfo': "Install it with your package manager, e.g. 'sudo apt-get install mediainfo'.",
    'ffprobe': "ffprobe ships with ffmpeg, e.g. 'sudo apt-get install ffmpeg'.",
    'libmediainfo': "Install the 'pymediainfo' package (wheels bundle libmediainfo).",
}

# --- Rendering ---
DEFAULT_FILENAME_LENGTH = 65
DEFAULT_BITRATE_THRESHOLD = 10.0  # Mbps
HIGHLIGHT_STYLE = 'bold red'
STYLES = ('box', 'plain', 'csv')

# --- Cache ---
DEFAULT_CACHE_DB = Path.home() / '.media_table' / 'cache.db'
DEFAULT_CONFIG_PATH = Path.home() / '.config' / 'media-table' / 'config.toml'
