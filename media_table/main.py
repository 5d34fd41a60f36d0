import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config
from .core import MediaTableApp
from .exceptions import ConfigError, FilterError, MediaTableError, ToolNotFoundError
from .filtering import parse_filters
from .probing.factory import create_probe
from .reporting import TableRenderer
from .settings import Settings, expand_filters, load_settings


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[Path] = None):
    """Logs go to stderr (stdout carries the table) and optionally to a file."""
    if verbose:
        log_level = logging.DEBUG
    elif quiet:
        log_level = logging.WARNING
    else:
        log_level = logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="media-table",
        description="Inspect media files with mediainfo or ffprobe and print one aligned row per file.",
    )

    p.add_argument("paths", nargs="*", type=Path, help="Media files or directories (scanned recursively)")

    g = p.add_argument_group("inspection")
    g.add_argument("--backend", choices=config.BACKENDS, default=None,
                   help=f"Inspection tool (default: {config.DEFAULT_BACKEND})")
    g.add_argument("--template", type=Path, default=None, help="mediainfo inform template file")
    g.add_argument("--mediainfo-bin", default=None, help="mediainfo binary name or path")
    g.add_argument("--ffprobe-bin", default=None, help="ffprobe binary name or path")

    g = p.add_argument_group("rows")
    g.add_argument("-s", "--sort", choices=config.COLUMNS, default=None,
                   help="Sort by column (default: argument order)")
    g.add_argument("-d", "--direction", choices=("asc", "desc"), default=None, help="Sort direction")
    g.add_argument("-f", "--filter", action="append", default=[], metavar="EXPR",
                   help="column:op:value for size/duration/fps/bitrate (e.g. 'bitrate:>:5'), "
                        "column:text for other columns, or @alias from the config file. Repeatable.")

    g = p.add_argument_group("output")
    g.add_argument("-l", "--filename-length", type=int, default=None,
                   help=f"Maximum filename width (default: {config.DEFAULT_FILENAME_LENGTH})")
    g.add_argument("--highlight-bitrate", type=float, default=None, metavar="MBPS",
                   help=f"Highlight bitrates above this (default: {config.DEFAULT_BITRATE_THRESHOLD:g} Mbps)")
    g.add_argument("--no-highlight", action="store_true", help="Never highlight the bitrate column")
    g.add_argument("--no-color", action="store_true", help="Disable colors")
    g.add_argument("--style", choices=config.STYLES, default=None, help="Table style (default: box)")

    g = p.add_argument_group("cache")
    g.add_argument("--cached", action="store_true", help="Show cached entries only; probe nothing")
    g.add_argument("--no-cache", action="store_true", help="Neither read nor write the cache")
    g.add_argument("--cache-db", type=Path, default=None,
                   help=f"Cache database (default: {config.DEFAULT_CACHE_DB})")
    g.add_argument("--prune-cache", action="store_true", help="Drop cache entries for files that no longer exist")
    g.add_argument("--clear-cache", action="store_true", help="Drop every cache entry")

    p.add_argument("--config", type=Path, default=None,
                   help=f"Config file (default: {config.DEFAULT_CONFIG_PATH}, if present)")
    p.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return p


def merge_settings(args: argparse.Namespace, settings: Settings) -> Settings:
    """Command line flags win over the config file."""
    if args.backend:
        settings.backend = args.backend
    if args.template:
        settings.template = args.template
    if args.mediainfo_bin:
        settings.mediainfo_bin = args.mediainfo_bin
    if args.ffprobe_bin:
        settings.ffprobe_bin = args.ffprobe_bin
    if args.sort:
        settings.sort = args.sort
    if args.direction:
        settings.direction = args.direction
    if args.filename_length is not None:
        if args.filename_length < 5:
            raise ConfigError("--filename-length must be at least 5")
        settings.filename_length = args.filename_length
    if args.highlight_bitrate is not None:
        settings.bitrate_threshold = args.highlight_bitrate
    if args.no_highlight:
        settings.bitrate_threshold = None
    if args.no_color:
        settings.color = False
    if args.style:
        settings.style = args.style
    if args.no_cache:
        settings.cache = False
    if args.cache_db:
        settings.cache_db = args.cache_db
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose, args.quiet, args.log_file)

    # 1. Config
    try:
        settings = merge_settings(args, load_settings(args.config))
        filters = parse_filters(expand_filters(args.filter, settings.aliases))
    except (ConfigError, FilterError) as e:
        logging.error(str(e))
        return 1

    if (args.cached or args.prune_cache or args.clear_cache) and not settings.cache:
        logging.error("--no-cache cannot be combined with cache options")
        return 1
    cache_path = settings.cache_db if settings.cache else None

    # 2. Cache maintenance
    if args.prune_cache or args.clear_cache:
        app = MediaTableApp(None, settings.backend, cache_path)
        try:
            if args.clear_cache:
                app.clear_cache()
            else:
                app.prune_cache()
        except MediaTableError as e:
            logging.error(str(e))
            return 1
        if not args.paths and not args.cached:
            return 0

    # 3. Dependency, then arguments
    prober = None
    if not args.cached:
        try:
            prober = create_probe(
                settings.backend,
                mediainfo_bin=settings.mediainfo_bin,
                ffprobe_bin=settings.ffprobe_bin,
                template=settings.template,
            )
        except ToolNotFoundError as e:
            logging.error(f"Error: {e}")
            return 1

        if not args.paths:
            parser.print_usage(sys.stderr)
            print(f"{parser.prog}: at least one media file or directory is required", file=sys.stderr)
            return 1

    # 4. Execution
    app = MediaTableApp(prober, settings.backend, cache_path)
    try:
        records = app.run(
            args.paths,
            filters=filters,
            sort=settings.sort,
            descending=settings.direction == "desc",
            from_cache=args.cached,
        )
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        return 130
    except MediaTableError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.exception("Fatal error while inspecting files.")
        return 1

    if app.total == 0:
        logging.warning("No cached entries found!" if args.cached else "No media files found!")
        return 0

    renderer = TableRenderer(
        style=settings.style,
        color=settings.color,
        bitrate_threshold=settings.bitrate_threshold,
        filename_length=settings.filename_length,
    )
    renderer.render(records)
    return 0


if __name__ == "__main__":
    sys.exit(main())
