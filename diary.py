#!/usr/bin/env python3
"""
diary.py - Letterboxd diary reader

Read-only. Reads a Letterboxd diary.csv export and prints every watched
movie with its rating, plus average rating and rewatch count.

Getting the export:
  1. Log into Letterboxd.com
  2. Go to Settings > Import & Export
  3. Click 'Export Your Data'
  4. Extract the ZIP file
  5. Use the 'diary.csv' file

Usage:
  python diary.py                               # interactive menus
  python diary.py path/to/diary.csv             # read a known file
  python diary.py --browse                      # pick the file in a dialog
  python diary.py diary.csv --sort rating       # highest rated first
  python diary.py diary.csv --config my.yaml    # custom configuration
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Callable, Optional

import yaml

from diarylib.constants import DEFAULT_CONFIG
from diarylib.reader import DiaryReader, ReadResult
from diarylib.report import SortMode, DiaryReport, build_report
from diarylib.source import (
    SourceResolver, FixedPathResolver, ManualPathResolver, DialogSourceResolver
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path('config.yaml')
RULE = "=" * 40


class ConfigError(Exception):
    """Configuration file exists but cannot be used"""


def load_config(config_path: Path, required: bool = False) -> dict:
    """
    Load configuration from YAML file, filling gaps from DEFAULT_CONFIG

    Args:
        config_path: YAML file to read
        required: If True a missing file is an error, otherwise defaults apply
    """
    config = dict(DEFAULT_CONFIG)

    if not config_path.exists():
        if required:
            raise ConfigError(f"Config file not found: {config_path}")
        logger.debug(f"No config at {config_path}, using defaults")
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not load config {config_path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config {config_path} must be a mapping, got {type(loaded).__name__}")

    for key, value in loaded.items():
        if key not in DEFAULT_CONFIG:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        expected = type(DEFAULT_CONFIG[key])
        if not isinstance(value, expected):
            raise ConfigError(
                f"Config {config_path}: {key} must be {expected.__name__}, "
                f"got {type(value).__name__} ({value!r})"
            )
        config[key] = value

    try:
        SortMode.parse(config['default_sort'])
    except ValueError as e:
        raise ConfigError(f"Invalid default_sort in {config_path}: {e}") from e

    return config


# ============================================================
# Console presentation
# ============================================================

def print_banner(out=print) -> None:
    out(RULE)
    out("  Letterboxd CSV Export Reader")
    out(RULE)
    out()
    out("Instructions:")
    out("1. Log into Letterboxd.com")
    out("2. Go to Settings > Import & Export")
    out("3. Click 'Export Your Data'")
    out("4. Extract the ZIP file")
    out("5. Use the 'diary.csv' file below")
    out()
    out(RULE)
    out()


def choose_resolver(config: dict, ask: Callable[[str], str] = input,
                    out=print) -> Optional[SourceResolver]:
    """Source menu: 1 = browse, 2 = type a path. None on an invalid choice."""
    out("Choose an option:")
    out("1. Browse for diary.csv file")
    out("2. Enter file path manually")
    out()
    choice = ask("Enter choice (1 or 2): ").strip()

    if choice == '1':
        out()
        out("Opening file browser...")
        return DialogSourceResolver(title=config['dialog_title'])
    if choice == '2':
        out()
        out("Enter the full path to diary.csv")
        out("(Tip: You can drag and drop the file into this window)")
        return ManualPathResolver(prompt_fn=ask)

    out("Invalid choice.")
    return None


def choose_sort_mode(default: SortMode, ask: Callable[[str], str] = input,
                     out=print) -> SortMode:
    """Sort menu; Enter or an unrecognised answer keeps the default"""
    out("How would you like to view your movies?")
    out("1. Most recent first (default)")
    out("2. Oldest first")
    out("3. Alphabetically by title")
    out("4. Highest rated first")
    out()
    answer = ask("Enter choice (1-4) or press Enter for default: ")
    try:
        return SortMode.parse(answer) if answer.strip() else default
    except ValueError:
        logger.warning(f"Unrecognised sort choice {answer!r}, using {default.value}")
        return default


def print_unavailable(path: Path, out=print) -> None:
    out(RULE)
    out(f"Error: Could not open file '{path}'")
    out(RULE)
    out("Please check that:")
    out("  - The file path is correct")
    out("  - The file exists")
    out("  - You have permission to read the file")


def print_no_movies(out=print) -> None:
    out(RULE)
    out("No movies found in file.")
    out(RULE)
    out()
    out("Troubleshooting tips:")
    out("- Make sure you selected 'diary.csv' (not 'watched.csv' or other files)")
    out("- Check that the file isn't empty")
    out("- Try extracting the ZIP file again")


def print_report(report: DiaryReport, read_result: ReadResult, out=print) -> None:
    """Print the movie list, statistics and skipped-line diagnostics"""
    out()
    out(RULE)
    out()

    for entry in report.entries:
        movie = entry.record
        heading = f"{entry.position}. {movie.name}"
        if movie.year:
            heading += f" ({movie.year})"
        out(heading)

        if movie.display_date:
            out(f"   Watched: {movie.display_date}")
        if entry.stars:
            out(f"   Rating: {entry.stars}")
        if movie.is_rewatch:
            out("   [REWATCH]")
        if movie.tags:
            out(f"   Tags: {movie.tags}")
        out()

    stats = report.stats
    out(RULE)
    out(f"Total movies watched: {stats.total}")
    if stats.average_rating is not None:
        out(f"Average rating: {stats.average_rating:.2f}/5 "
            f"(based on {stats.rated_count} rated films)")
    if stats.rewatch_count > 0:
        out(f"Rewatches: {stats.rewatch_count}")

    if read_result.skipped:
        out()
        out(f"Skipped {read_result.skipped_count} malformed lines:")
        for skipped in read_result.skipped:
            out(f"  line {skipped.line_number}: {skipped.reason} - {skipped.text}")


# ============================================================
# Pipeline
# ============================================================

def run(resolver: SourceResolver, config: dict, sort_mode: Optional[SortMode] = None,
        ask: Callable[[str], str] = input, out=print) -> int:
    """
    Resolve the source, read it and print the report

    Args:
        resolver: Where the diary path comes from
        config: Loaded configuration
        sort_mode: Fixed display order; None asks with the sort menu
        ask: Input function for menus
        out: Output function for the console

    Returns:
        Exit status: 0 on success or empty diary, 1 if the file could not be read
    """
    path = resolver.resolve()
    if path is None:
        out("No file selected.")
        return 0

    out()
    out(f"Reading file: {path}")
    out()

    reader = DiaryReader(encoding=config['encoding'])
    result = reader.read_path(path)

    if not result.source_available:
        print_unavailable(path, out=out)
        return 1

    if result.is_empty:
        print_no_movies(out=out)
        return 0

    out(RULE)
    out(f"Found {len(result.records)} watched movies!")
    out(RULE)
    out()

    if sort_mode is None:
        sort_mode = choose_sort_mode(SortMode.parse(config['default_sort']), ask=ask, out=out)

    report = build_report(result.records, sort_mode)
    print_report(report, result, out=out)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Read a Letterboxd diary.csv export and list watched movies',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument('diary_csv', type=Path, nargs='?',
                        help='Path to diary.csv (omit for the interactive menu)')
    parser.add_argument('--browse', action='store_true',
                        help='Pick diary.csv with the native file dialog')
    parser.add_argument('--sort', '-s', choices=[m.value for m in SortMode],
                        help='Display order (default: ask, or default_sort from config)')
    parser.add_argument('--config', type=Path, default=DEFAULT_CONFIG_PATH,
                        help='Configuration file (default: config.yaml)')
    parser.add_argument('--pause', action='store_true', default=None,
                        help='Wait for Enter before exiting')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('--verbose', '-v', action='store_true',
                           help='Show debug logging')
    verbosity.add_argument('--quiet', '-q', action='store_true',
                           help='Only show warnings and errors')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    pause = False
    try:
        config = load_config(args.config, required=args.config != DEFAULT_CONFIG_PATH)
        pause = config['pause_on_exit'] if args.pause is None else args.pause

        sort_mode = SortMode.parse(args.sort) if args.sort else None

        if args.diary_csv is not None:
            resolver = FixedPathResolver(args.diary_csv)
            if sort_mode is None:
                sort_mode = SortMode.parse(config['default_sort'])
        elif args.browse:
            resolver = DialogSourceResolver(title=config['dialog_title'])
        else:
            print_banner()
            resolver = choose_resolver(config, ask=input)
            if resolver is None:
                return 0

        return run(resolver, config, sort_mode=sort_mode, ask=input)

    except ConfigError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        print("Interrupted.")
        return 130
    except Exception as e:
        logger.exception("Unexpected error")
        print()
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        if pause:
            try:
                input("\nPress Enter to exit...")
            except EOFError:
                pass


if __name__ == '__main__':
    sys.exit(main())
