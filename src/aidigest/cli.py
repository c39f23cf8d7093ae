"""
CLI entrypoint for aidigest package.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, init as colorama_init

from . import __version__
from .core import DigestConfig, aggregate
from .errors import ConfigError, FileReadError, OutputError
from .ignore import load_extra_patterns

colorama_init()

# Lines shown even without --verbose
_SUMMARY_PREFIXES = ("Files aggregated", "Total files included", "Included files:", "- ")

_COLOURS = (
    ("Ignored:", Fore.YELLOW),
    ("Pruned:", Fore.YELLOW),
    ("Skipped output file:", Fore.YELLOW),
    ("Invalid glob pattern", Fore.YELLOW),
    ("Included binary file:", Fore.CYAN),
    ("Files aggregated", Fore.GREEN),
)


def _colour_for(line: str) -> str:
    for prefix, colour in _COLOURS:
        if line.startswith(prefix):
            return colour
    return ""


def _print_log(line: str) -> None:
    colour = _colour_for(line)
    msg = f"[aidigest] {line}"
    print(colour + msg + Style.RESET_ALL if colour else msg)


def _error(msg: str) -> None:
    print(Fore.RED + f"Error: {msg}" + Style.RESET_ALL, file=sys.stderr)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="aidigest",
        description="Aggregate a codebase into one Markdown file of paths and contents.",
    )
    p.add_argument("--root", type=Path, default=Path("."), help="Project root dir")
    p.add_argument(
        "--out",
        type=Path,
        default=Path("code_context.md"),
        help="Output file (default: code_context.md)",
    )
    p.add_argument(
        "--no-default-ignores",
        dest="use_default_ignores",
        action="store_false",
        help="Do not apply the built-in ignore patterns",
    )
    p.add_argument(
        "--remove-whitespace",
        action="store_true",
        help="Trim trailing whitespace in files whose format does not depend on it",
    )
    p.add_argument(
        "--show-output-files",
        action="store_true",
        help="List every included file once the digest is written",
    )
    p.add_argument(
        "-i",
        "--ignore",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra ignore pattern (repeatable)",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra ignore patterns (one per line)",
    )
    p.add_argument(
        "--gitignore",
        action="store_true",
        help="Also skip files matched by the root .gitignore",
    )
    p.add_argument(
        "--prune-ignored-dirs",
        action="store_true",
        help="Do not descend into directories that match an ignore pattern",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    try:
        ns = _parse_args(argv)

        patterns = list(ns.ignore)
        if ns.config:
            try:
                patterns.extend(load_extra_patterns(ns.config.resolve()))
            except ConfigError as e:
                _error(str(e))
                sys.exit(1)
            if ns.verbose:
                _print_log(f"Loaded extra patterns from {ns.config}")

        config = DigestConfig(
            input_dir=ns.root,
            output_file=ns.out,
            use_default_ignores=ns.use_default_ignores,
            remove_whitespace=ns.remove_whitespace,
            report_included_files=ns.show_output_files,
            custom_ignore_patterns=tuple(patterns),
            respect_gitignore=ns.gitignore,
            prune_ignored_dirs=ns.prune_ignored_dirs,
        )

        def _sink(line: str) -> None:
            if ns.verbose or line.startswith(_SUMMARY_PREFIXES):
                _print_log(line)

        try:
            aggregate(config, _sink)
        except (ConfigError, FileReadError, OutputError) as e:
            _error(str(e))
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(Fore.RED + f"Unexpected error: {e}" + Style.RESET_ALL, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
