"""
Core logic for aidigest package.
"""

from __future__ import annotations

import os
import re
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, TextIO, Tuple

from .errors import FileReadError, InvalidRootError, OutputError
from .ignore import IgnoreResolver

LogHandler = Callable[[str], None]

BINARY_PLACEHOLDER = "This is a binary file."

# Formats where indentation or blank-line layout carries meaning
WHITESPACE_SENSITIVE_EXTENSIONS = frozenset({"py", "yaml", "yml", "md", "swift", "go"})

# \r\n first so it splits as a single boundary
_NEWLINE_RE = re.compile("\r\n|[\n\v\f\r\x85\u2028\u2029]")


@dataclass(frozen=True)
class DigestConfig:
    input_dir: Path
    output_file: Path
    use_default_ignores: bool = True
    remove_whitespace: bool = False
    report_included_files: bool = False
    custom_ignore_patterns: Tuple[str, ...] = ()
    respect_gitignore: bool = False
    prune_ignored_dirs: bool = False


@dataclass(frozen=True)
class FileEntry:
    rel_path: str
    is_text: bool


# Path helpers
def relative_path(path: Path, root: Path) -> str:
    """
    Return *path* relative to *root* as a ``/``-joined string.

    Both component sequences are walked in lock-step while they agree; the
    rest of *path*'s components form the result.
    """
    parts = path.parts
    base = root.parts
    i = 0
    while i < len(parts) and i < len(base) and parts[i] == base[i]:
        i += 1
    return "/".join(parts[i:])


def _extension(path: Path) -> str:
    return path.suffix[1:]


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


# Content helpers
def remove_whitespace(content: str) -> str:
    """
    Strip trailing whitespace from every line, keeping the leading run of
    spaces and tabs. Whitespace-only lines become empty; empty lines are kept.
    """
    lines = []
    for line in _NEWLINE_RE.split(content):
        trimmed = line.strip()
        if not trimmed:
            lines.append("")
            continue
        indent = line[: len(line) - len(line.lstrip(" \t"))]
        lines.append(indent + trimmed)
    return "\n".join(lines)


def is_whitespace_sensitive(path: Path) -> bool:
    return _extension(path).lower() in WHITESPACE_SENSITIVE_EXTENSIONS


def read_entry(path: Path, rel: str) -> Tuple[FileEntry, Optional[str]]:
    """Read *path*; content is ``None`` when it does not decode as UTF-8."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileReadError(f"Could not read '{rel}': {e}")
    try:
        return FileEntry(rel, True), raw.decode("utf-8")
    except UnicodeDecodeError:
        return FileEntry(rel, False), None


def format_section(entry: FileEntry, content: Optional[str], ext: str) -> str:
    if not entry.is_text:
        return f"# {entry.rel_path}\n\n{BINARY_PLACEHOLDER}\n\n"
    return f"# {entry.rel_path}\n\n```{ext}\n{content}\n```\n\n"


# Traversal
def walk_files(
    root: Path,
    prune: Optional[Callable[[Path], bool]] = None,
) -> Iterator[Path]:
    """
    Yield every regular file under *root*, depth-first, sorted by name within
    each directory. Hidden entries and everything beneath them are skipped;
    symlinked directories are not followed. Directories for which *prune*
    returns true are not descended into.
    """
    try:
        children = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise FileReadError(f"Could not scan directory '{root}': {e}")
    for child in children:
        if _is_hidden(child):
            continue
        if child.is_dir() and not child.is_symlink():
            if prune is not None and prune(child):
                continue
            yield from walk_files(child, prune)
        elif child.is_file():
            yield child


def _resolve_root(input_dir: Path) -> Path:
    try:
        root = Path(input_dir).expanduser().resolve()
    except (OSError, RuntimeError) as e:
        raise InvalidRootError(f"Could not resolve root path '{input_dir}': {e}")
    if not root.exists():
        raise InvalidRootError(f"Root directory '{root}' does not exist")
    if not root.is_dir():
        raise InvalidRootError(f"Root path '{root}' is not a directory")
    return root


def _output_mode(out_path: Path) -> int:
    """Mode for the finished digest: the existing output's, else 0o666 less umask."""
    try:
        return stat.S_IMODE(out_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _open_temp(out_path: Path) -> Tuple[TextIO, Path]:
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        mode = _output_mode(out_path)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{out_path.name}.", suffix=".tmp", dir=out_path.parent
        )
    except OSError as e:
        raise OutputError(f"Could not open output file '{out_path}' for writing: {e}")
    try:
        # mkstemp always creates 0o600
        os.chmod(tmp_name, mode)
        fh = os.fdopen(fd, "w", encoding="utf-8", newline="\n")
    except OSError as e:
        os.close(fd)
        os.unlink(tmp_name)
        raise OutputError(f"Could not open output file '{out_path}' for writing: {e}")
    return fh, Path(tmp_name)


# Main entry points
def aggregate(config: DigestConfig, on_log: Optional[LogHandler] = None) -> List[str]:
    """
    Run one aggregation and write the digest to ``config.output_file``.

    Progress lines go to *on_log* as they happen. Sections are streamed into
    a hidden temp file beside the output, which replaces the output only once
    the whole tree has been processed. Returns the included relative paths in
    traversal order.
    """
    log: LogHandler = on_log if on_log is not None else (lambda _msg: None)

    root = _resolve_root(config.input_dir)
    try:
        out_path = Path(config.output_file).expanduser().resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{config.output_file}': {e}")

    resolver = IgnoreResolver.from_config(
        root,
        use_default_ignores=config.use_default_ignores,
        custom_patterns=config.custom_ignore_patterns,
        respect_gitignore=config.respect_gitignore,
        on_log=log,
    )

    log("Starting file aggregation...")
    log(f"Input directory: {root}")
    log(f"Output file: {out_path}")
    log(f"Using {len(resolver)} ignore patterns")

    def _prune(directory: Path) -> bool:
        rel = relative_path(directory, root)
        if resolver.is_ignored(rel):
            log(f"Pruned: {rel}/")
            return True
        return False

    included: List[str] = []
    out_fh, tmp_path = _open_temp(out_path)
    try:
        with out_fh:
            for path in walk_files(root, _prune if config.prune_ignored_dirs else None):
                rel = relative_path(path, root)
                if path == out_path:
                    log(f"Skipped output file: {rel}")
                    continue
                if resolver.is_ignored(rel):
                    log(f"Ignored: {rel}")
                    continue

                entry, content = read_entry(path, rel)
                if (
                    content is not None
                    and config.remove_whitespace
                    and not is_whitespace_sensitive(path)
                ):
                    content = remove_whitespace(content)
                section = format_section(entry, content, _extension(path))
                try:
                    out_fh.write(section)
                except OSError as e:
                    raise OutputError(f"Could not write to output file '{out_path}': {e}")

                included.append(rel)
                if entry.is_text:
                    log(f"Processed: {rel}")
                else:
                    log(f"Included binary file: {rel}")
        os.replace(tmp_path, out_path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    log("Files aggregated successfully.")
    log(f"Total files included: {len(included)}")
    if config.report_included_files:
        log("Included files:")
        for rel in included:
            log(f"- {rel}")
    return included


def aggregate_files(
    input_dir: Path,
    output_file: Path,
    use_default_ignores: bool = True,
    remove_whitespace: bool = False,
    report_included_files: bool = False,
    custom_ignore_patterns: Sequence[str] = (),
    on_log: Optional[LogHandler] = None,
) -> List[str]:
    """Keyword form of :func:`aggregate` taking the settings one by one."""
    config = DigestConfig(
        input_dir=Path(input_dir),
        output_file=Path(output_file),
        use_default_ignores=use_default_ignores,
        remove_whitespace=remove_whitespace,
        report_included_files=report_included_files,
        custom_ignore_patterns=tuple(custom_ignore_patterns),
    )
    return aggregate(config, on_log)
