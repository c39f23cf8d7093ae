"""
Ignore-pattern resolution for aidigest.

Patterns come from three places, in this order: the built-in defaults, the
caller's own list and the ``.aidigestignore`` file at the top of the input
directory. Each pattern is tried twice against a relative path: as a plain
substring and as an anchored glob where ``*`` matches anything. Either hit
excludes the path.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Pattern, Tuple

import pathspec

from .errors import IgnoreFileError, PatternError

IGNORE_FILENAME = ".aidigestignore"

DEFAULT_IGNORES: List[str] = [
    "node_modules",
    ".git",
    "build",
    "dist",
    ".DS_Store",
    "Thumbs.db",
    ".env",
]


# Pattern-file utilities
def _pattern_lines(text: str) -> List[str]:
    return [ln for ln in text.splitlines() if ln and not ln.startswith("#")]


def read_ignore_file(root: Path) -> List[str]:
    """Return the patterns listed in ``<root>/.aidigestignore``, if any."""
    ignore_path = root / IGNORE_FILENAME
    if not ignore_path.exists():
        return []
    try:
        text = ignore_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IgnoreFileError(f"Could not read ignore file '{ignore_path}': {e}")
    return _pattern_lines(text)


def load_extra_patterns(config_path: Path) -> List[str]:
    if not config_path.exists():
        raise IgnoreFileError(f"Config file '{config_path}' does not exist")
    if not config_path.is_file():
        raise IgnoreFileError(f"'{config_path}' is not a file")
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IgnoreFileError(f"Could not read config file '{config_path}': {e}")
    return [ln.strip() for ln in _pattern_lines(text) if ln.strip()]


def load_gitignore(root: Path) -> "pathspec.PathSpec":
    gitignore_path = root / ".gitignore"
    if not gitignore_path.exists():
        return pathspec.PathSpec.from_lines("gitwildmatch", [])
    try:
        with gitignore_path.open("r", encoding="utf-8") as fh:
            return pathspec.PathSpec.from_lines("gitwildmatch", fh)
    except (OSError, UnicodeDecodeError) as e:
        raise IgnoreFileError(f"Could not read '{gitignore_path}': {e}")


def compile_glob(pattern: str) -> Pattern[str]:
    """
    Compile *pattern* into an anchored matcher where ``*`` is any run of
    characters. Everything else keeps its regular-expression meaning, so a
    pattern such as ``[abc`` is rejected with :class:`PatternError`.
    """
    try:
        return re.compile(pattern.replace("*", ".*"))
    except re.error as e:
        raise PatternError(f"Invalid glob pattern '{pattern}': {e}")


# Resolver
class IgnoreResolver:
    """Decides whether a root-relative path is excluded from the digest."""

    def __init__(
        self,
        patterns: Iterable[str],
        gitignore: Optional["pathspec.PathSpec"] = None,
        on_log: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.patterns: List[str] = list(patterns)
        self.gitignore = gitignore
        self._compiled: List[Tuple[str, Optional[Pattern[str]]]] = []
        for pattern in self.patterns:
            try:
                regex: Optional[Pattern[str]] = compile_glob(pattern)
            except PatternError as e:
                # substring check still applies
                regex = None
                if on_log is not None:
                    on_log(str(e))
            self._compiled.append((pattern, regex))

    @classmethod
    def from_config(
        cls,
        root: Path,
        use_default_ignores: bool = True,
        custom_patterns: Iterable[str] = (),
        respect_gitignore: bool = False,
        on_log: Optional[Callable[[str], None]] = None,
    ) -> "IgnoreResolver":
        """Combine defaults, *custom_patterns* and the root's ignore file."""
        patterns: List[str] = list(DEFAULT_IGNORES) if use_default_ignores else []
        patterns.extend(p for p in custom_patterns if p)
        patterns.extend(read_ignore_file(root))
        gitignore = load_gitignore(root) if respect_gitignore else None
        return cls(patterns, gitignore=gitignore, on_log=on_log)

    def __len__(self) -> int:
        return len(self.patterns)

    def is_ignored(self, rel_path: str) -> bool:
        for pattern, regex in self._compiled:
            if pattern in rel_path:
                return True
            if regex is not None and regex.fullmatch(rel_path):
                return True
        if self.gitignore is not None and self.gitignore.match_file(rel_path):
            return True
        return False
