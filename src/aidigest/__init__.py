"""
aidigest - Package a codebase into a single Markdown digest for LLM ingestion.

This package walks a directory tree, filters out files matched by built-in
defaults, caller patterns and a project ``.aidigestignore`` file, and writes
one document holding every remaining file's relative path and contents.
"""

from .core import (
    DigestConfig,
    FileEntry,
    aggregate,
    aggregate_files,
    relative_path,
    remove_whitespace,
)
from .errors import (
    ConfigError,
    DigestError,
    FileReadError,
    IgnoreFileError,
    InvalidRootError,
    OutputError,
    PatternError,
)
from .ignore import DEFAULT_IGNORES, IgnoreResolver

__version__ = "0.1.0"
__author__ = "aidigest contributors"

__all__ = [
    "DEFAULT_IGNORES",
    "ConfigError",
    "DigestConfig",
    "DigestError",
    "FileEntry",
    "FileReadError",
    "IgnoreFileError",
    "IgnoreResolver",
    "InvalidRootError",
    "OutputError",
    "PatternError",
    "aggregate",
    "aggregate_files",
    "relative_path",
    "remove_whitespace",
]
