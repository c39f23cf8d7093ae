"""
Exceptions raised by aidigest.
"""


class DigestError(Exception):
    """Base exception for aidigest errors."""
    pass


class ConfigError(DigestError):
    """Raised when the run configuration cannot be used."""
    pass


class InvalidRootError(ConfigError):
    """Raised when the input directory is missing or not a directory."""
    pass


class IgnoreFileError(ConfigError):
    """Raised when an ignore pattern file exists but cannot be read."""
    pass


class OutputError(DigestError):
    """Raised when the digest cannot be written to its output path."""
    pass


class FileReadError(DigestError):
    """Raised when a source file cannot be read at all."""
    pass


class PatternError(DigestError):
    """Raised when an ignore pattern cannot be compiled as a glob."""
    pass
