from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class BundleError(Exception):
    """Base exception for errors in the bundle_assets module."""


@dataclass(frozen=True)
class InvalidPatternError(BundleError):
    """Raised when an include/exclude glob pattern is malformed."""

    pattern: str
    message: str = "Invalid wildcard pattern."

    def __str__(self) -> str:
        return f"{self.message} {self.pattern!r}"


@dataclass(frozen=True)
class GitignoreError(BundleError):
    """Raised when a `.gitignore` file cannot be read or compiled."""

    file: Path
    reason: str

    def __str__(self) -> str:
        return f"cannot open .gitignore {self.file}: {self.reason}"


@dataclass(frozen=True)
class ConfigFileError(BundleError):
    """Raised when the YAML configuration file is unreadable or invalid."""

    file: Path
    reason: str

    def __str__(self) -> str:
        return f"invalid configuration file {self.file}: {self.reason}"


@dataclass(frozen=True)
class InputNotFoundError(BundleError):
    """Raised when an input path does not exist."""

    path: str

    def __str__(self) -> str:
        return f"file or directory {self.path} not found"


@dataclass(frozen=True)
class DuplicatePathError(BundleError):
    """Raised when the same path is selected twice."""

    path: str

    def __str__(self) -> str:
        return f"duplicate path in the input: {self.path}"


@dataclass(frozen=True)
class CollectionIOError(BundleError):
    """Raised when reading a file or walking a directory fails."""

    path: str
    reason: str

    def __str__(self) -> str:
        return f"cannot open file or directory {self.path}: {self.reason}"


@dataclass(frozen=True)
class PackingError(BundleError):
    """Raised when the collected files cannot be compressed."""

    reason: str

    def __str__(self) -> str:
        return f"could not compress the input: {self.reason}"


@dataclass(frozen=True)
class PackageNameError(BundleError):
    """Raised when the package name of the target directory cannot be found."""

    folder: Path
    reason: str

    def __str__(self) -> str:
        return f"cannot parse package in {self.folder}: {self.reason}"
