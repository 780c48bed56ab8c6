from __future__ import annotations

import os
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from bundle_assets.exceptions import DuplicatePathError

GITIGNORE_NAME = ".gitignore"

MIN_QUALITY = 1
MAX_QUALITY = 11
DEFAULT_QUALITY = 11

DEFAULT_OUTPUT = "assets.gen.go"
DEFAULT_VARIABLE = "br"
DEFAULT_RUNTIME_IMPORT = "aletheia.icu/broccoli/fs"

GENERATED_HEADER = "// Code generated by bundle-assets. DO NOT EDIT."


class FileRecord(BaseModel):
    """One selected input file, loaded eagerly at collection time.

    Attributes:
        path: Normalised path of the file; unique within a manifest.
        size: Byte length of `content`.
        content: Raw bytes of the file.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Normalised file path")
    size: int = Field(..., ge=0, description="File size in bytes")
    content: bytes = Field(..., repr=False, description="Raw file content")

    @model_validator(mode="after")
    def _check_size(self) -> FileRecord:
        if self.size != len(self.content):
            msg = f"size {self.size} does not match content length {len(self.content)}"
            raise ValueError(msg)
        return self

    @computed_field
    @property
    def name(self) -> str:
        """Archive member name, with the platform separator written as `/`."""
        return self.path.replace(os.sep, "/")


@dataclass
class Manifest:
    """Ordered, duplicate-free collection of file records ready for packing."""

    records: list[FileRecord] = field(default_factory=list)
    total_bytes: int = 0
    _seen: set[str] = field(default_factory=set, repr=False)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, path: object) -> bool:
        return path in self._seen

    def check_absent(self, path: str) -> None:
        """Raise `DuplicatePathError` if `path` is already in the manifest."""
        if path in self._seen:
            raise DuplicatePathError(path=path)

    def add(self, record: FileRecord) -> None:
        """Append a record, keeping paths unique and the byte total current."""
        self.check_absent(record.path)
        self._seen.add(record.path)
        self.records.append(record)
        self.total_bytes += record.size

    @property
    def paths(self) -> list[str]:
        return [r.path for r in self.records]
