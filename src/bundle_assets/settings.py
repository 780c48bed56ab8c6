from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from bundle_assets.config import (
    DEFAULT_OUTPUT,
    DEFAULT_QUALITY,
    DEFAULT_RUNTIME_IMPORT,
    DEFAULT_VARIABLE,
    MAX_QUALITY,
    MIN_QUALITY,
)
from bundle_assets.exceptions import ConfigFileError


class Settings(BaseModel):
    """Configuration settings for one generation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    inputs: list[str] = Field(..., min_length=1, description="Input files or directories.")
    output: Path = Field(default=Path(DEFAULT_OUTPUT), description="Generated file.")
    variable: str = Field(default=DEFAULT_VARIABLE, min_length=1, description="Variable name.")
    include: str = Field(default="", description="Comma list of globs to include.")
    exclude: str = Field(default="", description="Comma list of globs to exclude.")
    gitignore: bool = Field(default=False, description="Apply .gitignore rules.")
    quality: int = Field(
        default=DEFAULT_QUALITY,
        ge=MIN_QUALITY,
        le=MAX_QUALITY,
        description="Compression quality.",
    )
    decompress: bool = Field(
        default=False,
        description="Emit the decompression flag for the runtime constructor.",
    )
    package: str = Field(default="", description="Package name; discovered when empty.")
    runtime_import: str = Field(
        default=DEFAULT_RUNTIME_IMPORT,
        description="Import path of the runtime support module.",
    )
    verbose: bool = Field(default=False, description="Diagnostic logging.")
    log_file: str = Field(default="", description="Log file path.")


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load setting defaults from a YAML file.

    Keys use the `Settings` field names. `inputs` may be a list or a comma
    separated string.

    Args:
        path (str | Path): the YAML file to read

    Raises:
        ConfigFileError: if the file cannot be read, is not a mapping, or
            holds unknown keys

    Returns:
        dict[str, Any]: the values found in the file
    """
    file = Path(path)
    try:
        data = yaml.safe_load(file.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(file=file, reason=str(e)) from e
    if not isinstance(data, dict):
        raise ConfigFileError(file=file, reason="top level must be a mapping")

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ConfigFileError(file=file, reason=f"unknown keys: {', '.join(unknown)}")

    inputs = data.get("inputs")
    if isinstance(inputs, str):
        data["inputs"] = [s.strip() for s in inputs.split(",") if s.strip()]
    return data
