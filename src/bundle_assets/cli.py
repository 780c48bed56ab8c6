"""
bundle_assets — Embed build-time assets into generated Go source.

Overview
--------
The inputs (files or directories) are collected into an ordered manifest,
packed into a single brotli-compressed archive, and written out as a Go file
declaring one variable initialised from the runtime constructor:

    var br = fs.New(false, []byte("..."))

Files named directly are always bundled. Files found while walking a
directory go through the filters: `--include` *or* `--exclude` globs matched
against the base name (include wins when both are given), and with
`--gitignore` every `.gitignore` below the working directory.

The same inputs always produce byte-identical output.

The runtime module is not part of this package. The default
`--runtime-import` (aletheia.icu/broccoli/fs) is only the import path written
into the template: the upstream broccoli runtime expects its own archive
format and cannot decode these tar+brotli blobs. Point `--runtime-import` at
a module whose `New(decompress bool, data []byte)` unpacks a brotli tar.

Usage
-----
Run `python -m bundle_assets.cli --help` for full options. Common examples:
    - Bundle a directory at maximum compression:
        bundle-assets --src public --output assets.gen.go

    - Only templates and stylesheets, verbose:
        bundle-assets --src web --include "*.html,*.css" -v

    - Respect .gitignore, faster compression:
        bundle-assets --src static --gitignore --quality 5

    - Read defaults from a YAML file:
        bundle-assets --config bundle.yaml
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

from pydantic import ValidationError

from bundle_assets import __version__
from bundle_assets.config import (
    DEFAULT_OUTPUT,
    DEFAULT_QUALITY,
    DEFAULT_RUNTIME_IMPORT,
    DEFAULT_VARIABLE,
)
from bundle_assets.exceptions import BundleError
from bundle_assets.generator import generate
from bundle_assets.logging import logger, setup_logging
from bundle_assets.output_construction import discover_package_name, render_source, write_output
from bundle_assets.settings import Settings, load_config_file

if TYPE_CHECKING:
    from collections.abc import Sequence

# argparse dest -> Settings field
_FIELD_NAMES = {
    "src": "inputs",
    "var": "variable",
    "opt": "decompress",
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bundle-assets",
        description="Bundle files into a compressed blob embedded in generated Go source.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", type=str, default="", help="YAML file with default settings.")
    p.add_argument(
        "--src",
        action="append",
        default=None,
        help="Input file or directory (repeatable, or comma list).",
    )
    p.add_argument("--output", "-o", type=str, default=DEFAULT_OUTPUT, help="Generated file.")
    p.add_argument("--var", type=str, default=DEFAULT_VARIABLE, help="Variable name.")

    filters = p.add_argument_group("filters")
    filters.add_argument("--include", type=str, default="", help="Comma list of globs to include.")
    filters.add_argument("--exclude", type=str, default="", help="Comma list of globs to exclude.")
    filters.add_argument("--gitignore", action="store_true", help="Apply .gitignore rules.")

    p.add_argument(
        "--quality",
        type=int,
        default=DEFAULT_QUALITY,
        help="Compression quality, 1 (fast) to 11 (small).",
    )
    p.add_argument(
        "--opt",
        action="store_true",
        help="Pass true as the runtime decompression flag.",
    )
    p.add_argument("--package", type=str, default="", help="Package name (default: discovered).")
    p.add_argument(
        "--runtime-import",
        type=str,
        default=DEFAULT_RUNTIME_IMPORT,
        help="Import path of a runtime module that unpacks a brotli tar.",
    )
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    p.add_argument("--verbose", "-v", action="store_true", help="Diagnostic logging.")
    return p


def _split_inputs(values: Sequence[str] | None) -> list[str]:
    out: list[str] = []
    for v in values or []:
        out.extend(s.strip() for s in v.split(",") if s.strip())
    return out


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line into settings.

    Values from `--config` become parser defaults, so explicit flags win.

    Args:
        argv (Sequence[str] | None, optional): arguments, defaults to `sys.argv[1:]`

    Raises:
        ConfigFileError: if the config file is invalid

    Returns:
        Settings: the validated configuration
    """
    p = build_parser()
    pre, _ = p.parse_known_args(argv)
    config_inputs: list[str] = []
    if pre.config:
        defaults = load_config_file(pre.config)
        config_inputs = list(defaults.pop("inputs", None) or [])
        reverse = {v: k for k, v in _FIELD_NAMES.items()}
        p.set_defaults(**{reverse.get(k, k): v for k, v in defaults.items()})

    args = p.parse_args(argv)
    values = vars(args)
    values.pop("config")
    values["src"] = _split_inputs(values["src"]) or config_inputs or None
    try:
        return Settings(**{_FIELD_NAMES.get(k, k): v for k, v in values.items() if v is not None})
    except ValidationError as e:
        p.error(str(e))


def run(settings: Settings) -> int:
    """Generate the bundle and write the output file."""
    bundle = generate(settings)
    package = settings.package or discover_package_name(".")
    text = render_source(
        bundle,
        variable=settings.variable,
        decompress=settings.decompress,
        package=package,
        runtime_import=settings.runtime_import,
    )
    out = write_output(settings.output, text)
    logger.info("wrote output", output=str(out), package=package, bytes=len(bundle))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
        if settings.log_file:
            setup_logging(settings.log_file)
        return run(settings)
    except BundleError as e:
        logger.error("generation failed", error=str(e), kind=type(e).__name__)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
