from __future__ import annotations

import re
from pathlib import Path

from bundle_assets.config import DEFAULT_RUNTIME_IMPORT, GENERATED_HEADER
from bundle_assets.exceptions import PackageNameError

TEMPLATE = """{header}
package {package}

import "{runtime_import}"

var {variable} = {qualifier}.New({decompress}, []byte("{blob}"))
"""

_GO_ESCAPES: dict[int, str] = {
    0x07: "\\a",
    0x08: "\\b",
    0x0C: "\\f",
    0x0A: "\\n",
    0x0D: "\\r",
    0x09: "\\t",
    0x0B: "\\v",
    0x22: '\\"',
    0x5C: "\\\\",
}

_COMMENTS = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
_PACKAGE_CLAUSE = re.compile(r"\A\s*package\s+([A-Za-z_][A-Za-z0-9_]*)\b")


def quote_go_bytes(data: bytes) -> str:
    """Quote bytes as the body of a Go interpreted string literal.

    Printable ASCII is kept as is, the usual control characters use their
    short escapes, every other byte is written as `\\xNN`.

    Args:
        data (bytes): the bytes to encode

    Returns:
        str: the literal body, without the surrounding double quotes
    """
    parts: list[str] = []
    for b in data:
        if b in _GO_ESCAPES:
            parts.append(_GO_ESCAPES[b])
        elif 0x20 <= b < 0x7F:
            parts.append(chr(b))
        else:
            parts.append(f"\\x{b:02x}")
    return "".join(parts)


def render_source(
    blob: bytes,
    *,
    variable: str,
    decompress: bool,
    package: str,
    runtime_import: str = DEFAULT_RUNTIME_IMPORT,
) -> str:
    """Render the generated Go file embedding `blob`.

    Args:
        blob (bytes): the packed bundle
        variable (str): name of the declared variable
        decompress (bool): flag passed to the runtime constructor
        package (str): package clause of the generated file
        runtime_import (str, optional): import path of the runtime module.
            Its last element qualifies the constructor call.

    Returns:
        str: the generated source text
    """
    return TEMPLATE.format(
        header=GENERATED_HEADER,
        package=package,
        runtime_import=runtime_import,
        variable=variable,
        qualifier=runtime_import.rstrip("/").rsplit("/", 1)[-1],
        decompress="true" if decompress else "false",
        blob=quote_go_bytes(blob),
    )


def read_package_clause(source: str) -> str | None:
    """Return the package name declared in Go source text, if any."""
    m = _PACKAGE_CLAUSE.match(_COMMENTS.sub(" ", source))
    return m.group(1) if m else None


def _is_buildable_go_file(p: Path) -> bool:
    # go build ignores _test.go files and names starting with "_" or "."
    return (
        p.suffix == ".go"
        and not p.name.endswith("_test.go")
        and not p.name.startswith(("_", "."))
        and p.is_file()
    )


def discover_package_name(directory: str | Path = ".") -> str:
    """Find the Go package name of `directory`.

    The `.go` files the Go tool would build (no `_test.go`, no names
    starting with `_` or `.`) are read in name order and the first package
    clause wins.

    Args:
        directory (str | Path, optional): the package directory. Defaults to ".".

    Raises:
        PackageNameError: if there is no Go file or no parsable package clause

    Returns:
        str: the package name
    """
    folder = Path(directory)
    try:
        files = sorted(p for p in folder.iterdir() if _is_buildable_go_file(p))
    except OSError as e:
        raise PackageNameError(folder=folder, reason=str(e)) from e
    if not files:
        raise PackageNameError(folder=folder, reason="no buildable Go files")

    first = files[0]
    try:
        source = first.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PackageNameError(folder=folder, reason=f"{first.name}: {e}") from e
    name = read_package_clause(source)
    if name is None:
        raise PackageNameError(folder=folder, reason=f"{first.name}: no package clause")
    return name


def write_output(path: str | Path, text: str) -> Path:
    """Write generated text to `path`, creating parent directories."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8", newline="\n")
    return out
