"""Deterministic packing of collected files into one brotli-compressed blob.

The blob is a PAX tar archive of the records, in manifest order, compressed
with brotli. Header fields that could differ between machines or runs are
pinned so that the same files always give the same bytes.
"""

from __future__ import annotations

import io
import tarfile
from typing import TYPE_CHECKING

import brotli

from bundle_assets.config import MAX_QUALITY, MIN_QUALITY
from bundle_assets.exceptions import PackingError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bundle_assets.config import FileRecord

FILE_MODE = 0o644


def _tar_info(record: FileRecord) -> tarfile.TarInfo:
    info = tarfile.TarInfo(name=record.name)
    info.size = record.size
    info.mtime = 0
    info.mode = FILE_MODE
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def archive(records: Iterable[FileRecord]) -> bytes:
    """Write the records to an uncompressed tar archive."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for rec in records:
            tar.addfile(_tar_info(rec), io.BytesIO(rec.content))
    return buf.getvalue()


def pack(records: Iterable[FileRecord], quality: int) -> bytes:
    """Pack file records into a single compressed blob.

    Args:
        records (Iterable[FileRecord]): the files to pack, in order
        quality (int): brotli quality, 1 (fastest) to 11 (smallest)

    Raises:
        PackingError: if the quality is out of range or compression fails

    Returns:
        bytes: the compressed archive
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise PackingError(reason=f"quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise PackingError(
            reason=f"quality {quality} out of range [{MIN_QUALITY}, {MAX_QUALITY}]",
        )
    data = archive(records)
    try:
        return brotli.compress(data, quality=quality)
    except brotli.error as e:
        raise PackingError(reason=str(e)) from e


def unpack(blob: bytes) -> list[tuple[str, bytes]]:
    """Reverse `pack`.

    Args:
        blob (bytes): a blob produced by `pack`

    Raises:
        PackingError: if the blob is not a valid bundle

    Returns:
        list[tuple[str, bytes]]: `(path, content)` pairs in packing order
    """
    try:
        data = brotli.decompress(blob)
    except brotli.error as e:
        raise PackingError(reason=f"corrupt bundle: {e}") from e

    out: list[tuple[str, bytes]] = []
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tar:
            for member in tar:
                f = tar.extractfile(member)
                out.append((member.name, f.read() if f else b""))
    except tarfile.TarError as e:
        raise PackingError(reason=f"corrupt bundle: {e}") from e
    return out
