from __future__ import annotations

import io
import os
import tarfile
from typing import TYPE_CHECKING

import brotli
import pytest

from bundle_assets.collector import collect
from bundle_assets.config import FileRecord
from bundle_assets.exceptions import PackingError
from bundle_assets.packing import archive, pack, unpack
from bundle_assets.rules import RuleSet

if TYPE_CHECKING:
    from pathlib import Path


def _rec(path: str, content: bytes) -> FileRecord:
    return FileRecord(path=path, size=len(content), content=content)


RECORDS = [
    _rec("assets/a.txt", b"alpha\n"),
    _rec("assets/sub/c.bin", bytes(range(256))),
    _rec("assets/empty", b""),
]


@pytest.mark.unit
def test_pack_then_unpack_restores_paths_and_contents_in_order() -> None:
    blob = pack(RECORDS, 5)

    assert unpack(blob) == [(r.path, r.content) for r in RECORDS]


@pytest.mark.unit
def test_pack_is_deterministic() -> None:
    assert pack(RECORDS, 11) == pack(list(RECORDS), 11)


@pytest.mark.unit
def test_pack_empty_manifest() -> None:
    assert unpack(pack([], 1)) == []


@pytest.mark.unit
def test_archive_pins_variable_header_fields() -> None:
    with tarfile.open(fileobj=io.BytesIO(archive(RECORDS)), mode="r:") as tar:
        members = tar.getmembers()

    assert {(m.mtime, m.uid, m.gid, m.uname, m.gname, m.mode) for m in members} == {(0, 0, 0, "", "", 0o644)}


@pytest.mark.unit
def test_pack_output_is_brotli() -> None:
    blob = pack(RECORDS, 3)

    assert brotli.decompress(blob) == archive(RECORDS)


@pytest.mark.unit
@pytest.mark.parametrize("quality", [0, 12, -1, True, 5.0])
def test_pack_rejects_unsupported_quality(quality: object) -> None:
    with pytest.raises(PackingError) as exc_info:
        pack(RECORDS, quality)  # type: ignore[arg-type]

    assert "could not compress the input" in str(exc_info.value)


@pytest.mark.unit
def test_unpack_rejects_corrupt_blob() -> None:
    with pytest.raises(PackingError):
        unpack(b"definitely not brotli")


@pytest.mark.unit
def test_native_separators_become_posix_member_names() -> None:
    path = os.path.join("assets", "sub", "native.txt")

    assert unpack(pack([_rec(path, b"x")], 1)) == [("assets/sub/native.txt", b"x")]


@pytest.mark.unit
@pytest.mark.skipif(os.sep == "\\", reason="backslash is the separator on this platform")
def test_backslash_in_posix_file_name_survives_packing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "d").mkdir()
    (tmp_path / "d" / "a\\b.txt").write_bytes(b"x")
    monkeypatch.chdir(tmp_path)
    manifest = collect(["d"], RuleSet())

    assert unpack(pack(manifest.records, 1)) == [("d/a\\b.txt", b"x")]
