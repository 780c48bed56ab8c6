from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING

from bundle_assets.config import FileRecord, Manifest
from bundle_assets.exceptions import CollectionIOError, InputNotFoundError
from bundle_assets.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from bundle_assets.rules import RuleSet


def _reason(e: OSError) -> str:
    return e.strerror or str(e)


def normalize_path(path: str | os.PathLike[str]) -> str:
    """Return the key used for duplicate detection.

    Args:
        path (str | os.PathLike[str]): a path as given or as produced by a walk

    Returns:
        str: the path with redundant separators and `.` components removed
    """
    return os.path.normpath(os.fspath(path))


def walk_tree(top: str) -> Iterator[tuple[str, bool]]:
    """Walk the tree under `top` depth first, in lexical order of names.

    A directory is yielded before its contents and its contents are visited
    before its next sibling. `top` itself is not yielded. Symlinked
    directories are reported as non-directories and not followed.

    Args:
        top (str): the directory to walk

    Raises:
        CollectionIOError: if a directory cannot be listed

    Yields:
        Iterator[tuple[str, bool]]: `(path, is_dir)` for every descendant
    """
    try:
        with os.scandir(top) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise CollectionIOError(path=top, reason=_reason(e)) from e

    for entry in entries:
        path = normalize_path(os.path.join(top, entry.name))
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            raise CollectionIOError(path=path, reason=_reason(e)) from e
        yield path, is_dir
        if is_dir:
            yield from walk_tree(path)


def read_file(path: str) -> FileRecord:
    """Read a file fully into a record.

    Args:
        path (str): the normalised file path

    Raises:
        CollectionIOError: if the file cannot be read

    Returns:
        FileRecord: the file's path, size and content
    """
    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise CollectionIOError(path=path, reason=_reason(e)) from e
    return FileRecord(path=path, size=len(content), content=content)


def _is_regular_file(path: str) -> bool:
    try:
        st = os.stat(path)
    except OSError as e:
        raise CollectionIOError(path=path, reason=_reason(e)) from e
    return stat.S_ISREG(st.st_mode)


def _collect_directory(top: str, rules: RuleSet, manifest: Manifest, *, verbose: bool) -> None:
    for path, is_dir in walk_tree(top):
        if not rules.test(path, is_dir=is_dir, verbose=verbose):
            continue
        if is_dir:
            continue
        if not _is_regular_file(path):
            if verbose:
                logger.info("skipping non-regular file", path=path)
            continue
        manifest.check_absent(path)
        manifest.add(read_file(path))


def collect(
    inputs: Sequence[str | os.PathLike[str]],
    rules: RuleSet,
    *,
    verbose: bool = False,
) -> Manifest:
    """Select and read the files named by `inputs`.

    Files named directly are always kept. Directories are walked recursively
    and every descendant is checked against `rules`; directories themselves
    are never pruned.

    Args:
        inputs (Sequence[str | os.PathLike[str]]): files or directories, in order
        rules (RuleSet): filters applied during directory traversal
        verbose (bool, optional): log skipped paths. Defaults to False.

    Raises:
        InputNotFoundError: if an input does not exist
        DuplicatePathError: if a path is selected twice
        CollectionIOError: if a file or directory cannot be read

    Returns:
        Manifest: the selected files in deterministic order
    """
    manifest = Manifest()
    for raw in inputs:
        path = normalize_path(raw)
        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise InputNotFoundError(path=os.fspath(raw)) from e
        except OSError as e:
            raise CollectionIOError(path=path, reason=_reason(e)) from e

        if stat.S_ISDIR(st.st_mode):
            _collect_directory(path, rules, manifest, verbose=verbose)
            continue

        manifest.check_absent(path)
        manifest.add(read_file(path))
    return manifest
