"""Discovery and compilation of `.gitignore` files.

Every `.gitignore` below the working directory becomes one rule. A rule only
sees the base name of a candidate, so patterns are effectively matched
against file and directory names wherever they appear in the tree.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import pathspec

from bundle_assets.collector import walk_tree
from bundle_assets.config import GITIGNORE_NAME
from bundle_assets.exceptions import CollectionIOError, GitignoreError
from bundle_assets.logging import logger


@dataclass(frozen=True)
class GitignoreRule:
    """Reject candidates whose name is matched by one compiled `.gitignore`."""

    source: Path
    spec: pathspec.PathSpec

    def test(self, path: str, *, is_dir: bool) -> bool:  # noqa: ARG002
        return not self.spec.match_file(os.path.basename(path))


def compile_gitignore(path: str | Path) -> GitignoreRule:
    """Compile one `.gitignore` file.

    Args:
        path (str | Path): the file to compile

    Raises:
        GitignoreError: if the file cannot be read or holds an invalid pattern

    Returns:
        GitignoreRule: the compiled rule
    """
    file = Path(path)
    try:
        lines = file.read_text(encoding="utf-8").splitlines()
        spec = pathspec.GitIgnoreSpec.from_lines(lines)
    except OSError as e:
        raise GitignoreError(file=file, reason=e.strerror or str(e)) from e
    except ValueError as e:
        raise GitignoreError(file=file, reason=str(e)) from e
    return GitignoreRule(source=file, spec=spec)


def find_gitignore_files(root: str | Path = ".") -> list[Path]:
    """List every `.gitignore` file under `root`, in walk order.

    Args:
        root (str | Path, optional): where to start. Defaults to the working directory.

    Raises:
        GitignoreError: if a directory under `root` cannot be listed

    Returns:
        list[Path]: the `.gitignore` files found
    """
    found: list[Path] = []
    try:
        for path, is_dir in walk_tree(os.fspath(root)):
            if not is_dir and os.path.basename(path) == GITIGNORE_NAME:
                found.append(Path(path))
    except CollectionIOError as e:
        raise GitignoreError(file=Path(e.path), reason=e.reason) from e
    return found


def load_gitignore_rules(root: str | Path = ".") -> list[GitignoreRule]:
    """Compile every `.gitignore` file under `root`.

    Args:
        root (str | Path, optional): where to start. Defaults to the working directory.

    Returns:
        list[GitignoreRule]: one rule per file, in discovery order
    """
    rules = [compile_gitignore(p) for p in find_gitignore_files(root)]
    logger.debug("loaded gitignore rules", count=len(rules))
    return rules
