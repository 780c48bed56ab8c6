from __future__ import annotations

import os
import re
import string
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from bundle_assets.exceptions import InvalidPatternError
from bundle_assets.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

_TRIM_CHARS = string.whitespace + "\"'"


class Rule(Protocol):
    """A predicate deciding whether a candidate path is kept."""

    def test(self, path: str, *, is_dir: bool) -> bool: ...


def split_patterns(patterns: str) -> list[str]:
    """Split a comma separated pattern list.

    Surrounding whitespace and quote characters are trimmed from every token;
    empty tokens are dropped.

    Args:
        patterns (str): e.g. `'*.go', "*.md", LICENSE`

    Returns:
        list[str]: the individual glob patterns
    """
    out: list[str] = []
    for token in patterns.split(","):
        p = token.strip(_TRIM_CHARS)
        if p:
            out.append(p)
    return out


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    n = len(pattern)
    if i >= n or pattern[i] in "-]":
        raise InvalidPatternError(pattern=pattern)
    if pattern[i] == "\\":
        i += 1
        if i >= n:
            raise InvalidPatternError(pattern=pattern)
    return pattern[i], i + 1


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a shell glob into a regular expression matching a whole name.

    Supports `*`, `?`, character classes with ranges and `!`/`^` negation, and
    backslash escapes.

    Args:
        pattern (str): the glob to compile

    Raises:
        InvalidPatternError: on an unterminated or empty character class, a
            reversed range, or a trailing backslash

    Returns:
        re.Pattern[str]: a compiled expression to use with `fullmatch`
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        elif c == "\\":
            if i >= n:
                raise InvalidPatternError(pattern=pattern)
            out.append(re.escape(pattern[i]))
            i += 1
        elif c == "[":
            negate = i < n and pattern[i] in "!^"
            if negate:
                i += 1
            items: list[str] = []
            while True:
                if i >= n:
                    raise InvalidPatternError(pattern=pattern)
                if pattern[i] == "]" and items:
                    i += 1
                    break
                lo, i = _class_char(pattern, i)
                hi = lo
                if i < n and pattern[i] == "-":
                    hi, i = _class_char(pattern, i + 1)
                    if hi < lo:
                        raise InvalidPatternError(pattern=pattern)
                items.append(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}")
            out.append("[" + ("^" if negate else "") + "".join(items) + "]")
        else:
            out.append(re.escape(c))
    return re.compile("".join(out), re.DOTALL)


@dataclass(frozen=True)
class NamePatternRule:
    """Include or exclude files whose base name matches one of the globs.

    Directories always pass, so name patterns never prune a traversal.
    """

    include: bool
    patterns: tuple[str, ...]
    _compiled: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", tuple(compile_glob(p) for p in self.patterns))

    @classmethod
    def from_string(cls, patterns: str, *, include: bool) -> NamePatternRule:
        return cls(include=include, patterns=tuple(split_patterns(patterns)))

    def test(self, path: str, *, is_dir: bool) -> bool:
        if is_dir:
            return True
        name = os.path.basename(path)
        if any(rx.fullmatch(name) for rx in self._compiled):
            return self.include
        return not self.include


@dataclass
class RuleSet:
    """Ordered rules combined with a logical AND."""

    rules: list[Rule] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def append(self, rule: Rule) -> None:
        self.rules.append(rule)

    def extend(self, rules: Sequence[Rule]) -> None:
        self.rules.extend(rules)

    def test(self, path: str, *, is_dir: bool, verbose: bool = False) -> bool:
        """Check `path` against every rule, stopping at the first failure.

        Args:
            path (str): the candidate path
            is_dir (bool): whether the candidate is a directory
            verbose (bool, optional): log rejected paths. Defaults to False.

        Returns:
            bool: True if every rule passes
        """
        for rule in self.rules:
            if not rule.test(path, is_dir=is_dir):
                if verbose:
                    logger.info("ignoring", path=path)
                return False
        return True
