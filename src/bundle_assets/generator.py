from __future__ import annotations

from typing import TYPE_CHECKING

from bundle_assets.collector import collect
from bundle_assets.gitignore import load_gitignore_rules
from bundle_assets.logging import logger
from bundle_assets.packing import pack
from bundle_assets.rules import NamePatternRule, RuleSet

if TYPE_CHECKING:
    from pathlib import Path

    from bundle_assets.config import Manifest
    from bundle_assets.settings import Settings


def build_rules(settings: Settings, *, root: str | Path = ".") -> RuleSet:
    """Build the ordered filter rules for a run.

    At most one name pattern rule is created: include wins over exclude when
    both are set. Gitignore rules, when enabled, follow it in discovery order.

    Args:
        settings (Settings): the run configuration
        root (str | Path, optional): where `.gitignore` files are searched.
            Defaults to the working directory.

    Returns:
        RuleSet: the rules to apply during directory traversal
    """
    rules = RuleSet()
    if settings.include:
        rules.append(NamePatternRule.from_string(settings.include, include=True))
    elif settings.exclude:
        rules.append(NamePatternRule.from_string(settings.exclude, include=False))

    if settings.gitignore:
        rules.extend(load_gitignore_rules(root))
    return rules


def collect_manifest(settings: Settings, *, root: str | Path = ".") -> Manifest:
    """Build the rules and collect the files selected by `settings`."""
    rules = build_rules(settings, root=root)
    return collect(settings.inputs, rules, verbose=settings.verbose)


def generate(settings: Settings, *, root: str | Path = ".") -> bytes:
    """Collect and pack the inputs of `settings`.

    Args:
        settings (Settings): the run configuration
        root (str | Path, optional): where `.gitignore` files are searched.

    Returns:
        bytes: the compressed bundle
    """
    manifest = collect_manifest(settings, root=root)
    if settings.verbose:
        logger.info("total bytes read", bytes=manifest.total_bytes, files=len(manifest))

    bundle = pack(manifest.records, settings.quality)

    if settings.verbose:
        logger.info("total bytes compressed", bytes=len(bundle))
    return bundle
