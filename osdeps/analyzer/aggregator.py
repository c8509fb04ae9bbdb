"""Aggregator: fan in shard results, deduplicate, filter, sort."""

from __future__ import annotations

import warnings
from typing import Iterable

import structlog

from osdeps.config import ScanConfig
from osdeps.exceptions import ConfigurationWarning
from osdeps.models import ShardResult

log = structlog.get_logger("osdeps.analyzer")


def collect(shards: Iterable[ShardResult]) -> set[str]:
    """Union of every shard's dependencies, without empty strings."""
    deps: set[str] = set()
    for shard in shards:
        deps.update(shard.dependencies)
    deps.discard("")
    return deps


def merge(shards: Iterable[ShardResult], config: ScanConfig, target_os: str) -> list[str]:
    """Build the final dependency list.

    Entries in the *target_os* ignore list are dropped. When no list exists for
    *target_os* a ConfigurationWarning is issued and nothing is filtered. The
    result is sorted by code point, so it does not depend on shard arrival order.
    """
    deps = collect(shards)
    return filter_ignored(deps, config, target_os)


def filter_ignored(deps: Iterable[str], config: ScanConfig, target_os: str) -> list[str]:
    ignore = config.ignore_list_for(target_os)
    if ignore is None:
        warnings.warn(
            f"no ignore list defined for OS {target_os!r}; nothing will be filtered",
            ConfigurationWarning,
            stacklevel=2,
        )
        ignore = frozenset()

    kept = {d for d in deps if d and d not in ignore}
    log.debug("aggregator.filtered", kept=len(kept), target_os=target_os)
    return sorted(kept)
