"""Dependency analysis core: resolver, aggregator and worker pool."""

from osdeps.analyzer.aggregator import collect, filter_ignored, merge
from osdeps.analyzer.resolver import DependencyResolver, is_symbolic
from osdeps.analyzer.worker_pool import (
    ResultChannel,
    WorkerPool,
    effective_worker_count,
    shard_bounds,
)

__all__ = [
    "DependencyResolver",
    "ResultChannel",
    "WorkerPool",
    "collect",
    "effective_worker_count",
    "filter_ignored",
    "is_symbolic",
    "merge",
    "shard_bounds",
]
