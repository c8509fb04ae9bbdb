"""Worker pool: static partitioning of artifacts across threads.

Lifecycle::

    Spawning -> Running -> Draining (join all workers) -> Closed

Each worker owns a private parser, resolver and accumulator, processes its
contiguous shard in index order and puts exactly one ShardResult on the
shared channel. A completion thread joins every worker and then closes the
channel; consumers stop on closure, never on a message count.
"""

from __future__ import annotations

import os
import threading
from queue import Queue
from typing import Callable, Iterator, Sequence

import structlog

from osdeps.analyzer.resolver import DependencyResolver
from osdeps.exceptions import ParseError
from osdeps.models import Artifact, ShardResult
from osdeps.parsers.base import ArtifactParser

log = structlog.get_logger("osdeps.analyzer")

_CLOSED = object()


def effective_worker_count(requested: int, artifact_count: int) -> int:
    """Workers to spawn: *requested* if positive, else CPU count; never more than artifacts."""
    workers = requested if requested > 0 else (os.cpu_count() or 1)
    return min(workers, artifact_count)


def shard_bounds(index: int, workers: int, total: int) -> tuple[int, int]:
    """Half-open index range ``[start, end)`` assigned to worker *index* of *workers*."""
    return index * total // workers, (index + 1) * total // workers


class ResultChannel:
    """Bounded single-consumer channel of ShardResults, closed exactly once."""

    def __init__(self, capacity: int) -> None:
        self._queue: Queue = Queue(maxsize=max(capacity, 1))
        self._closed = threading.Event()

    def put(self, result: ShardResult) -> None:
        if self._closed.is_set():
            raise RuntimeError("put on closed result channel")
        self._queue.put(result)

    def close(self) -> None:
        if not self._closed.is_set():
            self._closed.set()
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[ShardResult]:
        """Yield results until the channel is closed and drained."""
        while True:
            if self._closed.is_set() and self._queue.empty():
                return
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item


class WorkerPool:
    """Run the dependency resolver over a list of artifacts with N threads."""

    def __init__(
        self,
        artifacts: Sequence[Artifact],
        parser_factory: Callable[[], ArtifactParser],
        workers: int = 0,
    ) -> None:
        self.artifacts = list(artifacts)
        self.workers = effective_worker_count(workers, len(self.artifacts))
        self._parser_factory = parser_factory
        self._known_paths = tuple(a.path for a in self.artifacts)
        self._channel = ResultChannel(self.workers)
        self._threads: list[threading.Thread] = []
        self._started = False

    def start(self) -> ResultChannel:
        """Spawn the workers and return the channel their results arrive on."""
        if self._started:
            raise RuntimeError("worker pool already started")
        self._started = True

        log.info("pool.start", workers=self.workers, artifacts=len(self.artifacts))
        for idx in range(self.workers):
            t = threading.Thread(
                target=self._worker, args=(idx,), name=f"osdeps-worker-{idx}", daemon=True
            )
            self._threads.append(t)
            t.start()

        threading.Thread(target=self._close_when_done, name="osdeps-pool-closer", daemon=True).start()
        return self._channel

    def _close_when_done(self) -> None:
        for t in self._threads:
            t.join()
        log.info("pool.drained", workers=self.workers)
        self._channel.close()

    def _worker(self, idx: int) -> None:
        start, end = shard_bounds(idx, self.workers, len(self.artifacts))
        shard = self.artifacts[start:end]
        result = ShardResult(worker=idx)
        with structlog.contextvars.bound_contextvars(worker=idx):
            try:
                try:
                    resolver = DependencyResolver(self._parser_factory(), self._known_paths)
                except Exception:
                    log.error("worker.parser_unavailable", exc_info=True)
                    result.skipped.extend(a.path for a in shard)
                    return

                for artifact in shard:
                    log.debug("worker.processing", path=artifact.path)
                    try:
                        deps = resolver.resolve(artifact)
                    except ParseError as e:
                        log.info("worker.artifact_skipped", path=artifact.path, error=str(e.cause))
                        result.skipped.append(artifact.path)
                        continue
                    except Exception:
                        log.error("worker.artifact_failed", path=artifact.path, exc_info=True)
                        result.skipped.append(artifact.path)
                        continue
                    result.dependencies.update(deps)
                    result.parsed += 1
                result.ambiguous = dict(resolver.ambiguous)
            finally:
                self._channel.put(result)
                log.debug("worker.done", parsed=result.parsed, skipped=len(result.skipped))
