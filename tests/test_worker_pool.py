"""Tests for WorkerPool: partitioning, concurrency and failure isolation."""

from __future__ import annotations

import os
import threading
import time

import pytest

from conftest import FakeParser, make_artifact
from osdeps.analyzer.worker_pool import (
    ResultChannel,
    WorkerPool,
    effective_worker_count,
    shard_bounds,
)
from osdeps.exceptions import ParseError
from osdeps.models import ShardResult


class TestEffectiveWorkerCount:
    def test_positive_request(self):
        assert effective_worker_count(3, 10) == 3

    def test_clamped_to_artifacts(self):
        assert effective_worker_count(16, 5) == 5

    def test_auto_detect(self):
        assert effective_worker_count(0, 1000) == min(os.cpu_count() or 1, 1000)

    def test_negative_means_auto(self):
        assert effective_worker_count(-1, 1) == 1

    def test_no_artifacts(self):
        assert effective_worker_count(4, 0) == 0


class TestShardBounds:
    @pytest.mark.parametrize("total", [1, 2, 7, 10, 33])
    def test_every_index_exactly_once(self, total):
        for workers in range(1, total + 1):
            seen: list[int] = []
            for i in range(workers):
                start, end = shard_bounds(i, workers, total)
                assert end > start  # no empty shard when workers <= total
                seen.extend(range(start, end))
            assert seen == list(range(total))

    def test_contiguous_example(self):
        assert [shard_bounds(i, 3, 10) for i in range(3)] == [(0, 3), (3, 6), (6, 10)]


class TestResultChannel:
    def test_iterates_until_closed(self):
        channel = ResultChannel(2)
        channel.put(ShardResult(worker=0))
        channel.put(ShardResult(worker=1))
        channel.close()
        assert [r.worker for r in channel] == [0, 1]

    def test_put_after_close_rejected(self):
        channel = ResultChannel(1)
        channel.close()
        with pytest.raises(RuntimeError):
            channel.put(ShardResult(worker=0))

    def test_close_is_idempotent(self):
        channel = ResultChannel(1)
        channel.close()
        channel.close()
        assert list(channel) == []

    def test_second_iteration_after_drain_returns(self):
        channel = ResultChannel(2)
        channel.put(ShardResult(worker=0))
        channel.close()
        assert [r.worker for r in channel] == [0]
        assert list(channel) == []


class TestWorkerPool:
    def _artifacts(self, n: int):
        return [make_artifact(f"/env/pkg{i}/_ext{i}.so") for i in range(n)]

    def test_one_shard_result_per_worker(self, fake_parser_factory):
        artifacts = self._artifacts(10)
        factory, created = fake_parser_factory({a.path: [f"lib{i}.so"] for i, a in enumerate(artifacts)})
        pool = WorkerPool(artifacts, factory, workers=4)
        shards = list(pool.start())

        assert pool.workers == 4
        assert sorted(s.worker for s in shards) == [0, 1, 2, 3]
        assert sum(s.parsed for s in shards) == 10
        assert set().union(*(s.dependencies for s in shards)) == {f"lib{i}.so" for i in range(10)}
        # One private parser per worker
        assert len(created) == 4

    def test_each_artifact_parsed_once(self, fake_parser_factory):
        artifacts = self._artifacts(9)
        factory, created = fake_parser_factory({a.path: [] for a in artifacts})
        list(WorkerPool(artifacts, factory, workers=3).start())
        calls = [c for p in created for c in p.calls]
        assert sorted(calls) == sorted(a.path for a in artifacts)

    def test_shard_processed_in_index_order(self, fake_parser_factory):
        artifacts = self._artifacts(6)
        factory, created = fake_parser_factory({a.path: [] for a in artifacts})
        list(WorkerPool(artifacts, factory, workers=2).start())
        orders = sorted(p.calls for p in created)
        assert orders == [
            [a.path for a in artifacts[:3]],
            [a.path for a in artifacts[3:]],
        ]

    def test_more_workers_than_artifacts(self, fake_parser_factory):
        artifacts = self._artifacts(3)
        factory, _ = fake_parser_factory({a.path: [] for a in artifacts})
        pool = WorkerPool(artifacts, factory, workers=64)
        shards = list(pool.start())
        assert pool.workers == 3
        assert len(shards) == 3

    def test_empty_artifact_list_closes_channel(self, fake_parser_factory):
        factory, created = fake_parser_factory({})
        pool = WorkerPool([], factory, workers=4)
        assert list(pool.start()) == []
        assert created == []

    def test_parse_failure_skipped_not_fatal(self, fake_parser_factory):
        artifacts = self._artifacts(4)
        deps = {a.path: ["libok.so"] for a in artifacts}
        factory, _ = fake_parser_factory(deps, broken={artifacts[1].path})
        shards = list(WorkerPool(artifacts, factory, workers=1).start())

        assert len(shards) == 1
        assert shards[0].parsed == 3
        assert shards[0].skipped == [artifacts[1].path]
        assert shards[0].dependencies == {"libok.so"}

    def test_unexpected_parser_crash_skips_only_that_artifact(self):
        artifacts = self._artifacts(4)

        class CrashingParser(FakeParser):
            def parse_dependencies(self, path):
                if path == artifacts[1].path:
                    raise RuntimeError("boom")
                return super().parse_dependencies(path)

        deps = {a.path: [f"lib{i}.so"] for i, a in enumerate(artifacts)}
        shards = list(WorkerPool(artifacts, lambda: CrashingParser(deps), workers=1).start())
        assert len(shards) == 1
        assert shards[0].parsed == 3
        assert shards[0].skipped == [artifacts[1].path]
        assert shards[0].dependencies == {"lib0.so", "lib2.so", "lib3.so"}

    def test_crashing_sibling_check_keeps_reference(self):
        artifacts = [
            make_artifact("/env/pkg/_a.so"),
            make_artifact("/env/pkg/_b.so"),
        ]
        sibling = "/env/pkg/libbar.dylib"

        class CrashingSiblingParser(FakeParser):
            def parse_dependencies(self, path):
                if path == sibling:
                    raise RuntimeError("boom")
                return super().parse_dependencies(path)

        deps = {artifacts[0].path: ["@rpath/libbar.dylib"], artifacts[1].path: ["libz.so.1"]}
        shards = list(WorkerPool(artifacts, lambda: CrashingSiblingParser(deps), workers=1).start())
        assert shards[0].parsed == 2
        assert shards[0].skipped == []
        assert shards[0].dependencies == {"@rpath/libbar.dylib", "libz.so.1"}

    def test_parser_factory_failure_skips_whole_shard(self):
        artifacts = self._artifacts(2)

        def factory():
            raise OSError("no parser")

        shards = list(WorkerPool(artifacts, factory, workers=1).start())
        assert shards[0].parsed == 0
        assert shards[0].skipped == [a.path for a in artifacts]

    def test_start_twice_rejected(self, fake_parser_factory):
        factory, _ = fake_parser_factory({})
        pool = WorkerPool([], factory)
        pool.start()
        with pytest.raises(RuntimeError):
            pool.start()

    def test_slow_shard_does_not_block_others(self):
        artifacts = self._artifacts(2)
        release = threading.Event()

        class SlowParser(FakeParser):
            def parse_dependencies(self, path):
                if path == artifacts[0].path:
                    release.wait(timeout=5)
                return super().parse_dependencies(path)

        deps = {a.path: [] for a in artifacts}
        channel = WorkerPool(artifacts, lambda: SlowParser(deps), workers=2).start()
        it = iter(channel)
        first = next(it)
        assert first.worker == 1
        release.set()
        rest = list(it)
        assert [r.worker for r in rest] == [0]

    def test_workers_run_on_separate_threads(self, fake_parser_factory):
        artifacts = self._artifacts(4)
        barrier = threading.Barrier(2, timeout=5)

        class BarrierParser(FakeParser):
            def parse_dependencies(self, path):
                if path in (artifacts[0].path, artifacts[2].path):
                    barrier.wait()
                return super().parse_dependencies(path)

        deps = {a.path: [] for a in artifacts}
        start = time.monotonic()
        shards = list(WorkerPool(artifacts, lambda: BarrierParser(deps), workers=2).start())
        assert len(shards) == 2
        assert all(s.skipped == [] for s in shards)
        assert time.monotonic() - start < 5


class TestParseErrorShape:
    def test_carries_path_and_cause(self):
        err = ParseError("/x.so", ValueError("bad magic"))
        assert err.path == "/x.so"
        assert isinstance(err.cause, ValueError)
        assert "/x.so" in str(err)
