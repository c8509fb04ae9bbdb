"""Pipeline: scan -> worker pool -> merge."""

from __future__ import annotations

from functools import partial
from typing import Callable, Sequence

import structlog

from osdeps.analyzer.aggregator import collect, merge
from osdeps.analyzer.worker_pool import WorkerPool
from osdeps.config import ScanConfig, default_config
from osdeps.models import AnalysisReport, Artifact
from osdeps.parsers import create_parser
from osdeps.parsers.base import ArtifactParser
from osdeps.progress import PhaseTimer
from osdeps.scanners import create_scanner

log = structlog.get_logger("osdeps.pipeline")


def analyze_artifacts(
    artifacts: Sequence[Artifact],
    target_os: str,
    config: ScanConfig | None = None,
    workers: int = 0,
    parser_factory: Callable[[], ArtifactParser] | None = None,
    progress: PhaseTimer | None = None,
) -> AnalysisReport:
    """Resolve, merge and filter the dependencies of *artifacts*.

    Per-artifact failures are counted in ``AnalysisReport.skipped`` and never
    abort the run.
    """
    config = config or default_config()
    if parser_factory is None:
        # Fail on an unsupported OS before any worker starts
        create_parser(target_os)
        parser_factory = partial(create_parser, target_os)
    progress = progress or PhaseTimer()

    with progress.phase("resolve") as step:
        pool = WorkerPool(artifacts, parser_factory, workers)
        shards = list(pool.start())
        skipped = sorted(path for shard in shards for path in shard.skipped)
        step.detail = f"{len(artifacts) - len(skipped)} parsed, {len(skipped)} skipped"

    with progress.phase("merge") as step:
        final = merge(shards, config, target_os)
        unfiltered = sorted(collect(shards))
        ambiguous: dict[str, tuple[str, ...]] = {}
        for shard in sorted(shards, key=lambda s: s.worker):
            for ref, candidates in shard.ambiguous.items():
                ambiguous.setdefault(ref, candidates)
        step.detail = f"{len(final)} dependencies"

    log.info(
        "pipeline.done",
        artifacts=len(artifacts),
        skipped=len(skipped),
        dependencies=len(final),
    )
    return AnalysisReport(
        dependencies=final,
        unfiltered=unfiltered,
        artifact_count=len(artifacts),
        workers=pool.workers,
        skipped=skipped,
        ambiguous=ambiguous,
    )


def analyze_environment(
    env_path: str,
    target_os: str,
    env_type: str = "python-venv",
    config: ScanConfig | None = None,
    workers: int = 0,
    progress: PhaseTimer | None = None,
) -> AnalysisReport:
    """Scan *env_path* for artifacts and analyze them.

    Raises ScanError if the environment cannot be enumerated.
    """
    progress = progress or PhaseTimer()
    scanner = create_scanner(env_type, target_os)

    with progress.phase("scan") as step:
        artifacts = scanner.scan(env_path)
        step.detail = f"{len(artifacts)} artifacts"

    if not artifacts:
        log.warning("pipeline.no_artifacts", env_path=env_path)

    return analyze_artifacts(
        artifacts,
        target_os,
        config=config,
        workers=workers,
        progress=progress,
    )
