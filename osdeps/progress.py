"""Wall-clock timing of the scan, resolve and merge phases of a run."""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import structlog

log = structlog.get_logger("osdeps.pipeline")


@dataclass
class Phase:
    name: str
    started: float
    finished: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def status(self) -> str:
        if self.finished is None:
            return "running"
        return "failed" if self.error is not None else "completed"

    @property
    def elapsed(self) -> float | None:
        if self.finished is None:
            return None
        return round(self.finished - self.started, 2)


class PhaseTimer:
    """Records one Phase per ``with timer.phase(name)`` block, in entry order."""

    def __init__(self) -> None:
        self.phases: list[Phase] = []

    @contextmanager
    def phase(self, name: str) -> Iterator[Phase]:
        """Time the enclosed block; the body may set ``detail`` on the yielded Phase.

        An exception escaping the block marks the phase failed and propagates.
        """
        record = Phase(name=name, started=time.monotonic())
        self.phases.append(record)
        try:
            yield record
        except Exception as e:
            record.error = str(e)
            raise
        finally:
            record.finished = time.monotonic()
            log.debug(
                "pipeline.phase",
                phase=name,
                status=record.status,
                elapsed=record.elapsed,
                detail=record.detail,
            )

    @property
    def total(self) -> float:
        return round(sum(p.elapsed or 0 for p in self.phases), 2)
