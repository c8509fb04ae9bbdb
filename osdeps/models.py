"""Data models shared by the scanner, analyzer and pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ArtifactKind(Enum):
    """Kind of compiled artifact found in an environment."""

    PYTHON_EXTENSION_SO = "python-ext-so"


@dataclass(frozen=True)
class Artifact:
    """A compiled binary discovered by a scanner. Never mutated after creation."""

    path: str  # absolute
    kind: ArtifactKind
    os: str  # "linux" | "darwin"
    arch: str  # e.g. "x86_64", "arm64"


@dataclass
class ShardResult:
    """Output of one worker for its contiguous slice of the artifact list.

    Owned by the worker until it is put on the result channel.
    """

    worker: int
    dependencies: set[str] = field(default_factory=set)
    parsed: int = 0
    skipped: list[str] = field(default_factory=list)
    # symbolic reference -> (chosen path, *other parseable candidates)
    ambiguous: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass
class AnalysisReport:
    """Final result of a pipeline run."""

    dependencies: list[str]
    unfiltered: list[str]
    artifact_count: int
    workers: int
    skipped: list[str] = field(default_factory=list)
    ambiguous: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def parsed_count(self) -> int:
        return self.artifact_count - len(self.skipped)
