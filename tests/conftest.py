"""Shared pytest fixtures for osdeps tests."""

from __future__ import annotations

import threading

import pytest
import structlog

from osdeps.exceptions import ParseError
from osdeps.models import Artifact, ArtifactKind


class FakeParser:
    """In-memory parser: path -> dependency list; unknown paths fail to parse."""

    format_name = "fake"

    def __init__(self, deps_by_path: dict[str, list[str]], broken: set[str] | None = None):
        self.deps_by_path = deps_by_path
        self.broken = broken or set()
        self.calls: list[str] = []
        self.threads: set[int] = set()

    def parse_dependencies(self, path: str) -> list[str]:
        self.calls.append(path)
        self.threads.add(threading.get_ident())
        if path in self.broken or path not in self.deps_by_path:
            raise ParseError(path, "not a recognised binary")
        return list(self.deps_by_path[path])


def make_artifact(path: str, target_os: str = "linux") -> Artifact:
    return Artifact(path=path, kind=ArtifactKind.PYTHON_EXTENSION_SO, os=target_os, arch="x86_64")


@pytest.fixture
def fake_parser_factory():
    """Return a builder: deps mapping -> (factory, list of created parsers)."""

    def build(deps_by_path: dict[str, list[str]], broken: set[str] | None = None):
        created: list[FakeParser] = []
        lock = threading.Lock()

        def factory() -> FakeParser:
            parser = FakeParser(deps_by_path, broken)
            with lock:
                created.append(parser)
            return parser

        return factory, created

    return build


@pytest.fixture
def venv(tmp_path):
    """A minimal POSIX venv layout; returns (env_root, site_packages)."""
    site = tmp_path / "env" / "lib" / "python3.12" / "site-packages"
    site.mkdir(parents=True)
    return tmp_path / "env", site


@pytest.fixture(autouse=True, scope="session")
def _structlog_via_stdlib():
    """Route structlog through stdlib logging so nothing lands on stdout."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()
