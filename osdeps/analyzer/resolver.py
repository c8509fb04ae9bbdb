"""Dependency resolver: raw references for one artifact, symbolic ones resolved.

A symbolic reference defers its location to the runtime loader
(``@rpath/libfoo.dylib``). It is resolved by probing sibling directories for a
file of that name that the same parser accepts. Search order:

  1. the artifact's own directory
  2. for ``@rpath/`` only: every other known artifact's directory, in scan order

The first parseable candidate wins. If further directories also hold a
parseable candidate, the reference is recorded as ambiguous. A reference with
no parseable candidate is kept verbatim.
"""

from __future__ import annotations

import os
from typing import Iterable

import structlog

from osdeps.exceptions import ParseError
from osdeps.models import Artifact
from osdeps.parsers.base import ArtifactParser

log = structlog.get_logger("osdeps.analyzer")

RPATH_PREFIX = "@rpath/"
LOADER_PATH_PREFIX = "@loader_path/"
SYMBOLIC_PREFIXES = (RPATH_PREFIX, LOADER_PATH_PREFIX)


def is_symbolic(reference: str) -> bool:
    return reference.startswith(SYMBOLIC_PREFIXES)


def _unique_dirs(paths: Iterable[str]) -> list[str]:
    dirs: list[str] = []
    seen: set[str] = set()
    for path in paths:
        d = os.path.dirname(path)
        if d not in seen:
            seen.add(d)
            dirs.append(d)
    return dirs


class DependencyResolver:
    """Resolve the dependencies of artifacts with a single parser instance.

    Not thread-safe: each worker owns one resolver (and its parse cache).
    """

    def __init__(self, parser: ArtifactParser, known_artifact_paths: Iterable[str]) -> None:
        self._parser = parser
        self._known_dirs = _unique_dirs(known_artifact_paths)
        self._parse_cache: dict[str, bool] = {}
        # symbolic reference -> (chosen, *alternatives)
        self.ambiguous: dict[str, tuple[str, ...]] = {}

    def resolve(self, artifact: Artifact) -> set[str]:
        """Return the resolved dependency set of *artifact*.

        Raises ParseError if the artifact itself cannot be parsed.
        """
        raw = self._parser.parse_dependencies(artifact.path)
        log.debug("resolver.parsed", path=artifact.path, references=raw)

        resolved: set[str] = set()
        for ref in raw:
            if not ref:
                continue
            if is_symbolic(ref):
                resolved.add(self.resolve_symbolic(ref, artifact.path))
            else:
                resolved.add(ref)
        return resolved

    def resolve_symbolic(self, reference: str, artifact_path: str) -> str:
        """Resolve one symbolic *reference* seen in *artifact_path*.

        Returns the absolute path of the first parseable candidate, or the
        reference unchanged when none exists.
        """
        own_dir = os.path.dirname(artifact_path)
        if reference.startswith(LOADER_PATH_PREFIX):
            name = reference[len(LOADER_PATH_PREFIX):]
            dirs = [own_dir]
        else:
            name = reference[len(RPATH_PREFIX):]
            dirs = [own_dir] + [d for d in self._known_dirs if d != own_dir]

        if not name:
            return reference

        hits = [
            candidate
            for candidate in (os.path.normpath(os.path.join(d, name)) for d in dirs)
            if self._is_parseable(candidate)
        ]
        if not hits:
            log.debug("resolver.unresolved", reference=reference, artifact=artifact_path)
            return reference

        # Distinct directories can still normalise to the same file
        hits = list(dict.fromkeys(hits))
        if len(hits) > 1:
            log.warning(
                "resolver.ambiguous_reference",
                reference=reference,
                artifact=artifact_path,
                chosen=hits[0],
                alternatives=hits[1:],
            )
            self.ambiguous[reference] = tuple(hits)
        return hits[0]

    def _is_parseable(self, candidate: str) -> bool:
        cached = self._parse_cache.get(candidate)
        if cached is not None:
            return cached
        try:
            self._parser.parse_dependencies(candidate)
            ok = True
        except ParseError:
            ok = False
        except Exception:
            log.debug("resolver.candidate_check_failed", candidate=candidate, exc_info=True)
            ok = False
        self._parse_cache[candidate] = ok
        return ok
