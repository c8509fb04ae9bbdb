"""Artifact parser capability interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ArtifactParser(Protocol):
    """Interface that every binary-format parser must satisfy.

    ``parse_dependencies`` returns the ordered dependency references recorded
    in the binary's dynamic-linking metadata. A binary with no dynamic section
    yields ``[]``; any other failure raises :class:`osdeps.exceptions.ParseError`.
    """

    format_name: str

    def parse_dependencies(self, path: str) -> list[str]: ...


def decode_name(raw: bytes) -> str:
    """Decode a library name stored in a binary as UTF-8, replacing invalid bytes."""
    return raw.rstrip(b"\x00").decode("utf-8", errors="replace")
