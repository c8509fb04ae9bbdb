"""Binary-format parsers, selected by target OS."""

from __future__ import annotations

from osdeps.exceptions import UnsupportedTargetError
from osdeps.parsers.base import ArtifactParser
from osdeps.parsers.elf import ElfParser
from osdeps.parsers.macho import MachOParser

PARSERS: dict[str, type] = {
    "linux": ElfParser,
    "darwin": MachOParser,
}


def create_parser(target_os: str) -> ArtifactParser:
    """Return a new parser instance for *target_os*."""
    try:
        return PARSERS[target_os]()
    except KeyError:
        raise UnsupportedTargetError(
            f"no artifact parser for OS {target_os!r} (supported: {sorted(PARSERS)})"
        ) from None


__all__ = ["ArtifactParser", "ElfParser", "MachOParser", "PARSERS", "create_parser"]
