"""Parser for Mach-O binaries (macOS), including universal (fat) files."""

from __future__ import annotations

from macholib.mach_o import (
    LC_LAZY_LOAD_DYLIB,
    LC_LOAD_DYLIB,
    LC_LOAD_UPWARD_DYLIB,
    LC_LOAD_WEAK_DYLIB,
    LC_REEXPORT_DYLIB,
)
from macholib.MachO import MachO

from osdeps.exceptions import ParseError
from osdeps.parsers.base import decode_name

_DYLIB_COMMANDS = frozenset(
    {
        LC_LOAD_DYLIB,
        LC_LOAD_WEAK_DYLIB,
        LC_REEXPORT_DYLIB,
        LC_LAZY_LOAD_DYLIB,
        LC_LOAD_UPWARD_DYLIB,
    }
)


class MachOParser:
    format_name = "mach-o"

    def parse_dependencies(self, path: str) -> list[str]:
        """Return the install names of every dylib load command in *path*.

        For fat binaries the names from all architecture slices are merged,
        keeping first-seen order.
        """
        try:
            macho = MachO(path)
        except Exception as e:
            # macholib raises ValueError for bad magic, struct.error when truncated
            raise ParseError(path, e) from e

        deps: list[str] = []
        seen: set[str] = set()
        for header in macho.headers:
            for load_cmd, _cmd, data in header.commands:
                if load_cmd.cmd not in _DYLIB_COMMANDS:
                    continue
                name = decode_name(data)
                if name and name not in seen:
                    seen.add(name)
                    deps.append(name)
        return deps
