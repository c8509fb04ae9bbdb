"""Parser for ELF shared objects (Linux)."""

from __future__ import annotations

from elftools.elf.dynamic import DynamicSection, DynamicSegment
from elftools.elf.elffile import ELFFile

from osdeps.exceptions import ParseError
from osdeps.parsers.base import decode_name


class ElfParser:
    format_name = "elf"

    def parse_dependencies(self, path: str) -> list[str]:
        """Return the DT_NEEDED entries of *path*, in file order."""
        try:
            with open(path, "rb") as fh:
                elf = ELFFile(fh)
                dynamic = _find_dynamic(elf)
                if dynamic is None:
                    # Statically linked or a relocatable object
                    return []
                # pyelftools hands back latin-1 strings; recover the raw bytes
                return [
                    decode_name(tag.needed.encode("latin-1"))
                    for tag in dynamic.iter_tags("DT_NEEDED")
                ]
        except Exception as e:
            # ELFError, OSError, and assorted construct errors on truncated input
            raise ParseError(path, e) from e


def _find_dynamic(elf: ELFFile) -> DynamicSection | DynamicSegment | None:
    for section in elf.iter_sections():
        if isinstance(section, DynamicSection):
            return section
    # Section headers may be stripped; the PT_DYNAMIC segment is authoritative
    for segment in elf.iter_segments():
        if isinstance(segment, DynamicSegment):
            return segment
    return None
