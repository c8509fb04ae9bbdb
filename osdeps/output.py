"""Output formatting for the final dependency list."""

from __future__ import annotations

import json
from typing import Sequence

from osdeps.exceptions import OutputFormatError

FORMATS = ("list", "json")


def format_dependencies(dependencies: Sequence[str] | None, fmt: str) -> str:
    """Render *dependencies* as ``list`` (one per line) or ``json`` (array).

    An empty input gives ``""`` for list and ``[]`` for json, never ``null``.
    """
    deps = list(dependencies or [])
    kind = fmt.lower()
    if kind == "list":
        return "\n".join(deps)
    if kind == "json":
        return json.dumps(deps, indent=2)
    raise OutputFormatError(f"unsupported output format: {fmt!r} (supported: {', '.join(FORMATS)})")
