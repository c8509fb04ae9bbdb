"""Environment scanners, selected by environment type."""

from __future__ import annotations

from osdeps.exceptions import UnsupportedTargetError
from osdeps.scanners.base import Scanner
from osdeps.scanners.python_venv import PythonVenvScanner, find_site_packages

SCANNERS: dict[str, type] = {
    "python-venv": PythonVenvScanner,
}


def create_scanner(env_type: str, target_os: str) -> Scanner:
    """Return a scanner for *env_type* looking for *target_os* artifacts."""
    try:
        scanner_cls = SCANNERS[env_type]
    except KeyError:
        raise UnsupportedTargetError(
            f"unsupported environment type {env_type!r} (supported: {sorted(SCANNERS)})"
        ) from None
    return scanner_cls(target_os)


__all__ = ["PythonVenvScanner", "SCANNERS", "Scanner", "create_scanner", "find_site_packages"]
