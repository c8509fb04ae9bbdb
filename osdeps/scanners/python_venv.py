"""Scanner for compiled extension modules inside a Python virtualenv."""

from __future__ import annotations

import os
import platform
from pathlib import Path

import structlog

from osdeps.exceptions import ScanError
from osdeps.models import Artifact, ArtifactKind

log = structlog.get_logger("osdeps.scanner")

# Extension suffixes per target OS. Python extensions on macOS are usually .so too.
_SUFFIXES: dict[str, tuple[str, ...]] = {
    "linux": (".so",),
    "darwin": (".so", ".dylib"),
}


def find_site_packages(env_path: Path) -> list[Path]:
    """Locate site-packages directories inside a venv.

    Search order:
      1. lib/python*/site-packages  (POSIX venv)
      2. Lib/python*/site-packages, Lib/site-packages  (Windows-style layout)
      3. site-packages at the env root
    """
    found: list[Path] = []
    for lib_name in ("lib", "Lib"):
        lib_dir = env_path / lib_name
        if not lib_dir.is_dir():
            continue
        try:
            entries = sorted(lib_dir.iterdir())
        except OSError as e:
            raise ScanError(f"cannot read {lib_dir}: {e}") from e
        for entry in entries:
            if entry.is_dir() and entry.name.startswith("python"):
                candidate = entry / "site-packages"
                if candidate.is_dir():
                    found.append(candidate)
        if (lib_dir / "site-packages").is_dir():
            found.append(lib_dir / "site-packages")

    top = env_path / "site-packages"
    if top.is_dir():
        found.append(top)

    # lib and Lib are the same directory on case-insensitive filesystems
    unique: list[Path] = []
    seen: set[Path] = set()
    for path in found:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique


class PythonVenvScanner:
    """Find compiled extension modules in a Python venv's site-packages."""

    env_type = "python-venv"

    def __init__(self, target_os: str, arch: str | None = None) -> None:
        if target_os not in _SUFFIXES:
            raise ScanError(
                f"unsupported target OS for python-venv scan: {target_os!r} "
                f"(supported: {sorted(_SUFFIXES)})"
            )
        self.target_os = target_os
        self.arch = arch or platform.machine()
        self._suffixes = _SUFFIXES[target_os]

    def scan(self, env_path: str) -> list[Artifact]:
        root = Path(env_path)
        if not root.is_dir():
            raise ScanError(f"environment path not found or not a directory: {env_path}")

        site_dirs = find_site_packages(root)
        if not site_dirs:
            raise ScanError(f"no site-packages directory found in {env_path}")
        log.info("scanner.site_packages", paths=[str(p) for p in site_dirs])

        artifacts: list[Artifact] = []
        seen: set[str] = set()
        for site_dir in site_dirs:
            log.debug("scanner.walk", path=str(site_dir))
            for path in self._walk(site_dir):
                abs_path = os.path.abspath(path)
                if abs_path in seen:
                    continue
                seen.add(abs_path)
                artifacts.append(
                    Artifact(
                        path=abs_path,
                        kind=ArtifactKind.PYTHON_EXTENSION_SO,
                        os=self.target_os,
                        arch=self.arch,
                    )
                )

        log.info("scanner.done", artifacts=len(artifacts))
        return artifacts

    def _walk(self, site_dir: Path) -> list[str]:
        """Regular files under *site_dir* with a target suffix, in sorted walk order."""

        def on_error(err: OSError) -> None:
            log.warning("scanner.walk_error", path=err.filename, error=str(err))

        hits: list[str] = []
        for dirpath, dirnames, filenames in os.walk(site_dir, onerror=on_error):
            dirnames.sort()
            for name in sorted(filenames):
                if not name.endswith(self._suffixes):
                    continue
                full = os.path.join(dirpath, name)
                try:
                    if os.path.islink(full) or not os.path.isfile(full):
                        continue
                except OSError as e:
                    log.warning("scanner.stat_error", path=full, error=str(e))
                    continue
                hits.append(full)
        return hits
