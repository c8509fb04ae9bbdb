"""Scan configuration — per-OS ignore lists of base-image libraries.

The configuration is an immutable value built once at startup and passed to
every component; nothing mutates it during a run.

Config file format (TOML)::

    [ignore]
    replace = false               # true: replace the defaults instead of extending
    linux = ["libz.so.1"]
    darwin = ["/usr/lib/libz.1.dylib"]
"""

from __future__ import annotations

import sys
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from osdeps.exceptions import ConfigError

# Not exhaustive: glibc, the compiler runtime and the dynamic loader, which every
# Linux base image ships.
LINUX_BASE_LIBRARIES = frozenset(
    {
        "linux-vdso.so.1",
        "libc.so.6",
        "libm.so.6",
        "libdl.so.2",
        "libpthread.so.0",
        "librt.so.1",
        "libutil.so.1",
        "ld-linux-x86-64.so.2",
        "ld-linux-aarch64.so.1",
        "libgcc_s.so.1",
        "libstdc++.so.6",
    }
)

DARWIN_BASE_LIBRARIES = frozenset(
    {
        "/usr/lib/libSystem.B.dylib",
        "/usr/lib/libobjc.A.dylib",
        "/usr/lib/libc++.1.dylib",
    }
)


def _default_ignore_lists() -> dict[str, frozenset[str]]:
    return {"linux": LINUX_BASE_LIBRARIES, "darwin": DARWIN_BASE_LIBRARIES}


class ScanConfig(BaseModel):
    """Immutable scan configuration."""

    model_config = ConfigDict(frozen=True)

    ignore_lists: Mapping[str, frozenset[str]] = Field(
        default_factory=_default_ignore_lists, validate_default=True
    )

    @field_validator("ignore_lists", mode="after")
    @classmethod
    def freeze_ignore_lists(cls, v: Mapping[str, frozenset[str]]) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(dict(v))

    def ignore_list_for(self, target_os: str) -> frozenset[str] | None:
        """Return the ignore list for *target_os*, or None if none is defined."""
        return self.ignore_lists.get(target_os)

    def without_filtering(self, target_os: str) -> ScanConfig:
        """Copy of this config whose *target_os* list is empty (no filtering)."""
        lists = dict(self.ignore_lists)
        lists[target_os] = frozenset()
        return ScanConfig(ignore_lists=lists)

    def with_ignores(self, target_os: str, names: Iterable[str]) -> ScanConfig:
        """Copy of this config with *names* added to the *target_os* list."""
        lists = dict(self.ignore_lists)
        lists[target_os] = lists.get(target_os, frozenset()) | frozenset(names)
        return ScanConfig(ignore_lists=lists)


def default_config() -> ScanConfig:
    return ScanConfig()


def load_config(path: str | Path | None = None) -> ScanConfig:
    """Build the configuration, optionally merging a TOML file over the defaults.

    Raises ConfigError if the file cannot be read or has the wrong shape.
    """
    config = default_config()
    if path is None:
        return config

    try:
        data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e

    section = data.get("ignore", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[ignore] in {path} must be a table")

    replace = bool(section.get("replace", False))
    lists = {k: v for k, v in section.items() if k != "replace"}
    for os_tag, names in lists.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ConfigError(f"ignore.{os_tag} in {path} must be a list of strings")

    if replace:
        try:
            return ScanConfig(ignore_lists=lists)
        except ValidationError as e:
            raise ConfigError(f"invalid config {path}: {e}") from e

    for os_tag, names in lists.items():
        config = config.with_ignores(os_tag, names)
    return config
