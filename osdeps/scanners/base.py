"""Artifact scanner capability interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from osdeps.models import Artifact


@runtime_checkable
class Scanner(Protocol):
    """Interface that every environment scanner must satisfy.

    ``scan`` raises :class:`osdeps.exceptions.ScanError` when the environment
    cannot be enumerated at all; unreadable individual entries are logged and
    skipped.
    """

    env_type: str

    def scan(self, env_path: str) -> list[Artifact]: ...
