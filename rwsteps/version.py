"""rwsteps/version.py — Package version, read by the CLI, the server and packaging."""

from __future__ import annotations

from typing import NamedTuple


class VersionInfo(NamedTuple):
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return ".".join(str(part) for part in self)


VERSION_INFO = VersionInfo(0, 2, 0)

__version__: str = str(VERSION_INFO)

# Reported by GET /health
FRAMEWORK_NAME = "rwsteps"
