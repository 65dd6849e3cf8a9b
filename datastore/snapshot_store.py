"""Read-only access to a JSON tree addressed by slash-separated paths."""

from __future__ import annotations

from typing import Any, Optional, Protocol


class SnapshotStore(Protocol):

    def fetch(self, path: str) -> Optional[Any]:
        """Return the JSON value stored at ``path`` or ``None`` when absent."""
        ...


def split_path(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


def join_path(*parts: str) -> str:
    segments: list[str] = []
    for part in parts:
        segments.extend(split_path(part))
    return "/" + "/".join(segments)
