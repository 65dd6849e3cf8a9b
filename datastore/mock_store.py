from __future__ import annotations
import copy
import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from datastore.snapshot_store import split_path


class MockSnapshotStore:
    """In-memory JSON tree standing in for the hosted realtime database."""

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        persistence_path: Optional[Path] = None,
    ) -> None:
        self._root: Dict[str, Any] = copy.deepcopy(data) if data else {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def fetch(self, path: str) -> Optional[Any]:
        with self._lock:
            node: Any = self._root
            for segment in split_path(path):
                if isinstance(node, dict):
                    node = node.get(segment)
                elif isinstance(node, list) and segment.isdigit():
                    index = int(segment)
                    node = node[index] if index < len(node) else None
                else:
                    return None
                if node is None:
                    return None
            if node == {}:
                return None
            return copy.deepcopy(node)

    def put(self, path: str, value: Any) -> None:
        """Replace the value at ``path``; used to seed local runs and tests."""
        segments = split_path(path)
        with self._lock:
            if not segments:
                self._root = copy.deepcopy(value) if isinstance(value, dict) else {}
                self._persist()
                return
            node = self._root
            for segment in segments[:-1]:
                child = node.get(segment)
                if not isinstance(child, dict):
                    child = {}
                    node[segment] = child
                node = child
            if value is None:
                node.pop(segments[-1], None)
            else:
                node[segments[-1]] = copy.deepcopy(value)
            self._persist()

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        self.persistence_path.write_text(json.dumps(self._root, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            data = {}

        if isinstance(data, dict):
            self._root = data
