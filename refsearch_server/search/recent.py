"""
Recent searches: a small, session-owned ring buffer of normalized queries.
"""
import json
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Union

from ..core.config import RECENT_SEARCHES_CAPACITY
from ..core.logger import get_logger

logger = get_logger(__name__)

MIN_CAPACITY = 5
MAX_CAPACITY = 10


class RecentSearches:
    def __init__(self, capacity: int = RECENT_SEARCHES_CAPACITY) -> None:
        if not isinstance(capacity, int) or not MIN_CAPACITY <= capacity <= MAX_CAPACITY:
            raise ValueError(f"capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}, got {capacity!r}")
        self.capacity = capacity
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, query: str, results: Union[int, List[Any], None] = 0) -> Optional[Dict[str, Any]]:
        """
        Record a query, most recent first.

        Args:
            query: Raw query text; lower-cased and stripped before storing
            results: Result count, or the result list itself

        Returns:
            The stored entry, or None when the query was empty
        """
        normalized = (query or "").strip().lower()
        if not normalized:
            return None
        count = len(results) if isinstance(results, list) else int(results or 0)

        for existing in list(self._entries):
            if existing["query"] == normalized:
                self._entries.remove(existing)
        entry = {
            "query": normalized,
            "timestamp": datetime.now().isoformat(),
            "results_count": count,
        }
        self._entries.appendleft(entry)
        return entry

    def items(self) -> List[Dict[str, Any]]:
        return [dict(e) for e in self._entries]

    def queries(self) -> List[str]:
        return [e["query"] for e in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.items(), f, ensure_ascii=False, indent=2)
        return path

    @classmethod
    def load(cls, path: Union[str, Path], capacity: int = RECENT_SEARCHES_CAPACITY) -> "RecentSearches":
        """Restore a buffer from save(); a missing or unreadable file gives an empty buffer."""
        recent = cls(capacity)
        path = Path(path)
        if not path.exists():
            return recent
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read recent searches from {path}: {e}")
            return recent
        if not isinstance(data, list):
            logger.warning(f"Ignoring recent searches file {path}: expected a list")
            return recent

        # Saved newest first; replay oldest first so order is preserved.
        for item in reversed(data[:capacity]):
            if not isinstance(item, dict) or not isinstance(item.get("query"), str):
                continue
            entry = recent.add(item["query"], item.get("results_count") or 0)
            if entry is not None and item.get("timestamp"):
                entry["timestamp"] = str(item["timestamp"])
        return recent
