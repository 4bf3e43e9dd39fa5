from __future__ import annotations

from collections import OrderedDict

MAX_ENTRIES = 100


def normalize_key(text: str) -> str:
    return text.strip().lower()


class ResultCache:
    """Bounded cache evicting the oldest inserted key. No TTL, no LRU reordering."""

    def __init__(self, max_entries: int = MAX_ENTRIES):
        self.max = max_entries
        self._data: OrderedDict[str, str] = OrderedDict()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        # Overwrite keeps the original insertion position.
        self._data[key] = value
        while len(self._data) > self.max:
            self._data.popitem(last=False)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
