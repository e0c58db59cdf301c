"""Negative cache of directories whose permissions cannot be read."""

from __future__ import annotations

from pathlib import Path


def path_key(path: Path) -> int:
    return hash(str(path.absolute()))


class NegativeAccessCache:
    """
    Append-only record of directories known to deny all access.
    Entries are never evicted; a hit only ever short-circuits to "denied".
    """

    def __init__(self) -> None:
        self._denied: dict[int, bool] = {}

    def lookup(self, path: Path) -> bool | None:
        return self._denied.get(path_key(path))

    def mark_denied(self, path: Path) -> None:
        self._denied[path_key(path)] = True

    def __contains__(self, path: object) -> bool:
        return isinstance(path, Path) and path_key(path) in self._denied

    def __len__(self) -> int:
        return len(self._denied)
