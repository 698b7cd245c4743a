"""Unassigned pool of changed files."""

from __future__ import annotations

from collections.abc import Container, Iterable, Iterator

from multipr.logging import get_logger
from multipr.types import FileRef

logger = get_logger("registry")


class FileRegistry:
    """Changed files not yet assigned to any bucket.

    Entries are keyed by path. The registry never holds a path that a
    bucket owns; BucketStore passes its owned paths on every reload and
    routes all moves through take() and give().
    """

    def __init__(self) -> None:
        self._pool: dict[str, FileRef] = {}

    def load_from_source(self, refs: Iterable[FileRef], assigned: Container[str] = ()) -> int:
        """Replace the pool with freshly reported changes.

        Args:
            refs: Changed files as reported by git
            assigned: Paths currently owned by buckets; these are skipped

        Returns:
            Number of files now in the pool
        """
        pool: dict[str, FileRef] = {}
        skipped = 0
        for ref in refs:
            if ref.path in assigned:
                skipped += 1
                continue
            # First report of a path wins
            pool.setdefault(ref.path, ref)

        self._pool = pool
        logger.debug(f"Loaded {len(pool)} unassigned files ({skipped} already in buckets)")
        return len(pool)

    def take(self, path: str) -> FileRef | None:
        """Remove and return the entry for ``path``, or None if absent."""
        return self._pool.pop(path, None)

    def give(self, ref: FileRef) -> bool:
        """Return a file to the pool.

        Returns:
            False if the path was already present (the existing entry is kept)
        """
        if ref.path in self._pool:
            return False
        self._pool[ref.path] = ref
        return True

    def get(self, path: str) -> FileRef | None:
        return self._pool.get(path)

    def paths(self) -> list[str]:
        return list(self._pool)

    def clear(self) -> None:
        self._pool.clear()

    def __contains__(self, path: object) -> bool:
        return path in self._pool

    def __iter__(self) -> Iterator[FileRef]:
        return iter(list(self._pool.values()))

    def __len__(self) -> int:
        return len(self._pool)
