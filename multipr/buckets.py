"""Bucket store: bucket CRUD, file moves and dependency edges."""

from __future__ import annotations

from collections.abc import Iterable

from multipr.constants import POOL, Event, MoveOutcome
from multipr.events import ChangeNotifier
from multipr.exceptions import (
    DuplicateNameError,
    UnknownBucketError,
    UnknownFileError,
    ValidationError,
)
from multipr.logging import get_logger
from multipr.registry import FileRegistry
from multipr.resolver import DependencyResolver
from multipr.types import Bucket, DependencyUpdate, FileRef, Resolution

logger = get_logger("buckets")


class BucketStore:
    """Owns all buckets and keeps every changed path in exactly one place.

    A path lives either in the registry pool or in a single bucket. The
    ``_owners`` index maps each bucket-held path to its bucket name so that
    moves and reloads never have to scan every bucket. All mutating
    operations validate first and then mutate, so a failed call leaves the
    store untouched.
    """

    def __init__(
        self,
        registry: FileRegistry | None = None,
        resolver: DependencyResolver | None = None,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        self.registry = registry if registry is not None else FileRegistry()
        self.resolver = resolver if resolver is not None else DependencyResolver()
        self.notifier = notifier
        self._buckets: dict[str, Bucket] = {}
        self._owners: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, name: str) -> Bucket:
        try:
            return self._buckets[name]
        except KeyError:
            raise UnknownBucketError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def list(self) -> list[Bucket]:
        """Buckets in insertion order."""
        return list(self._buckets.values())

    def list_ordered(self) -> list[Bucket]:
        """Buckets by resolved order; unordered buckets follow in insertion order."""
        indexed = list(enumerate(self._buckets.values()))
        indexed.sort(key=lambda item: (item[1].order is None, item[1].order or 0, item[0]))
        return [bucket for _, bucket in indexed]

    def eligible(self) -> list[Bucket]:
        """Ordered buckets that hold at least one file."""
        return [b for b in self.list_ordered() if not b.is_empty()]

    def locate(self, path: str) -> str | None:
        """Return the owning bucket name, POOL, or None if the path is unknown."""
        if path in self._owners:
            return self._owners[path]
        if path in self.registry:
            return POOL
        return None

    def dependency_of(self, name: str) -> str | None:
        return self.get(name).depends_on

    # ------------------------------------------------------------------
    # Bucket lifecycle
    # ------------------------------------------------------------------

    def create(self, name: str, title: str, description: str = "") -> Bucket:
        """Create an empty bucket.

        Raises:
            ValidationError: If name or title is empty
            DuplicateNameError: If a bucket with this exact name exists
        """
        name = (name or "").strip()
        title = (title or "").strip()
        if not name:
            raise ValidationError("Bucket name cannot be empty", field="name")
        if not title:
            raise ValidationError("PR title cannot be empty", field="title")
        if name in self._buckets:
            raise DuplicateNameError(name)

        bucket = Bucket(name=name, title=title, description=(description or "").strip())
        self._buckets[name] = bucket
        self._reorder()
        logger.info(f"Created bucket {name}")
        self._emit(Event.BUCKET_CREATED, {"bucket": name})
        return bucket

    def delete(self, name: str) -> list[FileRef]:
        """Delete a bucket and return its files to the pool.

        Buckets that depended on it keep the dangling edge, which the
        resolver and orchestrator treat as "no dependency".

        Returns:
            The files that were returned to the pool
        """
        bucket = self.get(name)
        returned = list(bucket.files.values())
        for ref in returned:
            del self._owners[ref.path]
            self.registry.give(ref)

        del self._buckets[name]
        self._reorder()
        logger.info(f"Deleted bucket {name}, returned {len(returned)} files to pool")
        self._emit(Event.BUCKET_DELETED, {"bucket": name, "returned": [r.path for r in returned]})
        return returned

    def rename(self, old: str, new: str) -> Bucket:
        """Rename a bucket, rewriting dependency edges that point at it."""
        bucket = self.get(old)
        new = (new or "").strip()
        if not new:
            raise ValidationError("Bucket name cannot be empty", field="name")
        if new == old:
            return bucket
        if new in self._buckets:
            raise DuplicateNameError(new)

        self._buckets = {(new if key == old else key): value for key, value in self._buckets.items()}
        bucket.name = new
        for path in bucket.files:
            self._owners[path] = new
        for other in self._buckets.values():
            if other.depends_on == old:
                other.depends_on = new

        logger.info(f"Renamed bucket {old} to {new}")
        self._emit(Event.BUCKET_RENAMED, {"old": old, "new": new})
        return bucket

    def clear(self) -> None:
        """Drop every bucket after a run consumed them.

        Files are not returned to the pool; the caller reloads the pool
        from the current working tree state.
        """
        self._buckets.clear()
        self._owners.clear()
        logger.info("Cleared all buckets")
        self._emit(Event.BUCKETS_CLEARED, {})

    def restore(self, buckets: Iterable[Bucket]) -> None:
        """Replace all buckets with previously saved ones.

        Raises:
            DuplicateNameError: If two buckets share a name
            ValidationError: If a path is claimed by more than one bucket
        """
        restored: dict[str, Bucket] = {}
        owners: dict[str, str] = {}
        for bucket in buckets:
            if bucket.name in restored:
                raise DuplicateNameError(bucket.name)
            for path in bucket.files:
                if path in owners:
                    raise ValidationError(
                        f"File '{path}' is in both '{owners[path]}' and '{bucket.name}'",
                        field="files",
                    )
                owners[path] = bucket.name
            restored[bucket.name] = bucket

        self._buckets = restored
        self._owners = owners
        for path in owners:
            self.registry.take(path)
        self._reorder()

    def reload(self, refs: Iterable[FileRef]) -> int:
        """Reload the pool, skipping paths that buckets already own."""
        count = self.registry.load_from_source(refs, assigned=self._owners)
        self._emit(Event.POOL_LOADED, {"count": count})
        return count

    # ------------------------------------------------------------------
    # File moves
    # ------------------------------------------------------------------

    def move_file_to_bucket(self, path: str, bucket_name: str) -> MoveOutcome:
        """Move a file from wherever it lives into ``bucket_name``.

        Raises:
            UnknownBucketError: If the target bucket does not exist
            UnknownFileError: If the path is not a known changed file
        """
        target = self.get(bucket_name)
        source = self.locate(path)
        if source is None:
            raise UnknownFileError(path)
        if source == bucket_name:
            return MoveOutcome.ALREADY_PRESENT

        ref = self._detach(path, source)
        target.files[path] = ref
        self._owners[path] = bucket_name

        self._emit(Event.FILE_MOVED, {"path": path, "from": source, "to": bucket_name})
        return MoveOutcome.MOVED

    def move_file_to_pool(self, path: str) -> MoveOutcome:
        """Move a file out of its bucket back to the pool."""
        source = self.locate(path)
        if source is None:
            raise UnknownFileError(path)
        if source == POOL:
            return MoveOutcome.ALREADY_PRESENT

        ref = self._detach(path, source)
        self.registry.give(ref)

        self._emit(Event.FILE_MOVED, {"path": path, "from": source, "to": POOL})
        return MoveOutcome.MOVED

    def _detach(self, path: str, source: str) -> FileRef:
        if source == POOL:
            ref = self.registry.take(path)
            if ref is None:
                raise UnknownFileError(path)
            return ref
        del self._owners[path]
        return self._buckets[source].files.pop(path)

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def set_dependency(self, name: str, depends_on: str | None) -> DependencyUpdate:
        """Set or clear the bucket ``name`` depends on.

        A cycle is not an error: the resolver drops the new edge and the
        returned update reports ``applied=False`` with a warning.

        Raises:
            UnknownBucketError: If either bucket does not exist
            ValidationError: If a bucket is made to depend on itself
        """
        bucket = self.get(name)
        if depends_on is not None:
            self.get(depends_on)
            if depends_on == name:
                raise ValidationError(f"Bucket '{name}' cannot depend on itself", field="depends_on")

        bucket.depends_on = depends_on
        resolution = self._reorder(prefer_break=name)
        applied = bucket.depends_on == depends_on

        update = DependencyUpdate(
            bucket=name,
            depends_on=depends_on,
            applied=applied,
            broken=resolution.broken,
        )
        if applied:
            logger.info(f"Bucket {name} now depends on {depends_on or 'nothing'}")
        self._emit(
            Event.DEPENDENCY_CHANGED,
            {"bucket": name, "depends_on": depends_on, "applied": applied},
        )
        return update

    def resolve(self) -> Resolution:
        """Recompute processing order for the current edge set."""
        return self._reorder()

    def _reorder(self, prefer_break: str | None = None) -> Resolution:
        resolution = self.resolver.resolve(self.list(), prefer_break=prefer_break)
        for edge in resolution.broken:
            self._emit(
                Event.CYCLE_BROKEN,
                {"bucket": edge.bucket, "depends_on": edge.depends_on, "cycle": list(edge.cycle)},
            )
        return resolution

    def _emit(self, event: Event, data: dict) -> None:
        if self.notifier is not None:
            self.notifier.emit(event, data)
