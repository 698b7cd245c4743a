"""Bucket state persistence between CLI invocations."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from multipr.constants import STATE_FILE, ChangeKind
from multipr.exceptions import StateError
from multipr.logging import get_logger
from multipr.types import Bucket, FileRef

logger = get_logger("state")

STATE_VERSION = 1


class StateStore:
    """Save and load buckets as JSON.

    Only bucket definitions and their file assignments are stored. The
    unassigned pool is never persisted; it is rebuilt from ``git status``
    on every load.
    """

    def __init__(self, state_file: str | Path | None = None) -> None:
        """Initialize state store.

        Args:
            state_file: Path to the state file (defaults to .multipr/state.json)
        """
        self.state_file = Path(state_file or STATE_FILE)

    def exists(self) -> bool:
        return self.state_file.exists()

    def load(self) -> list[Bucket]:
        """Load buckets from the state file.

        Returns:
            Buckets in their saved order; empty if there is no state file

        Raises:
            StateError: If the file cannot be parsed
        """
        if not self.state_file.exists():
            return []

        try:
            with open(self.state_file) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"Failed to parse state file: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("buckets", []), list):
            raise StateError(f"Unexpected state file layout: {self.state_file}")

        try:
            buckets = [_bucket_from_dict(entry) for entry in data.get("buckets", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise StateError(f"Invalid bucket entry in state file: {e}") from e

        logger.debug(f"Loaded {len(buckets)} buckets from {self.state_file}")
        return buckets

    def save(self, buckets: list[Bucket]) -> None:
        """Write buckets to the state file."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": STATE_VERSION,
            "saved_at": datetime.now().isoformat(),
            "buckets": [_bucket_to_dict(bucket) for bucket in buckets],
        }
        with open(self.state_file, "w") as f:
            json.dump(data, f, indent=2, default=str)
        logger.debug(f"Saved {len(buckets)} buckets to {self.state_file}")

    def delete(self) -> None:
        if self.state_file.exists():
            self.state_file.unlink()


def _bucket_to_dict(bucket: Bucket) -> dict[str, Any]:
    return {
        "name": bucket.name,
        "title": bucket.title,
        "description": bucket.description,
        "depends_on": bucket.depends_on,
        "branch_name": bucket.branch_name,
        "files": [
            {"path": ref.path, "kind": str(ref.kind), "original_path": ref.original_path}
            for ref in bucket.files.values()
        ],
    }


def _bucket_from_dict(entry: dict[str, Any]) -> Bucket:
    files: dict[str, FileRef] = {}
    for item in entry.get("files", []):
        ref = FileRef(
            path=item["path"],
            kind=ChangeKind(item.get("kind", ChangeKind.MODIFIED)),
            original_path=item.get("original_path"),
        )
        files[ref.path] = ref

    return Bucket(
        name=entry["name"],
        title=entry["title"],
        description=entry.get("description", ""),
        files=files,
        depends_on=entry.get("depends_on"),
        branch_name=entry.get("branch_name"),
    )
