"""multipr constants and enumerations."""

from enum import Enum, StrEnum

# Workspace layout
STATE_DIR = ".multipr"
CONFIG_FILE = f"{STATE_DIR}/config.yaml"
STATE_FILE = f"{STATE_DIR}/state.json"
LOGS_DIR = f"{STATE_DIR}/logs"
EVENTS_FILE = f"{STATE_DIR}/events.jsonl"
EVENT_LOG_MAX_BYTES = 1024 * 1024
EVENT_LOG_BACKUPS = 2

# Defaults
DEFAULT_BASE_BRANCH = "main"
DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH_PREFIX = "feature/"
DEFAULT_MAX_SLUG_LENGTH = 40
BRANCH_SUFFIX_DIGITS = 6

# Pool pseudo-container name returned by BucketStore.locate()
POOL = "<unassigned>"


class ChangeKind(StrEnum):
    """Kind of change git reports for a path."""

    MODIFIED = "Modified"
    ADDED = "Added"
    DELETED = "Deleted"
    RENAMED = "Renamed"
    COPIED = "Copied"
    UNTRACKED = "Untracked"

    @classmethod
    def from_porcelain(cls, code: str) -> "ChangeKind":
        """Map a two-character porcelain XY code to a change kind."""
        if code == "??":
            return cls.UNTRACKED
        if "D" in code:
            return cls.DELETED
        if "R" in code:
            return cls.RENAMED
        if "C" in code:
            return cls.COPIED
        if "A" in code:
            return cls.ADDED
        return cls.MODIFIED


class HostKind(StrEnum):
    """Hosting service behind the repository remote."""

    GITHUB = "github"
    BITBUCKET = "bitbucket"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return {"github": "GitHub", "bitbucket": "Bitbucket"}.get(self.value, "repository")


class PipelineStep(StrEnum):
    """Steps of the per-bucket pipeline, in execution order."""

    BRANCH = "branch"
    STAGE = "stage"
    COMMIT = "commit"
    PUSH = "push"
    REQUEST = "request"


class MoveOutcome(Enum):
    """Result of a file move between containers."""

    MOVED = "moved"
    ALREADY_PRESENT = "already_present"


class Event(StrEnum):
    """Change notifications emitted by the bucket model and orchestrator."""

    POOL_LOADED = "pool_loaded"
    BUCKET_CREATED = "bucket_created"
    BUCKET_DELETED = "bucket_deleted"
    BUCKET_RENAMED = "bucket_renamed"
    BUCKETS_CLEARED = "buckets_cleared"
    FILE_MOVED = "file_moved"
    DEPENDENCY_CHANGED = "dependency_changed"
    CYCLE_BROKEN = "cycle_broken"
    STEP_STARTED = "step_started"
    BUCKET_PROCESSED = "bucket_processed"
    RUN_COMPLETE = "run_complete"
