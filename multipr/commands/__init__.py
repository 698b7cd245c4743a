"""multipr CLI commands."""

from multipr.commands.assign import assign, unassign
from multipr.commands.bucket import bucket_group
from multipr.commands.init import init
from multipr.commands.process import process
from multipr.commands.refresh import refresh
from multipr.commands.status import status

__all__ = [
    "assign",
    "bucket_group",
    "init",
    "process",
    "refresh",
    "status",
    "unassign",
]
