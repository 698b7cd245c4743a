"""multipr - split a working tree into stacked pull requests.

Group changed files into buckets and turn each bucket into its own
branch and pull request.
"""

__version__ = "0.1.0"

from multipr.buckets import BucketStore
from multipr.constants import ChangeKind, HostKind, PipelineStep
from multipr.exceptions import MultiPRError
from multipr.registry import FileRegistry
from multipr.resolver import DependencyResolver
from multipr.types import Bucket, FileRef, ProcessingResult

__all__ = [
    "__version__",
    "Bucket",
    "BucketStore",
    "ChangeKind",
    "DependencyResolver",
    "FileRef",
    "FileRegistry",
    "HostKind",
    "MultiPRError",
    "PipelineStep",
    "ProcessingResult",
]
