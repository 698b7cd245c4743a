"""Shared fixtures for unit tests."""

import pytest

from multipr.buckets import BucketStore
from multipr.events import ChangeNotifier
from tests.helpers.factories import POOL_PATHS, make_store


@pytest.fixture
def notifier() -> ChangeNotifier:
    """In-memory notifier with no event log."""
    return ChangeNotifier()


@pytest.fixture
def store(notifier: ChangeNotifier) -> BucketStore:
    """BucketStore with five unassigned files and no buckets."""
    return make_store(POOL_PATHS, notifier=notifier)
