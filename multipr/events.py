"""Change notifications for presentation layers.

The bucket model and the orchestrator emit events through a
ChangeNotifier; a UI subscribes instead of reaching into model state.
Events can optionally be appended to a JSONL file for later inspection.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from multipr.constants import EVENT_LOG_BACKUPS, EVENT_LOG_MAX_BYTES
from multipr.logging import get_logger

logger = get_logger(__name__)

EventCallback = Callable[[str, dict[str, Any]], None]


class ChangeNotifier:
    """In-process event fan-out with an optional JSONL event log."""

    def __init__(
        self,
        event_file: Path | str | None = None,
        max_bytes: int = EVENT_LOG_MAX_BYTES,
        backup_count: int = EVENT_LOG_BACKUPS,
    ) -> None:
        """Initialize notifier.

        Args:
            event_file: Optional JSONL file every event is appended to
            max_bytes: Size at which the event log is rolled over
            backup_count: Number of rolled-over files to keep
        """
        self._event_file = Path(event_file) if event_file else None
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._subscribers: list[EventCallback] = []

        if self._event_file is not None:
            self._event_file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def event_file(self) -> Path | None:
        return self._event_file

    def emit(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        """Emit an event to subscribers and the event log.

        Args:
            event_type: Type of event (e.g. 'file_moved', 'run_complete')
            data: Event data dictionary
        """
        event_data: dict[str, Any] = data or {}

        if self._event_file is not None:
            event = {
                "timestamp": datetime.now(UTC).isoformat(),
                "type": str(event_type),
                "data": event_data,
            }
            try:
                self._rollover_if_needed()
                with open(self._event_file, "a") as f:
                    f.write(json.dumps(event, default=str) + "\n")
            except OSError as e:
                logger.error(f"Failed to write event: {e}")

        for callback in list(self._subscribers):
            try:
                callback(str(event_type), event_data)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Subscriber callback error: {e}")

    def _rollover_if_needed(self) -> None:
        """Rotate the event log the way RotatingFileHandler rotates multipr.log."""
        event_file = self._event_file
        if event_file is None or not event_file.exists():
            return
        if event_file.stat().st_size < self.max_bytes:
            return

        for i in range(self.backup_count - 1, 0, -1):
            source = Path(f"{event_file}.{i}")
            if source.exists():
                source.replace(f"{event_file}.{i + 1}")
        if self.backup_count > 0:
            event_file.replace(f"{event_file}.1")
        else:
            event_file.unlink()

    def subscribe(self, callback: EventCallback) -> None:
        """Subscribe to events with a callback.

        Args:
            callback: Function called with (event_type, data) for each event
        """
        self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        """Unsubscribe a previously registered callback."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def get_events(self) -> list[dict[str, Any]]:
        """Read back the events in the current event log file.

        Returns:
            List of event dictionaries, empty if no event log is configured
        """
        events: list[dict[str, Any]] = []
        if self._event_file is None or not self._event_file.exists():
            return events

        with open(self._event_file) as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        return events
