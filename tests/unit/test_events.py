"""Tests for multipr.events -- ChangeNotifier."""

from pathlib import Path

from multipr.constants import Event
from multipr.events import ChangeNotifier


class TestChangeNotifier:
    """Tests for event fan-out and the JSONL log."""

    def test_subscribers_receive_events(self) -> None:
        notifier = ChangeNotifier()
        received: list[tuple[str, dict]] = []
        notifier.subscribe(lambda kind, data: received.append((kind, data)))

        notifier.emit(Event.FILE_MOVED, {"path": "a.py"})

        assert received == [("file_moved", {"path": "a.py"})]

    def test_unsubscribe(self) -> None:
        notifier = ChangeNotifier()
        received: list[str] = []

        def callback(kind: str, data: dict) -> None:
            received.append(kind)

        notifier.subscribe(callback)
        notifier.unsubscribe(callback)
        notifier.emit(Event.BUCKET_CREATED)

        assert received == []

    def test_failing_subscriber_does_not_stop_others(self) -> None:
        notifier = ChangeNotifier()
        received: list[str] = []

        def broken(kind: str, data: dict) -> None:
            raise RuntimeError("boom")

        notifier.subscribe(broken)
        notifier.subscribe(lambda kind, data: received.append(kind))
        notifier.emit(Event.BUCKET_DELETED, {"bucket": "a"})

        assert received == ["bucket_deleted"]

    def test_event_log(self, tmp_path: Path) -> None:
        notifier = ChangeNotifier(tmp_path / "logs" / "events.jsonl")

        notifier.emit(Event.BUCKET_CREATED, {"bucket": "api"})
        notifier.emit(Event.RUN_COMPLETE, {"succeeded": 1})

        events = notifier.get_events()
        assert [e["type"] for e in events] == ["bucket_created", "run_complete"]
        assert events[0]["data"] == {"bucket": "api"}

    def test_get_events_without_log(self) -> None:
        assert ChangeNotifier().get_events() == []
        assert ChangeNotifier().event_file is None

    def test_event_log_rolls_over(self, tmp_path: Path) -> None:
        event_file = tmp_path / "events.jsonl"
        notifier = ChangeNotifier(event_file, max_bytes=200, backup_count=2)

        for i in range(20):
            notifier.emit(Event.FILE_MOVED, {"path": f"src/module_{i}.py"})

        assert event_file.stat().st_size < 400
        assert (tmp_path / "events.jsonl.1").exists()
        assert (tmp_path / "events.jsonl.2").exists()
        assert not (tmp_path / "events.jsonl.3").exists()
        assert notifier.get_events()[-1]["data"] == {"path": "src/module_19.py"}

    def test_event_log_without_backups_is_truncated(self, tmp_path: Path) -> None:
        event_file = tmp_path / "events.jsonl"
        notifier = ChangeNotifier(event_file, max_bytes=100, backup_count=0)

        for i in range(10):
            notifier.emit(Event.BUCKET_CREATED, {"bucket": f"b{i}"})

        assert len(notifier.get_events()) < 10
        assert list(tmp_path.iterdir()) == [event_file]
