from pathlib import Path
import json
import logging
import unittest

from partrunner.app_logging import JsonFormatter, log_with_fields
from partrunner.errors import FileError
from partrunner.events import EventKind, LifecycleEvent, LoggingObserver
from partrunner.models import PartId, Status


class RecordingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


class LoggingObserverTest(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("test_partrunner_events")
        self.logger.handlers.clear()
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.handler = RecordingHandler()
        self.logger.addHandler(self.handler)

    def test_completed_status_is_logged_at_info(self) -> None:
        observer = LoggingObserver(self.logger)
        observer.on_event(
            LifecycleEvent(EventKind.STATUS_CHANGED, "part-worker-0", part_id=PartId(2023, 1, 1), status=Status.completed(42))
        )
        record = self.handler.records[0]
        self.assertEqual(record.levelno, logging.INFO)
        self.assertEqual(record.getMessage(), "status_changed")
        self.assertEqual(
            record.extra_fields,  # type: ignore[attr-defined]
            {"worker": "part-worker-0", "part": "2023/1-1", "status": "42"},
        )

    def test_failures_are_logged_as_errors(self) -> None:
        observer = LoggingObserver(self.logger)
        part_id = PartId(2023, 4, 2)
        error = FileError(part_id, Path("/inputs/2023/4"), "No such file or directory")
        observer.on_event(LifecycleEvent(EventKind.JOB_FAILED, "part-worker-1", part_id=part_id, error=error))
        record = self.handler.records[0]
        self.assertEqual(record.levelno, logging.ERROR)
        self.assertIn("input error (2023,4,2)", record.extra_fields["error"])  # type: ignore[attr-defined]

    def test_json_formatter_merges_fields(self) -> None:
        log_with_fields(self.logger, logging.INFO, "run_started", jobs=2)
        payload = json.loads(JsonFormatter().format(self.handler.records[0]))
        self.assertEqual(payload["message"], "run_started")
        self.assertEqual(payload["jobs"], 2)
        self.assertEqual(payload["level"], "INFO")


if __name__ == "__main__":
    unittest.main()
