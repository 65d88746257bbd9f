import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from servicenow_adapter.data_contract import AdapterStatus  # noqa: E402
from servicenow_adapter.events import EventPublisher  # noqa: E402


class EventPublisherTests(unittest.TestCase):
    def setUp(self):
        self.publisher = EventPublisher(logger=MagicMock())

    def test_emit_calls_handlers_in_subscription_order(self):
        calls = []
        self.publisher.subscribe("ONLINE", lambda payload: calls.append(("first", payload)))
        self.publisher.subscribe("ONLINE", lambda payload: calls.append(("second", payload)))

        notified = self.publisher.emit("ONLINE", {"id": "sn-1"})

        self.assertEqual(notified, 2)
        self.assertEqual(calls, [("first", {"id": "sn-1"}), ("second", {"id": "sn-1"})])

    def test_enum_and_string_names_are_the_same_event(self):
        handler = MagicMock()
        self.publisher.subscribe(AdapterStatus.OFFLINE, handler)

        self.publisher.emit("OFFLINE", {"id": "sn-1"})

        handler.assert_called_once_with({"id": "sn-1"})

    def test_emit_without_handlers_returns_zero(self):
        self.assertEqual(self.publisher.emit("ONLINE", {"id": "x"}), 0)

    def test_unsubscribe_removes_handler(self):
        handler = MagicMock()
        self.publisher.subscribe("ONLINE", handler)
        self.publisher.unsubscribe("ONLINE", handler)

        self.assertEqual(self.publisher.emit("ONLINE", {"id": "x"}), 0)
        handler.assert_not_called()

    def test_failing_handler_does_not_stop_others(self):
        failing = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        self.publisher.subscribe("OFFLINE", failing)
        self.publisher.subscribe("OFFLINE", healthy)

        self.publisher.emit("OFFLINE", {"id": "sn-1"})

        healthy.assert_called_once_with({"id": "sn-1"})
        self.publisher.logger.exception.assert_called_once()


if __name__ == "__main__":
    unittest.main()
