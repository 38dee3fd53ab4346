"""Log file setup tests."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from lazymolt.runtime.logs import setup_logging


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved = (list(root.handlers), root.level)

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        handlers, level = self._saved
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_records_go_to_file_and_http_noise_is_quieted(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "logs" / "lazymolt.log"

            used = setup_logging(target, debug=True)
            logging.getLogger("lazymolt.test").debug("hello from test")
            for handler in logging.getLogger().handlers:
                handler.flush()

            self.assertEqual(used, target)
            self.assertIn("lazymolt.test - DEBUG - hello from test", target.read_text(encoding="utf-8"))
            self.assertEqual(logging.getLogger("httpx").level, logging.WARNING)

    def test_unwritable_location_discards_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")

            used = setup_logging(blocker / "lazymolt.log")

        self.assertIsNone(used)
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
