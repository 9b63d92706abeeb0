from __future__ import annotations

import unittest

from loguru import logger

from services.logging_setup import _parse_level, log_timing, redact_for_log, summarize_for_log


class LoggingHelperTests(unittest.TestCase):
    def test_redact_nested_secrets(self) -> None:
        redacted = redact_for_log({
            "Authorization": "Bearer abc",
            "form": {"password": "secret", "phone_number": "0911"},
            "items": [{"token": "t"}],
        })
        self.assertEqual(redacted["Authorization"], "***REDACTED***")
        self.assertEqual(redacted["form"], {"password": "***REDACTED***", "phone_number": "0911"})
        self.assertEqual(redacted["items"], [{"token": "***REDACTED***"}])

    def test_summarize_truncates(self) -> None:
        summary = summarize_for_log({"text": "x" * 200, "list": list(range(20))}, max_items=3, max_text=10)
        self.assertEqual(summary["text"], "xxxxxxxxxx...(200 chars)")
        self.assertEqual(summary["list"], ["0", "1", "2"])

    def test_parse_level(self) -> None:
        self.assertEqual(_parse_level("debug"), "DEBUG")
        self.assertEqual(_parse_level(30), "WARNING")
        self.assertEqual(_parse_level("nonsense"), "INFO")
        self.assertEqual(_parse_level(None), "INFO")

    def test_log_timing_logs_and_reraises(self) -> None:
        messages: list[str] = []
        sink_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
        try:
            with self.assertRaises(RuntimeError):
                with log_timing("unit", loan_id=42):
                    raise RuntimeError("boom")
        finally:
            logger.remove(sink_id)

        self.assertTrue(any(m.startswith("[unit] - start loan_id=42") for m in messages))
        self.assertTrue(any(m.startswith("[unit] - failed") for m in messages))


if __name__ == "__main__":
    unittest.main()
