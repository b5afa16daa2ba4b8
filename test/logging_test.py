import logging
import os
import tempfile
import unittest
import uuid
from logging.handlers import RotatingFileHandler

from clustermgr.config import LoggingSettings
from clustermgr.utils.logging import (
    ColoredFormatter,
    ContextFilter,
    get_logger,
    get_logger_from_config,
    resolve_level,
)


class TestLogging(unittest.TestCase):

    def setUp(self):
        self.name = f"test.clustermgr.{uuid.uuid4().hex}"

    def tearDown(self):
        self._close_handlers()

    def _close_handlers(self):
        logger = logging.getLogger(self.name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_handlers_added_once(self):
        first = get_logger(name=self.name)
        second = get_logger(name=self.name)
        self.assertIs(first, second)
        self.assertEqual(len(first.handlers), 1)
        self.assertEqual(first.level, logging.INFO)

    def test_enable_debug_overrides_level(self):
        logger = get_logger(name=self.name, level=logging.ERROR, enable_debug=True)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_file_handler(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "nested", "cluster.log")
            logger = get_logger(name=self.name, log_file=log_file)
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in logger.handlers))

            logger.warning("bucket quota low")
            for handler in logger.handlers:
                handler.flush()
            with open(log_file, encoding="utf-8") as f:
                content = f.read()
            self.assertIn("bucket quota low", content)
            self.assertIn("WARNING", content)
            self._close_handlers()

    def test_resolve_level(self):
        self.assertEqual(resolve_level("warning"), logging.WARNING)
        self.assertEqual(resolve_level("verbose"), logging.INFO)
        self.assertEqual(resolve_level(logging.ERROR), logging.ERROR)
        self.assertEqual(resolve_level("ERROR", enable_debug=True), logging.DEBUG)
        self.assertEqual(resolve_level(None), logging.INFO)

    def test_from_config(self):
        logger = get_logger_from_config(LoggingSettings(level="warning"))
        self.assertEqual(logger.name, "clustermgr")
        self.assertIn(logger.level, (logging.WARNING, logging.INFO, logging.DEBUG))

    def test_colored_formatter_leaves_record_untouched(self):
        record = logging.LogRecord(self.name, logging.ERROR, __file__, 1, "failed", None, None)
        formatted = ColoredFormatter("%(levelname)s %(message)s").format(record)
        self.assertIn("\033[0;31mERROR\033[0m", formatted)
        self.assertEqual(record.levelname, "ERROR")


class TestContextFilter(unittest.TestCase):

    def test_records_calling_class(self):
        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger(f"test.context.{uuid.uuid4().hex}")
        logger.propagate = False
        handler = Capture()
        handler.addFilter(ContextFilter())
        logger.addHandler(handler)

        class Bucketeer:
            def run(self):
                logger.warning("from method")

        Bucketeer().run()
        logger.removeHandler(handler)

        self.assertEqual(records[0].cls, "Bucketeer")
        self.assertEqual(records[0].func, "run")


if __name__ == "__main__":
    unittest.main()
