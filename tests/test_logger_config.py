#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unit tests for logger_config.py module.

Tests cover:
- setup_logging handler selection (Rich on stderr, plain stream, file)
- Handler replacement on repeated setup
- Child logger naming
"""

import logging
import os
import tempfile
import unittest
from unittest.mock import Mock, patch

from logger_config import LOGGER_NAME, get_logger, setup_logging


def _clear_handlers():
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestSetupLogging(unittest.TestCase):
    """Tests for the setup_logging function."""

    def tearDown(self):
        _clear_handlers()

    def test_returns_application_logger(self):
        logger = setup_logging(log_level=logging.DEBUG)

        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.DEBUG)

    def test_replaces_existing_handlers(self):
        logger = logging.getLogger(LOGGER_NAME)
        stale = logging.StreamHandler()
        logger.addHandler(stale)

        setup_logging(use_rich=False)

        self.assertNotIn(stale, logger.handlers)
        self.assertEqual(len(logger.handlers), 1)

    @patch('logger_config.RichHandler')
    @patch('logger_config.Console')
    def test_rich_handler_on_stderr(self, mock_console_class, mock_rich_handler_class):
        mock_console = Mock()
        mock_console_class.return_value = mock_console
        mock_handler = Mock()
        mock_rich_handler_class.return_value = mock_handler

        setup_logging(log_level=logging.WARNING, use_rich=True)

        mock_console_class.assert_called_once_with(stderr=True, legacy_windows=False)
        call_kwargs = mock_rich_handler_class.call_args[1]
        self.assertIs(call_kwargs['console'], mock_console)
        self.assertFalse(call_kwargs['show_time'])
        self.assertFalse(call_kwargs['show_path'])
        self.assertTrue(call_kwargs['rich_tracebacks'])
        mock_handler.setLevel.assert_called_once_with(logging.WARNING)

    def test_plain_stream_handler(self):
        logger = setup_logging(use_rich=False)

        self.assertIs(type(logger.handlers[0]), logging.StreamHandler)
        self.assertIsNotNone(logger.handlers[0].formatter)

    def test_no_console_output(self):
        logger = setup_logging(console_output=False)

        self.assertEqual(logger.handlers, [])

    def test_file_handler_writes_messages(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, 'nested', 'cleanup.log')

            logger = setup_logging(log_level=logging.INFO, log_file=log_file, console_output=False)
            get_logger('cleaner').info("Deleted patch-1")
            for handler in logger.handlers:
                handler.flush()

            with open(log_file, encoding='utf-8') as f:
                content = f.read()
            _clear_handlers()

        self.assertIn(f"{LOGGER_NAME}.cleaner - INFO - Deleted patch-1", content)


class TestGetLogger(unittest.TestCase):
    """Tests for the get_logger function."""

    def test_application_logger_aliases(self):
        for name in (None, '', '__main__', LOGGER_NAME):
            with self.subTest(name=name):
                self.assertEqual(get_logger(name).name, LOGGER_NAME)

    def test_module_logger_is_child(self):
        logger = get_logger('repository')

        self.assertEqual(logger.name, f"{LOGGER_NAME}.repository")
        self.assertIs(logger.parent, logging.getLogger(LOGGER_NAME))

    def test_same_instance_for_same_name(self):
        self.assertIs(get_logger('cleaner'), get_logger('cleaner'))


if __name__ == '__main__':
    unittest.main()
