"""
Unit tests for the tordesc.util.log functions.
"""

import logging
import unittest

from tordesc.util import log


class TestLog(unittest.TestCase):
  def test_is_tracing(self):
    logger = log.get_logger()
    original_handlers = logger.handlers
    logger.handlers = [log._NullHandler()]

    try:
      self.assertFalse(log.is_tracing())

      logger.addHandler(log.LogBuffer(log.DEBUG))
      self.assertFalse(log.is_tracing())

      logger.addHandler(log.LogBuffer(log.TRACE))
      self.assertTrue(log.is_tracing())
    finally:
      logger.handlers = original_handlers

  def test_logging_level(self):
    self.assertEqual(logging.DEBUG, log.logging_level(log.DEBUG))
    self.assertEqual(logging.DEBUG - 5, log.logging_level(log.TRACE))
    self.assertEqual(logging.INFO + 5, log.logging_level(log.NOTICE))
    self.assertEqual(logging.ERROR, log.logging_level(log.ERR))
    self.assertEqual(log.NO_LOGGING, log.logging_level(None))

  def test_level_names(self):
    self.assertEqual('TRACE', logging.getLevelName(log.logging_level(log.TRACE)))
    self.assertEqual('NOTICE', logging.getLevelName(log.logging_level(log.NOTICE)))

  def test_escape(self):
    self.assertEqual('hello world', log.escape('hello world'))
    self.assertEqual('router\\nbandwidth\\r\\tpublished', log.escape('router\nbandwidth\r\tpublished'))
    self.assertEqual('reject *:*\\n', log.escape(b'reject *:*\n'))

  def test_log_buffer(self):
    """
    Buffers messages at or above its runlevel, and empties as it's iterated over.
    """

    logger = log.get_logger()
    buffer = log.LogBuffer(log.Runlevel.INFO)
    logger.addHandler(buffer)

    try:
      self.assertTrue(buffer.is_empty())

      log.debug('not buffered')
      log.info('first message')
      log.warn('second message')

      self.assertFalse(buffer.is_empty())

      entries = list(buffer)
      self.assertEqual(2, len(entries))
      self.assertTrue(entries[0].endswith('[INFO] first message'))
      self.assertTrue(entries[1].endswith('[WARNING] second message'))
      self.assertTrue(buffer.is_empty())
    finally:
      logger.removeHandler(buffer)

  def test_log_buffer_records(self):
    logger = log.get_logger()
    buffer = log.LogBuffer(log.Runlevel.TRACE, yield_records = True)
    logger.addHandler(buffer)

    try:
      log.trace('per-line message')
      log.notice('notice message')
      log.log(None, 'skipped')

      records = list(buffer)
      self.assertEqual(['per-line message', 'notice message'], [record.getMessage() for record in records])
      self.assertEqual(['TRACE', 'NOTICE'], [record.levelname for record in records])
    finally:
      logger.removeHandler(buffer)
