# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Logging for the library. Events go to the 'tordesc' logger of python's
logging module, which is silent unless the caller attaches a handler.

Parsing reports at the following runlevels...

* **TRACE** each line we skip because we don't recognize its keyword
* **DEBUG** each descriptor we parse, and content lenient parsing discards
* **INFO** each descriptor we reject, and where we resume afterward

**Module Overview:**

::

  get_logger - provides the tordesc Logger instance
  logging_level - converts a runlevel to its logging number
  is_tracing - checks if anyone is listening for TRACE events
  escape - escapes special characters in a message in preparation for logging

  log - logs a message at the given runlevel
  trace - logs a message at the TRACE runlevel
  debug - logs a message at the DEBUG runlevel
  info - logs a message at the INFO runlevel
  notice - logs a message at the NOTICE runlevel
  warn - logs a message at the WARN runlevel
  error - logs a message at the ERROR runlevel

  LogBuffer - Buffers logged events so they can be iterated over.
    |- is_empty - checks if there's events in our buffer
    +- __iter__ - iterates over and removes the buffered events

  log_to_stdout - reports further logged events to stdout

.. data:: Runlevel (enum)

  Enumeration for logging runlevels.

  ========== ===========
  Runlevel   Description
  ========== ===========
  **ERROR**  critical issue occurred, the user needs to be notified
  **WARN**   non-critical issue occurred that the user should be aware of
  **NOTICE** information that is helpful to the user
  **INFO**   rejected descriptors
  **DEBUG**  parsed descriptors and lenient parsing
  **TRACE**  per-line parsing activity
  ========== ===========
"""

import logging

import tordesc.util.enum
import tordesc.util.str_tools

from typing import Iterator, List, Optional, Union

Runlevel = tordesc.util.enum.UppercaseEnum('TRACE', 'DEBUG', 'INFO', 'NOTICE', 'WARN', 'ERROR')
TRACE, DEBUG, INFO, NOTICE, WARN, ERR = list(Runlevel)

# TRACE and NOTICE aren't among the logging module's levels, so they're
# slotted around DEBUG and INFO

LOG_VALUES = {
  TRACE: logging.DEBUG - 5,
  DEBUG: logging.DEBUG,
  INFO: logging.INFO,
  NOTICE: logging.INFO + 5,
  WARN: logging.WARN,
  ERR: logging.ERROR,
}

NO_LOGGING = logging.FATAL + 5

logging.addLevelName(LOG_VALUES[TRACE], 'TRACE')
logging.addLevelName(LOG_VALUES[NOTICE], 'NOTICE')

LOGGER = logging.getLogger('tordesc')
LOGGER.setLevel(LOG_VALUES[TRACE])

FORMATTER = logging.Formatter(
  fmt = '%(asctime)s [%(levelname)s] %(message)s',
  datefmt = '%m/%d/%Y %H:%M:%S',
)


class _NullHandler(logging.Handler):
  """
  Handler that drops everything. Libraries shouldn't emit anything unless
  asked to, and this keeps python from warning that the logger lacks a
  handler.
  """

  def __init__(self) -> None:
    logging.Handler.__init__(self, level = NO_LOGGING)

  def emit(self, record: logging.LogRecord) -> None:
    pass


if not LOGGER.handlers:
  LOGGER.addHandler(_NullHandler())


def get_logger() -> logging.Logger:
  """
  Provides the tordesc logger.

  :returns: **logging.Logger** for tordesc
  """

  return LOGGER


def logging_level(runlevel: Optional['tordesc.util.log.Runlevel']) -> int:
  """
  Translates a runlevel into the value expected by the logging module.

  :param runlevel: runlevel to be translated, no logging if **None**
  """

  return LOG_VALUES[runlevel] if runlevel else NO_LOGGING


def is_tracing() -> bool:
  """
  Checks if a handler will receive TRACE events. Messages at this runlevel are
  per-line, so callers can skip constructing them when nobody's listening.

  :returns: **True** if a handler accepts TRACE events, **False** otherwise
  """

  return any([handler.level <= LOG_VALUES[TRACE] for handler in LOGGER.handlers])


def escape(message: Union[str, bytes]) -> str:
  """
  Escapes newlines, carriage returns and tabs so descriptor content stays on a
  single log line. **bytes** are decoded as UTF-8.

  :param message: content to be escaped

  :returns: **str** that is escaped
  """

  message = tordesc.util.str_tools._to_unicode(message)
  return message.replace('\n', '\\n').replace('\r', '\\r').replace('\t', '\\t')


def log(runlevel: Optional['tordesc.util.log.Runlevel'], message: str) -> None:
  """
  Logs a message at the given runlevel.

  :param runlevel: runlevel to log the message at, logging is skipped if **None**
  :param message: message to be logged
  """

  if runlevel:
    LOGGER.log(LOG_VALUES[runlevel], message)


def trace(message: str) -> None:
  log(TRACE, message)


def debug(message: str) -> None:
  log(DEBUG, message)


def info(message: str) -> None:
  log(INFO, message)


def notice(message: str) -> None:
  log(NOTICE, message)


def warn(message: str) -> None:
  log(WARN, message)


def error(message: str) -> None:
  log(ERR, message)


class LogBuffer(logging.Handler):
  """
  Handler that holds onto events until they're iterated over. This is
  handy for checking what a parse reported...

  ::

    logs = log.LogBuffer(log.Runlevel.INFO)
    log.get_logger().addHandler(logs)

    results = list(parse(content))

    for entry in logs:
      print(entry)

  :param runlevel: minimum runlevel a message needs to be to be buffered
  :param yield_records: provides **logging.LogRecord** instances rather than
    formatted strings
  """

  def __init__(self, runlevel: 'tordesc.util.log.Runlevel', yield_records: bool = False) -> None:
    logging.Handler.__init__(self, level = logging_level(runlevel))

    self.formatter = FORMATTER
    self._buffer = []  # type: List[logging.LogRecord]
    self._yield_records = yield_records

  def is_empty(self) -> bool:
    return not self._buffer

  def __iter__(self) -> Iterator[Union[logging.LogRecord, str]]:
    while self._buffer:
      record = self._buffer.pop(0)
      yield record if self._yield_records else self.formatter.format(record)

  def emit(self, record: logging.LogRecord) -> None:
    self._buffer.append(record)


class _StdoutLogger(logging.Handler):
  def __init__(self, runlevel: 'tordesc.util.log.Runlevel') -> None:
    logging.Handler.__init__(self, level = logging_level(runlevel))
    self.formatter = FORMATTER

  def emit(self, record: logging.LogRecord) -> None:
    print(self.formatter.format(record))


def log_to_stdout(runlevel: 'tordesc.util.log.Runlevel') -> None:
  """
  Prints further events to stdout.

  :param runlevel: minimum runlevel a message needs to be to be printed
  """

  LOGGER.addHandler(_StdoutLogger(runlevel))
