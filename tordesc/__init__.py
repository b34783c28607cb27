# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Library for parsing tor relay server descriptors.

**Module Overview:**

::

  ParseError - Base exception raised when descriptor content is malformed.
    |- LexError - Line framing or embedded block is malformed.
    |- FieldFormatError - Keyword's arguments or block violate its grammar.
    |- StructureError - Entries are missing, duplicated, or out of order.
    +- ValidationError - Assembled descriptor is incomplete or out of bounds.
"""

__version__ = '1.0.0'
__author__ = 'Damian Johnson'
__contact__ = 'atagar@torproject.org'
__url__ = 'https://www.torproject.org/'
__license__ = 'LGPLv3'

__all__ = [
  'descriptor',
  'exit_policy',
  'util',
  'ParseError',
  'LexError',
  'FieldFormatError',
  'StructureError',
  'ValidationError',
]

from typing import Optional


class ParseError(ValueError):
  """
  Base error for malformed descriptor content. This is a **ValueError** so
  callers can treat any parsing failure uniformly.

  :var str keyword: keyword of the line that was rejected, if applicable
  :var int line_number: line within the document the issue was found on, this
    is **None** if the issue doesn't concern a specific line
  """

  def __init__(self, message: str, keyword: Optional[str] = None, line_number: Optional[int] = None) -> None:
    super(ParseError, self).__init__(message)
    self.message = message
    self.keyword = keyword
    self.line_number = line_number

  def __str__(self) -> str:
    if self.line_number is not None:
      return 'line %i: %s' % (self.line_number, self.message)
    else:
      return self.message


class LexError(ParseError):
  """
  Document can't be split into keyword lines, for instance because of an
  unterminated or non-base64 block.

  :var int offset: byte offset of the line that was rejected
  """

  def __init__(self, message: str, line_number: Optional[int] = None, offset: Optional[int] = None) -> None:
    super(LexError, self).__init__(message, line_number = line_number)
    self.offset = offset


class FieldFormatError(ParseError):
  """
  A recognized keyword's arguments or block don't conform to its grammar.

  :var str reason: description of what was wrong with the line
  """

  def __init__(self, keyword: str, line_number: Optional[int], reason: str) -> None:
    super(FieldFormatError, self).__init__("'%s' line is malformed: %s" % (keyword, reason), keyword, line_number)
    self.reason = reason


class StructureError(ParseError):
  "Entries are missing, repeated, or in a position they're not permitted."


class ValidationError(ParseError):
  """
  Assembled descriptor lacks a mandatory field or has an out of bounds value.

  :var str field: keyword of the missing or invalid field
  """

  def __init__(self, field: str, message: str, line_number: Optional[int] = None) -> None:
    super(ValidationError, self).__init__(message, field, line_number)
    self.field = field
