# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Package for parsing descriptor data. This module provides the tokenizer that
breaks a document into its keyword lines.

A descriptor contains a series of 'keyword lines' which are simply a keyword
followed by an optional value. Lines can also be followed by a pseudo-PGP
style block...

::

  onion-key
  -----BEGIN RSA PUBLIC KEY-----
  MIGJAoGBAJv5IIWQ+WDWYUdyA/0L8qbIkEVH/cwryZWoIaPAzINfrw1WfNZGtBmg
  -----END RSA PUBLIC KEY-----

**Module Overview:**

::

  parse_file - Parses the server descriptors in a file.

  DocumentLexer - Restartable iterator over the keyword lines of a document.
    +- __iter__ - provides Line entries in document order

  Line - Keyword line along with its optional block.
  Block - Pseudo-PGP block that follows a keyword line.
"""

import base64
import collections
import os
import random
import re

import tordesc
import tordesc.util.log as log
import tordesc.util.str_tools

from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

__all__ = [
  'server_descriptor',
  'parse_file',
  'DocumentLexer',
  'Line',
  'Block',
]

KEYWORD_CHAR = 'a-zA-Z0-9-'
WHITESPACE = ' \t'
KEYWORD_LINE = re.compile('^(@?[a-zA-Z0-9][%s]*)(?:[%s]+(.*))?$' % (KEYWORD_CHAR, WHITESPACE))
PGP_BLOCK_START = re.compile('^-----BEGIN ([%s%s]+)-----$' % (KEYWORD_CHAR, WHITESPACE))
PGP_BLOCK_END = '-----END %s-----'


class Block(collections.namedtuple('Block', ['block_type', 'content', 'line_number'])):
  """
  Pseudo-PGP block that follows a keyword line.

  :var str block_type: label of the block, such as 'RSA PUBLIC KEY'
  :var str content: base64 payload between the BEGIN and END markers, with its
    lines joined by newlines
  :var int line_number: line the BEGIN marker is on
  """


class Line(collections.namedtuple('Line', ['keyword', 'value', 'block', 'line_number', 'start', 'end'])):
  """
  Keyword line of a document.

  :var str keyword: keyword the line starts with
  :var str value: remainder of the line, this is an empty string if the line
    only has a keyword
  :var tordesc.descriptor.Block block: block that follows this line, **None**
    if it doesn't have one
  :var int line_number: line the keyword is on
  :var int start: byte offset where the keyword line starts
  :var int end: byte offset just past this entry, including its block
  """


class DocumentLexer(object):
  """
  Breaks a document into its keyword lines. Iteration is lazy and each call to
  **iter()** rescans the content, so this can be iterated over any number of
  times.

  Lines end with a newline, and an optional carriage return before it is
  discarded. Blank lines are skipped and the legacy 'opt ' prefix is removed.
  This never checks if a keyword is one we recognize.

  :param bytes,str content: document to be read
  :param int start: byte offset to start reading from
  :param int line_number: line number of the starting offset
  """

  def __init__(self, content: Union[bytes, str], start: int = 0, line_number: int = 1) -> None:
    if isinstance(content, str):
      content = content.encode('utf-8')

    self._content = content
    self._start = start
    self._line_number = line_number

  def __iter__(self) -> Iterator['tordesc.descriptor.Line']:
    """
    Provides the keyword lines of our document.

    :raises: :class:`~tordesc.LexError` if a line isn't a keyword line or its
      block is malformed
    """

    content = self._content
    position, line_number = self._start, self._line_number

    while position < len(content):
      line_start, line_start_number = position, line_number
      line, position = _read_line(content, position)
      line_number += 1

      if not line.strip():
        continue

      line = tordesc.util.str_tools._to_unicode(line)

      # Some lines have an 'opt ' for backward compatibility. They should be
      # ignored. This prefix was removed from tor in...
      # https://trac.torproject.org/projects/tor/ticket/5124

      if line.startswith('opt '):
        line = line[4:]

      line_match = KEYWORD_LINE.match(line)

      if not line_match:
        raise tordesc.LexError('Line is not a keyword line: %s' % log.escape(line), line_start_number, line_start)

      keyword, value = line_match.groups()
      value = value.strip() if value else ''

      block = None

      if position < len(content):
        next_line, _ = _read_line(content, position)

        if PGP_BLOCK_START.match(tordesc.util.str_tools._to_unicode(next_line)):
          block, position, line_number = _read_block(content, position, line_number)

      yield Line(keyword, value, block, line_start_number, line_start, position)


def _read_line(content: bytes, position: int) -> Tuple[bytes, int]:
  """
  Reads the line at the given offset.

  :param content: document being read
  :param position: offset the line starts at

  :returns: **tuple** of the form (line, next_position), where the line lacks
    its newline and trailing carriage return
  """

  line_end = content.find(b'\n', position)

  if line_end == -1:
    line, next_position = content[position:], len(content)
  else:
    line, next_position = content[position:line_end], line_end + 1

  if line.endswith(b'\r'):
    line = line[:-1]

  return line, next_position


def _read_block(content: bytes, position: int, line_number: int) -> Tuple['tordesc.descriptor.Block', int, int]:
  """
  Reads the pseudo-PGP block that starts at the given offset. Its END marker
  must have the same label as its BEGIN marker, and everything in between
  must be base64.

  :param content: document being read
  :param position: offset of the BEGIN marker
  :param line_number: line number of the BEGIN marker

  :returns: **tuple** of the form (block, next_position, next_line_number)

  :raises: :class:`~tordesc.LexError` if the block is unterminated or has
    content that isn't base64
  """

  block_start = position
  begin_line, position = _read_line(content, position)
  block_type = PGP_BLOCK_START.match(tordesc.util.str_tools._to_unicode(begin_line)).group(1)
  block_line_number = line_number
  end_line = PGP_BLOCK_END % block_type
  line_number += 1
  block_lines = []

  while True:
    if position >= len(content):
      raise tordesc.LexError("Unterminated %s block (looking for '%s')" % (block_type, end_line), block_line_number, block_start)

    line_start = position
    line, position = _read_line(content, position)
    line = tordesc.util.str_tools._to_unicode(line)

    if line == end_line:
      return Block(block_type, '\n'.join(block_lines), block_line_number), position, line_number + 1
    elif line.startswith('-----END '):
      raise tordesc.LexError("%s block ended with a mismatched marker (expected '%s'): %s" % (block_type, end_line, log.escape(line)), line_number, line_start)
    elif not tordesc.util.str_tools.is_base64(line):
      raise tordesc.LexError('%s block has content that is not base64: %s' % (block_type, log.escape(line)), line_number, line_start)

    block_lines.append(line)
    line_number += 1


def parse_file(descriptor_file, validate: bool = True, **kwargs) -> Iterable['tordesc.descriptor.server_descriptor.ParseResult']:
  """
  Reads the server descriptors from a file, providing an iterable for the
  :class:`~tordesc.descriptor.server_descriptor.ParseResult` of each.

  Beware that the open() function defaults to using text mode. **Binary mode**
  is strongly suggested because it doesn't do universal newline translation,
  which would change the bytes each descriptor's signature covers.

  ::

    my_descriptor_file = open(descriptor_path, 'rb')

  :param str,file descriptor_file: path or opened file with the descriptor contents
  :param bool validate: checks the validity of the descriptor's content if
    **True**, skips these checks otherwise
  :param dict kwargs: additional arguments for
    :func:`~tordesc.descriptor.server_descriptor.parse`

  :returns: iterable for :class:`~tordesc.descriptor.server_descriptor.ParseResult` instances in the file

  :raises: **IOError** if unable to read from the descriptor_file
  """

  import tordesc.descriptor.server_descriptor

  return tordesc.descriptor.server_descriptor.parse_file(descriptor_file, validate, **kwargs)


def _line_number_at(content: bytes, position: int) -> int:
  """
  Provides the line number of the given byte offset.
  """

  return content.count(b'\n', 0, position) + 1


def _descriptor_content(attr: Optional[Mapping[str, Any]] = None, exclude: Sequence[str] = (), header_template: Sequence[Tuple[str, Any]] = (), footer_template: Sequence[Tuple[str, Any]] = ()) -> bytes:
  """
  Constructs a minimal descriptor with the given attributes. The content we
  provide back is of the form...

  * header_template (with matching attr filled in)
  * unused attr entries
  * footer_template (with matching attr filled in)

  So for instance...

  ::

    _descriptor_content(
      attr = {'platform': 'Tor 0.4.3.5', 'contact': 'atagar'},
      header_template = (
        ('router', 'caerSidi 71.35.133.197 9001 0 0'),
        ('platform', 'Tor 0.2.1.30'),
      ),
    )

  ... would result in...

  ::

    router caerSidi 71.35.133.197 9001 0 0
    platform Tor 0.4.3.5
    contact atagar

  :param attr: keyword/value mappings to be included in the descriptor
  :param exclude: mandatory keywords to exclude from the descriptor
  :param header_template: key/value pairs for mandatory fields before unrecognized content
  :param footer_template: key/value pairs for mandatory fields after unrecognized content

  :returns: bytes with the requested descriptor content
  """

  header_content, footer_content = [], []  # type: List[str], List[str]
  attr = {} if attr is None else collections.OrderedDict(attr)  # shallow copy since we're destructive

  for content, template in ((header_content, header_template),
                            (footer_content, footer_template)):
    for keyword, value in template:
      if keyword in exclude:
        continue

      value = attr.pop(keyword, value)

      if value is None:
        continue
      elif isinstance(value, (tuple, list)):
        for v in value:
          content.append('%s %s' % (keyword, v))
      elif value == '':
        content.append(keyword)
      elif value.startswith('\n'):
        # some values like crypto follow the line instead
        content.append('%s%s' % (keyword, value))
      else:
        content.append('%s %s' % (keyword, value))

  remainder = []

  for k, v in attr.items():
    if isinstance(v, (tuple, list)):
      remainder += ['%s %s' % (k, entry) for entry in v]
    elif v == '':
      remainder.append(k)
    elif v.startswith('\n'):
      remainder.append('%s%s' % (k, v))
    else:
      remainder.append('%s %s' % (k, v))

  return '\n'.join(header_content + remainder + footer_content).encode('utf-8')


def _random_nickname() -> str:
  return ('Unnamed%i' % random.randint(0, 100000000000000))[:19]


def _random_fingerprint() -> str:
  return ('%040x' % random.randrange(16 ** 40)).upper()


def _random_ipv4_address() -> str:
  return '%i.%i.%i.%i' % (random.randint(0, 255), random.randint(0, 255), random.randint(0, 255), random.randint(0, 255))


def _random_date() -> str:
  return '%i-%02i-%02i %02i:%02i:%02i' % (random.randint(2000, 2015), random.randint(1, 12), random.randint(1, 20), random.randint(0, 23), random.randint(0, 59), random.randint(0, 59))


def _random_crypto_blob(block_type: Optional[str] = None) -> str:
  """
  Provides a random string that can be used for crypto blocks.
  """

  random_base64 = tordesc.util.str_tools._to_unicode(base64.b64encode(os.urandom(140)))
  crypto_blob = '\n'.join(tordesc.util.str_tools._split_by_length(random_base64, 64))

  if block_type:
    return '\n-----BEGIN %s-----\n%s\n-----END %s-----' % (block_type, crypto_blob, block_type)
  else:
    return crypto_blob
