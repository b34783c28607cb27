# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Toolkit for various string activity.

**Module Overview:**

::

  is_base64 - checks if a string only contains base64 characters
"""

import base64
import binascii
import codecs
import datetime
import re

from typing import List, Union, overload

_timestamp_re = re.compile(r'^([0-9]{4})-([0-9]{2})-([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})$')
_base64_re = re.compile(r'^[A-Za-z0-9+/=]*$')


def is_base64(entry: str) -> bool:
  """
  Checks if a string is composed entirely of base64 characters. This doesn't
  check padding, just the alphabet.

  :param entry: string to be checked

  :returns: **True** if the string only has base64 characters, **False** otherwise
  """

  return isinstance(entry, str) and bool(_base64_re.match(entry))


def _to_bytes(msg: Union[str, bytes]) -> bytes:
  """
  Encodes str content so it can be base64 decoded. Characters beyond latin-1
  are replaced, which base64 then rejects.
  """

  if isinstance(msg, str):
    return codecs.latin_1_encode(msg, 'replace')[0]  # type: ignore
  else:
    return msg


def _to_unicode(msg: Union[str, bytes]) -> str:
  """
  Decodes descriptor content as UTF-8, swapping anything malformed for the
  replacement character. Free text lines like 'contact' can hold anything a
  relay operator typed.
  """

  if isinstance(msg, bytes):
    return msg.decode('utf-8', 'replace')
  else:
    return msg


def _decode_b64(msg: Union[str, bytes]) -> bytes:
  """
  Base64 decode, without padding concerns.

  :raises: **ValueError** if the content isn't base64
  """

  msg = _to_bytes(msg)
  missing_padding = len(msg.rstrip(b'=')) % 4

  if missing_padding == 1:
    raise ValueError('base64 content has an invalid length')

  try:
    return base64.b64decode(msg.rstrip(b'=') + (b'=' * ((4 - missing_padding) % 4)), validate = True)
  except binascii.Error as exc:
    raise ValueError('content is not valid base64: %s' % exc)


def _to_camel_case(label: str, divider: str = '_', joiner: str = ' ') -> str:
  """
  Capitalizes each word of an enum key, for instance...

  ::

    >>> _to_camel_case('EXPECT_ROUTER')
    'Expect Router'

  :param label: input string to be converted
  :param divider: word boundary
  :param joiner: replacement for word boundaries

  :returns: camel cased string
  """

  return joiner.join([word[:1].upper() + word[1:].lower() for word in label.split(divider)])


@overload
def _split_by_length(msg: bytes, size: int) -> List[bytes]:
  ...


@overload
def _split_by_length(msg: str, size: int) -> List[str]:
  ...


def _split_by_length(msg, size):
  """
  Chunks content into pieces of the given size, such as the 64 character
  lines of a base64 block.

  ::

    >>> _split_by_length('MIGJAoGB', 3)
    ['MIG', 'JAo', 'GB']
  """

  return [msg[i:i + size] for i in range(0, len(msg), size)]


def _parse_timestamp(entry: str) -> datetime.datetime:
  """
  Parses the date and time that in format like like...

  ::

    2012-11-08 16:48:41

  Tor's timestamps are always UTC, so this provides a naive **datetime** in
  that timezone.

  :param entry: timestamp to be parsed

  :returns: **datetime** for the time represented by the timestamp

  :raises: **ValueError** if the timestamp is malformed
  """

  if not isinstance(entry, (bytes, str)):
    raise ValueError('parse_timestamp() input must be a str, got a %s' % type(entry))

  timestamp_match = _timestamp_re.match(_to_unicode(entry))

  if not timestamp_match:
    raise ValueError('Expected timestamp in format YYYY-MM-DD HH:MM:SS but got %s' % _to_unicode(entry))

  # datetime rejects impossible dates like February 29th on a non-leap year

  return datetime.datetime(*[int(x) for x in timestamp_match.groups()])
