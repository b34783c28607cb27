# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Miscellaneous utility functions for working with tor.

**Module Overview:**

::

  is_valid_fingerprint - checks if a string is a valid relay fingerprint
  is_valid_grouped_fingerprint - checks for a descriptor's spaced fingerprint
  is_valid_nickname - checks if a string is a valid relay nickname
  is_hex_digits - checks if a string is only made up of hex digits
"""

import re

from typing import Any

# The control-spec defines the following as...
#
#   Fingerprint = "$" 40*HEXDIG
#   NicknameChar = "a"-"z" / "A"-"Z" / "0" - "9"
#   Nickname = 1*19 NicknameChar
#
# HEXDIG is defined in RFC 5234 as being uppercase and used in RFC 5987 as
# case insensitive. Tor doesn't say which applies to descriptors, so flipping a coin
# and going with case insensitive.

HEX_DIGIT = '[0-9a-fA-F]'
FINGERPRINT_PATTERN = re.compile('^%s{40}$' % HEX_DIGIT)
GROUPED_FINGERPRINT_PATTERN = re.compile('^%s{4}(?: %s{4}){9}$' % (HEX_DIGIT, HEX_DIGIT))
NICKNAME_PATTERN = re.compile('^[a-zA-Z0-9]{1,19}$')


def is_valid_fingerprint(entry: Any, check_prefix: bool = False) -> bool:
  """
  Checks if a string is a properly formatted relay fingerprint. This checks for
  a '$' prefix if check_prefix is true, otherwise this only validates the hex
  digits.

  :param entry: string to be checked
  :param check_prefix: checks for a '$' prefix

  :returns: **True** if the string could be a relay fingerprint, **False** otherwise
  """

  if not isinstance(entry, str):
    return False
  elif check_prefix:
    if not entry or entry[0] != '$':
      return False

    entry = entry[1:]

  return bool(FINGERPRINT_PATTERN.match(entry))


def is_valid_grouped_fingerprint(entry: Any) -> bool:
  """
  Checks if a string is a fingerprint as it appears in a server descriptor's
  'fingerprint' line: ten groups of four hex digits separated by single spaces.

  :param entry: string to be checked

  :returns: **True** if the string is a grouped fingerprint, **False** otherwise
  """

  return isinstance(entry, str) and bool(GROUPED_FINGERPRINT_PATTERN.match(entry))


def is_valid_nickname(entry: Any) -> bool:
  """
  Checks if a string is a valid format for being a nickname.

  :param entry: string to be checked

  :returns: **True** if the string could be a nickname, **False** otherwise
  """

  if not isinstance(entry, str):
    return False

  return bool(NICKNAME_PATTERN.match(entry))


def is_hex_digits(entry: Any, count: int) -> bool:
  """
  Checks if a string is the given number of hex digits. Digits represented by
  letters are case insensitive.

  :param entry: string to be checked
  :param count: number of hex digits to be checked for

  :returns: **True** if the given number of hex digits, **False** otherwise
  """

  if not isinstance(entry, str):
    return False

  return bool(re.match('^%s{%i}$' % (HEX_DIGIT, count), entry))
