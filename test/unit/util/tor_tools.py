"""
Unit tests for the tordesc.util.tor_tools functions.
"""

import unittest

from tordesc.util.tor_tools import (
  is_hex_digits,
  is_valid_fingerprint,
  is_valid_grouped_fingerprint,
  is_valid_nickname,
)

LET_FREEDOM_RING = 'DA4DEC93C8D2F187C027A96D3925C1531D90A89E'
FALKENSTEIN = '0512FE6BE9CCA0ED133152E64010B2FBA141EB10'


class TestTorTools(unittest.TestCase):
  def test_fingerprints(self):
    """
    Family entries have a '$' prefix, while the fingerprints we store don't.
    """

    for fingerprint in (LET_FREEDOM_RING, FALKENSTEIN, FALKENSTEIN.lower()):
      self.assertTrue(is_valid_fingerprint(fingerprint))
      self.assertTrue(is_valid_fingerprint('$' + fingerprint, check_prefix = True))

      self.assertFalse(is_valid_fingerprint('$' + fingerprint))
      self.assertFalse(is_valid_fingerprint(fingerprint, check_prefix = True))

    invalid_fingerprints = (
      LET_FREEDOM_RING[:-1],
      LET_FREEDOM_RING + 'E',
      LET_FREEDOM_RING[:-1] + 'G',
      'DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E',
      '',
      None,
      [LET_FREEDOM_RING],
    )

    for fingerprint in invalid_fingerprints:
      self.assertFalse(is_valid_fingerprint(fingerprint), fingerprint)
      self.assertFalse(is_valid_fingerprint(fingerprint, check_prefix = True), fingerprint)

  def test_grouped_fingerprints(self):
    """
    Descriptors' fingerprint lines are ten groups of four hex digits.
    """

    self.assertTrue(is_valid_grouped_fingerprint('DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E'))
    self.assertTrue(is_valid_grouped_fingerprint('da4d ec93 c8d2 f187 c027 a96d 3925 c153 1d90 a89e'))

    invalid_fingerprints = (
      LET_FREEDOM_RING,
      'DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90',
      'DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E 0000',
      'DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89G',
      'DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89',
      'DA4DE C93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E',
      'DA4D  EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E',
      'DA4D\tEC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E',
      ' DA4D EC93 C8D2 F187 C027 A96D 3925 C153 1D90 A89E',
      '',
      None,
    )

    for fingerprint in invalid_fingerprints:
      self.assertFalse(is_valid_grouped_fingerprint(fingerprint), fingerprint)

  def test_nicknames(self):
    for nickname in ('LetFreedomRing', 'FalkensteinTor02', 'a', 'Unnamed1234567890123'[:19]):
      self.assertTrue(is_valid_nickname(nickname), nickname)

    for nickname in ('Unnamed1234567890123', 'Let-Freedom', 'Let Freedom', 'Lét', '', None, 5):
      self.assertFalse(is_valid_nickname(nickname), nickname)

  def test_hex_digits(self):
    self.assertTrue(is_hex_digits('15FA36289DD75D89B389CED0BE23D80FB50629BD', 40))
    self.assertTrue(is_hex_digits('abcdef', 6))

    for entry in ('15FA', '15FA36', 'XYZW3', '', None, 15):
      self.assertFalse(is_hex_digits(entry, 5), entry)
