"""
Unit tests for the tordesc.util.str_tools functions.
"""

import datetime
import unittest

from tordesc.util import str_tools


class TestStrTools(unittest.TestCase):
  def test_to_camel_case(self):
    """
    Checks the _to_camel_case() function.
    """

    # test the pydoc example
    self.assertEqual('I Like Pepperjack!', str_tools._to_camel_case('I_LIKE_PEPPERJACK!'))

    # check a few edge cases
    self.assertEqual('', str_tools._to_camel_case(''))
    self.assertEqual('Hello', str_tools._to_camel_case('hello'))
    self.assertEqual('Hello', str_tools._to_camel_case('HELLO'))
    self.assertEqual('Hello  World', str_tools._to_camel_case('hello__world'))
    self.assertEqual('Hello\tworld', str_tools._to_camel_case('hello\tWORLD'))
    self.assertEqual('Hello\t\tWorld', str_tools._to_camel_case('hello__world', '_', '\t'))

  def test_split_by_length(self):
    self.assertEqual(['he', 'll', 'o'], str_tools._split_by_length('hello', 2))
    self.assertEqual(['hello'], str_tools._split_by_length('hello', 5))
    self.assertEqual([b'ab', b'c'], str_tools._split_by_length(b'abc', 2))
    self.assertEqual([], str_tools._split_by_length('', 3))

  def test_parse_timestamp(self):
    """
    Checks the _parse_timestamp() function.
    """

    test_inputs = {
      '2012-11-08 16:48:41': datetime.datetime(2012, 11, 8, 16, 48, 41),
      '2005-12-16 18:00:48': datetime.datetime(2005, 12, 16, 18, 0, 48),
      '2012-02-29 00:00:00': datetime.datetime(2012, 2, 29, 0, 0, 0),
    }

    for arg, expected in test_inputs.items():
      self.assertEqual(expected, str_tools._parse_timestamp(arg))

    invalid_input = [
      None,
      32,
      'hello world',
      '2012-11-08T16:48:41',
      '2012-11-08 16:48',
      '2012-11-08 16:48:41 ',
      '2012-11-08  16:48:41',
      '2012-11-08 16:48:41.123',
      '2011-02-29 00:00:00',
      '2012-13-01 00:00:00',
      '2012-11-08 25:00:00',
      '٢٠١٢-11-08 16:48:41',
      '2012-11-08 16:48:４１',
    ]

    for arg in invalid_input:
      self.assertRaises(ValueError, str_tools._parse_timestamp, arg)

  def test_is_base64(self):
    self.assertTrue(str_tools.is_base64(''))
    self.assertTrue(str_tools.is_base64('aGVsbG8='))
    self.assertTrue(str_tools.is_base64('Zm9v+/8'))
    self.assertFalse(str_tools.is_base64('aGVs bG8='))
    self.assertFalse(str_tools.is_base64('aGVs*bG8='))
    self.assertFalse(str_tools.is_base64(b'aGVsbG8='))

  def test_decode_b64(self):
    """
    Decodes base64 with and without its padding.
    """

    self.assertEqual(b'hello', str_tools._decode_b64('aGVsbG8='))
    self.assertEqual(b'hello', str_tools._decode_b64('aGVsbG8'))
    self.assertEqual(b'hello', str_tools._decode_b64(b'aGVsbG8='))
    self.assertEqual(b'foo', str_tools._decode_b64('Zm9v'))
    self.assertEqual(b'', str_tools._decode_b64(''))

    self.assertRaises(ValueError, str_tools._decode_b64, 'aGVsb')
    self.assertRaises(ValueError, str_tools._decode_b64, 'aGVs*bG8=')

  def test_to_unicode(self):
    self.assertEqual('hello', str_tools._to_unicode(b'hello'))
    self.assertEqual('hello', str_tools._to_unicode('hello'))
    self.assertEqual('\ufffd', str_tools._to_unicode(b'\xff'))
    self.assertEqual(None, str_tools._to_unicode(None))

  def test_to_bytes(self):
    self.assertEqual(b'hello', str_tools._to_bytes('hello'))
    self.assertEqual(b'hello', str_tools._to_bytes(b'hello'))
