"""
Unit tests for tordesc.util.* contents.
"""

import unittest

from tordesc.util import _hash_attr, _hash_value

__all__ = [
  'connection',
  'enum',
  'log',
  'str_tools',
  'tor_tools',
]


class _Sample(object):
  def __init__(self, nickname, ports):
    self.nickname = nickname
    self.ports = ports


class TestBaseUtil(unittest.TestCase):
  def test_hash_value(self):
    self.assertEqual(_hash_value(('a', 1)), _hash_value(('a', 1)))
    self.assertEqual(_hash_value(frozenset(['a', 'b'])), _hash_value(frozenset(['b', 'a'])))
    self.assertEqual(_hash_value({'a': 1, 'b': 2}), _hash_value({'b': 2, 'a': 1}))

    # containers of differing types hash differently

    self.assertNotEqual(_hash_value((1, 2)), _hash_value([1, 2]))
    self.assertNotEqual(_hash_value((1, 2)), _hash_value((2, 1)))

  def test_hash_attr(self):
    self.assertEqual(_hash_attr(_Sample('caerSidi', (9001,)), 'nickname', 'ports'), _hash_attr(_Sample('caerSidi', (9001,)), 'nickname', 'ports'))
    self.assertNotEqual(_hash_attr(_Sample('caerSidi', (9001,)), 'nickname', 'ports'), _hash_attr(_Sample('caerSidi', (9030,)), 'nickname', 'ports'))
    self.assertEqual(_hash_attr(_Sample('caerSidi', (9001,)), 'nickname'), _hash_attr(_Sample('caerSidi', (9030,)), 'nickname'))
