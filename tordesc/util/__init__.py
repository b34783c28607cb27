# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Utility functions used by the tordesc library.
"""

from typing import Any

__all__ = [
  'connection',
  'enum',
  'log',
  'str_tools',
  'test_tools',
  'tor_tools',
]


def _hash_value(val: Any) -> int:
  # Hashing common builtins (ints, bools, etc) provide consistant values but
  # many others vary their value on interpreter invokation. Including the type
  # means a tuple and list with the same content hash differently.

  my_hash = hash(str(type(val)))

  if isinstance(val, (tuple, list)):
    for v in val:
      my_hash = (my_hash * 1024) + _hash_value(v)
  elif isinstance(val, dict):
    for k in sorted(val.keys()):
      my_hash = (my_hash * 2048) + (hash(k) * 1024) + _hash_value(val[k])
  elif isinstance(val, (set, frozenset)):
    for v in sorted(val):
      my_hash = (my_hash * 1024) + hash(v)
  else:
    my_hash += hash(val)

  return my_hash


def _hash_attr(obj: Any, *attributes: str) -> int:
  """
  Provide a hash value for the given set of attributes.

  :param obj: object to be hashed
  :param attributes: attribute names to take into account

  :returns: **int** object hash
  """

  my_hash = hash(str(type(obj)))

  for attr in attributes:
    my_hash = my_hash * 1024 + _hash_value(getattr(obj, attr))

  return my_hash
