# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Ordered enumerations. These are used for our parser states, runlevels, and
similar fixed sets of values. Entries can be plain keys, in which case their
value is the key in camel case...

::

  >>> from tordesc.util import enum
  >>> states = enum.Enum('EXPECT_ROUTER', 'IN_BODY', 'DONE')
  >>> states.IN_BODY
  'In Body'
  >>> tuple(states)
  ('Expect Router', 'In Body', 'Done')

... or key/value pairs...

::

  >>> cardinality = enum.Enum(('AT_MOST_ONCE', 'at most once'), 'ANY')
  >>> cardinality.AT_MOST_ONCE
  'at most once'

**Module Overview:**

::

  UppercaseEnum - Provides an enum instance with capitalized values

  Enum - Ordered enumeration
    |- __getitem__ - provides the value for an enum key
    |- __contains__ - checks if a value belongs to this enum
    +- __iter__ - iterator over our enum values
"""

import collections

from typing import Any, Iterator, Tuple, Union


def UppercaseEnum(*args: str) -> 'tordesc.util.enum.Enum':
  """
  Provides an :class:`~tordesc.util.enum.Enum` whose values are its keys,
  such as our logging runlevels...

  ::

    >>> runlevels = enum.UppercaseEnum('TRACE', 'DEBUG', 'INFO')
    >>> runlevels.TRACE
    'TRACE'

  :param args: enum keys to initialize with

  :returns: :class:`~tordesc.util.enum.Enum` instance with the given keys
  """

  return Enum(*[(v, v) for v in args])


class Enum(object):
  """
  Basic enumeration. Values are provided in the order they were given.

  :raises: **ValueError** if an entry is neither a key nor key/value pair
  """

  def __init__(self, *args: Union[str, Tuple[str, Any]]) -> None:
    from tordesc.util.str_tools import _to_camel_case

    self._mapping = collections.OrderedDict()

    for entry in args:
      if isinstance(entry, str):
        self._mapping[entry] = _to_camel_case(entry)
      elif isinstance(entry, tuple) and len(entry) == 2:
        self._mapping[entry[0]] = entry[1]
      else:
        raise ValueError('Enum entries must be a key or key/value pair: %s' % (entry,))

    for key, value in self._mapping.items():
      setattr(self, key, value)

  def __getitem__(self, key: str) -> Any:
    """
    Provides the value for the given key.

    :raises: **ValueError** if the key doesn't exist
    """

    if key not in self._mapping:
      raise ValueError("'%s' isn't among our enumeration keys, which includes: %s" % (key, ', '.join(self._mapping)))

    return self._mapping[key]

  def __contains__(self, value: Any) -> bool:
    return value in self._mapping.values()

  def __iter__(self) -> Iterator[Any]:
    for value in self._mapping.values():
      yield value
