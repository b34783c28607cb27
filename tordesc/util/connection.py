# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Address and port utility functions.

**Module Overview:**

::

  is_valid_ipv4_address - checks if a string is a valid IPv4 address
  is_valid_ipv6_address - checks if a string is a valid IPv6 address
  is_valid_port - checks if something is a valid representation for a port
  expand_ipv6_address - provides an IPv6 address with its collapsed portions expanded
  get_mask_ipv4 - provides the mask representation for a given number of bits
  get_mask_ipv6 - provides the IPv6 mask representation for a given number of bits
"""

import re

from typing import Any, Sequence, Union

IPV6_GROUP = re.compile('^[0-9a-fA-F]{1,4}$')


def is_valid_ipv4_address(address: Any) -> bool:
  """
  Checks if a string is a valid IPv4 address.

  :param address: string to be checked

  :returns: **True** if input is a valid IPv4 address, **False** otherwise
  """

  if not isinstance(address, str):
    return False

  # checks if theres four period separated values

  if address.count('.') != 3:
    return False

  # checks that each value in the octet are decimal values between 0-255
  for entry in address.split('.'):
    if not entry.isdigit() or not entry.isascii() or int(entry) < 0 or int(entry) > 255:
      return False
    elif entry[0] == '0' and len(entry) > 1:
      return False  # leading zeros, for instance in "1.2.3.001"

  return True


def is_valid_ipv6_address(address: Any, allow_brackets: bool = False) -> bool:
  """
  Checks if a string is a valid IPv6 address.

  :param address: string to be checked
  :param allow_brackets: ignore brackets which form '[address]'

  :returns: **True** if input is a valid IPv6 address, **False** otherwise
  """

  if not isinstance(address, str):
    return False

  if allow_brackets:
    if address.startswith('[') and address.endswith(']'):
      address = address[1:-1]

  if address.count('.') == 3:
    # Address ends with an IPv4 address, for instance...
    # 5908:3e10:4a1c:0fe1:a43c:13b8:127.0.0.1

    ipv4_start = address.rfind(':', 0, address.find('.')) + 1
    ipv4_end = address.find(':', ipv4_start + 1)

    if ipv4_end == -1:
      ipv4_end = None  # don't crop the last character

    # Swap out the ipv4 address for a placeholder so we can check the rest.

    if not is_valid_ipv4_address(address[ipv4_start:ipv4_end]):
      return False

    addr_comp = [address[:ipv4_start - 1] if ipv4_start != 0 else None, 'ff:ff', address[ipv4_end + 1:] if ipv4_end else None]
    address = ':'.join(filter(None, addr_comp))

  # addresses are made up of eight colon separated groups of four hex digits
  # with leading zeros being optional, and a single '::' can stand in for one
  # or more groups of zeros
  # https://en.wikipedia.org/wiki/IPv6#Address_format

  if address.count('::') > 1 or ':::' in address:
    return False  # multiple groupings of zeros can't be collapsed

  if '::' in address:
    head, tail = address.split('::')
    groups = (head.split(':') if head else []) + (tail.split(':') if tail else [])

    if len(groups) > 7:
      return False  # too many groups to have any collapsed
  else:
    groups = address.split(':')

    if len(groups) != 8:
      return False  # wrong number of groups and none are collapsed

  for entry in groups:
    if not IPV6_GROUP.match(entry):
      return False

  return True


def is_valid_port(entry: Union[str, int, Sequence[str], Sequence[int]], allow_zero: bool = False) -> bool:
  """
  Checks if a string or int is a valid port number.

  :param entry: string, integer or list to be checked
  :param allow_zero: accept port number of zero (reserved by definition)

  :returns: **True** if input is an integer and within the valid port range, **False** otherwise
  """

  if isinstance(entry, (tuple, list)):
    for port in entry:
      if not is_valid_port(port, allow_zero):
        return False

    return True
  elif isinstance(entry, str):
    if not entry.isdigit() or not entry.isascii():
      return False
    elif entry[0] == '0' and len(entry) > 1:
      return False  # leading zeros, ex "001"

    entry = int(entry)
  elif isinstance(entry, bool) or not isinstance(entry, int):
    return False

  if allow_zero and entry == 0:
    return True

  return entry > 0 and entry < 65536


def expand_ipv6_address(address: str) -> str:
  """
  Expands abbreviated IPv6 addresses to their full colon separated hex format.
  For instance...

  ::

    >>> expand_ipv6_address('2a01:4f8:161:32c7::2')
    '2a01:04f8:0161:32c7:0000:0000:0000:0002'

    >>> expand_ipv6_address('::')
    '0000:0000:0000:0000:0000:0000:0000:0000'

    >>> expand_ipv6_address('::ffff:5.9.43.211')
    '0000:0000:0000:0000:0000:ffff:0509:2bd3'

  :param address: IPv6 address to be expanded

  :raises: **ValueError** if the address can't be expanded due to being malformed
  """

  if not is_valid_ipv6_address(address):
    raise ValueError("'%s' isn't a valid IPv6 address" % address)

  if address.count('.') == 3:
    # swaps an embedded ipv4 address for its two hex groups, such as...
    #
    #   '5.9.43.211' => '0509:2bd3'

    ipv4_start = address.rfind(':', 0, address.find('.')) + 1
    ipv4_end = address.find(':', ipv4_start + 1)

    if ipv4_end == -1:
      ipv4_end = len(address)

    octets = tuple([int(octet) for octet in address[ipv4_start:ipv4_end].split('.')])
    address = address[:ipv4_start] + '%02x%02x:%02x%02x' % octets + address[ipv4_end:]

  if '::' in address:
    head, tail = address.split('::')
    head_groups = head.split(':') if head else []
    tail_groups = tail.split(':') if tail else []
    groups = head_groups + ['0'] * (8 - len(head_groups) - len(tail_groups)) + tail_groups
  else:
    groups = address.split(':')

  return ':'.join([group.zfill(4) for group in groups])


def get_mask_ipv4(bits: int) -> str:
  """
  Provides the IPv4 mask for a given number of bits, in the dotted-quad format.

  :param bits: number of bits to be converted

  :returns: **str** with the subnet mask representation for this many bits

  :raises: **ValueError** if given a number of bits outside the range of 0-32
  """

  if bits > 32 or bits < 0:
    raise ValueError('A mask can only be 0-32 bits, got %i' % bits)

  mask = (0xFFFFFFFF << (32 - bits)) & 0xFFFFFFFF
  return '.'.join([str((mask >> shift) & 0xFF) for shift in (24, 16, 8, 0)])


def get_mask_ipv6(bits: int) -> str:
  """
  Provides the IPv6 mask for a given number of bits, in the uppercase hex
  colon-delimited format.

  :param bits: number of bits to be converted

  :returns: **str** with the subnet mask representation for this many bits

  :raises: **ValueError** if given a number of bits outside the range of 0-128
  """

  if bits > 128 or bits < 0:
    raise ValueError('A mask can only be 0-128 bits, got %i' % bits)

  mask = ((1 << 128) - 1) ^ ((1 << (128 - bits)) - 1)
  return ':'.join(['%04X' % ((mask >> shift) & 0xFFFF) for shift in range(112, -1, -16)])


def _get_masked_bits(mask: str) -> int:
  """
  Provides the number of bits that an IPv4 subnet mask represents. Note that
  not all masks can be represented by a bit count.

  :param mask: mask to be converted

  :returns: **int** with the number of bits represented by the mask

  :raises: **ValueError** if the mask is invalid or can't be converted
  """

  if not is_valid_ipv4_address(mask):
    raise ValueError("'%s' is an invalid subnet mask" % mask)

  value = 0

  for octet in mask.split('.'):
    value = (value << 8) + int(octet)

  # the unmasked bits must all be trailing, so flipping them gives 2^n - 1

  host_bits = ~value & 0xFFFFFFFF

  if host_bits & (host_bits + 1):
    raise ValueError('Unable to convert mask to a bit count: %s' % mask)

  return 32 - host_bits.bit_length()
