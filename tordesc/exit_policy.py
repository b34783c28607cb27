# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Representation of the exit policy a relay's server descriptor lists. Rules
are parsed structurally and kept in the order they were listed, so the first
matching rule is always the first in the sequence. For instance...

::

  >>> from tordesc.exit_policy import ExitPolicy
  >>> policy = ExitPolicy('accept *:80', 'accept *:443', 'reject *:*')
  >>> print(policy)
  accept *:80, accept *:443, reject *:*
  >>> [rule.is_accept for rule in policy]
  [True, True, False]

::

  ExitPolicy - Exit policy for a Tor relay
    |- __len__ - number of rules in the policy
    |- __str__  - string representation
    +- __iter__ - ExitPolicyRule entries that this contains

  ExitPolicyRule - Single rule of an exit policy chain
    |- is_address_wildcard - checks if we'll accept any address
    |- is_port_wildcard - checks if we'll accept any port
    |- get_address_type - provides the protocol our ip address belongs to
    |- get_mask - provides the address representation of our mask
    |- get_masked_bits - provides the bit representation of our mask
    +- __str__ - string representation for this rule

.. data:: AddressType (enum)

  Enumerations for IP address types that can be in an exit policy.

  ============ ===========
  AddressType  Description
  ============ ===========
  **WILDCARD** any address of either IPv4 or IPv6
  **IPv4**     IPv4 address
  **IPv6**     IPv6 address
  ============ ===========
"""

import tordesc.util
import tordesc.util.connection
import tordesc.util.enum
import tordesc.util.str_tools

from typing import Any, Iterator, Optional, Union

AddressType = tordesc.util.enum.Enum(('WILDCARD', 'Wildcard'), ('IPv4', 'IPv4'), ('IPv6', 'IPv6'))


class ExitPolicy(object):
  """
  Policy for the destinations that a relay allows or denies exiting to. This
  is, in effect, just an ordered tuple of
  :class:`~tordesc.exit_policy.ExitPolicyRule` entries. Policies are
  immutable.

  :param list rules: **str** or :class:`~tordesc.exit_policy.ExitPolicyRule`
    entries that make up this policy

  :raises:
    * **TypeError** if a rule is neither a string nor ExitPolicyRule
    * **ValueError** if a string rule is malformed
  """

  def __init__(self, *rules: Union[str, bytes, 'tordesc.exit_policy.ExitPolicyRule']) -> None:
    parsed = []

    for rule in rules:
      if isinstance(rule, ExitPolicyRule):
        parsed.append(rule)
      elif isinstance(rule, (bytes, str)):
        parsed.append(ExitPolicyRule(rule.strip()))
      else:
        raise TypeError('Exit policy rules can only contain strings or ExitPolicyRules, got a %s (%s)' % (type(rule), rules))

    object.__setattr__(self, '_rules', tuple(parsed))

  def __setattr__(self, name: str, value: Any) -> None:
    raise AttributeError('Exit policies are immutable')

  def __delattr__(self, name: str) -> None:
    raise AttributeError('Exit policies are immutable')

  def __len__(self) -> int:
    return len(self._rules)

  def __iter__(self) -> Iterator['tordesc.exit_policy.ExitPolicyRule']:
    for rule in self._rules:
      yield rule

  def __getitem__(self, index: int) -> 'tordesc.exit_policy.ExitPolicyRule':
    return self._rules[index]

  def __str__(self) -> str:
    return ', '.join([str(rule) for rule in self._rules])

  def __repr__(self) -> str:
    return 'ExitPolicy(%s)' % ', '.join([repr(str(rule)) for rule in self._rules])

  def __hash__(self) -> int:
    my_hash = 0

    for rule in self._rules:
      my_hash *= 1024
      my_hash += hash(rule)

    return my_hash

  def __eq__(self, other: Any) -> bool:
    return self._rules == other._rules if isinstance(other, ExitPolicy) else False

  def __ne__(self, other: Any) -> bool:
    return not self == other


class ExitPolicyRule(object):
  """
  Single rule from a relay's exit policy. These rules are chained together to
  form complete policies that describe where a relay will and will not allow
  traffic to exit.

  The format of these rules are formally described in the `dir-spec
  <https://gitweb.torproject.org/torspec.git/tree/dir-spec.txt>`_ as an
  'exitpattern'...

  ::

    exitpattern ::= addrspec ":" portspec
    addrspec ::= "*" | ip4spec | ip6spec
    portspec ::= "*" | port | port "-" port

  Only the structure of a rule is parsed. Rules are immutable.

  :var bool is_accept: indicates if exiting is allowed or disallowed

  :var str address: address that this rule is for, **None** if it's a
    wildcard

  :var int min_port: lower end of the port range that we include (inclusive)
  :var int max_port: upper end of the port range that we include (inclusive)

  :param str rule: exit policy rule to be parsed

  :raises: **ValueError** if input isn't a valid tor exit policy rule
  """

  def __init__(self, rule: Union[str, bytes]) -> None:
    # policy ::= "accept" exitpattern | "reject" exitpattern

    rule = tordesc.util.str_tools._to_unicode(rule)

    if rule.startswith('accept') or rule.startswith('reject'):
      exitpattern = rule[6:]
    else:
      raise ValueError("An exit policy must start with either 'accept' or 'reject': %s" % rule)

    if not exitpattern.startswith(' '):
      raise ValueError('An exit policy should have a space separating its accept/reject from the exit pattern: %s' % rule)

    exitpattern = exitpattern.lstrip()

    if ':' not in exitpattern or ']' in exitpattern.rsplit(':', 1)[1]:
      raise ValueError("An exitpattern must be of the form 'addrspec:portspec': %s" % rule)

    addrspec, portspec = exitpattern.rsplit(':', 1)
    address, address_type, masked_bits, mask = _parse_addrspec(rule, addrspec)
    min_port, max_port = _parse_portspec(rule, portspec)

    for attr, value in (
      ('is_accept', rule.startswith('accept')),
      ('address', address),
      ('min_port', min_port),
      ('max_port', max_port),
      ('_address_type', address_type),
      ('_masked_bits', masked_bits),
      ('_mask', mask),
    ):
      object.__setattr__(self, attr, value)

  def __setattr__(self, name: str, value: Any) -> None:
    raise AttributeError('Exit policy rules are immutable')

  def __delattr__(self, name: str) -> None:
    raise AttributeError('Exit policy rules are immutable')

  def is_address_wildcard(self) -> bool:
    """
    **True** if we'll match against **any** address, **False** otherwise.

    Note that this is different than a '/0' address, which is a wildcard for
    only either IPv4 or IPv6.

    :returns: **bool** for if our address matching is a wildcard
    """

    return self._address_type == AddressType.WILDCARD

  def is_port_wildcard(self) -> bool:
    """
    **True** if we'll match against any port, **False** otherwise.

    :returns: **bool** for if our port matching is a wildcard
    """

    return self.min_port in (0, 1) and self.max_port == 65535

  def get_address_type(self) -> 'tordesc.exit_policy.AddressType':
    """
    Provides the :data:`~tordesc.exit_policy.AddressType` for our policy.

    :returns: :data:`~tordesc.exit_policy.AddressType` for the type of address that we have
    """

    return self._address_type

  def get_mask(self) -> Optional[str]:
    """
    Provides the address represented by our mask. This is **None** if our
    address type is a wildcard.

    :returns: str of our subnet mask for the address (ex. '255.255.255.0')
    """

    return self._mask

  def get_masked_bits(self) -> Optional[int]:
    """
    Provides the number of bits our subnet mask represents. This is **None** if
    our mask can't have a bit representation.

    :returns: int with the bit representation of our mask
    """

    return self._masked_bits

  def __str__(self) -> str:
    """
    Provides the string representation of our policy. This does not
    necessarily match the rule that we were constructed from (due to things
    like IPv6 address expansion or the multiple representations that our mask
    can have). However, it is a valid that would be accepted by our constructor
    to re-create this rule.
    """

    label = 'accept ' if self.is_accept else 'reject '

    if self.is_address_wildcard():
      label += '*:'
    else:
      address_type = self.get_address_type()

      if address_type == AddressType.IPv4:
        label += self.address
      else:
        label += '[%s]' % self.address

      # Including our mask label as follows...
      # - exclude our mask if it doesn't do anything
      # - use our masked bit count if we can
      # - use the mask itself otherwise

      if (address_type == AddressType.IPv4 and self._masked_bits == 32) or \
         (address_type == AddressType.IPv6 and self._masked_bits == 128):
        label += ':'
      elif self._masked_bits is not None:
        label += '/%i:' % self._masked_bits
      else:
        label += '/%s:' % self.get_mask()

    if self.min_port == 1 and self.max_port == 65535:
      label += '*'
    elif self.min_port == self.max_port:
      label += str(self.min_port)
    else:
      label += '%i-%i' % (self.min_port, self.max_port)

    return label

  def __repr__(self) -> str:
    return 'ExitPolicyRule(%r)' % str(self)

  def __hash__(self) -> int:
    return tordesc.util._hash_attr(self, 'is_accept', 'address', 'min_port', 'max_port') * 1024 + hash(self._mask)

  def __eq__(self, other: Any) -> bool:
    if not isinstance(other, ExitPolicyRule):
      return False

    return (self.is_accept, self.address, self._mask, self.min_port, self.max_port) == (other.is_accept, other.address, other._mask, other.min_port, other.max_port)

  def __ne__(self, other: Any) -> bool:
    return not self == other


def _parse_addrspec(rule: str, addrspec: str) -> tuple:
  """
  Parses the addrspec of a rule...

  ::

    addrspec ::= "*" | ip4spec | ip6spec

  :returns: **tuple** of the form (address, address_type, masked_bits, mask)

  :raises: **ValueError** if the addrspec is malformed
  """

  if '/' in addrspec:
    address, addr_extra = addrspec.split('/', 1)
  else:
    address, addr_extra = addrspec, None

  if addrspec == '*':
    return None, AddressType.WILDCARD, None, None
  elif tordesc.util.connection.is_valid_ipv4_address(address):
    # ipv4spec ::= ip4 | ip4 "/" num_ip4_bits | ip4 "/" ip4mask
    # ip4 ::= an IPv4 address in dotted-quad format
    # ip4mask ::= an IPv4 mask in dotted-quad format
    # num_ip4_bits ::= an integer between 0 and 32

    if addr_extra is None:
      masked_bits = 32
    elif tordesc.util.connection.is_valid_ipv4_address(addr_extra):
      # provided with an ip4mask
      try:
        masked_bits = tordesc.util.connection._get_masked_bits(addr_extra)
      except ValueError:
        # mask can't be represented as a number of bits (ex. '255.255.0.255')
        return address, AddressType.IPv4, None, addr_extra
    elif addr_extra.isdigit() and addr_extra.isascii():
      # provided with a num_ip4_bits
      masked_bits = int(addr_extra)

      if masked_bits < 0 or masked_bits > 32:
        raise ValueError('IPv4 masks must be in the range of 0-32 bits')
    else:
      raise ValueError("The '%s' isn't a mask nor number of bits: %s" % (addr_extra, rule))

    return address, AddressType.IPv4, masked_bits, tordesc.util.connection.get_mask_ipv4(masked_bits)
  elif address.startswith('[') and address.endswith(']') and \
    tordesc.util.connection.is_valid_ipv6_address(address[1:-1]):
    # ip6spec ::= ip6 | ip6 "/" num_ip6_bits
    # ip6 ::= an IPv6 address, surrounded by square brackets.
    # num_ip6_bits ::= an integer between 0 and 128

    address = tordesc.util.connection.expand_ipv6_address(address[1:-1]).upper()

    if addr_extra is None:
      masked_bits = 128
    elif addr_extra.isdigit() and addr_extra.isascii():
      # provided with a num_ip6_bits
      masked_bits = int(addr_extra)

      if masked_bits < 0 or masked_bits > 128:
        raise ValueError('IPv6 masks must be in the range of 0-128 bits')
    else:
      raise ValueError("The '%s' isn't a number of bits: %s" % (addr_extra, rule))

    return address, AddressType.IPv6, masked_bits, tordesc.util.connection.get_mask_ipv6(masked_bits)
  else:
    raise ValueError("'%s' isn't a wildcard, IPv4, or IPv6 address: %s" % (addrspec, rule))


def _parse_portspec(rule: str, portspec: str) -> tuple:
  """
  Parses the portspec of a rule...

  ::

    portspec ::= "*" | port | port "-" port
    port ::= an integer between 1 and 65535, inclusive.

  Due to a tor bug the dir-spec says that we should accept port of zero, but
  connections to port zero are never permitted.

  :returns: **tuple** of the form (min_port, max_port)

  :raises: **ValueError** if the portspec is malformed
  """

  if portspec == '*':
    return 1, 65535
  elif portspec.isdigit():
    # provided with a single port
    if tordesc.util.connection.is_valid_port(portspec, allow_zero = True):
      return int(portspec), int(portspec)
    else:
      raise ValueError("'%s' isn't within a valid port range: %s" % (portspec, rule))
  elif '-' in portspec:
    # provided with a port range
    port_comp = portspec.split('-', 1)

    if tordesc.util.connection.is_valid_port(port_comp, allow_zero = True):
      min_port, max_port = int(port_comp[0]), int(port_comp[1])

      if min_port > max_port:
        raise ValueError("Port range has a lower bound that's greater than its upper bound: %s" % rule)

      return min_port, max_port
    else:
      raise ValueError('Malformed port range: %s' % rule)
  else:
    raise ValueError("Port value isn't a wildcard, integer, or range: %s" % rule)
