# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Parsing for Tor server descriptors, which contains the infrequently changing
information about a Tor relay (contact information, exit policy, public keys,
etc). This information is provided from a few sources...

* the 'cached-descriptors' file in tor's data directory
* tor metrics, at https://metrics.torproject.org/data.html
* directory authorities and mirrors via their DirPort

Documents can contain any number of descriptors, each optionally preceded by
annotations...

::

  @type server-descriptor 1.0
  router caerSidi 71.35.133.197 9001 0 0
  platform Tor 0.2.1.30 on Linux x86_64
  <rest of the descriptor content>
  router-signature
  -----BEGIN SIGNATURE-----
  <signature for the above descriptor>
  -----END SIGNATURE-----

**Module Overview:**

::

  parse - Iterates over the server descriptors in a document.
  parse_file - Iterates over the server descriptors in a file.

  ParseResult - Descriptor or error for a single descriptor of a document.
    +- is_ok - checks if the descriptor was parsed successfully

  ServerDescriptor - Tor server descriptor.
    |- from_str - provides the descriptor within the given content
    |- content - creates descriptor content with the given attributes
    |- create - creates a descriptor with the given attributes
    |- digest - calculates the digest value for our content
    |- is_hidden_service_dir - checks if the relay is a hidden service directory
    |- get_annotations - dictionary of content prior to the descriptor entry
    |- get_bytes - bytes the descriptor was parsed from
    +- __str__ - string that the descriptor was made from

.. data:: ParserState (enum)

  Position of the assembler within a descriptor.

  ==================== ===========
  ParserState          Description
  ==================== ===========
  **EXPECT_ROUTER**    collecting annotations until the 'router' line
  **IN_BODY**          reading the descriptor's fields
  **EXPECT_SIGNATURE** reading the 'router-signature' line
  **DONE**             descriptor is complete
  ==================== ===========

.. data:: Cardinality (enum)

  Number of times a keyword can appear in a descriptor.

  ================= ===========
  Cardinality       Description
  ================= ===========
  **AT_MOST_ONCE**  keyword can appear zero or one times
  **ANY**           keyword can appear any number of times
  ================= ===========
"""

import collections
import datetime
import hashlib
import re
import types

import tordesc
import tordesc.descriptor
import tordesc.exit_policy
import tordesc.util
import tordesc.util.connection
import tordesc.util.enum
import tordesc.util.str_tools
import tordesc.util.tor_tools

from tordesc.descriptor import (
  _descriptor_content,
  _random_crypto_blob,
  _random_date,
  _random_fingerprint,
  _random_ipv4_address,
  _random_nickname,
)

from tordesc.util import log
from typing import Any, BinaryIO, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

ParserState = tordesc.util.enum.Enum('EXPECT_ROUTER', 'IN_BODY', 'EXPECT_SIGNATURE', 'DONE')
Cardinality = tordesc.util.enum.UppercaseEnum('AT_MOST_ONCE', 'ANY')

# relay descriptors must have exactly one of the following
REQUIRED_FIELDS = (
  'router',
  'bandwidth',
  'published',
  'fingerprint',
  'onion-key',
  'signing-key',
  'router-signature',
)

# entries that must be followed by a block
BLOCK_KEYWORDS = (
  'onion-key',
  'signing-key',
  'router-signature',
  'identity-ed25519',
)

ROUTER_LINE = re.compile(b'^router[ \t]', re.MULTILINE)
PROTOCOL_VERSION = re.compile('^[0-9]+$')

RELAY_SERVER_HEADER = (
  ('router', '%s %s 9001 0 0' % (_random_nickname(), _random_ipv4_address())),
  ('published', _random_date()),
  ('bandwidth', '153600 256000 104590'),
  ('fingerprint', ' '.join(tordesc.util.str_tools._split_by_length(_random_fingerprint(), 4))),
  ('reject', '*:*'),
  ('onion-key', _random_crypto_blob('RSA PUBLIC KEY')),
  ('signing-key', _random_crypto_blob('RSA PUBLIC KEY')),
)

RELAY_SERVER_FOOTER = (
  ('router-signature', _random_crypto_blob('SIGNATURE')),
)

# Attributes of our descriptor along with their default value. Entries with a
# list or set default can appear multiple times.

ATTRIBUTES = {
  'nickname': None,
  'address': None,
  'or_port': None,
  'socks_port': None,
  'dir_port': None,

  'average_bandwidth': None,
  'burst_bandwidth': None,
  'observed_bandwidth': None,

  'platform': None,
  'published': None,
  'uptime': None,
  'contact': None,

  'onion_key': None,
  'signing_key': None,
  'ntor_onion_key': None,

  'fingerprint': None,
  'family': set(),
  'exit_policy': [],

  'hibernating': False,
  'extra_info_cache': False,
  'allow_single_hop_exits': False,
  'eventdns': False,
  'hidden_service_dir': None,

  'link_protocols': None,
  'circuit_protocols': None,
  'or_addresses': [],
  'extra_info_digest': None,
  'extra_info_sha256_digest': None,

  'ed25519_certificate': None,
  'ed25519_master_key': None,
  'ed25519_signature': None,

  'signature': None,
}

# attributes populated by the assembler rather than keyword lines

DOCUMENT_ATTRIBUTES = ('signed_region', 'annotations', 'unrecognized_lines')


class Field(collections.namedtuple('Field', ['rule', 'cardinality'])):
  """
  Grammar rule for a keyword.

  :var function rule: parses the (value, block) of a line into a dictionary of
    attributes, raising a **ValueError** if they're malformed
  :var tordesc.descriptor.server_descriptor.Cardinality cardinality: number of
    times the keyword can appear
  """


class ParseResult(collections.namedtuple('ParseResult', ['descriptor', 'error'])):
  """
  Outcome of parsing a single descriptor within a document. Exactly one of our
  attributes is set.

  :var tordesc.descriptor.server_descriptor.ServerDescriptor descriptor:
    descriptor if it was successfully parsed, **None** otherwise
  :var tordesc.ParseError error: reason the descriptor was rejected, **None**
    if it was successfully parsed
  """

  def is_ok(self) -> bool:
    """
    Checks if this descriptor was successfully parsed.

    :returns: **True** if we have a descriptor, **False** if it was rejected
    """

    return self.error is None


def _parse_router_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "router" nickname address ORPort SocksPort DirPort

  router_comp = value.split()

  if len(router_comp) != 5:
    raise ValueError('router line must have five values, but had %i' % len(router_comp))

  nickname, address, or_port, socks_port, dir_port = router_comp

  if not tordesc.util.tor_tools.is_valid_nickname(nickname):
    raise ValueError("'%s' isn't a valid nickname" % nickname)
  elif not tordesc.util.connection.is_valid_ipv4_address(address):
    raise ValueError("'%s' isn't a valid IPv4 address" % address)

  for label, port in (('ORPort', or_port), ('SocksPort', socks_port), ('DirPort', dir_port)):
    if not tordesc.util.connection.is_valid_port(port, allow_zero = True):
      raise ValueError("%s '%s' is invalid" % (label, port))

  return {
    'nickname': nickname,
    'address': address,
    'or_port': int(or_port),
    'socks_port': int(socks_port),
    'dir_port': None if dir_port == '0' else int(dir_port),
  }


def _parse_bandwidth_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "bandwidth" bandwidth-avg bandwidth-burst bandwidth-observed

  bandwidth_comp = value.split()

  if len(bandwidth_comp) != 3:
    raise ValueError('bandwidth line must have three values, but had %i' % len(bandwidth_comp))

  for label, entry in zip(('average', 'burst', 'observed'), bandwidth_comp):
    if not _is_int(entry):
      raise ValueError("%s rate isn't numeric: %s" % (label, entry))

  return {
    'average_bandwidth': int(bandwidth_comp[0]),
    'burst_bandwidth': int(bandwidth_comp[1]),
    'observed_bandwidth': int(bandwidth_comp[2]),
  }


def _parse_published_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "published" YYYY-MM-DD HH:MM:SS

  return {'published': tordesc.util.str_tools._parse_timestamp(value)}


def _parse_fingerprint_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # This is forty hex digits split into space separated groups of four.

  if not tordesc.util.tor_tools.is_valid_grouped_fingerprint(value):
    raise ValueError('fingerprints must be ten space separated groups of four hex digits: %s' % value)

  return {'fingerprint': value.replace(' ', '')}


def _parse_uptime_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  if not _is_int(value):
    raise ValueError('uptime must be a non-negative integer: %s' % value)

  return {'uptime': int(value)}


def _parse_protocols_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "protocols" "Link" versions "Circuit" versions

  protocols_comp = value.split()

  if not protocols_comp or protocols_comp[0] != 'Link' or 'Circuit' not in protocols_comp:
    raise ValueError("protocols must be of the form 'Link <versions> Circuit <versions>': %s" % value)

  circuit_index = protocols_comp.index('Circuit')
  link_versions, circuit_versions = protocols_comp[1:circuit_index], protocols_comp[circuit_index + 1:]

  if not link_versions or not circuit_versions:
    raise ValueError('protocols must list both link and circuit versions: %s' % value)

  for version in link_versions + circuit_versions:
    if not PROTOCOL_VERSION.match(version):
      raise ValueError("protocol version isn't numeric: %s" % version)

  return {
    'link_protocols': tuple([int(v) for v in link_versions]),
    'circuit_protocols': tuple([int(v) for v in circuit_versions]),
  }


def _parse_hidden_service_dir_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "hidden-service-dir" *(SP VersionNum), with a default version of two

  versions = value.split()

  for version in versions:
    if not PROTOCOL_VERSION.match(version):
      raise ValueError("hidden service directory version isn't numeric: %s" % version)

  return {'hidden_service_dir': tuple(versions) if versions else ('2',)}


def _parse_family_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "family" names, where each is a nickname, "$" fingerprint, or
  # "$" fingerprint followed by "=" or "~" and a nickname

  family = set()

  for entry in value.split():
    if not _is_valid_family_entry(entry):
      raise ValueError("'%s' isn't a nickname or fingerprint" % entry)

    family.add(entry)

  return {'family': family}


def _parse_or_address_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "or-address" SP ADDRESS ":" PORT

  if ':' not in value or len(value.split()) != 1:
    raise ValueError("must be of the form 'address:port': %s" % value)

  address, port = value.rsplit(':', 1)
  is_ipv6 = address.startswith('[') and address.endswith(']')

  if is_ipv6:
    address = address[1:-1]  # remove brackets

    if not tordesc.util.connection.is_valid_ipv6_address(address):
      raise ValueError("'%s' isn't a valid IPv6 address" % address)
  elif not tordesc.util.connection.is_valid_ipv4_address(address):
    raise ValueError("'%s' isn't a valid IPv4 address" % address)

  if not tordesc.util.connection.is_valid_port(port):
    raise ValueError("'%s' isn't a valid port" % port)

  return {'or_addresses': [(address, int(port), is_ipv6)]}


def _parse_extra_info_digest_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  # "extra-info-digest" SP sha1-digest [SP sha256-digest]

  digest_comp = value.split()

  if not digest_comp or len(digest_comp) > 2:
    raise ValueError('should have a hex digest, optionally followed by a base64 digest: %s' % value)
  elif not tordesc.util.tor_tools.is_hex_digits(digest_comp[0], 40):
    raise ValueError('extra-info digests should consist of forty hex digits: %s' % digest_comp[0])
  elif len(digest_comp) == 2 and not tordesc.util.str_tools.is_base64(digest_comp[1]):
    raise ValueError("sha256 digest isn't base64: %s" % digest_comp[1])

  return {
    'extra_info_digest': digest_comp[0],
    'extra_info_sha256_digest': digest_comp[1] if len(digest_comp) == 2 else None,
  }


def _parse_exit_policy_line(keyword: str) -> Callable[[str, Optional['tordesc.descriptor.Block']], Dict[str, Any]]:
  def _parse(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
    return {'exit_policy': [tordesc.exit_policy.ExitPolicyRule('%s %s' % (keyword, value))]}

  return _parse


def _parse_text_line(attribute: str) -> Callable[[str, Optional['tordesc.descriptor.Block']], Dict[str, Any]]:
  def _parse(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
    return {attribute: value}

  return _parse


def _parse_flag_line(attribute: str) -> Callable[[str, Optional['tordesc.descriptor.Block']], Dict[str, Any]]:
  # flags are set when the keyword is present, and can optionally be
  # explicitly enabled or disabled with a '1' or '0' argument

  def _parse(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
    if value in ('', '1'):
      return {attribute: True}
    elif value == '0':
      return {attribute: False}
    else:
      raise ValueError("flag argument must be '0' or '1': %s" % value)

  return _parse


def _parse_base64_line(attribute: str) -> Callable[[str, Optional['tordesc.descriptor.Block']], Dict[str, Any]]:
  # single base64 value, with optional padding

  def _parse(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
    if len(value.split()) != 1:
      raise ValueError('should have a single base64 value: %s' % value)

    tordesc.util.str_tools._decode_b64(value)
    return {attribute: value}

  return _parse


def _parse_key_block(attribute: str) -> Callable[[str, Optional['tordesc.descriptor.Block']], Dict[str, Any]]:
  # keyword with no arguments that's followed by a block, which we decode

  def _parse(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
    if value:
      raise ValueError("shouldn't have any arguments: %s" % value)
    elif block is None:
      raise ValueError('must be followed by a block')

    decoded = tordesc.util.str_tools._decode_b64(''.join(block.content.split()))

    if not decoded:
      raise ValueError('block is empty')

    return {attribute: decoded}

  return _parse


def _parse_identity_ed25519_line(value: str, block: Optional['tordesc.descriptor.Block']) -> Dict[str, Any]:
  if value:
    raise ValueError("shouldn't have any arguments: %s" % value)
  elif block is None or block.block_type != 'ED25519 CERT':
    raise ValueError('must be followed by an ED25519 CERT block')
  elif not block.content:
    raise ValueError('block is empty')

  return {'ed25519_certificate': block.content}


FIELDS = {
  'router': Field(_parse_router_line, Cardinality.AT_MOST_ONCE),
  'bandwidth': Field(_parse_bandwidth_line, Cardinality.AT_MOST_ONCE),
  'platform': Field(_parse_text_line('platform'), Cardinality.AT_MOST_ONCE),
  'published': Field(_parse_published_line, Cardinality.AT_MOST_ONCE),
  'fingerprint': Field(_parse_fingerprint_line, Cardinality.AT_MOST_ONCE),
  'onion-key': Field(_parse_key_block('onion_key'), Cardinality.AT_MOST_ONCE),
  'signing-key': Field(_parse_key_block('signing_key'), Cardinality.AT_MOST_ONCE),
  'ntor-onion-key': Field(_parse_base64_line('ntor_onion_key'), Cardinality.AT_MOST_ONCE),
  'accept': Field(_parse_exit_policy_line('accept'), Cardinality.ANY),
  'reject': Field(_parse_exit_policy_line('reject'), Cardinality.ANY),
  'router-signature': Field(_parse_key_block('signature'), Cardinality.AT_MOST_ONCE),
  'hibernating': Field(_parse_flag_line('hibernating'), Cardinality.AT_MOST_ONCE),
  'caches-extra-info': Field(_parse_flag_line('extra_info_cache'), Cardinality.AT_MOST_ONCE),
  'allow-single-hop-exits': Field(_parse_flag_line('allow_single_hop_exits'), Cardinality.AT_MOST_ONCE),
  'eventdns': Field(_parse_flag_line('eventdns'), Cardinality.AT_MOST_ONCE),
  'hidden-service-dir': Field(_parse_hidden_service_dir_line, Cardinality.AT_MOST_ONCE),
  'family': Field(_parse_family_line, Cardinality.ANY),
  'contact': Field(_parse_text_line('contact'), Cardinality.AT_MOST_ONCE),
  'or-address': Field(_parse_or_address_line, Cardinality.ANY),
  'extra-info-digest': Field(_parse_extra_info_digest_line, Cardinality.AT_MOST_ONCE),
  'protocols': Field(_parse_protocols_line, Cardinality.AT_MOST_ONCE),
  'uptime': Field(_parse_uptime_line, Cardinality.AT_MOST_ONCE),
  'identity-ed25519': Field(_parse_identity_ed25519_line, Cardinality.AT_MOST_ONCE),
  'master-key-ed25519': Field(_parse_base64_line('ed25519_master_key'), Cardinality.AT_MOST_ONCE),
  'router-sig-ed25519': Field(_parse_base64_line('ed25519_signature'), Cardinality.AT_MOST_ONCE),
}


def _is_int(entry: str) -> bool:
  return entry.isdigit() and entry.isascii()


def _is_valid_family_entry(entry: str) -> bool:
  if tordesc.util.tor_tools.is_valid_nickname(entry):
    return True
  elif not entry.startswith('$') or not tordesc.util.tor_tools.is_valid_fingerprint(entry[1:41]):
    return False
  elif len(entry) == 41:
    return True
  else:
    return entry[41] in ('=', '~') and tordesc.util.tor_tools.is_valid_nickname(entry[42:])


def _line_text(line: 'tordesc.descriptor.Line') -> str:
  # reconstructs the content of a keyword line, along with its block

  text = '%s %s' % (line.keyword, line.value) if line.value else line.keyword

  if line.block:
    text += '\n-----BEGIN %s-----\n%s\n-----END %s-----' % (line.block.block_type, line.block.content, line.block.block_type)

  return text


def _validate(attributes: Mapping[str, Any], line_numbers: Mapping[str, int], published_tolerance: Optional[datetime.timedelta] = None) -> None:
  """
  Checks that an assembled descriptor is complete and its values are within
  their bounds.

  :param attributes: attributes parsed from the descriptor
  :param line_numbers: keywords we parsed mapped to the line they're on
  :param published_tolerance: how far in the future the descriptor's
    publication can be, this isn't checked if **None**

  :raises: :class:`~tordesc.ValidationError` if the descriptor is invalid
  """

  for keyword in REQUIRED_FIELDS:
    if keyword not in line_numbers:
      raise tordesc.ValidationError(keyword, "Descriptor must have a '%s' entry" % keyword)

  if not tordesc.util.tor_tools.is_valid_fingerprint(attributes['fingerprint']):
    raise tordesc.ValidationError('fingerprint', 'Tor relay fingerprints consist of forty hex digits: %s' % attributes['fingerprint'], line_numbers['fingerprint'])

  for attr in ('or_port', 'socks_port', 'dir_port'):
    port = attributes.get(attr)

    if port is not None and not tordesc.util.connection.is_valid_port(port, allow_zero = True):
      raise tordesc.ValidationError('router', '%s must be between 0 and 65535: %s' % (attr, port), line_numbers['router'])

  for attr, keyword in (('average_bandwidth', 'bandwidth'), ('burst_bandwidth', 'bandwidth'), ('observed_bandwidth', 'bandwidth'), ('uptime', 'uptime')):
    value = attributes.get(attr)

    if value is not None and value < 0:
      raise tordesc.ValidationError(keyword, '%s must be non-negative: %i' % (attr, value), line_numbers.get(keyword))

  if published_tolerance is not None:
    now = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo = None)

    if attributes['published'] > now + published_tolerance:
      raise tordesc.ValidationError('published', 'Descriptor was published too far in the future: %s' % attributes['published'], line_numbers['published'])


class _DescriptorAssembler(object):
  """
  State machine that builds a descriptor from its keyword lines. Lines are
  provided in document order through **add()**, which provides the
  :class:`~tordesc.descriptor.server_descriptor.ServerDescriptor` when its
  'router-signature' is reached.

  :var tordesc.descriptor.server_descriptor.ParserState state: position
    within the descriptor
  :var int router_start: byte offset of our 'router' line, **None** if we
    haven't reached it yet
  """

  def __init__(self, content: bytes, validate: bool = True, published_tolerance: Optional[datetime.timedelta] = None) -> None:
    self.state = ParserState.EXPECT_ROUTER
    self.router_start = None  # type: Optional[int]

    self._content = content
    self._validate = validate
    self._published_tolerance = published_tolerance

    self._annotation_start = None  # type: Optional[int]
    self._annotations = []  # type: List[str]
    self._attributes = {}  # type: Dict[str, Any]
    self._seen = {}  # type: Dict[str, int]
    self._line_numbers = {}  # type: Dict[str, int]
    self._unrecognized_lines = []  # type: List[str]
    self._last_line_number = None  # type: Optional[int]

  def add(self, line: 'tordesc.descriptor.Line') -> Optional['tordesc.descriptor.server_descriptor.ServerDescriptor']:
    """
    Processes the next line of our descriptor.

    :param line: keyword line to be processed

    :returns: :class:`~tordesc.descriptor.server_descriptor.ServerDescriptor`
      if this completes the descriptor, **None** otherwise

    :raises: :class:`~tordesc.ParseError` if the line can't be added
    """

    self._last_line_number = line.line_number

    if self.state == ParserState.EXPECT_ROUTER:
      if line.keyword.startswith('@'):
        if self._annotation_start is None:
          self._annotation_start = line.start

        self._annotations.append(_line_text(line))
      elif line.keyword == 'router':
        self.router_start = line.start
        self.state = ParserState.IN_BODY
        self._apply(line)
      else:
        raise tordesc.StructureError("Descriptor must start with a 'router' entry", line.keyword, line.line_number)
    elif self.state == ParserState.IN_BODY:
      if line.keyword == 'router-signature':
        self.state = ParserState.EXPECT_SIGNATURE
        return self._read_signature(line)

      self._apply(line)
    else:
      raise tordesc.StructureError("Content after the 'router-signature' entry must be a new descriptor", line.keyword, line.line_number)

    return None

  def finish(self) -> None:
    """
    Checks that we aren't partway through a descriptor at the end of the
    document.

    :raises: :class:`~tordesc.StructureError` if the document ended early
    """

    if self.state == ParserState.IN_BODY:
      raise tordesc.StructureError("Descriptor must end with a 'router-signature' entry", 'router-signature', self._last_line_number)
    elif self.state == ParserState.EXPECT_ROUTER and self._annotations:
      raise tordesc.StructureError("Annotations must be followed by a 'router' entry", None, self._last_line_number)

  def _apply(self, line: 'tordesc.descriptor.Line') -> None:
    field = FIELDS.get(line.keyword)

    if field is None:
      if log.is_tracing():
        log.trace("Ignoring unrecognized '%s' entry on line %i" % (line.keyword, line.line_number))

      self._unrecognized_lines.append(_line_text(line))
      return

    if field.cardinality == Cardinality.AT_MOST_ONCE and line.keyword in self._seen:
      raise tordesc.StructureError("The '%s' entry can only appear once in a descriptor, but was repeated on line %i (first on line %i)" % (line.keyword, line.line_number, self._seen[line.keyword]), line.keyword, line.line_number)

    self._seen.setdefault(line.keyword, line.line_number)

    try:
      if line.block is not None and line.keyword not in BLOCK_KEYWORDS:
        raise ValueError("shouldn't be followed by a %s block" % line.block.block_type)

      parsed = field.rule(line.value, line.block)
    except ValueError as exc:
      error = tordesc.FieldFormatError(line.keyword, line.line_number, str(exc))

      if self._validate:
        raise error

      log.debug('Treating malformed line as unrecognized content: %s' % error)
      self._unrecognized_lines.append(_line_text(line))
      return

    self._line_numbers.setdefault(line.keyword, line.line_number)

    for attr, value in parsed.items():
      if field.cardinality == Cardinality.ANY and attr in self._attributes:
        if isinstance(value, set):
          self._attributes[attr].update(value)
        else:
          self._attributes[attr].extend(value)
      else:
        self._attributes[attr] = value

  def _read_signature(self, line: 'tordesc.descriptor.Line') -> 'tordesc.descriptor.server_descriptor.ServerDescriptor':
    self._apply(line)

    # Signatures cover everything from the start of the 'router' line through
    # the newline that ends the 'router-signature' keyword line.

    keyword_line_end = self._content.find(b'\n', line.start)
    signed_end = len(self._content) if keyword_line_end == -1 else keyword_line_end + 1

    self.state = ParserState.DONE

    try:
      _validate(self._attributes, self._line_numbers, self._published_tolerance)
    except tordesc.ValidationError as exc:
      if self._validate:
        raise

      log.debug('Providing invalid descriptor since validation is disabled: %s' % exc)

    attributes = dict(self._attributes)
    attributes['signed_range'] = (self.router_start, signed_end)
    attributes['signed_region'] = self._content[self.router_start:signed_end]
    attributes['annotations'] = self._annotations
    attributes['unrecognized_lines'] = self._unrecognized_lines
    attributes['line_numbers'] = self._line_numbers

    raw_start = self._annotation_start if self._annotation_start is not None else self.router_start
    return ServerDescriptor(attributes, self._content[raw_start:line.end])


class ServerDescriptor(object):
  """
  Tor server descriptor. These are immutable, and own a copy of everything
  they reference from the document they were parsed from.

  :var str nickname: **\\*** relay's nickname
  :var str fingerprint: **\\*** identity key fingerprint
  :var datetime published: **\\*** time in UTC when this descriptor was made

  :var str address: **\\*** IPv4 address of the relay
  :var int or_port: **\\*** port used for relaying
  :var int socks_port: **\\*** port used as client (deprecated, usually zero)
  :var int dir_port: **\\*** port used for descriptor mirroring, **None** if
    the relay isn't a mirror

  :var str platform: line with operating system and tor version
  :var int uptime: uptime when published in seconds
  :var str contact: contact information
  :var tordesc.exit_policy.ExitPolicy exit_policy: **\\*** stated exit policy
  :var frozenset family: **\\*** nicknames or fingerprints of declared family

  :var int average_bandwidth: **\\*** average rate it's willing to relay in bytes/s
  :var int burst_bandwidth: **\\*** burst rate it's willing to relay in bytes/s
  :var int observed_bandwidth: **\\*** estimated capacity based on usage in bytes/s

  :var bytes onion_key: **\\*** decoded key used to encrypt EXTEND cells
  :var bytes signing_key: **\\*** decoded relay's long-term identity key
  :var str ntor_onion_key: base64 key used to encrypt EXTEND in the ntor protocol

  :var tuple link_protocols: link protocols supported by the relay
  :var tuple circuit_protocols: circuit protocols supported by the relay
  :var bool hibernating: **\\*** hibernating when published
  :var bool allow_single_hop_exits: **\\*** flag if single hop exiting is allowed
  :var bool extra_info_cache: **\\*** flag if a mirror for extra-info documents
  :var bool eventdns: **\\*** flag for evdns backend (deprecated)
  :var tuple hidden_service_dir: hidden service descriptor versions this
    relay is a directory for, **None** if it isn't one
  :var str extra_info_digest: upper-case hex encoded digest of our extra-info document
  :var str extra_info_sha256_digest: base64 encoded sha256 digest of our extra-info document
  :var tuple or_addresses: **\\*** alternative for our address/or_port
    attributes, each entry is a tuple of the form (address (**str**), port
    (**int**), is_ipv6 (**bool**))

  :var str ed25519_certificate: base64 encoded ed25519 certificate
  :var str ed25519_master_key: base64 encoded master key for our ed25519 certificate
  :var str ed25519_signature: base64 encoded ed25519 signature of the descriptor

  :var bytes signature: **\\*** decoded signature of the descriptor
  :var bytes signed_region: **\\*** content the signature covers, from the
    start of the 'router' line through the newline that ends the
    'router-signature' line. Unlike the 'newline preceding router-signature'
    reading of the dir-spec this includes the 'router-signature\\n' line
    itself, since that's what tor hashes for the descriptor's digest.
  :var tuple signed_range: **\\*** (start, end) byte offsets of the
    signed_region within the document we were parsed from

  :var tuple annotations: **\\*** lines that appeared prior to the descriptor
  :var tuple unrecognized_lines: **\\*** lines we didn't recognize, in the
    order they appeared
  :var dict line_numbers: **\\*** keywords mapped to the first line they
    appeared on

  **\\*** attribute is either required when we're parsed with validation or has
  a default value, others are left as **None** if undefined
  """

  def __init__(self, attributes: Mapping[str, Any], raw_contents: bytes = b'') -> None:
    """
    Descriptors are constructed by :func:`~tordesc.descriptor.server_descriptor.parse`
    rather than directly.

    :param attributes: attributes parsed from the descriptor
    :param raw_contents: bytes the descriptor was parsed from
    """

    for attr, default in ATTRIBUTES.items():
      value = attributes.get(attr, default)

      if attr == 'exit_policy':
        value = tordesc.exit_policy.ExitPolicy(*value)
      elif isinstance(value, (set, frozenset)):
        value = frozenset(value)
      elif isinstance(value, list):
        value = tuple(value)

      object.__setattr__(self, attr, value)

    object.__setattr__(self, 'signed_region', attributes.get('signed_region'))
    object.__setattr__(self, 'signed_range', attributes.get('signed_range'))
    object.__setattr__(self, 'annotations', tuple(attributes.get('annotations', ())))
    object.__setattr__(self, 'unrecognized_lines', tuple(attributes.get('unrecognized_lines', ())))
    object.__setattr__(self, 'line_numbers', types.MappingProxyType(dict(attributes.get('line_numbers', {}))))
    object.__setattr__(self, '_raw_contents', bytes(raw_contents))

  @classmethod
  def from_str(cls: Type['tordesc.descriptor.server_descriptor.ServerDescriptor'], content: Union[str, bytes], validate: bool = True, **kwargs: Any) -> 'tordesc.descriptor.server_descriptor.ServerDescriptor':
    """
    Provides the descriptor within the given content.

    :param content: document with a single descriptor
    :param validate: checks the validity of the descriptor's content if
      **True**, skips these checks otherwise
    :param kwargs: additional arguments for
      :func:`~tordesc.descriptor.server_descriptor.parse`

    :returns: :class:`~tordesc.descriptor.server_descriptor.ServerDescriptor`
      for the content

    :raises:
      * :class:`~tordesc.ParseError` if the descriptor is malformed
      * **ValueError** if the content has multiple descriptors
    """

    results = list(parse(content, validate, **kwargs))

    if len(results) != 1:
      raise ValueError('Content should only contain a single descriptor, but had %i' % len(results))
    elif results[0].error:
      raise results[0].error

    return results[0].descriptor

  @classmethod
  def content(cls: Type['tordesc.descriptor.server_descriptor.ServerDescriptor'], attr: Optional[Mapping[str, Any]] = None, exclude: Sequence[str] = ()) -> bytes:
    """
    Creates descriptor content with the given attributes. Mandatory fields are
    filled with dummy information unless data is supplied. This doesn't create
    a valid signature.

    :param attr: keyword/value mappings to be included in the descriptor
    :param exclude: mandatory keywords to exclude from the descriptor, this
      results in an invalid descriptor

    :returns: **bytes** with the content of a descriptor
    """

    return _descriptor_content(attr, exclude, RELAY_SERVER_HEADER, RELAY_SERVER_FOOTER)

  @classmethod
  def create(cls: Type['tordesc.descriptor.server_descriptor.ServerDescriptor'], attr: Optional[Mapping[str, Any]] = None, exclude: Sequence[str] = (), validate: bool = True) -> 'tordesc.descriptor.server_descriptor.ServerDescriptor':
    """
    Creates a descriptor with the given attributes. Mandatory fields are filled
    with dummy information unless data is supplied. This doesn't create a
    valid signature.

    :param attr: keyword/value mappings to be included in the descriptor
    :param exclude: mandatory keywords to exclude from the descriptor, this
      results in an invalid descriptor
    :param validate: checks the validity of the descriptor's content if
      **True**, skips these checks otherwise

    :returns: :class:`~tordesc.descriptor.server_descriptor.ServerDescriptor`

    :raises: :class:`~tordesc.ParseError` if the contents is malformed and
      validate is **True**
    """

    return cls.from_str(cls.content(attr, exclude), validate = validate)

  def digest(self) -> str:
    """
    Provides the digest of our descriptor's content. This is the hex encoded
    sha1 of our signed_region, and is how network status entries refer to us.

    :returns: **str** with the upper-case hex digest

    :raises: **ValueError** if we lack a signed region
    """

    if self.signed_region is None:
      raise ValueError('Unable to calculate the digest of a descriptor without a signed region')

    return hashlib.sha1(self.signed_region).hexdigest().upper()

  def is_hidden_service_dir(self) -> bool:
    """
    Checks if this relay is a hidden service directory.

    :returns: **True** if it has a 'hidden-service-dir' entry, **False** otherwise
    """

    return self.hidden_service_dir is not None

  def get_annotations(self) -> Dict[str, Optional[str]]:
    """
    Provides content that appeared prior to the descriptor. If this comes from
    the cached-descriptors file then this commonly contains content like...

    ::

      @downloaded-at 2012-03-18 21:18:29
      @source "173.254.216.66"

    :returns: **dict** with the key/value pairs in our annotations
    """

    annotation_dict = {}

    for line in self.annotations:
      if ' ' in line:
        key, value = line.split(' ', 1)
        annotation_dict[key] = value
      else:
        annotation_dict[line] = None

    return annotation_dict

  def get_bytes(self) -> bytes:
    """
    Provides the bytes this descriptor was parsed from, including its
    annotations and signature block.

    :returns: **bytes** for the descriptor
    """

    return self._raw_contents

  def __str__(self) -> str:
    return tordesc.util.str_tools._to_unicode(self._raw_contents)

  def __setattr__(self, name: str, value: Any) -> None:
    raise AttributeError('Server descriptors are immutable')

  def __delattr__(self, name: str) -> None:
    raise AttributeError('Server descriptors are immutable')

  def _compared_values(self) -> Tuple[Any, ...]:
    return tuple([getattr(self, attr) for attr in _COMPARED_ATTRIBUTES])

  def __hash__(self) -> int:
    return tordesc.util._hash_attr(self, *_COMPARED_ATTRIBUTES)

  def __eq__(self, other: Any) -> bool:
    return self._compared_values() == other._compared_values() if isinstance(other, ServerDescriptor) else False

  def __ne__(self, other: Any) -> bool:
    return not self == other


# signed_range and line_numbers depend on where the descriptor was within its
# document, so they're excluded from comparisons

_COMPARED_ATTRIBUTES = tuple(sorted(ATTRIBUTES)) + DOCUMENT_ATTRIBUTES


class _DocumentResults(object):
  """
  Descriptors within a document. Like the
  :class:`~tordesc.descriptor.DocumentLexer` each **iter()** call parses the
  document again, so this can be iterated over any number of times.
  """

  def __init__(self, content: bytes, validate: bool, published_tolerance: Optional[datetime.timedelta]) -> None:
    self._content = content
    self._validate = validate
    self._published_tolerance = published_tolerance

  def __iter__(self) -> Iterator['tordesc.descriptor.server_descriptor.ParseResult']:
    return _parse_descriptors(self._content, self._validate, self._published_tolerance)


def parse(content: Union[str, bytes], validate: bool = True, published_tolerance: Optional[datetime.timedelta] = None) -> Iterable['tordesc.descriptor.server_descriptor.ParseResult']:
  """
  Iterates over the server descriptors in a document. This provides a
  :class:`~tordesc.descriptor.server_descriptor.ParseResult` for each
  descriptor, so a malformed descriptor doesn't prevent us from reading the
  rest. After an error we resume with the next 'router' line after the start
  of the rejected descriptor.

  Parsing is lazy, and each iteration over our result starts over from the
  beginning of the document.

  ::

    for result in parse(content):
      if result.is_ok():
        print(result.descriptor.nickname)
      else:
        print('Rejected descriptor: %s' % result.error)

  :param content: document to be parsed, str content is UTF-8 encoded
  :param validate: checks the validity of the descriptor's content if
    **True**, otherwise malformed fields are treated as unrecognized lines
  :param published_tolerance: how far into the future a descriptor's
    publication can be, this isn't checked if **None**

  :returns: iterable for :class:`~tordesc.descriptor.server_descriptor.ParseResult`
    instances in the document
  """

  if isinstance(content, str):
    content = content.encode('utf-8')
  else:
    content = bytes(content)

  return _DocumentResults(content, validate, published_tolerance)


def parse_file(descriptor_file: Union[str, BinaryIO], validate: bool = True, **kwargs: Any) -> Iterable['tordesc.descriptor.server_descriptor.ParseResult']:
  """
  Iterates over the server descriptors in a file.

  :param descriptor_file: path or binary file with descriptor content
  :param validate: checks the validity of the descriptor's content if
    **True**, skips these checks otherwise
  :param kwargs: additional arguments for
    :func:`~tordesc.descriptor.server_descriptor.parse`

  :returns: iterable for :class:`~tordesc.descriptor.server_descriptor.ParseResult`
    instances in the file

  :raises: **IOError** if the file can't be read
  """

  if isinstance(descriptor_file, str):
    with open(descriptor_file, 'rb') as path_file:
      content = path_file.read()
  else:
    content = descriptor_file.read()

  return parse(content, validate, **kwargs)


def _parse_descriptors(content: bytes, validate: bool, published_tolerance: Optional[datetime.timedelta]) -> Iterator['tordesc.descriptor.server_descriptor.ParseResult']:
  if not ROUTER_LINE.search(content):
    yield ParseResult(None, tordesc.StructureError("Content doesn't contain a 'router' entry", 'router'))
    return

  start, line_number = 0, 1

  while True:
    assembler = _DescriptorAssembler(content, validate, published_tolerance)
    position = start

    try:
      for line in tordesc.descriptor.DocumentLexer(content, start, line_number):
        position = line.start

        if assembler.state == ParserState.DONE and (line.keyword == 'router' or line.keyword.startswith('@')):
          assembler = _DescriptorAssembler(content, validate, published_tolerance)

        desc = assembler.add(line)

        if desc is not None:
          log.debug('Parsed server descriptor for %s (%s)' % (desc.nickname, desc.fingerprint))
          yield ParseResult(desc, None)

      assembler.finish()
      return
    except tordesc.ParseError as exc:
      log.info('Rejecting server descriptor: %s' % exc)
      yield ParseResult(None, exc)

      if isinstance(exc, tordesc.LexError) and exc.offset is not None:
        position = max(position, exc.offset)

      search_start = assembler.router_start + 1 if assembler.router_start is not None else position
      router_match = ROUTER_LINE.search(content, max(search_start, start + 1))

      if not router_match:
        return

      start = _annotation_start(content, router_match.start(), max(search_start, start + 1, position + 1))
      line_number = tordesc.descriptor._line_number_at(content, start)
      log.info('Resuming with the descriptor on line %i' % line_number)


def _annotation_start(content: bytes, router_start: int, floor: int) -> int:
  """
  Provides where the annotations directly preceding a 'router' line begin,
  so they're included with the descriptor when we resume after an error.
  Annotations prior to **floor** belong to the descriptor we rejected.

  :param content: document being parsed
  :param router_start: byte offset of the 'router' line
  :param floor: earliest offset our annotations can begin at

  :returns: **int** offset of the first annotation, or the 'router' line if
    there are none
  """

  resume, position = router_start, router_start

  while position > floor:
    line_start = content.rfind(b'\n', 0, position - 1) + 1

    if line_start < floor:
      break

    line = content[line_start:position].strip()

    if line.startswith(b'@'):
      resume = line_start
    elif line:
      break

    position = line_start

  return resume
