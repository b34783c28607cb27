"""
Unit tests for tordesc.descriptor.
"""

import os

__all__ = [
  'descriptor',
  'server_descriptor',
]

DESCRIPTOR_TEST_DATA = os.path.join(os.path.dirname(__file__), 'data')


def get_resource(filename):
  """
  Provides the path for a file in our descriptor data directory.
  """

  return os.path.join(DESCRIPTOR_TEST_DATA, filename)


def read_resource(filename):
  """
  Provides test data.
  """

  with open(get_resource(filename), 'rb') as resource_file:
    return resource_file.read()
