"""
Unit tests for the tordesc library.
"""

__all__ = [
  'descriptor',
  'examples',
  'exit_policy',
  'util',
]
