"""
Unit tests for tordesc.exit_policy.
"""

__all__ = [
  'policy',
  'rule',
]
