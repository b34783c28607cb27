# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Unit tests for the tordesc library.
"""

import os

__all__ = [
  'unit',
]

# We make some paths relative to our base directory (the one above us)
# rather than the process' cwd. This doesn't end with a slash.

TORDESC_BASE = os.path.sep.join(__file__.split(os.path.sep)[:-2])
