# Copyright 2015-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Static checks for our codebase. These run pycodestyle and pyflakes when
they're installed, and report nothing otherwise.

::

  stylistic_issues - checks for PEP8 and newline issues
  pyflakes_issues - static checks for problems via pyflakes
"""

import collections
import importlib
import linecache
import os

from typing import Dict, Iterator, List, Sequence

# pycodestyle checks we don't conform to...
#
# * E111 and E114 since we use two space indentation
# * E121 and E501 for line length and continuation line indentation
# * E251 since we put spaces around keyword arguments
# * W503 and W504 for line breaks around binary operators

PYCODESTYLE_IGNORE = ('E111', 'E114', 'E121', 'E501', 'E251', 'W503', 'W504')


class Issue(collections.namedtuple('Issue', ['line_number', 'message', 'line'])):
  """
  Issue encountered by pyflakes or pycodestyle.

  :var int line_number: line number the issue occurred on
  :var str message: description of the issue
  :var str line: content of the line the issue is about
  """


def stylistic_issues(paths: Sequence[str], check_newlines: bool = False) -> Dict[str, List['tordesc.util.test_tools.Issue']]:
  """
  Checks for the parts of PEP8 that we conform to.

  :param paths: files or directories to check
  :param check_newlines: also report windows newlines (\\r\\n)

  :returns: **dict** mapping paths to a list of their
    :class:`~tordesc.util.test_tools.Issue` instances
  """

  issues = {}  # type: Dict[str, List[Issue]]

  if not _module_exists('pycodestyle'):
    return issues

  import pycodestyle

  class StyleReport(pycodestyle.BaseReport):
    def init_file(self, filename, lines, expected, line_offset):
      super(StyleReport, self).init_file(filename, lines, expected, line_offset)

      if check_newlines:
        for index, line in enumerate(lines):
          if '\r' in line:
            issues.setdefault(filename, []).append(Issue(index + 1, 'contains a windows newline', line))

    def error(self, line_number, offset, text, check):
      code = super(StyleReport, self).error(line_number, offset, text, check)

      if code:
        issues.setdefault(self.filename, []).append(Issue(line_number, text, linecache.getline(self.filename, line_number)))

  style_checker = pycodestyle.StyleGuide(ignore = list(PYCODESTYLE_IGNORE), reporter = StyleReport)
  style_checker.check_files(list(_python_files(paths)))

  return issues


def pyflakes_issues(paths: Sequence[str]) -> Dict[str, List['tordesc.util.test_tools.Issue']]:
  """
  Performs static checks via pyflakes.

  :param paths: files or directories to check

  :returns: **dict** mapping paths to a list of their
    :class:`~tordesc.util.test_tools.Issue` instances
  """

  issues = {}  # type: Dict[str, List[Issue]]

  if not _module_exists('pyflakes.api') or not _module_exists('pyflakes.reporter'):
    return issues

  import pyflakes.api
  import pyflakes.reporter

  class Reporter(pyflakes.reporter.Reporter):
    def __init__(self):
      pass

    def unexpectedError(self, filename, msg):
      issues.setdefault(filename, []).append(Issue(None, msg, None))

    def syntaxError(self, filename, msg, lineno, offset, text):
      issues.setdefault(filename, []).append(Issue(lineno, msg, text))

    def flake(self, msg):
      line = linecache.getline(msg.filename, msg.lineno).strip()
      issues.setdefault(msg.filename, []).append(Issue(msg.lineno, msg.message % msg.message_args, line))

  reporter = Reporter()

  for path in _python_files(paths):
    pyflakes.api.checkPath(path, reporter)

  return issues


def _module_exists(module_name: str) -> bool:
  try:
    importlib.import_module(module_name)
    return True
  except ImportError:
    return False


def _python_files(paths: Sequence[str]) -> Iterator[str]:
  for path in paths:
    if os.path.isfile(path):
      if path.endswith('.py'):
        yield path
    else:
      for root, _, files in os.walk(path):
        for filename in sorted(files):
          if filename.endswith('.py'):
            yield os.path.join(root, filename)
