#!/usr/bin/env python
# Copyright 2011-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information

"""
Runs our unit tests and static checks. For usage information run this with
'--help'.
"""

import getopt
import os
import sys
import time
import unittest

import tordesc.util.log
import tordesc.util.test_tools

import test

UNIT_TESTS = (
  'test.unit.util.TestBaseUtil',
  'test.unit.util.connection.TestConnection',
  'test.unit.util.enum.TestEnum',
  'test.unit.util.log.TestLog',
  'test.unit.util.str_tools.TestStrTools',
  'test.unit.util.tor_tools.TestTorTools',
  'test.unit.exit_policy.rule.TestExitPolicyRule',
  'test.unit.exit_policy.policy.TestExitPolicy',
  'test.unit.descriptor.descriptor.TestDescriptor',
  'test.unit.descriptor.server_descriptor.TestServerDescriptor',
  'test.unit.examples.TestExamples',
)

SRC_PATHS = [os.path.join(test.TORDESC_BASE, path) for path in (
  'tordesc',
  'docs',
  'test',
  'run_tests.py',
  'setup.py',
)]

OPT = 'st:l:vh'
OPT_EXPANDED = ['style', 'test=', 'log=', 'verbose', 'help']

HELP_MSG = """\
Usage: run_tests.py [OPTION]
Runs tests for the tordesc library.

  -s, --style             runs pycodestyle and pyflakes checks
  -t, --test TEST_NAME    only run tests modules containing the given name
  -l, --log RUNLEVEL      includes logging output with test results, runlevels:
                            TRACE, DEBUG, INFO, NOTICE, WARN, ERROR
  -v, --verbose           provides additional test output
  -h, --help              presents this help
"""

LOG_TYPE_ERROR = """\
'%s' isn't a logging runlevel, use one of the following instead:
  TRACE, DEBUG, INFO, NOTICE, WARN, ERROR
"""


def main():
  try:
    recognized_args, unrecognized_args = getopt.getopt(sys.argv[1:], OPT, OPT_EXPANDED)

    if unrecognized_args:
      raise getopt.GetoptError("'%s' aren't recognized arguments" % "', '".join(unrecognized_args))
  except getopt.GetoptError as exc:
    print('%s (for usage provide --help)' % exc)
    sys.exit(1)

  run_style, specific_tests, verbose = False, [], False

  for opt, arg in recognized_args:
    if opt in ('-s', '--style'):
      run_style = True
    elif opt in ('-t', '--test'):
      specific_tests.append(arg)
    elif opt in ('-l', '--log'):
      runlevel = arg.upper()

      if runlevel not in tordesc.util.log.Runlevel:
        print(LOG_TYPE_ERROR % arg)
        sys.exit(1)

      tordesc.util.log.log_to_stdout(runlevel)
    elif opt in ('-v', '--verbose'):
      verbose = True
    elif opt in ('-h', '--help'):
      print(HELP_MSG)
      sys.exit()

  start_time = time.time()
  has_failures = False

  for test_class in UNIT_TESTS:
    if specific_tests and not any([name in test_class for name in specific_tests]):
      continue

    suite = unittest.TestLoader().loadTestsFromName(test_class)
    run_result = unittest.TextTestRunner(verbosity = 2 if verbose else 1).run(suite)

    if run_result.failures or run_result.errors:
      has_failures = True

  if run_style:
    static_check_issues = {}

    for path, issues in tordesc.util.test_tools.pyflakes_issues(SRC_PATHS).items():
      static_check_issues.setdefault(path, []).extend(issues)

    for path, issues in tordesc.util.test_tools.stylistic_issues(SRC_PATHS, check_newlines = True).items():
      static_check_issues.setdefault(path, []).extend(issues)

    _print_static_issues(static_check_issues)

    if static_check_issues:
      has_failures = True

  print('TESTING %s (%i seconds)' % ('FAILED' if has_failures else 'PASSED', time.time() - start_time))
  sys.exit(1 if has_failures else 0)


def _print_static_issues(static_check_issues):
  if static_check_issues:
    print('STATIC CHECKS')

    for file_path in static_check_issues:
      print('* %s' % file_path)

      # Make a dict of line numbers to its issues. This is so we can both sort
      # by the line number and clear any duplicate messages.

      line_to_issues = {}

      for issue in static_check_issues[file_path]:
        line_to_issues.setdefault(issue.line_number or 0, set()).add((issue.message, issue.line or ''))

      for line_number in sorted(line_to_issues.keys()):
        for msg, line in line_to_issues[line_number]:
          line_count = '%-4s' % line_number
          content = ' | %s' % line.strip() if line.strip() else ''
          print('  line %s - %-40s%s' % (line_count, msg, content))

      print('')


if __name__ == '__main__':
  main()
