#!/usr/bin/env python
# Copyright 2012-2020, Damian Johnson and The Tor Project
# See LICENSE for licensing information
#
# Release Checklist
# =================
#
# * Test with python3 and pypy.
#   |- If using tox run...
#   |
#   |    % tox
#   |
#   +- Otherwise, for each interpreter run...
#
#        % [python_interpreter] run_tests.py --style
#
# * Tag the release
#   |- Bump tordesc's version (in tordesc/__init__.py).
#   |- git commit -a -m "tordesc release 1.0.0"
#   +- git tag -m "tordesc release 1.0.0" 1.0.0
#
# * Final release
#   |- rm dist/*
#   |- python setup.py sdist
#   +- twine upload dist/*

import setuptools
import os
import re

SUMMARY = 'Parser for the server descriptors that Tor relays publish (https://www.torproject.org/).'

DESCRIPTION = """
Tordesc reads the server descriptors that Tor relays publish, checking them
against the directory specification and providing each as an immutable
record. Its lexer and assembler are restartable, and each descriptor's
signed region is provided so callers can verify the relay's signature.

Quick Start
-----------

::

  pip install tordesc

... or install from the source tarball. Tordesc supports Python 3.7 and above.

::

  import tordesc.descriptor.server_descriptor

  with open('cached-descriptors', 'rb') as descriptor_file:
    for result in tordesc.descriptor.server_descriptor.parse_file(descriptor_file):
      print(result)
""".strip()

MANIFEST = """
include MANIFEST.in
include run_tests.py
include tox.ini
graft docs
graft test
global-exclude __pycache__
global-exclude *.orig
global-exclude *.pyc
global-exclude *.swp
global-exclude *.swo
global-exclude .tox
global-exclude *~
""".strip()

# installation requires us to be in our setup.py's directory

os.chdir(os.path.dirname(os.path.abspath(__file__)))

with open('MANIFEST.in', 'w') as manifest_file:
  manifest_file.write(MANIFEST)


def get_module_info():
  # reads the basic __stat__ strings from our module's init

  STAT_REGEX = re.compile(r"^__(.+)__ = '(.+)'$")
  result = {}
  cwd = os.path.sep.join(__file__.split(os.path.sep)[:-1])

  with open(os.path.join(cwd, 'tordesc', '__init__.py')) as init_file:
    for line in init_file.readlines():
      line_match = STAT_REGEX.match(line)

      if line_match:
        keyword, value = line_match.groups()
        result[keyword] = value

  return result


module_info = get_module_info()

try:
  setuptools.setup(
    name = 'tordesc',
    version = module_info['version'],
    description = SUMMARY,
    long_description = DESCRIPTION,
    license = module_info['license'],
    author = module_info['author'],
    author_email = module_info['contact'],
    url = module_info['url'],
    packages = setuptools.find_packages(exclude = ['test*']),
    keywords = 'tor descriptor parser',
    python_requires = '>=3.7',
    extras_require = {
      'test': ['pycodestyle', 'pyflakes'],
    },
    classifiers = [
      'Development Status :: 5 - Production/Stable',
      'Intended Audience :: Developers',
      'License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)',
      'Topic :: Security',
      'Topic :: Software Development :: Libraries :: Python Modules',
    ],
  )
finally:
  for filename in ['MANIFEST.in', 'MANIFEST']:
    if os.path.exists(filename):
      os.remove(filename)
