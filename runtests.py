# -*- coding: utf-8 -*-
"""Run all tests for `condrestart`.

Equivalent to running `pytest` at the top level of the source tree; this
just makes sure the local source code is what gets tested, not an installed
copy of the library.
"""

import os
import sys

import pytest

def main():
    here = os.path.dirname(os.path.abspath(__file__))
    sys.path.insert(0, here)
    return pytest.main([os.path.join(here, "condrestart", "tests")]) == 0

if __name__ == '__main__':
    if not main():
        sys.exit(1)  # pragma: no cover, this only runs when the tests fail.
