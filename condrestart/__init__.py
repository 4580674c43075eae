# -*- coding: utf-8 -*
"""A condition and restart system for Python, in the style of Common Lisp and R.

Signaling a condition does not by itself unwind anything. Handlers decide
*which* recovery to use; restarts, established near the signal site, know
*how* to perform it.

See ``dir(condrestart)`` and submodule docstrings for more.
"""

__version__ = '0.1.0'

from .collections import *  # noqa: F401, F403
from .conditions import *  # noqa: F401, F403
from .dispatch import *  # noqa: F401, F403
from .restarts import *  # noqa: F401, F403
from .protocols import *  # noqa: F401, F403
