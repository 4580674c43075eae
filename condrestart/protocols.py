# -*- coding: utf-8 -*-
"""Standard signaling protocols built on `signal` and restarts.

`error` (in `condrestart.dispatch`) escalates an unhandled condition into a
`ConditionError`. This module adds the protocols that also establish a
restart around the signal:

  - `warn`: report the condition and continue, unless a handler muffles it
    with the ``muffleWarning`` restart (restart function: `muffle_warning`).

  - `cerror` (correctable error): like `error`, but a handler may veto the
    error with the ``proceed`` restart (restart function: `proceed`).

If these do not cover a use case, create a custom protocol; see the existing
ones as examples.
"""

__all__ = ["warn", "muffle_warning", "ConditionWarning",
           "cerror", "proceed"]

import sys
import warnings

from .conditions import simple_error, simple_warning, _coerce
from .dispatch import signal, error
from .restarts import restarts, invoker

class ConditionWarning(UserWarning):
    """Warning category used by `warn` for unhandled warning conditions."""

def warn(condition):
    """Like `signal`, but emit a warning if the condition is not handled.

    The warning is emitted through Python's standard `warnings` machinery,
    with category `ConditionWarning` and the condition's message as its text.
    By default it is printed to `sys.stderr`, attributed to the line that
    called `warn`; configure it the usual way, with warning filters. Every
    unhandled call is reported, also when the same line warns repeatedly.

    `warn` internally establishes a restart named ``muffleWarning``, taking no
    arguments, which a handler can invoke to suppress the warning. Either way
    `warn` returns `None`, and execution continues normally in its caller.

    As a convenience, a plain message string is accepted; it is signaled as
    a `simple_warning`.

    Example::

        with handlers(slightly_malformed=muffle_warning):
            warn(condition(["slightly_malformed"], "minor issue"))  # nothing printed
    """
    c = _coerce(condition, simple_warning)
    caller = sys._getframe(1)
    with restarts(muffleWarning=(lambda: None)):  # just for control, no return value
        signal(c if c is not None else condition)
        # A fresh registry per call, so a warning repeated from the same line
        # is reported every time. Filters still apply.
        warnings.warn_explicit(c.message, ConditionWarning,
                               caller.f_code.co_filename, caller.f_lineno,
                               module=caller.f_globals.get("__name__"),
                               registry=None,
                               module_globals=caller.f_globals)
    return None

def cerror(condition):
    """Like `error`, but allow a handler to instruct the caller to ignore the error.

    `cerror` internally establishes a restart named ``proceed``, which can be
    invoked to make `cerror` return `None` to its caller. As a convenience,
    there is a restart function `proceed` that just invokes it.

    We use the name "proceed" instead of Common Lisp's "continue", because in
    Python `continue` is a reserved word.

    Example::

        with handlers(odd_number=proceed):
            out = []
            for x in range(10):
                if x % 2 == 1:
                    cerror(condition("odd_number", f"{x} is odd"))  # if unhandled, raises ConditionError
                out.append(x)
        assert out == list(range(10))
    """
    c = _coerce(condition, simple_error)
    with restarts(proceed=(lambda: None)):  # just for control, no return value
        error(c if c is not None else condition)

# Standard restart functions for the predefined protocols

muffle_warning = invoker("muffleWarning")
muffle_warning.__doc__ = "Invoke the 'muffleWarning' restart. Restart function for use with `warn`."

proceed = invoker("proceed")
proceed.__doc__ = "Invoke the 'proceed' restart. Restart function for use with `cerror`."
