# -*- coding: utf-8 -*-
"""Restarts: named, scoped recovery actions.

Roughly, restarts can be thought of as canned error recovery strategies.
Low-level code offers them with `with restarts(...)` (or `with_restarts`),
and high-level code picks one, typically from a calling handler, by
`invoke_restart`. The decision of which restart to invoke is thus made further
out on the call stack than where the restarts are defined, without the
high-level code having to know how the recovery is performed.

Invoking a restart unwinds the stack to the block that established it,
running any cleanup on the way, and the restart's return value becomes the
value of that block.

The function `find_restart` can be used for querying for the presence of a
given restart name before committing to actually invoking it. See also the
introspection utility `available_restarts`.

*Restart functions* are ordinary functions that close over a restart name and
forward to `invoke_restart`. See `invoker` and `use_value`.
"""

__all__ = ["Restart", "restarts", "with_restarts",
           "find_restart", "invoke_restart", "available_restarts",
           "invoker", "use_value"]

import contextlib
from functools import partial
import logging
from operator import itemgetter

from .arity import check_arguments
from .collections import box, unbox
from .conditions import condition
from .dispatch import error, _misuse
from .misc import namelambda
from .scopes import (Scope, RESTARTS,
                     restart_stack, established, visible, owned_here,
                     RestartUnwind)

logger = logging.getLogger(__name__)

class Restart:
    """A restart binding, as returned by `find_restart`.

    Opaque; pass it to `invoke_restart`. A `Restart` stays a valid reference
    only while the block that established it is running (see `active`).
    """
    __slots__ = ("name", "function", "scope")

    def __init__(self, name, function, scope):
        self.name = name
        self.function = function
        self.scope = scope

    @property
    def active(self):
        """Whether the establishing `with restarts` block has not exited yet."""
        return self.scope.active

    def __repr__(self):  # pragma: no cover
        state = "active" if self.active else "exited"
        return f"<Restart {repr(self.name)}, {state}>"

@contextlib.contextmanager
def restarts(**bindings):
    """Provide restarts. Known as `RESTART-CASE` in Common Lisp.

    Note that restarts may be defined at any level of the call stack,
    so they don't all have to be at the same level.

    A restart can take any number of args and kwargs; its call signature
    depends only on how it's intended to be invoked.

    Example::

        with restarts(use_value=(lambda x: x)) as result:
            ...
            result << 42

    The `with restarts` form binds a `box` to hold the return value of the
    block. Use `unbox(result)` to access the value. The default value the box
    holds, if nothing is set into it, is `None`.

    If the code inside the `with` block invokes one of the restarts defined in
    this `with restarts`, the block is unwound, and the contents of the box
    are set to the value returned by the restart. Then execution continues
    from immediately after the block.

    If you just need a jump label for skipping the rest of the block at the
    higher-level code's behest, use `lambda: None` as the restart function
    (`warn` and `cerror` do this internally).
    """
    # When an exception is raised in the `with` body, `@contextmanager` throws
    # it into the generator at the `yield`, so the `except` below sees it.
    # To let it propagate, the generator must reraise it.
    for name, function in bindings.items():
        if not callable(function):
            _misuse(f"Each restart binding must be of the form name=callable; got {name}={repr(function)}")
    b = box(None)
    scope = Scope(RESTARTS)
    scope.bindings = tuple(Restart(name, function, scope)
                           for name, function in bindings.items())
    try:
        with established(restart_stack, scope):
            yield b
    except RestartUnwind as exc:
        if exc.restart.scope is not scope:
            raise  # unwind this level of call stack, propagate outwards
        # Our scope has been popped; the restart runs at the establishment point.
        b << exc.restart.function(*exc.restart_args, **exc.restart_kwargs)

def with_restarts(body, /, **bindings):
    """Call `body` with restarts available. Known as `withRestarts` in R.

    Functional form of `with restarts(...)`. Returns the value of `body()`,
    or the return value of one of the restarts if one was invoked.

    Example::

        entry = with_restarts(lambda: parse_log_entry(text),
                              use_value=(lambda value: value),
                              reparse_entry=(lambda fixed: parse_log_entry(fixed)))
    """
    with restarts(**bindings) as result:
        result << body()
    return unbox(result)

def find_restart(name):
    """Look up a restart. Known as `FIND-RESTART` in Common Lisp.

    If the named restart is currently in (dynamic) scope, return a `Restart`
    object (accepted by `invoke_restart`) that represents it. The most
    recently established restart matching the name wins.

    If no match, return `None`.

    This allows optional condition handling. You can check for the presence
    of a specific restart before you commit to invoking it.
    """
    for _, scope in visible(restart_stack.get()):
        for restart in scope.bindings:
            if restart.name == name:
                return restart
    return None

def invoke_restart(name_or_restart, *args, **kwargs):
    """Invoke a restart currently in scope. Known as `INVOKE-RESTART` in Common Lisp.

    `name_or_restart` can be the name of a restart, or a `Restart` returned by
    `find_restart`.

    If it is a name, it is looked up as by `find_restart`. If no restart of
    that name is in scope, a ``control_error`` condition is signaled using
    `error`. If it is a `Restart` whose establishing block has already exited,
    a ``restart_not_active_error`` condition is signaled the same way.

    Any args and kwargs are passed through to the restart. If they do not fit
    the restart's call signature, `TypeError` is raised right here, before
    anything is unwound.

    To *handle* a condition, call `invoke_restart` from inside your condition
    handler. The call immediately terminates the handler, transferring control
    to the restart.

    This function never returns normally.
    """
    if isinstance(name_or_restart, str):
        restart = find_restart(name_or_restart)
        if restart is None:
            names = [name for name, _callable in available_restarts()]
            error(condition(("control_error", "error"),
                            f"No such restart: {repr(name_or_restart)}; available restarts: {names}",
                            name=name_or_restart, available=names))
    elif isinstance(name_or_restart, Restart):
        restart = name_or_restart
        if not (restart.active and owned_here(restart.scope)):
            error(condition(("restart_not_active_error", "control_error", "error"),
                            f"Restart {repr(restart.name)} is no longer active",
                            name=restart.name))
    else:
        _misuse(f"Expected str or a return value of find_restart, got {type(name_or_restart)} with value {repr(name_or_restart)}")
    check_arguments(restart.function, args, kwargs)
    logger.debug("invoking restart %r", restart.name)
    # Found it - now we are guaranteed to unwind only up to the matching `with restarts`.
    raise RestartUnwind(restart, args, kwargs)

def available_restarts():
    """Return a sorted list of restarts currently in scope.

    Name shadowing is respected; for each unique name, the return value
    contains only the most recently bound (dynamically innermost) restart.

    The return value format is `[(name, callable), ...]`.
    """
    out = []
    seen = set()
    for _, scope in visible(restart_stack.get()):
        for restart in scope.bindings:
            if restart.name not in seen:
                seen.add(restart.name)
                out.append((restart.name, restart.function))
    return sorted(out, key=itemgetter(0))

def invoker(restart_name, *args, **kwargs):
    """Create a handler that just invokes the named restart.

    The args and kwargs are "frozen" into the created handler by closure, and
    passed through to the restart whenever the created handler triggers.

    The returned function has the same name as the restart it invokes,
    to ease debugging. It accepts the condition instance (so it is applicable
    as a handler), but ignores it.

    Example::

        with handlers(malformed_log_entry_error=invoker("skip_log_entry")):
            ...
    """
    rename = namelambda(restart_name)
    the_invoker = rename(lambda c=None: invoke_restart(restart_name, *args, **kwargs))
    the_invoker.__doc__ = f"Invoke the '{restart_name}' restart."
    return the_invoker

use_value = partial(invoke_restart, "use_value")
use_value.__doc__ = """Invoke the 'use_value' restart immediately with given args and kwargs.

A handler that supplies a replacement value is common enough to deserve a
shorthand. This::

    with handlers(malformed_log_entry_error=lambda c: invoke_restart("use_value", fix(c.text))):
        ...

can be abbreviated to::

    with handlers(malformed_log_entry_error=lambda c: use_value(fix(c.text))):
        ...

Restarts are looked up by name, so one module-level shorthand serves every
`with restarts` site that offers a `use_value` restart.
"""
