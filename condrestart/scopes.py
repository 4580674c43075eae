# -*- coding: utf-8 -*-
"""Scope stacks for handler and restart bindings.

Every handler construct (`try_catch`, `with handlers`) and every restart
construct (`with restarts`) pushes one `Scope` when it is entered, and pops it
when its dynamic extent ends, by normal return or by a non-local exit passing
through it. Searches walk the stacks from the innermost scope outward.

The stacks live in `contextvars`, as immutable tuples. Pushing creates a new
tuple; popping resets the variable to the token saved at push time. Each
thread starts with empty stacks, and an `asyncio` task works on its own copy
of the context it was created in.

A context copy may still carry scopes belonging to another logical call
stack (e.g. a task spawned inside a `with handlers` block sees the parent's
tuple). Such scopes cannot be returned to from here, so each scope records
its owner, and scopes owned by someone else are skipped by all searches.

**Non-local exits**

Transfers of control to an enclosing scope are implemented as exceptions
derived from `Unwind`, which inherits from `BaseException`. Application code
that catches `Exception` does not intercept them, whereas `finally` blocks
and `with` exits run as usual, innermost first.
"""

__all__ = ["Scope", "CATCHING", "CALLING", "RESTARTS",
           "handler_stack", "restart_stack",
           "established", "rebound", "visible", "owned_here",
           "Unwind", "CatchUnwind", "RestartUnwind"]

import asyncio
from contextlib import contextmanager
from contextvars import ContextVar
import threading

# Scope kinds. The two handler kinds double as the handler discipline.
CATCHING = "catching"
CALLING = "calling"
RESTARTS = "restarts"

handler_stack = ContextVar("condrestart_handler_stack", default=())
restart_stack = ContextVar("condrestart_restart_stack", default=())

def _owner():
    """Return the current logical call stack: the running task, else the thread."""
    try:
        task = asyncio.current_task()
    except RuntimeError:  # no running event loop in this thread
        task = None
    if task is not None:
        return task
    return threading.current_thread()

class Scope:
    """One dynamic extent of a handler or restart construct.

    `bindings` is filled in by the construct, since each binding refers
    back to its scope. `active` is cleared when the extent ends; stale
    references to a binding can be detected through it.
    """
    __slots__ = ("kind", "bindings", "owner", "active")

    def __init__(self, kind):
        self.kind = kind
        self.bindings = ()
        self.owner = _owner()
        self.active = True

    def __repr__(self):  # pragma: no cover
        state = "active" if self.active else "exited"
        return f"<Scope {self.kind}, {len(self.bindings)} binding(s), {state}>"

def owned_here(scope):
    """Return whether `scope` belongs to the current logical call stack."""
    return scope.owner is _owner()

@contextmanager
def established(var, scope):
    """Push `scope` onto the stack held by `var` for the dynamic extent of the block."""
    token = var.set(var.get() + (scope,))
    try:
        yield scope
    finally:
        scope.active = False
        var.reset(token)

@contextmanager
def rebound(var, stack):
    """Temporarily replace the whole stack held by `var`.

    Used to run a handler with only the handlers outside its own scope active.
    """
    token = var.set(stack)
    try:
        yield
    finally:
        var.reset(token)

def visible(stack):
    """Iterate over `stack` innermost first, yielding `(index, scope)`.

    Scopes owned by another logical call stack are skipped.
    """
    me = _owner()
    for index in range(len(stack) - 1, -1, -1):
        scope = stack[index]
        if scope.owner is me:
            yield index, scope

class Unwind(BaseException):
    """Base class of the non-local exits performed by the condition system."""

class CatchUnwind(Unwind):
    """Unwind to a `try_catch` whose handler clause was selected by `signal`."""
    def __init__(self, scope, binding, condition):
        self.scope, self.binding, self.condition = scope, binding, condition
        # message when uncaught
        self.args = ("condrestart: internal error: uncaught CatchUnwind",)

class RestartUnwind(Unwind):
    """Unwind to the `with restarts` block that established the restart being invoked."""
    def __init__(self, restart, args, kwargs):
        self.restart = restart
        self.restart_args, self.restart_kwargs = args, kwargs
        # message when uncaught
        self.args = ("condrestart: internal error: uncaught RestartUnwind",)
