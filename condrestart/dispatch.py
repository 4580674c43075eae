# -*- coding: utf-8 -*-
"""Signal dispatch and condition handlers.

This module exports the core form `signal`, the two handler constructs, and
the `error` protocol built on `signal`.

A handler is established with one of two disciplines:

  - **calling** (`with handlers(...)`, `with_calling_handlers`; known as
    `HANDLER-BIND` in Common Lisp). The handler runs in place, on top of the
    call stack of the `signal` call, so restarts established between the
    handler and the signal site are still there to be invoked. Returning
    normally from the handler *declines*: the search continues outward.

  - **catching** (`try_catch`; `HANDLER-CASE` in Common Lisp). When selected,
    the stack is first unwound to the `try_catch`, and the handler then runs
    there. Its return value becomes the value of the `try_catch`.

Handler clauses are matched by tag. A clause is given either as a pair::

    ("malformed_log_entry_error", handler)
    (("disk_full", "network_down"), handler)  # tuple of tags, OR'd like in `except`

or as a keyword argument, ``malformed_log_entry_error=handler``.

Clauses of the same construct are examined in declaration order, pairs first.
In a calling construct every matching clause runs, in that order; in a
catching construct the first matching clause is selected.

The handler function may take one positional argument, the condition, or no
arguments, if it only needs the fact that the condition occurred.

While a calling handler runs, only the handlers *outside* the construct that
established it are active. So if the handler itself signals, it does not
recursively see its own signal.
"""

__all__ = ["signal", "error", "ConditionError",
           "try_catch", "handlers", "with_calling_handlers",
           "available_handlers"]

from collections import namedtuple
import logging

from .arity import arity_includes, UnknownArity
from .conditions import Condition, condition as make_condition, simple_error, _coerce
from .scopes import (Scope, CATCHING, CALLING,
                     handler_stack, established, rebound, visible,
                     CatchUnwind, _owner)

logger = logging.getLogger(__name__)

HandlerBinding = namedtuple("HandlerBinding", ["tags", "function", "discipline", "scope"])

class ConditionError(Exception):
    """Raised by `error` when no handler takes control of an error condition.

    This is the terminal failure path: the condition was signaled, nothing
    invoked a restart or selected a catching handler, so the operation is
    abandoned. The condition instance is available as `.condition`.

    The string representation is the condition's message, preceded by the
    originating call when the condition has one.
    """
    def __init__(self, condition):
        super().__init__(condition.message)
        self.condition = condition

    def __str__(self):
        c = self.condition
        if c.call is None:
            return c.message
        return f"Error in {_describe_call(c.call)}: {c.message}"

def _describe_call(call):
    if isinstance(call, str):
        return call
    name = getattr(call, "__qualname__", None)
    if name is not None:
        return f"{name}()"
    return repr(call)

def _misuse(message):
    """Report incorrect use of the condition system, through the condition system."""
    error(make_condition(("type_error", "error"), message))

def _call_handler(handler, condition):
    try:
        accepts_arg = arity_includes(handler, 1)
    except UnknownArity:  # pragma: no cover
        accepts_arg = True  # just assume it
    if accepts_arg:
        return handler(condition)
    return handler()

def _parse_clauses(clauses, bindings):
    out = []
    for clause in list(clauses) + list(bindings.items()):
        if not (isinstance(clause, tuple) and len(clause) == 2):
            _misuse(f"Expected a handler clause (tag, callable), got {type(clause)} with value {repr(clause)}")
        spec, handler = clause
        tags = (spec,) if isinstance(spec, str) else spec
        if not (isinstance(tags, tuple) and tags and
                all(isinstance(t, str) and t for t in tags) and
                callable(handler)):
            _misuse("Each handler clause must be of the form (tag, callable), ((tag0, ..., tagn), callable) or tag=callable")
        out.append((frozenset(tags), handler))
    return out

def _make_scope(discipline, clauses):
    scope = Scope(discipline)
    scope.bindings = tuple(HandlerBinding(tags, handler, discipline, scope)
                           for tags, handler in clauses)
    return scope

def signal(condition):
    """Signal a condition.

    Handlers matching the condition's tags are considered from dynamically
    innermost to dynamically outermost. A calling handler runs in place; if
    it returns normally, the search continues. A catching handler, or a
    calling handler that invokes a restart, ends the search by a non-local
    exit out of this `signal` call.

    If nothing takes control, `signal` returns `None`. Merely signaling a
    condition has no effect on control flow unless a handler chooses to act.

    If you want to error out on unhandled conditions, see `error`.
    """
    if not isinstance(condition, Condition):
        _misuse(f"Only conditions can be signaled; got {type(condition)} with value {repr(condition)}")

    stack = handler_stack.get()
    for index, scope in visible(stack):
        for binding in scope.bindings:
            if binding.tags.isdisjoint(condition.tags):
                continue
            if binding.discipline is CATCHING:
                logger.debug("catching handler selected for %r", condition)
                raise CatchUnwind(scope, binding, condition)
            with rebound(handler_stack, stack[:index]):
                _call_handler(binding.function, condition)
    return None

def error(condition):
    """Like `signal`, but raise `ConditionError` if the condition is not handled.

    Note *handled* means that a handler must actually take control, by
    invoking a restart or by being a catching handler; a condition does not
    count as handled simply because a calling handler was triggered.

    As a convenience, a plain message string is accepted; it is signaled as
    a `simple_error`.

    This function never returns normally.
    """
    c = _coerce(condition, simple_error)
    signal(c if c is not None else condition)
    logger.debug("unhandled error condition %r", c)
    raise ConditionError(c)

def try_catch(body, /, *clauses, finally_=None, **bindings):
    """Call `body` with catching handlers active. Known as `tryCatch` in R.

    Returns the value of `body()`, or, if a signal inside `body` selects one
    of the handler clauses, the return value of that handler. The handler
    runs after the stack has been unwound back to here, so none of the
    handlers or restarts established inside `body` are active any more.

    At most one clause fires per call.

    `finally_`, if given, is a thunk called when `try_catch` exits, by any
    path, after the handler clause if one fired.

    Example::

        result = try_catch(lambda: parse(text),
                           malformed_log_entry_error=(lambda c: None))
    """
    scope = _make_scope(CATCHING, _parse_clauses(clauses, bindings))
    try:
        try:
            with established(handler_stack, scope):
                return body()
        except CatchUnwind as exc:
            if exc.scope is not scope:
                raise  # meant for someone else, pass it on
            return _call_handler(exc.binding.function, exc.condition)
    finally:
        if finally_ is not None:
            finally_()

class handlers:
    """Set up calling handlers. Known as `HANDLER-BIND` in Common Lisp.

    Usage::

        with handlers((tag, callable), ..., tag=callable, ...):
            ...

    To *handle* the condition, a handler must invoke one of the restarts
    currently in scope (see `invoke_restart`). This immediately terminates
    the handler, transferring control to the restart.

    To cancel, and delegate to the next (outer) handler, a handler returns
    normally. The return value is ignored. Any side effects the canceled
    handler performed (such as logging) still occur.

    **Notes**

    There is no `finally` form here; use the usual `try`/`finally`. The
    unwinding happens later than with exceptions (when the restart is
    invoked), but it does happen, and `finally` blocks fire as usual.

    One instance may be entered several times, nested or concurrently from
    different threads and `asyncio` tasks.
    """
    def __init__(self, *clauses, **bindings):
        self.clauses = _parse_clauses(clauses, bindings)
        self._entered = {}  # logical call stack -> guards entered there, innermost last
    def __enter__(self):
        cm = established(handler_stack, _make_scope(CALLING, self.clauses))
        cm.__enter__()
        self._entered.setdefault(_owner(), []).append(cm)
        return self
    def __exit__(self, exctype, excvalue, traceback):
        owner = _owner()
        guards = self._entered[owner]
        cm = guards.pop()
        if not guards:
            del self._entered[owner]
        return cm.__exit__(exctype, excvalue, traceback)

def with_calling_handlers(body, /, *clauses, **bindings):
    """Call `body` with calling handlers active. Known as `withCallingHandlers` in R.

    Functional form of `with handlers(...)`; returns the value of `body()`.
    """
    with handlers(*clauses, **bindings):
        return body()

def available_handlers():
    """Return a sorted list of the handlers currently active.

    Shadowing is respected: for each tag, only the most recently established
    (dynamically innermost) handler is listed. A handler bound to several
    tags is listed once per tag.

    The return value format is `[(tag, callable), ...]`.
    """
    out = []
    seen = set()
    for _, scope in visible(handler_stack.get()):
        for binding in scope.bindings:
            for tag in sorted(binding.tags):
                if tag not in seen:
                    seen.add(tag)
                    out.append((tag, binding.function))
    return sorted(out, key=lambda x: x[0])
