# -*- coding: utf-8 -*-
"""Inspect the call signature of handlers and restart functions.

This module uses ``inspect`` out of necessity. Handlers may be written to take
the condition instance or no arguments at all, and a restart invocation must
be checked against the recovery function's signature *before* the stack is
unwound, so that a mismatch is reported at the call site.
"""

__all__ = ["arities", "arity_includes", "check_arguments", "UnknownArity"]

from inspect import signature, Parameter

class UnknownArity(ValueError):
    """Raised when the arity of a function cannot be inspected."""

_infty = float("+inf")

def arities(f):
    """Inspect f's minimum and maximum positional arity.

    For bound methods, ``self`` or ``cls`` does not count toward the arity,
    because these are passed implicitly by Python.

    Returns:
        `(min_arity, max_arity)`: (int, int_or_infinity)
            If ``f`` takes ``*args``, then ``max_arity == float("+inf")``.

    Raises:
        UnknownArity
            If inspection failed.
    """
    try:
        thesignature = signature(f)
    except (TypeError, ValueError) as e:  # likely an uninspectable builtin
        raise UnknownArity(*e.args)
    lower = 0
    upper = 0
    poskinds = set((Parameter.POSITIONAL_ONLY,
                    Parameter.POSITIONAL_OR_KEYWORD))
    for v in thesignature.parameters.values():
        if v.kind in poskinds:
            upper += 1
            if v.default is Parameter.empty:
                lower += 1  # no default --> required parameter
        elif v.kind is Parameter.VAR_POSITIONAL:
            upper = _infty
    return lower, upper

def arity_includes(f, n):
    """Check whether f's positional arity includes n.

    I.e., return whether ``f()`` can be called with ``n`` positional arguments.
    """
    lower, upper = arities(f)
    return lower <= n <= upper

def check_arguments(f, args, kwargs):
    """Raise `TypeError` if `f(*args, **kwargs)` would fail to bind its parameters.

    Does not call `f`. If the signature of `f` cannot be inspected, the check
    is skipped, and any mismatch will surface when `f` is actually called.
    """
    try:
        thesignature = signature(f)
    except (TypeError, ValueError):  # uninspectable; nothing to check against
        return
    try:
        thesignature.bind(*args, **kwargs)
    except TypeError as err:
        name = getattr(f, "__qualname__", repr(f))
        raise TypeError(f"{name}: {err}") from None
