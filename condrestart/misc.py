# -*- coding: utf-8 -*-
"""Miscellaneous utilities."""

__all__ = ["namelambda"]

from copy import copy
from types import LambdaType, FunctionType

def namelambda(name):
    """Rename a function. Decorator.

    Restart functions built by `invoker` are closures over a lambda; renaming
    them after the restart they invoke makes stack traces and the output of
    `available_handlers` meaningful, instead of just ``"<lambda>"``.

    Usage::

        foo = namelambda("foo")(lambda ...: ...)

    Non-function callables are returned as-is.
    """
    def rename(f):
        if not isinstance(f, (LambdaType, FunctionType)):
            return f
        f = copy(f)
        # __name__ for tools like pydoc; __qualname__ for repr(); __code__.co_name for stack traces
        f.__name__ = name
        idx = f.__qualname__.rfind('.')
        f.__qualname__ = f"{f.__qualname__[:idx]}.{name}" if idx != -1 else name
        f.__code__ = f.__code__.replace(co_name=name)
        return f
    return rename
