# -*- coding: utf-8 -*-
"""Containers used by the restart forms."""

__all__ = ["box", "unbox"]

class box:
    """Minimalistic, mutable single-item container à la Racket.

    A `with` statement cannot return a value, so the `with restarts(...)`
    form binds a box, and the value of the block lives inside it::

        with restarts(use_value=(lambda x: x)) as result:
            ...
            result << 42   # value for a normal exit from the block
        print(unbox(result))

    If a restart of that block is invoked, the restart's return value
    replaces whatever the box held.
    """
    def __init__(self, x=None):
        self.x = x
    def __repr__(self):  # pragma: no cover
        return f"box({repr(self.x)})"
    def set(self, x):
        """Store a new value in the box, replacing the old one.

        As a convenience, returns the new value, so this can be used
        in a lambda.
        """
        self.x = x
        return x
    def __lshift__(self, x):
        """Syntactic sugar for storing a new value. `b << 42` is `b.set(42)`."""
        return self.set(x)
    def get(self):
        """Return the value currently in the box. Sugar: `unbox(b)`."""
        return self.x

def unbox(b):
    """Return the value from inside the box b.

    If `b` is not a `box`, raises `TypeError`.
    """
    if not isinstance(b, box):
        raise TypeError(f"Expected box, got {type(b)} with value {repr(b)}")
    return b.get()
