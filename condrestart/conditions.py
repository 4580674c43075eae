# -*- coding: utf-8 -*-
"""The condition value type.

A condition is an immutable description of an occurrence of interest. It is
classified by an ordered tuple of string *tags*, most specific first, instead
of by a class hierarchy. To let several handler clauses match the same
condition, include the more general tags too::

    c = condition(["malformed_log_entry_error", "error"],
                  "Malformed log entry: garbage",
                  text="garbage")

A handler established for ``"error"`` and another for
``"malformed_log_entry_error"`` both match ``c``.

Any extra data travels in the *payload*, a read-only mapping. Payload fields
are also readable as attributes, so ``c.text == c.payload["text"]``.

Conditions compare by identity. Two conditions with the same tags and message
are still two separate occurrences.
"""

__all__ = ["Condition", "condition",
           "simple_condition", "simple_error", "simple_warning",
           "inherits"]

from types import MappingProxyType

class Condition:
    """Immutable condition value. See `condition` for the constructor API."""
    __slots__ = ("tags", "message", "call", "payload")

    def __init__(self, tags, message, payload=None, *, call=None):
        if isinstance(tags, str):
            tags = (tags,)
        tags = tuple(dict.fromkeys(tags))  # dedupe, keep the first occurrence
        if not tags:
            raise ValueError("A condition must have at least one tag")
        if not all(isinstance(t, str) and t for t in tags):
            raise TypeError(f"Condition tags must be non-empty strings, got {repr(tags)}")
        if not isinstance(message, str):
            raise TypeError(f"Condition message must be str, got {type(message)} with value {repr(message)}")
        object.__setattr__(self, "tags", tags)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "call", call)
        object.__setattr__(self, "payload", MappingProxyType(dict(payload or {})))

    def __setattr__(self, name, value):
        raise AttributeError(f"Condition is immutable; cannot set {repr(name)}")

    def __delattr__(self, name):
        raise AttributeError(f"Condition is immutable; cannot delete {repr(name)}")

    def __getattr__(self, name):
        # Only reached when normal lookup fails; never recurse on our own slots.
        if name in Condition.__slots__:
            raise AttributeError(name)
        try:
            return self.payload[name]
        except KeyError:
            raise AttributeError(f"Condition has no attribute or payload field {repr(name)}") from None

    def has_tag(self, tag):
        """Return whether `tag` is one of this condition's tags."""
        return tag in self.tags

    def __str__(self):
        return self.message

    def __repr__(self):
        return f"<Condition {list(self.tags)} {repr(self.message)}>"

def condition(tags, message, payload=None, *, call=None, **fields):
    """Create a `Condition`.

    Parameters:

        tags: str, or iterable of str
            Classification of the condition, most specific first.

        message: str
            Human-readable description. This is what gets reported if
            the condition goes unhandled.

        payload: mapping, optional
            Additional data for handlers.

        call: any, optional
            A reference to the originating call, reported alongside the
            message when an error condition goes unhandled.

        fields:
            Merged into the payload, for convenience.
    """
    data = dict(payload or {})
    data.update(fields)
    return Condition(tags, message, data, call=call)

def simple_condition(message, call=None):
    """A plain condition tagged ``"simple_condition"``."""
    return Condition(("simple_condition",), message, call=call)

def simple_error(message, call=None):
    """An error condition tagged ``("simple_error", "error")``."""
    return Condition(("simple_error", "error"), message, call=call)

def simple_warning(message, call=None):
    """A warning condition tagged ``("simple_warning", "warning")``."""
    return Condition(("simple_warning", "warning"), message, call=call)

def inherits(obj, tag):
    """Return whether `obj` is a `Condition` carrying `tag`."""
    return isinstance(obj, Condition) and obj.has_tag(tag)

def _coerce(obj, make_default):
    """Accept a condition, or a message to be wrapped by `make_default`.

    Return `None` for anything else; the caller decides how to complain.
    """
    if isinstance(obj, Condition):
        return obj
    if isinstance(obj, str):
        return make_default(obj)
    return None
