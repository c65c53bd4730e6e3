"""Exceptions raised by vacomplex."""


class VACError(Exception):
    """Base class of all vacomplex errors."""


class ParseError(VACError, ValueError):
    """Persisted data (text stream or XML document) is malformed.

    Raised for unbalanced brackets, non-numeric ids, unexpected fields,
    missing attributes and references to cells of the wrong kind. A load
    that raises ParseError never installs a partially built complex.
    """


class DanglingReferenceError(VACError, LookupError):
    """A cell id has no matching cell in the complex."""
