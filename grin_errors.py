# filename: grin_errors.py


class GrinError(Exception):
    """Base class for errors raised by the grin codec."""


class FormatError(GrinError, ValueError):
    """The input is not a well-formed GRIN stream."""
