"""Exception classes for frame definitions and film sessions."""


class SoapFilmError(Exception):
    """Base class for all soap film errors."""

    pass


class FrameValidationError(SoapFilmError, ValueError):
    """Raised when a frame definition has invalid shape or pose data."""

    pass


class UnknownFrameError(SoapFilmError, KeyError):
    """Raised when a session operation references a frame id it does not own."""

    pass
