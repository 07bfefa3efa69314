"""Exception taxonomy for capture, render and catalog operations.

Every error here is recoverable: the session layer turns it into a one-line
status message and leaves prior state untouched.
"""

from __future__ import annotations


class VPianoError(Exception):
    """Base class for all recoverable vpiano errors."""


class NoDataError(VPianoError):
    """Render requested on a log that holds no notes."""


class RecordingIOError(VPianoError, OSError):
    """A recording file could not be written, renamed or deleted."""


class DuplicateNameError(VPianoError):
    """Rename target collides with an existing recording."""


class InvalidInputError(VPianoError, ValueError):
    """User or caller input was malformed (tempo, name, note fields)."""
