"""Exception hierarchy for speckles.

Routine Listings
----------------
SpeckleError : exception
    Base class of every error raised by the package.
PreconditionViolation : exception
    An argument lies outside the declared bounds of an operation.
ConfigurationError : exception
    A parameter record or sweep description is malformed.
PersistenceFailure : exception
    A results path cannot be created, written or read.
IdentifierCollision : exception
    Two simulation runs share the same identifier in a results table.

Notes
-----
The first two derive from ``ValueError`` and ``PersistenceFailure``
derives from ``OSError`` so that callers catching the builtin
categories keep working.
"""


class SpeckleError(Exception):
    """Base class for errors raised by speckles."""


class PreconditionViolation(SpeckleError, ValueError):
    """Offset, window or length arguments outside their declared bounds."""


class ConfigurationError(SpeckleError, ValueError):
    """Malformed parameter record or sweep description."""


class PersistenceFailure(SpeckleError, OSError):
    """Results directory or table could not be written or read."""


class IdentifierCollision(SpeckleError, KeyError):
    """Duplicate run identifier encountered while merging results."""

    def __str__(self) -> str:
        return Exception.__str__(self)
