"""Common utilities used throughout the code.

Extended Summary
----------------
Error taxonomy and logging helpers shared by every subpackage.

Submodules
----------
errors
    Exception hierarchy
logging
    Logger factory

Routine Listings
----------------
configure_logging : function
    Installs a console handler for command-line use
get_logger : function
    Returns a logger under the package logger
SpeckleError : exception
    Base class of every package error
PreconditionViolation : exception
    Out-of-bounds offset, window or length argument
ConfigurationError : exception
    Malformed parameter record or sweep description
PersistenceFailure : exception
    Results path cannot be created, written or read
IdentifierCollision : exception
    Duplicate run identifier in a results table
"""

from .errors import (
    ConfigurationError,
    IdentifierCollision,
    PersistenceFailure,
    PreconditionViolation,
    SpeckleError,
)
from .logging import configure_logging, get_logger

__all__: list[str] = [
    "ConfigurationError",
    "IdentifierCollision",
    "PersistenceFailure",
    "PreconditionViolation",
    "SpeckleError",
    "configure_logging",
    "get_logger",
]
