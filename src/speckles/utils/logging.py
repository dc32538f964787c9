"""Logger factory for speckles."""

import logging

from beartype.typing import Optional

DEFAULT_LOG_LEVEL: int = logging.INFO
LOG_FORMAT: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
PACKAGE_LOGGER: str = "speckles"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the speckles package logger.

    Parameters
    ----------
    name : str, optional
        Name of the logger to retrieve. Defaults to the package name.

    Returns
    -------
    logger : logging.Logger
        The requested logger. Handlers are left to the application.
    """
    return logging.getLogger(name if name else PACKAGE_LOGGER)


def configure_logging(level: int = DEFAULT_LOG_LEVEL) -> None:
    """Install a stream handler on the root logger for console use.

    Does nothing to the handlers if the root logger already has one, so
    a host application's configuration is kept.

    Parameters
    ----------
    level : int, optional
        Level set on the package logger. Default is ``logging.INFO``.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
