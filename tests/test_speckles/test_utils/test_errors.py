"""Tests for the error taxonomy and logger in speckles.utils."""

import logging
from unittest import mock

import chex
from absl.testing import parameterized

from speckles.utils import (
    ConfigurationError,
    IdentifierCollision,
    PersistenceFailure,
    PreconditionViolation,
    SpeckleError,
    configure_logging,
    get_logger,
)
from speckles.utils.logging import LOG_FORMAT


class TestErrors(chex.TestCase, parameterized.TestCase):
    """Test the exception hierarchy."""

    @parameterized.named_parameters(
        ("precondition", PreconditionViolation, ValueError),
        ("configuration", ConfigurationError, ValueError),
        ("persistence", PersistenceFailure, OSError),
        ("collision", IdentifierCollision, KeyError),
    )
    def test_builtin_category(self, error, builtin) -> None:
        """Test that each error is also caught by its builtin category."""
        chex.assert_equal(issubclass(error, SpeckleError), True)
        chex.assert_equal(issubclass(error, builtin), True)

    def test_collision_message_not_quoted(self) -> None:
        """Test that the collision message reads like other errors."""
        chex.assert_equal(str(IdentifierCollision("duplicate")), "duplicate")


class TestGetLogger(chex.TestCase):
    """Test get_logger."""

    def test_default_name(self) -> None:
        """Test that the package logger is returned by default."""
        chex.assert_equal(get_logger().name, "speckles")

    def test_named_logger(self) -> None:
        """Test that a module logger is a child of the package logger."""
        logger = get_logger("speckles.simul")
        chex.assert_equal(isinstance(logger, logging.Logger), True)
        chex.assert_equal(logger.name, "speckles.simul")

    def test_library_leaves_root_alone(self) -> None:
        """Test that importing the package adds only a null handler."""
        handlers = logging.getLogger("speckles").handlers
        chex.assert_equal(
            any(isinstance(h, logging.NullHandler) for h in handlers), True
        )
        root = logging.getLogger()
        with mock.patch.object(root, "handlers", []):
            get_logger("speckles.simul")
            chex.assert_equal(root.handlers, [])


class TestConfigureLogging(chex.TestCase):
    """Test configure_logging."""

    def setUp(self) -> None:
        super().setUp()
        package = logging.getLogger("speckles")
        self.addCleanup(package.setLevel, package.level)

    def test_installs_console_handler(self) -> None:
        """Test that a bare root logger gets a formatted handler."""
        root = logging.getLogger()
        with mock.patch.object(root, "handlers", []), mock.patch(
            "speckles.utils.logging.logging.basicConfig"
        ) as basic:
            configure_logging(logging.DEBUG)
        basic.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT)
        chex.assert_equal(logging.getLogger("speckles").level, logging.DEBUG)

    def test_keeps_host_handlers(self) -> None:
        """Test that an existing root handler is not replaced."""
        root = logging.getLogger()
        existing = logging.StreamHandler()
        with mock.patch.object(root, "handlers", [existing]), mock.patch(
            "speckles.utils.logging.logging.basicConfig"
        ) as basic:
            configure_logging()
            chex.assert_equal(root.handlers, [existing])
        basic.assert_not_called()
