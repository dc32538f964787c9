"""Tests for scalar aliases in speckles.types.common_types."""

import chex
import jax.numpy as jnp
from absl.testing import parameterized
from beartype.door import is_bearable

import speckles.types as types
from speckles.types import ScalarFloat, ScalarInteger, ScalarNumeric


class TestScalarAliases(chex.TestCase, parameterized.TestCase):
    """Test the scalar aliases used by the public signatures."""

    def test_exported_aliases(self) -> None:
        """Test that only the aliases in use are exported."""
        exported = sorted(n for n in types.__all__ if n.startswith("Scalar"))
        chex.assert_equal(
            exported, ["ScalarFloat", "ScalarInteger", "ScalarNumeric"]
        )
        chex.assert_equal(hasattr(types, "NonJaxNumber"), False)

    @parameterized.named_parameters(
        ("float_literal", ScalarFloat, 1.5, True),
        ("float_array", ScalarFloat, jnp.asarray(1.5), True),
        ("float_vector", ScalarFloat, jnp.ones(2), False),
        ("int_literal", ScalarInteger, 3, True),
        ("int_array", ScalarInteger, jnp.asarray(3), True),
        ("int_from_float", ScalarInteger, jnp.asarray(3.0), False),
        ("numeric_complex", ScalarNumeric, 1.0 + 2.0j, True),
        ("numeric_array", ScalarNumeric, jnp.asarray(2), True),
    )
    def test_accepts(self, alias, value, expected) -> None:
        """Test which values each alias admits."""
        chex.assert_equal(is_bearable(value, alias), expected)
