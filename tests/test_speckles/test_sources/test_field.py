"""Tests for field instance drawing in speckles.sources.field."""

import chex
import jax
import jax.numpy as jnp

from speckles.sources import field_intensity, make_field_instance
from speckles.sources.field import _field_intensity_impl
from speckles.types import FieldInstance, make_field_params
from speckles.utils import PreconditionViolation


class TestFieldIntensity(chex.TestCase):
    """Test field_intensity."""

    @chex.variants(with_jit=True, without_jit=True)
    def test_single_emitter_constant(self) -> None:
        """Test that one emitter has constant intensity |em|**2."""
        var_fn = self.variant(field_intensity)
        times = jnp.linspace(0.0, 5.0, 6)
        result = var_fn(
            jnp.array([[2.0]]), jnp.array([[0.3]]), jnp.array([3.0 + 0j]),
            times,
        )
        chex.assert_trees_all_close(result, jnp.full(6, 9.0))

    @chex.variants(with_jit=True, without_jit=True)
    def test_two_emitter_beat(self) -> None:
        """Test the beat of two in-phase emitters of one line."""
        var_fn = self.variant(field_intensity)
        times = jnp.linspace(0.0, 3.0, 7)
        result = var_fn(
            jnp.array([[0.0, 1.0]]), jnp.zeros((1, 2)),
            jnp.array([1.0 + 0j]), times,
        )
        chex.assert_trees_all_close(result, 1.0 + jnp.cos(times))

    @chex.variants(with_jit=True, without_jit=True)
    def test_impl_matches_public(self) -> None:
        """Test that the wrapper forwards to the implementation."""
        omega = jnp.array([[0.5, 1.5], [2.0, -1.0]])
        phi = jnp.array([[0.1, 0.2], [0.3, 0.4]])
        em = jnp.array([1.0 + 0j, 0.5j])
        times = jnp.arange(5.0)
        chex.assert_trees_all_close(
            field_intensity(omega, phi, em, times),
            self.variant(_field_intensity_impl)(omega, phi, em, times),
        )


class TestMakeFieldInstance(chex.TestCase):
    """Test make_field_instance."""

    def setUp(self) -> None:
        """Set up a two-line ensemble."""
        super().setUp()
        self.params = make_field_params(
            [1.0, 0.5], [0.0, 4.0], omega0=0.0, sigma=0.5
        )

    def test_shapes(self) -> None:
        """Test the shapes of the drawn components."""
        instance = make_field_instance(
            jax.random.PRNGKey(0), self.params, 6, 50, 0.1
        )
        chex.assert_equal(isinstance(instance, FieldInstance), True)
        chex.assert_shape(instance.omega_n, (2, 6))
        chex.assert_shape(instance.phi_n, (2, 6))
        chex.assert_shape(instance.intensity, (50,))
        chex.assert_trees_all_close(instance.dt, 0.1)

    def test_deterministic_for_key(self) -> None:
        """Test that equal keys give equal instances."""
        first = make_field_instance(
            jax.random.PRNGKey(3), self.params, 4, 20, 0.1
        )
        second = make_field_instance(
            jax.random.PRNGKey(3), self.params, 4, 20, 0.1
        )
        chex.assert_trees_all_close(first, second)

    def test_phases_in_range(self) -> None:
        """Test that phases are drawn from [0, 2 pi)."""
        instance = make_field_instance(
            jax.random.PRNGKey(1), self.params, 200, 2, 0.1
        )
        chex.assert_equal(bool(jnp.all(instance.phi_n >= 0.0)), True)
        chex.assert_equal(bool(jnp.all(instance.phi_n < 2 * jnp.pi)), True)

    def test_frequencies_centred_on_lines(self) -> None:
        """Test that emitter frequencies scatter around the line centres."""
        instance = make_field_instance(
            jax.random.PRNGKey(2), self.params, 4000, 2, 0.1
        )
        chex.assert_trees_all_close(
            jnp.mean(instance.omega_n, axis=1), self.params.omega_m,
            atol=0.05,
        )
        chex.assert_trees_all_close(
            jnp.std(instance.omega_n, axis=1), jnp.full(2, 0.5), atol=0.05
        )

    def test_zero_linewidth(self) -> None:
        """Test that sigma zero places every emitter on its line."""
        params = make_field_params([1.0], [2.0], sigma=0.0)
        instance = make_field_instance(jax.random.PRNGKey(0), params, 3, 4, 0.5)
        chex.assert_trees_all_close(instance.omega_n, jnp.full((1, 3), 2.0))

    def test_mean_intensity(self) -> None:
        """Test that the ensemble mean intensity is sum(|em|**2)."""
        keys = jax.random.split(jax.random.PRNGKey(5), 4000)
        intensities = jax.vmap(
            lambda k: make_field_instance(k, self.params, 5, 20, 0.3).intensity
        )(keys)
        chex.assert_trees_all_close(jnp.mean(intensities), 1.25, rtol=0.1)

    def test_invalid_sizes(self) -> None:
        """Test that empty ensembles or grids raise."""
        with self.assertRaises(PreconditionViolation):
            make_field_instance(jax.random.PRNGKey(0), self.params, 0, 10, 0.1)
        with self.assertRaises(PreconditionViolation):
            make_field_instance(jax.random.PRNGKey(0), self.params, 3, 0, 0.1)
