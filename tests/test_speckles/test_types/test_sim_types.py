"""Tests for simulation records in speckles.types.sim_types."""

from datetime import datetime

import chex
import jax.numpy as jnp
from absl.testing import parameterized

from speckles.types import (
    RunResult,
    SimulationRun,
    SpeckleParams,
    make_speckle_params,
    speckle_params_to_dict,
)
from speckles.utils import ConfigurationError


class TestMakeSpeckleParams(chex.TestCase, parameterized.TestCase):
    """Test the make_speckle_params factory function."""

    def test_defaults(self) -> None:
        """Test that omitted fields take their defaults."""
        params = make_speckle_params()
        chex.assert_equal(params, SpeckleParams())
        chex.assert_equal(params.num_samples, 2000)

    def test_type_conversion(self) -> None:
        """Test conversion of YAML-style values."""
        params = make_speckle_params(
            em=["1+0.5j", [0.0, 2.0]],
            omega_m=[0, 3],
            n_emitters=4.0,
            seed="7",
        )
        chex.assert_equal(params.em, (1 + 0.5j, 2j))
        chex.assert_equal(params.omega_m, (0.0, 3.0))
        chex.assert_equal(params.n_emitters, 4)
        chex.assert_equal(isinstance(params.n_emitters, int), True)
        chex.assert_equal(params.seed, 7)

    def test_scalar_line(self) -> None:
        """Test that scalar line values describe a single line."""
        params = make_speckle_params(em=2.0, omega_m=1.0)
        chex.assert_equal(params.em, (2 + 0j,))
        chex.assert_equal(params.omega_m, (1.0,))

    def test_derived_records(self) -> None:
        """Test the array-valued views of the configuration."""
        params = make_speckle_params(
            em=[1.0, 1.0], omega_m=[0.0, 1.0], transmission=0.3,
            efficiency=0.8,
        )
        chex.assert_shape(params.field_params().em, (2,))
        chex.assert_trees_all_close(params.beamsplitter().transmission, 0.3)
        chex.assert_trees_all_close(params.detector().efficiency, 0.8)

    @parameterized.named_parameters(
        ("unknown_field", {"colour": "red"}),
        ("length_mismatch", {"em": [1.0, 1.0], "omega_m": [0.0]}),
        ("empty_lines", {"em": [], "omega_m": []}),
        ("negative_sigma", {"sigma": -1.0}),
        ("zero_emitters", {"n_emitters": 0}),
        ("fractional_repeat", {"repeat": 1.5}),
        ("zero_duration", {"duration": 0.0}),
        ("dt_above_duration", {"duration": 1.0, "dt": 2.0}),
        ("bad_transmission", {"transmission": 1.1}),
        ("bad_efficiency", {"efficiency": 0.0}),
        ("negative_dark_rate", {"dark_rate": -1.0}),
        ("non_bool_reinstance", {"reinstance": "yes"}),
        ("bool_as_number", {"sigma": True}),
        ("not_a_number", {"window": "wide"}),
        ("infinite", {"duration": float("inf")}),
        ("zero_amplitudes", {"em": [0.0], "omega_m": [0.0]}),
    )
    def test_invalid(self, fields) -> None:
        """Test that malformed configurations raise ConfigurationError."""
        with self.assertRaises(ConfigurationError):
            make_speckle_params(**fields)

    def test_to_dict(self) -> None:
        """Test the JSON-friendly mapping."""
        record = speckle_params_to_dict(
            make_speckle_params(em=[1 + 2j], omega_m=[0.5])
        )
        chex.assert_equal(record["em"], [[1.0, 2.0]])
        chex.assert_equal(record["omega_m"], [0.5])
        chex.assert_equal(record["seed"], 0)

    def test_to_dict_round_trip(self) -> None:
        """Test that the mapping is accepted by the factory."""
        params = make_speckle_params(
            em=[1 + 2j, 0.5], omega_m=[0.0, 1.0], reinstance=True
        )
        chex.assert_equal(
            make_speckle_params(**speckle_params_to_dict(params)), params
        )


class TestSimulationRun(chex.TestCase):
    """Test RunResult and SimulationRun."""

    def test_views(self) -> None:
        """Test the per-repeat readout and correlation views."""
        results = tuple(
            RunResult(
                readout=jnp.full((2, 4), k), correlation=jnp.full((3,), k)
            )
            for k in range(2)
        )
        sim = SimulationRun(
            run_id="abc",
            timestamp=datetime(2024, 1, 1),
            params=SpeckleParams(),
            results=results,
        )
        chex.assert_equal(len(sim.readouts), 2)
        chex.assert_trees_all_close(sim.correlations[1], jnp.full((3,), 1))
        chex.assert_shape(sim.readouts[0], (2, 4))
