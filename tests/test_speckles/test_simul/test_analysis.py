"""Tests for run post-processing in speckles.simul.analysis."""

from datetime import datetime

import chex
import jax.numpy as jnp

from speckles.simul import g2_estimate, snr, speckle_fft, tabulate
from speckles.types import (
    RunResult,
    SimulationRun,
    SpectralResult,
    make_speckle_params,
)


def _simulation(correlations, counts=2, dt=0.1, run_id="r"):
    nlags = correlations[0].shape[0]
    results = tuple(
        RunResult(
            readout=jnp.full((2, 2 * nlags), counts, dtype=jnp.int64),
            correlation=c,
        )
        for c in correlations
    )
    return SimulationRun(
        run_id=run_id,
        timestamp=datetime(2024, 1, 1),
        params=make_speckle_params(
            em=[1.0, 1.0], omega_m=[0.0, 3.0], dt=dt, repeat=len(results)
        ),
        results=results,
    )


class TestG2Estimate(chex.TestCase):
    """Test g2_estimate."""

    def test_normalised_by_arm_means(self) -> None:
        """Test normalisation of the repeat-averaged correlation."""
        sim = _simulation(
            [jnp.array([4.0, 4.0, 2.0]), jnp.array([4.0, 2.0, 2.0])]
        )
        chex.assert_trees_all_close(
            g2_estimate(sim), jnp.array([1.0, 0.75, 0.5])
        )

    def test_dark_arm(self) -> None:
        """Test that a run without counts gives zeros."""
        sim = _simulation([jnp.zeros(3)], counts=0)
        chex.assert_trees_all_close(g2_estimate(sim), jnp.zeros(3))


class TestSpeckleFFT(chex.TestCase):
    """Test speckle_fft."""

    def test_frequency_axis(self) -> None:
        """Test the angular frequency bins."""
        spectral = speckle_fft(_simulation([jnp.ones(16)], dt=0.1))
        chex.assert_shape(spectral.frequencies, (9,))
        chex.assert_trees_all_close(
            spectral.frequencies[1], 2 * jnp.pi / (16 * 0.1)
        )

    def test_flat_correlation(self) -> None:
        """Test that a constant g2 has no spectral content."""
        spectral = speckle_fft(_simulation([jnp.full(16, 4.0)]))
        chex.assert_trees_all_close(spectral.spectrum, jnp.zeros(9), atol=1e-12)

    def test_peak_at_beat(self) -> None:
        """Test that a modulated g2 peaks at its modulation frequency."""
        k = jnp.arange(16)
        corr = 4.0 * (1.0 + 0.5 * jnp.cos(2 * jnp.pi * 2 * k / 16))
        spectral = speckle_fft(_simulation([corr]))
        chex.assert_equal(int(jnp.argmax(spectral.spectrum)), 2)


class TestSnr(chex.TestCase):
    """Test snr."""

    def setUp(self) -> None:
        """Set up a spectrum with a beat and a stronger spur."""
        super().setUp()
        self.spectral = SpectralResult(
            frequencies=jnp.arange(6.0),
            spectrum=jnp.array([10.0, 1.0, 1.0, 5.0, 1.0, 8.0]),
        )

    def test_beat_frequency(self) -> None:
        """Test that the bin nearest the beat note is the signal."""
        params = make_speckle_params(em=[1.0, 1.0], omega_m=[0.0, 3.1])
        chex.assert_trees_all_close(snr(self.spectral, params), 5.0)

    def test_single_line_uses_peak(self) -> None:
        """Test that a single line uses the largest non-DC bin."""
        params = make_speckle_params(em=[1.0], omega_m=[0.0])
        chex.assert_trees_all_close(snr(self.spectral, params), 8.0)

    def test_degenerate_spectra(self) -> None:
        """Test that short or flat spectra give zero."""
        params = make_speckle_params()
        short = SpectralResult(jnp.arange(2.0), jnp.array([1.0, 2.0]))
        flat = SpectralResult(jnp.arange(4.0), jnp.zeros(4))
        chex.assert_equal(snr(short, params), 0.0)
        chex.assert_equal(snr(flat, params), 0.0)


class TestTabulate(chex.TestCase):
    """Test tabulate."""

    def test_rows_and_columns(self) -> None:
        """Test one row per run with configuration columns."""
        sims = [
            _simulation([jnp.ones(4)], run_id="a"),
            _simulation([jnp.ones(4)], run_id="b"),
        ]
        table = tabulate(sims, snrs=[1.0, 2.0])
        chex.assert_equal(list(table["run_id"]), ["a", "b"])
        chex.assert_equal(list(table["snr"]), [1.0, 2.0])
        chex.assert_equal(table["n_lines"].iloc[0], 2)
        chex.assert_equal(table["n_lags"].iloc[0], 4)
        chex.assert_equal(table["omega_m"].iloc[0], "0.0 3.0")
        chex.assert_equal(table["repeat"].iloc[0], 1)

    def test_without_snr(self) -> None:
        """Test that the snr column is optional."""
        table = tabulate([_simulation([jnp.ones(4)])])
        chex.assert_equal("snr" in table.columns, False)
