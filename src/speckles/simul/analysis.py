"""Post-processing of simulation runs.

Extended Summary
----------------
Turns the raw correlations of a run into an empirical g2 estimate, its
spectrum and a scalar signal-to-noise figure, and flattens runs into a
table row each.

Routine Listings
----------------
g2_estimate : function
    Repeat-averaged correlation normalised by the arm mean counts.
speckle_fft : function
    One-sided spectrum of the mean-subtracted g2 estimate.
snr : function
    Peak over median of the non-DC spectrum.
tabulate : function
    One table row per run.

Notes
-----
The beat notes between spectral lines appear as peaks of the spectrum
at the line detunings, so a high ``snr`` indicates the multi-line
structure survived the detection noise.
"""

import jax.numpy as jnp
import pandas as pd
from beartype import beartype
from beartype.typing import Any, Dict, Optional, Sequence
from jaxtyping import Array, Float, jaxtyped

from speckles.types import (
    SimulationRun,
    SpeckleParams,
    SpectralResult,
)


def g2_estimate(sim: SimulationRun) -> Float[Array, " nlags"]:
    """Return the empirical g2 of a run, one value per lag.

    The correlations of all repeats are averaged and divided by the
    product of the mean counts of the two arms. A run without any counts
    on an arm yields zeros.
    """
    correlations = jnp.stack(sim.correlations)
    readouts = jnp.stack(sim.readouts).astype(jnp.float64)
    mean_corr: Float[Array, " nlags"] = jnp.mean(correlations, axis=0)
    norm: Float[Array, " "] = jnp.mean(readouts[:, 0]) * jnp.mean(
        readouts[:, 1]
    )
    return jnp.where(norm > 0, mean_corr / jnp.where(norm > 0, norm, 1.0), 0.0)


def speckle_fft(sim: SimulationRun) -> SpectralResult:
    """Return the one-sided spectrum of the g2 estimate of a run.

    Frequencies are angular, in rad/s, derived from the sampling
    interval of the run configuration.
    """
    g2: Float[Array, " nlags"] = g2_estimate(sim)
    spectrum: Float[Array, " nf"] = jnp.abs(jnp.fft.rfft(g2 - jnp.mean(g2)))
    frequencies: Float[Array, " nf"] = (
        2.0 * jnp.pi * jnp.fft.rfftfreq(g2.shape[0], d=sim.params.dt)
    )
    return SpectralResult(frequencies=frequencies, spectrum=spectrum)


@jaxtyped(typechecker=beartype)
def snr(spectral: SpectralResult, params: SpeckleParams) -> float:
    """Return the signal-to-noise ratio of a g2 spectrum.

    Parameters
    ----------
    spectral : SpectralResult
        Output of :func:`speckle_fft`.
    params : SpeckleParams
        Configuration of the run. Its line frequencies give the expected
        beat frequencies ``|omega_i - omega_j|``.

    Returns
    -------
    ratio : float
        Largest magnitude at the bins nearest the beat frequencies divided
        by the median of the non-DC spectrum. A single-line field has no
        beat notes and uses the largest non-DC magnitude instead. Returns
        0.0 when fewer than two non-DC bins exist or the median vanishes.
    """
    freqs: Float[Array, " k"] = spectral.frequencies[1:]
    values: Float[Array, " k"] = spectral.spectrum[1:]
    if values.shape[0] < 2:
        return 0.0
    median = float(jnp.median(values))
    if median <= 0.0:
        return 0.0
    beats = sorted(
        {
            abs(a - b)
            for a in params.omega_m
            for b in params.omega_m
            if abs(a - b) > 0
        }
    )
    if not beats:
        return float(jnp.max(values)) / median
    signal = max(
        float(values[jnp.argmin(jnp.abs(freqs - beat))]) for beat in beats
    )
    return signal / median


def tabulate(
    sims: Sequence[SimulationRun], snrs: Optional[Sequence[float]] = None
) -> pd.DataFrame:
    """Flatten runs into a DataFrame with one row per run.

    Columns are ``run_id``, ``timestamp``, every scalar configuration
    field, the line count ``n_lines``, the number of lags ``n_lags`` and,
    when given, ``snr``. Line amplitudes and frequencies are written as
    strings so the table stays a flat CSV.
    """
    rows = []
    for index, sim in enumerate(sims):
        record: Dict[str, Any] = {
            "run_id": sim.run_id,
            "timestamp": sim.timestamp.isoformat(),
        }
        for name, value in sim.params._asdict().items():
            if name in ("em", "omega_m"):
                record[name] = " ".join(str(v) for v in value)
            else:
                record[name] = value
        record["n_lines"] = len(sim.params.em)
        record["n_lags"] = int(sim.correlations[0].shape[0])
        if snrs is not None:
            record["snr"] = snrs[index]
        rows.append(record)
    return pd.DataFrame(rows)
