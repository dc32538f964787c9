"""Photon-counting readout of a field instance.

Extended Summary
----------------
Splits the intensity of a field instance between the two arms of a
beamsplitter and draws Poisson photon counts on each arm. The mean
count of arm ``a`` in sample ``j`` is

    mu[a, j] = (eta * f_a * R * I[j] / <I> + dark_rate) * dt

with efficiency ``eta``, arm fraction ``f_a`` (``T`` and ``1 - T``),
incident photon rate ``R`` and ensemble-averaged intensity
``<I> = sum(|em|**2)``.

Routine Listings
----------------
produce_readout : function
    Draw the two-arm photon count readout of a field instance.
_readout_impl : function, internal (pure JAX)
    JIT-compiled count drawing.
"""

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Float, Int, PRNGKeyArray, jaxtyped

from speckles.types import Beamsplitter, DetectorParams, FieldInstance


@jax.jit
def _readout_impl(
    key: PRNGKeyArray,
    intensity: Float[Array, " nt"],
    mean_intensity: Float[Array, " "],
    transmission: Float[Array, " "],
    detector: DetectorParams,
    dt: Float[Array, " "],
) -> Int[Array, " 2 nt"]:
    """JIT-compiled Poisson counts on both beamsplitter arms."""
    arms: Float[Array, " 2"] = jnp.stack([transmission, 1.0 - transmission])
    rate: Float[Array, " nt"] = (
        detector.photon_rate * intensity / mean_intensity
    )
    mean: Float[Array, " 2 nt"] = (
        detector.efficiency * arms[:, None] * rate[None, :]
        + detector.dark_rate
    ) * dt
    return jax.random.poisson(key, mean, shape=mean.shape)


@jaxtyped(typechecker=beartype)
def produce_readout(
    instance: FieldInstance,
    beamsplitter: Beamsplitter,
    detector: DetectorParams,
    key: PRNGKeyArray,
) -> Int[Array, " 2 nt"]:
    """Draw the two-arm photon count readout of a field instance.

    Parameters
    ----------
    instance : FieldInstance
        Field realization whose intensity is detected.
    beamsplitter : Beamsplitter
        Splits the intensity between the two detector arms.
    detector : DetectorParams
        Efficiency, dark rate and incident photon rate.
    key : PRNGKeyArray
        JAX random key consumed by the Poisson draw.

    Returns
    -------
    readout : Int[Array, " 2 nt"]
        Counts per time step; row 0 is the transmitted arm, row 1 the
        reflected arm.
    """
    mean_intensity: Float[Array, " "] = jnp.sum(jnp.abs(instance.em) ** 2)
    return _readout_impl(
        key,
        instance.intensity,
        mean_intensity,
        beamsplitter.transmission,
        detector,
        instance.dt,
    )
