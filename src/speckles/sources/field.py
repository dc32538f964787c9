"""Stochastic realizations of a Doppler-broadened multi-line field.

Extended Summary
----------------
Draws the emitter frequencies and phases of one field instance and
samples its instantaneous intensity on a uniform time grid. Line ``m``
holds ``n`` emitters of equal amplitude ``em[m] / sqrt(n)`` whose
angular frequencies are drawn from ``N(omega_m[m], sigma**2)`` and whose
phases are uniform in ``[0, 2 pi)``. The field is

    E(t) = sum_m em[m] / sqrt(n) * sum_k exp(-i (omega_mk t - phi_mk))

so that the ensemble-averaged intensity equals ``sum(|em|**2)``.

Routine Listings
----------------
field_intensity : function
    Instantaneous intensity of a set of emitters on a time grid.
make_field_instance : function
    Draw a FieldInstance from ensemble parameters.
_field_intensity_impl : function, internal (pure JAX)
    JIT-compiled intensity evaluation.
"""

import jax
import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, Complex, Float, PRNGKeyArray, jaxtyped

from speckles.types import (
    FieldEnsembleParams,
    FieldInstance,
    ScalarFloat,
    ScalarInteger,
    make_field_instance_record,
)
from speckles.utils.errors import PreconditionViolation


@jax.jit
def _field_intensity_impl(
    omega_n: Float[Array, " m n"],
    phi_n: Float[Array, " m n"],
    em: Complex[Array, " m"],
    times: Float[Array, " nt"],
) -> Float[Array, " nt"]:
    """JIT-compiled intensity of the emitter ensemble on a time grid."""
    n: int = omega_n.shape[1]
    phases: Complex[Array, " m n nt"] = jnp.exp(
        -1j * (omega_n[..., None] * times - phi_n[..., None])
    )
    lines: Complex[Array, " m nt"] = jnp.sum(phases, axis=1)
    field: Complex[Array, " nt"] = jnp.sum(
        em[:, None] * lines, axis=0
    ) / jnp.sqrt(n)
    return jnp.real(field * jnp.conj(field))


@jaxtyped(typechecker=beartype)
def field_intensity(
    omega_n: Float[Array, " m n"],
    phi_n: Float[Array, " m n"],
    em: Complex[Array, " m"],
    times: Float[Array, " nt"],
) -> Float[Array, " nt"]:
    """Instantaneous intensity of a set of emitters on a time grid.

    Parameters
    ----------
    omega_n : Float[Array, " m n"]
        Angular frequency of every emitter in rad/s.
    phi_n : Float[Array, " m n"]
        Phase of every emitter in radians.
    em : Complex[Array, " m"]
        Line amplitudes; each emitter of line m carries em[m] / sqrt(n).
    times : Float[Array, " nt"]
        Sample times in seconds.

    Returns
    -------
    intensity : Float[Array, " nt"]
        ``|E(t)|**2`` at every sample time.
    """
    return _field_intensity_impl(omega_n, phi_n, em, times)


@jaxtyped(typechecker=beartype)
def make_field_instance(
    key: PRNGKeyArray,
    params: FieldEnsembleParams,
    n_emitters: ScalarInteger,
    num_samples: ScalarInteger,
    dt: ScalarFloat,
) -> FieldInstance:
    """Draw one realization of a field ensemble.

    Parameters
    ----------
    key : PRNGKeyArray
        JAX random key consumed by the draw.
    params : FieldEnsembleParams
        Ensemble statistics.
    n_emitters : ScalarInteger
        Number of emitters per spectral line.
    num_samples : ScalarInteger
        Number of intensity samples.
    dt : ScalarFloat
        Sampling interval in seconds.

    Returns
    -------
    instance : FieldInstance
        Drawn frequencies and phases with the sampled intensity.

    Raises
    ------
    PreconditionViolation
        If ``n_emitters`` or ``num_samples`` is smaller than one.
    """
    n: int = int(n_emitters)
    nt: int = int(num_samples)
    if n < 1 or nt < 1:
        raise PreconditionViolation(
            f"n_emitters and num_samples must be >= 1, got {n} and {nt}"
        )
    m: int = params.em.shape[0]
    key_omega, key_phi = jax.random.split(key)
    omega_n: Float[Array, " m n"] = params.omega_m[:, None] + (
        params.sigma * jax.random.normal(key_omega, (m, n), dtype=jnp.float64)
    )
    phi_n: Float[Array, " m n"] = jax.random.uniform(
        key_phi, (m, n), dtype=jnp.float64, minval=0.0, maxval=2.0 * jnp.pi
    )
    times: Float[Array, " nt"] = jnp.arange(nt, dtype=jnp.float64) * dt
    intensity: Float[Array, " nt"] = _field_intensity_impl(
        omega_n, phi_n, params.em, times
    )
    return make_field_instance_record(
        omega_n=omega_n,
        phi_n=phi_n,
        em=params.em,
        intensity=intensity,
        dt=dt,
    )
