"""Analytic moments of the Doppler noise term.

Extended Summary
----------------
Closed-form predictions for the intensity correlation of a field made of
``m`` spectral lines with ``n`` Doppler-broadened emitters each. The
emitter angular frequencies of a line are Gaussian distributed with
standard deviation ``sigma`` around the line centre. The random phasor
sum

    s(tau) = |sum_k exp(-i * tau * omega_k)|^2

is the Doppler noise term. Its ensemble mean and variance over the
frequency draws are available in closed form, and its mean enters the
second-order correlation g2(tau).

Routine Listings
----------------
stau_avg : function
    Mean of the Doppler noise term from sigma and n.
stau_avg_from_params : function
    Mean of the Doppler noise term from ensemble parameters.
stau_var : function
    Variance of the Doppler noise term from sigma and n.
stau_var_from_params : function
    Variance of the Doppler noise term from ensemble parameters.
stau : function
    Sampled Doppler noise term for a concrete set of frequencies.
stau_from_instance : function
    Sampled Doppler noise term of one line of a field instance.
g2_calc : function
    Ensemble-averaged second-order correlation g2(tau).
g2_zero_delay : function
    Theoretical g2 at zero delay.

Notes
-----
All functions are pure, JIT-compatible and broadcast over an array of
lag times ``tau``. No bounds are checked: ``sigma >= 0`` and ``n >= 1``
are assumed.

References
----------
1. Mandel, L. & Wolf, E. "Optical Coherence and Quantum Optics" (1995)
2. Goodman, J. W. "Statistical Optics" (2015)
"""

import jax.numpy as jnp
from beartype import beartype
from beartype.typing import TypeAlias, Union
from jaxtyping import Array, Complex, Float, Num, jaxtyped

from speckles.types import (
    FieldEnsembleParams,
    FieldInstance,
    ScalarInteger,
    ScalarNumeric,
)

LagTimes: TypeAlias = Union[int, float, Num[Array, " ..."]]


def _phasor_sum_power(
    tau: Float[Array, " ..."],
    omega: Float[Array, " n"],
    weights: Union[float, Float[Array, " n"]] = 1.0,
) -> Float[Array, " ..."]:
    """Squared magnitude of sum_k weights_k * exp(-i tau omega_k)."""
    phases: Complex[Array, " ... n"] = jnp.exp(
        -1j * jnp.expand_dims(tau, -1) * omega
    )
    total: Complex[Array, " ..."] = jnp.sum(weights * phases, axis=-1)
    return jnp.real(total * jnp.conj(total))


@jaxtyped(typechecker=beartype)
def stau_avg(
    tau: LagTimes,
    sigma: ScalarNumeric,
    n: ScalarInteger,
) -> Float[Array, " ..."]:
    """Return the average of the Doppler noise term.

    Parameters
    ----------
    tau : LagTimes
        Lag time(s) in seconds.
    sigma : ScalarNumeric
        Doppler linewidth in rad/s.
    n : ScalarInteger
        Number of emitters.

    Returns
    -------
    mean : Float[Array, " ..."]
        ``n + n * (n - 1) * exp(-sigma**2 * tau**2)``, shaped like tau.

    Notes
    -----
    At ``tau = 0`` every phasor is aligned and the mean is ``n**2``; for
    ``sigma * tau >> 1`` the cross terms average out and it tends to n.
    """
    tau_arr: Float[Array, " ..."] = jnp.asarray(tau, dtype=jnp.float64)
    sigma_arr: Float[Array, " "] = jnp.asarray(sigma, dtype=jnp.float64)
    term1 = n
    term2 = n * (n - 1) * jnp.exp(-(sigma_arr**2) * tau_arr**2)
    return term1 + term2


@jaxtyped(typechecker=beartype)
def stau_avg_from_params(
    tau: LagTimes,
    params: FieldEnsembleParams,
    n: ScalarInteger,
) -> Float[Array, " ..."]:
    """Return the average of the Doppler noise term for an ensemble."""
    return stau_avg(tau, params.sigma, n)


@jaxtyped(typechecker=beartype)
def stau_var(
    tau: LagTimes,
    sigma: ScalarNumeric,
    n: ScalarInteger,
) -> Float[Array, " ..."]:
    """Return the variance of the Doppler noise term.

    Parameters
    ----------
    tau : LagTimes
        Lag time(s) in seconds.
    sigma : ScalarNumeric
        Doppler linewidth in rad/s.
    n : ScalarInteger
        Number of emitters.

    Returns
    -------
    var : Float[Array, " ..."]
        With ``x = sigma**2 * tau**2``:
        ``8 n (n-1) exp(-2x) (n - 1 + cosh(x)) sinh(x/2)**2``.

    Notes
    -----
    The variance vanishes for a single emitter and at zero delay.
    """
    tau_arr: Float[Array, " ..."] = jnp.asarray(tau, dtype=jnp.float64)
    sigma_arr: Float[Array, " "] = jnp.asarray(sigma, dtype=jnp.float64)
    st2: Float[Array, " ..."] = sigma_arr**2 * tau_arr**2

    prod1 = 8 * n * (n - 1) * jnp.exp(-2 * st2)
    prod2 = n - 1 + jnp.cosh(st2)
    prod3 = jnp.sinh(st2 / 2) ** 2
    return prod1 * prod2 * prod3


@jaxtyped(typechecker=beartype)
def stau_var_from_params(
    tau: LagTimes,
    params: FieldEnsembleParams,
    n: ScalarInteger,
) -> Float[Array, " ..."]:
    """Return the variance of the Doppler noise term for an ensemble."""
    return stau_var(tau, params.sigma, n)


@jaxtyped(typechecker=beartype)
def stau(
    tau: LagTimes,
    omega_n: Num[Array, " n"],
) -> Float[Array, " ..."]:
    """Calculate the Doppler noise term for the given tau and frequencies.

    Parameters
    ----------
    tau : LagTimes
        Lag time(s) in seconds.
    omega_n : Num[Array, " n"]
        Angular frequency of every emitter in rad/s.

    Returns
    -------
    value : Float[Array, " ..."]
        ``|sum_k exp(-i * tau * omega_n[k])|**2``, shaped like tau.

    Notes
    -----
    This is the single-realization counterpart of :func:`stau_avg`; its
    mean over independent frequency draws converges to it.
    """
    tau_arr: Float[Array, " ..."] = jnp.asarray(tau, dtype=jnp.float64)
    omega: Float[Array, " n"] = jnp.asarray(omega_n, dtype=jnp.float64)
    return _phasor_sum_power(tau_arr, omega)


@jaxtyped(typechecker=beartype)
def stau_from_instance(
    tau: LagTimes,
    instance: FieldInstance,
    line: int = 0,
) -> Float[Array, " ..."]:
    """Calculate the Doppler noise term of one line of a field instance."""
    return stau(tau, instance.omega_n[line])


@jaxtyped(typechecker=beartype)
def g2_calc(
    tau: LagTimes,
    n: ScalarInteger,
    params: FieldEnsembleParams,
) -> Float[Array, " ..."]:
    """Return the ensemble-averaged second-order correlation g2(tau).

    Parameters
    ----------
    tau : LagTimes
        Lag time(s) in seconds.
    n : ScalarInteger
        Number of emitters per spectral line.
    params : FieldEnsembleParams
        Line amplitudes, line frequencies, reference frequency and
        Doppler width.

    Returns
    -------
    g2 : Float[Array, " ..."]
        Real-valued g2, shaped like tau.

    Notes
    -----
    With ``em2 = |em|**2``, ``em4 = em2**2`` and line detunings
    ``delta_m = omega_m - omega0``:

        g2(tau) = 1 - sum(em4) / (n * sum(em2)**2)
                  + |sum(em2 * exp(-i tau delta_m)) / sum(em2)|**2
                    * stau_avg(tau, sigma, n) / n**2

    The first correction accounts for the finite number of emitters,
    the last term carries the beat notes between lines modulated by the
    Doppler decay.
    """
    tau_arr: Float[Array, " ..."] = jnp.asarray(tau, dtype=jnp.float64)
    em2: Float[Array, " m"] = jnp.real(params.em * jnp.conj(params.em))
    em4: Float[Array, " m"] = em2 * em2
    sum_em2: Float[Array, " "] = jnp.sum(em2)
    sum_em4: Float[Array, " "] = jnp.sum(em4)

    term2 = -sum_em4 / (n * sum_em2**2)

    delta_m: Float[Array, " m"] = params.omega_m - params.omega0
    beat = _phasor_sum_power(tau_arr, delta_m, em2) / sum_em2**2
    term3 = beat * stau_avg(tau_arr, params.sigma, n) / n**2

    return 1.0 + term2 + term3


@jaxtyped(typechecker=beartype)
def g2_zero_delay(
    n: ScalarInteger,
    params: FieldEnsembleParams,
) -> Float[Array, " "]:
    """Return the theoretical zero-delay value ``2 - sum(em4) / (n sum(em2)^2)``.

    Equals 2 for chaotic light with many emitters and ``2 - 1/n`` for a
    single line.
    """
    em2: Float[Array, " m"] = jnp.real(params.em * jnp.conj(params.em))
    return 2.0 - jnp.sum(em2 * em2) / (n * jnp.sum(em2) ** 2)
