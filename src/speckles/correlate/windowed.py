"""Windowed correlation of photon count sequences.

Extended Summary
----------------
Offset correlation of two discrete sequences over a finite averaging
window. The second sequence is shifted by ``offset`` samples and any
index that falls past its end contributes zero (zero padding): the
window is neither wrapped around nor truncated and rescaled.

For count sequences ``u`` and ``v`` the correlation at offset ``k`` over
a window ``w`` is:

    C(k) = (1 / w) * sum_{i < w} u[i] * v[k + i]

Routine Listings
----------------
correlate : function
    Correlation of two sequences at one offset.
autocorrelate : function
    Correlation of a sequence with itself at one offset.
correlate_lags : function
    Correlation at every offset ``0 .. num_lags - 1``.
corr_times : function
    Lag times at which two count sequences are positively correlated.
autocorr_times : function
    Lag times at which a count sequence is positively autocorrelated.
count_times : function
    Expand a count histogram into a list of event times.
_correlate_impl : function, internal (pure JAX)
    JIT-compiled single-offset correlation.
_correlate_lags_impl : function, internal (pure JAX)
    JIT-compiled multi-offset correlation.

Notes
-----
The public functions check their bounds eagerly and raise
:class:`~speckles.utils.PreconditionViolation`; nothing is clamped. The
``_impl`` functions assume valid arguments and are safe to use inside
``jax.jit`` with a static window.
"""

from functools import partial

import jax
import jax.numpy as jnp
from beartype import beartype
from beartype.typing import Optional, Tuple
from jax import lax
from jaxtyping import Array, Float, Int, Num, jaxtyped

from speckles.types import ScalarInteger
from speckles.utils.errors import PreconditionViolation


def _padded_window(
    u: Num[Array, " nu"], v: Num[Array, " nv"], window: int
) -> Tuple[Float[Array, " w"], Float[Array, " np"]]:
    """Leading window of u and v padded with enough zeros for any offset."""
    pad: int = window + max(0, u.shape[0] - v.shape[0])
    u_win: Float[Array, " w"] = lax.slice(
        jnp.asarray(u, dtype=jnp.float64), (0,), (window,)
    )
    v_pad: Float[Array, " np"] = jnp.pad(
        jnp.asarray(v, dtype=jnp.float64), (0, pad)
    )
    return u_win, v_pad


@partial(jax.jit, static_argnums=(3,))
def _correlate_impl(
    u: Num[Array, " nu"],
    v: Num[Array, " nv"],
    offset: Int[Array, " "],
    window: int,
) -> Float[Array, " "]:
    """JIT-compiled correlation at a single offset.

    Parameters
    ----------
    u : Num[Array, " nu"]
        First sequence.
    v : Num[Array, " nv"]
        Second sequence, shifted by ``offset``.
    offset : Int[Array, " "]
        Shift of ``v`` in samples, ``0 <= offset <= nu``.
    window : int
        Number of leading samples averaged (static).

    Returns
    -------
    corr : Float[Array, " "]
        Zero-padded windowed correlation.
    """
    u_win, v_pad = _padded_window(u, v, window)
    v_win: Float[Array, " w"] = lax.dynamic_slice(v_pad, (offset,), (window,))
    return jnp.dot(u_win, v_win) / window


@partial(jax.jit, static_argnums=(2, 3))
def _correlate_lags_impl(
    u: Num[Array, " nu"],
    v: Num[Array, " nv"],
    num_lags: int,
    window: int,
) -> Float[Array, " num_lags"]:
    """JIT-compiled correlation at offsets ``0 .. num_lags - 1``.

    Parameters
    ----------
    u : Num[Array, " nu"]
        First sequence.
    v : Num[Array, " nv"]
        Second sequence.
    num_lags : int
        Number of offsets evaluated (static). ``num_lags - 1 <= nu``.
    window : int
        Number of leading samples averaged (static).

    Returns
    -------
    corr : Float[Array, " num_lags"]
        Zero-padded windowed correlation at each offset.
    """
    u_win, v_pad = _padded_window(u, v, window)

    def single(offset: Int[Array, " "]) -> Float[Array, " "]:
        v_win = lax.dynamic_slice(v_pad, (offset,), (window,))
        return jnp.dot(u_win, v_win) / window

    return jax.vmap(single)(jnp.arange(num_lags))


def _check_window(
    n_u: int, n_v: int, max_offset: int, window: int
) -> None:
    if max_offset < 0 or max_offset > n_u:
        raise PreconditionViolation(
            f"Offset out of bounds: {max_offset} not in [0, {n_u}]"
        )
    if window > n_u or window > n_v:
        raise PreconditionViolation(
            f"Window must be smaller than input vector lengths: window "
            f"{window}, lengths {n_u} and {n_v}"
        )
    if window < 1:
        raise PreconditionViolation(f"Window must be positive, got {window}")


@jaxtyped(typechecker=beartype)
def correlate(
    u: Num[Array, " nu"],
    v: Num[Array, " nv"],
    offset: ScalarInteger,
    window: Optional[ScalarInteger] = None,
) -> Float[Array, " "]:
    """Calculate the correlation between u and v at a given offset.

    Parameters
    ----------
    u : Num[Array, " nu"]
        First count sequence.
    v : Num[Array, " nv"]
        Second count sequence, shifted by ``offset`` samples.
    offset : ScalarInteger
        Shift of ``v`` relative to ``u``, ``0 <= offset <= len(u)``.
    window : ScalarInteger, optional
        Number of leading samples of ``u`` in the average. Must satisfy
        ``1 <= window <= min(len(u), len(v))``. Defaults to ``len(u)``.

    Returns
    -------
    corr : Float[Array, " "]
        ``sum(u[i] * v[offset + i] for i < window) / window`` with
        out-of-range indices of ``v`` treated as zero.

    Raises
    ------
    PreconditionViolation
        If ``offset`` or ``window`` are out of bounds.

    Examples
    --------
    >>> u = jnp.array([1.0, 2.0, 3.0])
    >>> correlate(u, u, 1)  # (1*2 + 2*3 + 3*0) / 3
    Array(2.66666667, dtype=float64)
    """
    n_u: int = u.shape[0]
    win: int = n_u if window is None else int(window)
    off: int = int(offset)
    _check_window(n_u, v.shape[0], off, win)
    return _correlate_impl(u, v, jnp.asarray(off, dtype=jnp.int32), win)


@jaxtyped(typechecker=beartype)
def autocorrelate(
    u: Num[Array, " nu"],
    offset: ScalarInteger,
    window: Optional[ScalarInteger] = None,
) -> Float[Array, " "]:
    """Calculate the correlation of u with itself at a given offset.

    Same contract as :func:`correlate` with ``v = u``.
    """
    return correlate(u, u, offset, window)


@jaxtyped(typechecker=beartype)
def correlate_lags(
    u: Num[Array, " nu"],
    v: Num[Array, " nv"],
    num_lags: ScalarInteger,
    window: Optional[ScalarInteger] = None,
) -> Float[Array, " num_lags"]:
    """Calculate the correlation of u and v at every offset below num_lags.

    Equivalent to ``[correlate(u, v, k, window) for k in range(num_lags)]``
    evaluated in a single vectorised call.

    Parameters
    ----------
    u : Num[Array, " nu"]
        First count sequence.
    v : Num[Array, " nv"]
        Second count sequence.
    num_lags : ScalarInteger
        Number of offsets; the largest offset ``num_lags - 1`` must not
        exceed ``len(u)``.
    window : ScalarInteger, optional
        Averaging window, defaults to ``len(u)``.

    Returns
    -------
    corr : Float[Array, " num_lags"]
        Correlation at offsets ``0 .. num_lags - 1``.

    Raises
    ------
    PreconditionViolation
        If ``num_lags < 1`` or the offsets or window are out of bounds.
    """
    n_u: int = u.shape[0]
    lags: int = int(num_lags)
    win: int = n_u if window is None else int(window)
    if lags < 1:
        raise PreconditionViolation(f"num_lags must be positive, got {lags}")
    _check_window(n_u, v.shape[0], lags - 1, win)
    return _correlate_lags_impl(u, v, lags, win)


@jaxtyped(typechecker=beartype)
def corr_times(
    tau: Num[Array, " t"],
    counts1: Num[Array, " n1"],
    counts2: Num[Array, " n2"],
) -> Num[Array, " k"]:
    """Return the tau values for which the count correlation is positive.

    For each index ``i`` of ``tau`` the correlation
    ``correlate(counts1, counts2, i, len(tau))`` is evaluated; ``tau[i]``
    is kept when it is strictly greater than zero.

    Parameters
    ----------
    tau : Num[Array, " t"]
        Candidate lag times, one per lag index.
    counts1 : Num[Array, " n1"]
        First count sequence.
    counts2 : Num[Array, " n2"]
        Second count sequence, same length as ``counts1``.

    Returns
    -------
    times : Num[Array, " k"]
        Ordered subsequence of ``tau``.

    Raises
    ------
    PreconditionViolation
        If the count sequences differ in length or ``len(tau)`` exceeds
        their length.
    """
    if counts1.shape[0] != counts2.shape[0]:
        raise PreconditionViolation(
            f"Count vectors must have the same length, got "
            f"{counts1.shape[0]} and {counts2.shape[0]}"
        )
    num: int = tau.shape[0]
    if num == 0:
        return tau
    corr: Float[Array, " t"] = correlate_lags(counts1, counts2, num, num)
    return tau[corr > 0]


@jaxtyped(typechecker=beartype)
def autocorr_times(
    tau: Num[Array, " t"],
    counts: Num[Array, " n"],
) -> Num[Array, " k"]:
    """Return the tau values for which the count autocorrelation is positive.

    Same filter as :func:`corr_times` applied to ``counts`` against
    itself.
    """
    return corr_times(tau, counts, counts)


@jaxtyped(typechecker=beartype)
def count_times(
    times: Num[Array, " n1"],
    counts: Num[Array, " n2"],
) -> Num[Array, " events"]:
    """Expand binned counts into a flat list of event times.

    Parameters
    ----------
    times : Num[Array, " n1"]
        Time label of every bin.
    counts : Num[Array, " n2"]
        Non-negative integer count of every bin, parallel to ``times``.

    Returns
    -------
    events : Num[Array, " events"]
        ``times[i]`` repeated ``counts[i]`` times, in bin order. Bins with
        zero counts are omitted.

    Raises
    ------
    PreconditionViolation
        If the inputs differ in length or a count is negative or not an
        integer.

    Examples
    --------
    >>> count_times(jnp.array([10, 20, 30]), jnp.array([2, 0, 1]))
    Array([10, 10, 30], dtype=int64)
    """
    if times.shape[0] != counts.shape[0]:
        raise PreconditionViolation(
            f"times and counts must have the same length, got "
            f"{times.shape[0]} and {counts.shape[0]}"
        )
    if bool(jnp.any(counts < 0)):
        raise PreconditionViolation("counts must be non-negative")
    if bool(jnp.any(counts != jnp.round(counts))):
        raise PreconditionViolation("counts must be integers")
    repeats: Int[Array, " n2"] = jnp.asarray(counts, dtype=jnp.int64)
    return jnp.repeat(times, repeats)
