"""Field ensemble and detection types.

Extended Summary
----------------
PyTree data structures describing a multi-emitter optical field and the
hardware that turns it into photon counts. An ensemble is made of ``m``
spectral lines; every line holds ``n`` emitters whose angular
frequencies are Doppler broadened around the line centre. A
:class:`FieldInstance` is one random draw of those frequencies and
phases together with the intensity it produces on the simulation grid.

Routine Listings
----------------
FieldEnsembleParams : NamedTuple
    PyTree for the ensemble statistics (amplitudes, line centres,
    reference frequency, Doppler width).
FieldInstance : NamedTuple
    PyTree for one stochastic realization of the ensemble.
Beamsplitter : NamedTuple
    PyTree for a lossless two-port beamsplitter.
DetectorParams : NamedTuple
    PyTree for a photon-counting detector.
make_field_params : function
    Factory function to create validated FieldEnsembleParams instances.
make_field_instance_record : function
    Factory function to create validated FieldInstance instances.
make_beamsplitter : function
    Factory function to create validated Beamsplitter instances.
make_detector_params : function
    Factory function to create validated DetectorParams instances.

Notes
-----
The ensemble-averaged intensity of a field built from these parameters
is ``sum(|em|**2)``. Detector count rates are expressed relative to it.
"""

import jax.numpy as jnp
from beartype import beartype
from beartype.typing import NamedTuple, Sequence, Tuple, Union
from jax.tree_util import register_pytree_node_class
from jaxtyping import Array, Complex, Float, Num, jaxtyped

from speckles.utils.errors import ConfigurationError

from .common_types import ScalarFloat, ScalarNumeric


@register_pytree_node_class
class FieldEnsembleParams(NamedTuple):
    """PyTree for the statistics of a multi-emitter field ensemble.

    Attributes
    ----------
    em : Complex[Array, " m"]
        Complex field amplitude of each spectral line.
    omega_m : Float[Array, " m"]
        Centre angular frequency of each spectral line in rad/s.
    omega0 : Float[Array, " "]
        Reference angular frequency in rad/s. Line detunings are
        ``omega_m - omega0``.
    sigma : Float[Array, " "]
        Doppler linewidth: standard deviation of the emitter angular
        frequencies around their line centre, in rad/s.
    """

    em: Complex[Array, " m"]
    omega_m: Float[Array, " m"]
    omega0: Float[Array, " "]
    sigma: Float[Array, " "]

    def tree_flatten(
        self,
    ) -> Tuple[
        Tuple[
            Complex[Array, " m"],
            Float[Array, " m"],
            Float[Array, " "],
            Float[Array, " "],
        ],
        None,
    ]:
        """Flatten the FieldEnsembleParams into a tuple of its components."""
        return ((self.em, self.omega_m, self.omega0, self.sigma), None)

    @classmethod
    def tree_unflatten(
        cls,
        _aux_data: None,
        children: Tuple[
            Complex[Array, " m"],
            Float[Array, " m"],
            Float[Array, " "],
            Float[Array, " "],
        ],
    ) -> "FieldEnsembleParams":
        """Unflatten the FieldEnsembleParams from a tuple of its components."""
        return cls(*children)


@register_pytree_node_class
class FieldInstance(NamedTuple):
    """PyTree for one stochastic realization of a field ensemble.

    Attributes
    ----------
    omega_n : Float[Array, " m n"]
        Drawn angular frequency of every emitter, grouped by line.
    phi_n : Float[Array, " m n"]
        Drawn phase of every emitter in radians.
    em : Complex[Array, " m"]
        Line amplitudes copied from the ensemble parameters.
    intensity : Float[Array, " nt"]
        Instantaneous intensity sampled on the simulation time grid.
    dt : Float[Array, " "]
        Sampling interval of ``intensity`` in seconds.
    """

    omega_n: Float[Array, " m n"]
    phi_n: Float[Array, " m n"]
    em: Complex[Array, " m"]
    intensity: Float[Array, " nt"]
    dt: Float[Array, " "]

    def tree_flatten(
        self,
    ) -> Tuple[
        Tuple[
            Float[Array, " m n"],
            Float[Array, " m n"],
            Complex[Array, " m"],
            Float[Array, " nt"],
            Float[Array, " "],
        ],
        None,
    ]:
        """Flatten the FieldInstance into a tuple of its components."""
        return (
            (self.omega_n, self.phi_n, self.em, self.intensity, self.dt),
            None,
        )

    @classmethod
    def tree_unflatten(
        cls,
        _aux_data: None,
        children: Tuple[
            Float[Array, " m n"],
            Float[Array, " m n"],
            Complex[Array, " m"],
            Float[Array, " nt"],
            Float[Array, " "],
        ],
    ) -> "FieldInstance":
        """Unflatten the FieldInstance from a tuple of its components."""
        return cls(*children)


@register_pytree_node_class
class Beamsplitter(NamedTuple):
    """PyTree for a lossless two-port beamsplitter.

    Attributes
    ----------
    transmission : Float[Array, " "]
        Fraction of the intensity sent to the first arm. The second arm
        receives ``1 - transmission``.
    """

    transmission: Float[Array, " "]

    def tree_flatten(self) -> Tuple[Tuple[Float[Array, " "]], None]:
        """Flatten the Beamsplitter into a tuple of its components."""
        return ((self.transmission,), None)

    @classmethod
    def tree_unflatten(
        cls, _aux_data: None, children: Tuple[Float[Array, " "]]
    ) -> "Beamsplitter":
        """Unflatten the Beamsplitter from a tuple of its components."""
        return cls(*children)


@register_pytree_node_class
class DetectorParams(NamedTuple):
    """PyTree for a photon-counting detector.

    Attributes
    ----------
    efficiency : Float[Array, " "]
        Quantum efficiency in (0, 1].
    dark_rate : Float[Array, " "]
        Dark count rate in counts per second.
    photon_rate : Float[Array, " "]
        Mean incident photon rate, in photons per second, for a field at
        its ensemble-averaged intensity.
    """

    efficiency: Float[Array, " "]
    dark_rate: Float[Array, " "]
    photon_rate: Float[Array, " "]

    def tree_flatten(
        self,
    ) -> Tuple[
        Tuple[Float[Array, " "], Float[Array, " "], Float[Array, " "]], None
    ]:
        """Flatten the DetectorParams into a tuple of its components."""
        return ((self.efficiency, self.dark_rate, self.photon_rate), None)

    @classmethod
    def tree_unflatten(
        cls,
        _aux_data: None,
        children: Tuple[Float[Array, " "], Float[Array, " "], Float[Array, " "]],
    ) -> "DetectorParams":
        """Unflatten the DetectorParams from a tuple of its components."""
        return cls(*children)


@jaxtyped(typechecker=beartype)
def make_field_params(
    em: Union[Sequence[ScalarNumeric], Num[Array, " m"]],
    omega_m: Union[Sequence[ScalarNumeric], Num[Array, " mw"]],
    omega0: ScalarNumeric = 0.0,
    sigma: ScalarNumeric = 1.0,
) -> FieldEnsembleParams:
    """Create a validated FieldEnsembleParams instance.

    Parameters
    ----------
    em : Union[Sequence[ScalarNumeric], Num[Array, " m"]]
        Complex amplitude of each spectral line.
    omega_m : Union[Sequence[ScalarNumeric], Num[Array, " mw"]]
        Centre angular frequency of each line in rad/s.
    omega0 : ScalarNumeric, optional
        Reference angular frequency in rad/s. Default is 0.0.
    sigma : ScalarNumeric, optional
        Doppler linewidth in rad/s. Default is 1.0.

    Returns
    -------
    params : FieldEnsembleParams
        Validated ensemble parameters.

    Raises
    ------
    ConfigurationError
        If the line arrays are empty or of different length, if the
        total intensity is zero, or if ``sigma`` is negative or any value
        is not finite.
    """
    em_arr: Complex[Array, " m"] = jnp.atleast_1d(
        jnp.asarray(em, dtype=jnp.complex128)
    )
    omega_arr: Float[Array, " m"] = jnp.atleast_1d(
        jnp.asarray(omega_m, dtype=jnp.float64)
    )
    omega0_arr: Float[Array, " "] = jnp.asarray(omega0, dtype=jnp.float64)
    sigma_arr: Float[Array, " "] = jnp.asarray(sigma, dtype=jnp.float64)

    if em_arr.shape[0] == 0:
        raise ConfigurationError("em must contain at least one line")
    if em_arr.shape != omega_arr.shape:
        raise ConfigurationError(
            f"em and omega_m must have the same length, got "
            f"{em_arr.shape[0]} and {omega_arr.shape[0]}"
        )
    finite = (
        jnp.all(jnp.isfinite(em_arr))
        & jnp.all(jnp.isfinite(omega_arr))
        & jnp.isfinite(omega0_arr)
        & jnp.isfinite(sigma_arr)
    )
    if not bool(finite):
        raise ConfigurationError("field parameters must be finite")
    if float(sigma_arr) < 0:
        raise ConfigurationError(f"sigma must be >= 0, got {float(sigma_arr)}")
    if float(jnp.sum(jnp.abs(em_arr) ** 2)) <= 0:
        raise ConfigurationError("at least one line amplitude must be nonzero")

    return FieldEnsembleParams(
        em=em_arr, omega_m=omega_arr, omega0=omega0_arr, sigma=sigma_arr
    )


@jaxtyped(typechecker=beartype)
def make_field_instance_record(
    omega_n: Float[Array, " m n"],
    phi_n: Float[Array, " m n"],
    em: Complex[Array, " m"],
    intensity: Float[Array, " nt"],
    dt: ScalarFloat,
) -> FieldInstance:
    """Create a validated FieldInstance from already drawn components.

    Shape agreement between ``omega_n``, ``phi_n`` and ``em`` is enforced
    by the annotations.

    Raises
    ------
    ConfigurationError
        If ``dt`` is not positive or the intensity grid is empty.
    """
    dt_arr: Float[Array, " "] = jnp.asarray(dt, dtype=jnp.float64)
    if float(dt_arr) <= 0:
        raise ConfigurationError(f"dt must be positive, got {float(dt_arr)}")
    if intensity.shape[0] == 0:
        raise ConfigurationError("intensity must hold at least one sample")
    return FieldInstance(
        omega_n=omega_n, phi_n=phi_n, em=em, intensity=intensity, dt=dt_arr
    )


@jaxtyped(typechecker=beartype)
def make_beamsplitter(transmission: ScalarNumeric = 0.5) -> Beamsplitter:
    """Create a validated Beamsplitter.

    Raises
    ------
    ConfigurationError
        If ``transmission`` lies outside [0, 1].
    """
    t: Float[Array, " "] = jnp.asarray(transmission, dtype=jnp.float64)
    if not 0.0 <= float(t) <= 1.0:
        raise ConfigurationError(
            f"transmission must lie in [0, 1], got {float(t)}"
        )
    return Beamsplitter(transmission=t)


@jaxtyped(typechecker=beartype)
def make_detector_params(
    efficiency: ScalarNumeric = 1.0,
    dark_rate: ScalarNumeric = 0.0,
    photon_rate: ScalarNumeric = 1.0,
) -> DetectorParams:
    """Create a validated DetectorParams instance.

    Parameters
    ----------
    efficiency : ScalarNumeric, optional
        Quantum efficiency in (0, 1]. Default is 1.0.
    dark_rate : ScalarNumeric, optional
        Dark counts per second. Default is 0.0.
    photon_rate : ScalarNumeric, optional
        Mean incident photons per second. Default is 1.0.

    Returns
    -------
    detector : DetectorParams
        Validated detector parameters.

    Raises
    ------
    ConfigurationError
        If the efficiency is outside (0, 1] or a rate is negative.
    """
    eta: Float[Array, " "] = jnp.asarray(efficiency, dtype=jnp.float64)
    dark: Float[Array, " "] = jnp.asarray(dark_rate, dtype=jnp.float64)
    rate: Float[Array, " "] = jnp.asarray(photon_rate, dtype=jnp.float64)
    if not 0.0 < float(eta) <= 1.0:
        raise ConfigurationError(
            f"efficiency must lie in (0, 1], got {float(eta)}"
        )
    if float(dark) < 0 or float(rate) < 0:
        raise ConfigurationError("dark_rate and photon_rate must be >= 0")
    return DetectorParams(efficiency=eta, dark_rate=dark, photon_rate=rate)
