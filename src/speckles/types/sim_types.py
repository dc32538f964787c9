"""Simulation configuration and result types.

Extended Summary
----------------
Records that flow through the simulation orchestrator. A
:class:`SpeckleParams` is the fully populated configuration of one
simulation; a :class:`SimulationRun` collects the :class:`RunResult` of
every repeat executed under it.

Routine Listings
----------------
SpeckleParams : NamedTuple
    Configuration of one simulation (field, sampling, detection, repeats).
RunResult : NamedTuple
    PyTree pairing the readout and correlation of a single repeat.
SimulationRun : NamedTuple
    Identifier, timestamp, configuration and ordered repeat results.
SpectralResult : NamedTuple
    PyTree holding a frequency axis and spectral magnitudes.
make_speckle_params : function
    Factory function to create validated SpeckleParams instances.
speckle_params_to_dict : function
    JSON-friendly mapping of a SpeckleParams record.

Notes
-----
``SpeckleParams`` holds plain Python values so it can be hashed, written
to JSON and compared exactly. Array-valued views of it are produced on
demand by :meth:`SpeckleParams.field_params`,
:meth:`SpeckleParams.beamsplitter` and :meth:`SpeckleParams.detector`.
"""

import math
from datetime import datetime

from beartype.typing import Any, Dict, NamedTuple, Tuple
from jax.tree_util import register_pytree_node_class
from jaxtyping import Array, Float, Num

from speckles.utils.errors import ConfigurationError

from .field_types import (
    Beamsplitter,
    DetectorParams,
    FieldEnsembleParams,
    make_beamsplitter,
    make_detector_params,
    make_field_params,
)


class SpeckleParams(NamedTuple):
    """Configuration of one speckle simulation.

    Attributes
    ----------
    em : Tuple[complex, ...]
        Complex amplitude of each spectral line.
    omega_m : Tuple[float, ...]
        Centre angular frequency of each line in rad/s.
    omega0 : float
        Reference angular frequency in rad/s.
    sigma : float
        Doppler linewidth in rad/s.
    n_emitters : int
        Number of emitters per spectral line.
    duration : float
        Simulated time span in seconds.
    dt : float
        Sampling interval in seconds.
    window : float
        Duration of one correlation window in seconds.
    repeat : int
        Number of repeats accumulated in a run.
    reinstance : bool
        Draw a new field instance between repeats. When False the same
        instance is reused and only the detector noise varies.
    transmission : float
        Beamsplitter transmission into the first arm.
    efficiency : float
        Detector quantum efficiency.
    dark_rate : float
        Detector dark counts per second.
    photon_rate : float
        Mean incident photons per second at the ensemble intensity.
    seed : int
        Seed of the JAX PRNG key used by the run.
    """

    em: Tuple[complex, ...] = (1.0 + 0.0j,)
    omega_m: Tuple[float, ...] = (0.0,)
    omega0: float = 0.0
    sigma: float = 1.0
    n_emitters: int = 10
    duration: float = 100.0
    dt: float = 0.05
    window: float = 10.0
    repeat: int = 1
    reinstance: bool = False
    transmission: float = 0.5
    efficiency: float = 1.0
    dark_rate: float = 0.0
    photon_rate: float = 1.0
    seed: int = 0

    @property
    def num_samples(self) -> int:
        """Number of time samples in one readout."""
        return int(round(self.duration / self.dt))

    def field_params(self) -> FieldEnsembleParams:
        """Ensemble parameters of the simulated field."""
        return make_field_params(
            list(self.em), list(self.omega_m), self.omega0, self.sigma
        )

    def beamsplitter(self) -> Beamsplitter:
        """Beamsplitter feeding the two detector arms."""
        return make_beamsplitter(self.transmission)

    def detector(self) -> DetectorParams:
        """Detector used on both arms."""
        return make_detector_params(
            self.efficiency, self.dark_rate, self.photon_rate
        )


@register_pytree_node_class
class RunResult(NamedTuple):
    """PyTree pairing the readout and correlation of one repeat.

    Attributes
    ----------
    readout : Num[Array, " arms nt"]
        Photon counts per time step, one row per beamsplitter arm.
    correlation : Float[Array, " nlags"]
        Cross-correlation of the two arms, one value per lag.
    """

    readout: Num[Array, " arms nt"]
    correlation: Float[Array, " nlags"]

    def tree_flatten(
        self,
    ) -> Tuple[Tuple[Num[Array, " arms nt"], Float[Array, " nlags"]], None]:
        """Flatten the RunResult into a tuple of its components."""
        return ((self.readout, self.correlation), None)

    @classmethod
    def tree_unflatten(
        cls,
        _aux_data: None,
        children: Tuple[Num[Array, " arms nt"], Float[Array, " nlags"]],
    ) -> "RunResult":
        """Unflatten the RunResult from a tuple of its components."""
        return cls(*children)


class SimulationRun(NamedTuple):
    """Completed simulation under a single configuration.

    Attributes
    ----------
    run_id : str
        Globally unique identifier (uuid4).
    timestamp : datetime
        Creation time of the run.
    params : SpeckleParams
        Configuration the run was executed under.
    results : Tuple[RunResult, ...]
        Result of every repeat, in execution order.
    """

    run_id: str
    timestamp: datetime
    params: SpeckleParams
    results: Tuple[RunResult, ...]

    @property
    def readouts(self) -> Tuple[Num[Array, " arms nt"], ...]:
        """Readout of every repeat."""
        return tuple(result.readout for result in self.results)

    @property
    def correlations(self) -> Tuple[Float[Array, " nlags"], ...]:
        """Correlation of every repeat."""
        return tuple(result.correlation for result in self.results)


@register_pytree_node_class
class SpectralResult(NamedTuple):
    """PyTree holding a one-sided spectrum.

    Attributes
    ----------
    frequencies : Float[Array, " nf"]
        Angular frequency of each bin in rad/s.
    spectrum : Float[Array, " nf"]
        Spectral magnitude of each bin.
    """

    frequencies: Float[Array, " nf"]
    spectrum: Float[Array, " nf"]

    def tree_flatten(
        self,
    ) -> Tuple[Tuple[Float[Array, " nf"], Float[Array, " nf"]], None]:
        """Flatten the SpectralResult into a tuple of its components."""
        return ((self.frequencies, self.spectrum), None)

    @classmethod
    def tree_unflatten(
        cls,
        _aux_data: None,
        children: Tuple[Float[Array, " nf"], Float[Array, " nf"]],
    ) -> "SpectralResult":
        """Unflatten the SpectralResult from a tuple of its components."""
        return cls(*children)


def _to_complex(v: Any) -> complex:
    if isinstance(v, str):
        return complex(v.replace(" ", ""))
    if isinstance(v, (list, tuple)) and len(v) == 2:
        return complex(float(v[0]), float(v[1]))
    return complex(v)


def _as_complex_tuple(name: str, value: Any) -> Tuple[complex, ...]:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        value = [value]
    try:
        out = tuple(_to_complex(v) for v in value)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"{name} must hold complex numbers") from err
    if not out:
        raise ConfigurationError(f"{name} must not be empty")
    return out


def _as_float_tuple(name: str, value: Any) -> Tuple[float, ...]:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        value = [value]
    try:
        out = tuple(float(v) for v in value)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(f"{name} must hold real numbers") from err
    if not out:
        raise ConfigurationError(f"{name} must not be empty")
    return out


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        out = float(value)
    except (TypeError, ValueError) as err:
        raise ConfigurationError(
            f"{name} must be a number, got {value!r}"
        ) from err
    if not math.isfinite(out):
        raise ConfigurationError(f"{name} must be finite, got {out}")
    return out


def _as_int(name: str, value: Any) -> int:
    number = _as_float(name, value)
    if not number.is_integer():
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    return int(number)


def make_speckle_params(**fields: Any) -> SpeckleParams:
    """Create a validated SpeckleParams instance.

    Parameters
    ----------
    **fields : Any
        Any subset of the SpeckleParams fields. Missing fields take their
        defaults. Complex amplitudes may be given as numbers or strings
        such as ``"1+0.5j"`` so that YAML sweep files can express them.

    Returns
    -------
    params : SpeckleParams
        Validated configuration with every field converted to its
        declared Python type.

    Raises
    ------
    ConfigurationError
        If a field name is unknown, a value cannot be converted, or a
        value is out of range.

    Notes
    -----
    Validation rules:

    - ``em`` and ``omega_m`` are non-empty and of equal length
    - ``sigma``, ``dark_rate`` and ``photon_rate`` are >= 0
    - ``n_emitters`` and ``repeat`` are >= 1
    - ``duration``, ``dt`` and ``window`` are > 0 and ``dt <= duration``
    - ``transmission`` lies in [0, 1], ``efficiency`` in (0, 1]
    - ``seed`` is a non-negative integer
    """
    unknown = sorted(set(fields) - set(SpeckleParams._fields))
    if unknown:
        raise ConfigurationError(f"unknown configuration fields: {unknown}")
    merged: Dict[str, Any] = {**SpeckleParams()._asdict(), **fields}

    em = _as_complex_tuple("em", merged["em"])
    omega_m = _as_float_tuple("omega_m", merged["omega_m"])
    if len(em) != len(omega_m):
        raise ConfigurationError(
            f"em and omega_m must have the same length, got {len(em)} and "
            f"{len(omega_m)}"
        )
    reinstance = merged["reinstance"]
    if not isinstance(reinstance, bool):
        raise ConfigurationError(
            f"reinstance must be a boolean, got {reinstance!r}"
        )
    params = SpeckleParams(
        em=em,
        omega_m=omega_m,
        omega0=_as_float("omega0", merged["omega0"]),
        sigma=_as_float("sigma", merged["sigma"]),
        n_emitters=_as_int("n_emitters", merged["n_emitters"]),
        duration=_as_float("duration", merged["duration"]),
        dt=_as_float("dt", merged["dt"]),
        window=_as_float("window", merged["window"]),
        repeat=_as_int("repeat", merged["repeat"]),
        reinstance=reinstance,
        transmission=_as_float("transmission", merged["transmission"]),
        efficiency=_as_float("efficiency", merged["efficiency"]),
        dark_rate=_as_float("dark_rate", merged["dark_rate"]),
        photon_rate=_as_float("photon_rate", merged["photon_rate"]),
        seed=_as_int("seed", merged["seed"]),
    )

    if params.sigma < 0:
        raise ConfigurationError(f"sigma must be >= 0, got {params.sigma}")
    if params.n_emitters < 1:
        raise ConfigurationError("n_emitters must be >= 1")
    if params.repeat < 1:
        raise ConfigurationError("repeat must be >= 1")
    for name in ("duration", "dt", "window"):
        if getattr(params, name) <= 0:
            raise ConfigurationError(f"{name} must be positive")
    if params.dt > params.duration:
        raise ConfigurationError("dt must not exceed duration")
    if not 0.0 <= params.transmission <= 1.0:
        raise ConfigurationError("transmission must lie in [0, 1]")
    if not 0.0 < params.efficiency <= 1.0:
        raise ConfigurationError("efficiency must lie in (0, 1]")
    if params.dark_rate < 0 or params.photon_rate < 0:
        raise ConfigurationError("dark_rate and photon_rate must be >= 0")
    if params.seed < 0:
        raise ConfigurationError("seed must be >= 0")
    if sum(abs(a) ** 2 for a in params.em) <= 0:
        raise ConfigurationError("at least one line amplitude must be nonzero")
    return params


def speckle_params_to_dict(params: SpeckleParams) -> Dict[str, Any]:
    """Return a JSON-friendly mapping of a configuration.

    Complex amplitudes are written as ``[real, imag]`` pairs, every other
    field keeps its Python type.
    """
    record: Dict[str, Any] = params._asdict()
    record["em"] = [[a.real, a.imag] for a in params.em]
    record["omega_m"] = list(params.omega_m)
    return record
