"""Speckle and photon-counting statistics of Doppler-broadened light in JAX.

Extended Summary
----------------
Simulates the second-order intensity correlation g2(tau) measured by
photon counting on the two arms of a beamsplitter illuminated by a
multi-line, Doppler-broadened chaotic field, and provides the closed
form predictions the simulation is validated against.

Routine Listings
----------------
:mod:`correlate`
    Windowed correlation of count sequences, lag-time filters and count
    expansion.
:mod:`noise`
    Analytic moments of the Doppler noise term and g2 prediction.
:mod:`sources`
    Field instance drawing and photon-counting readout.
:mod:`simul`
    Simulation orchestration, sweeps, analysis and persistence.
:mod:`types`
    PyTree records, configuration and factory functions.
:mod:`utils`
    Error taxonomy and logging.

Examples
--------
>>> import speckles as sp
>>> params = sp.types.make_speckle_params(
...     em=[1.0, 1.0], omega_m=[0.0, 2.0], sigma=0.5, repeat=4
... )
>>> sim = sp.simul.run_configuration(params, "results")
>>> g2 = sp.simul.g2_estimate(sim)

Notes
-----
64-bit precision is enabled in JAX on import.
"""

import os
from importlib.metadata import version

# Enable multi-threaded CPU execution for JAX (before importing JAX)
os.environ.setdefault(
    "XLA_FLAGS",
    "--xla_cpu_multi_thread_eigen=true intra_op_parallelism_threads=0",
)

# Enable 64-bit precision in JAX (must be set before importing submodules)
import jax  # noqa: E402

jax.config.update("jax_enable_x64", True)

from . import (  # noqa: E402, I001
    correlate,
    noise,
    simul,
    sources,
    types,
    utils,
)

__version__: str = version("speckles")

__all__: list[str] = [
    "__version__",
    "correlate",
    "noise",
    "simul",
    "sources",
    "types",
    "utils",
]
