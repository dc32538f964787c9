"""Simulation orchestrator.

Extended Summary
----------------
Drives the simulation pipeline: draw a field instance, read it out on
the two arms of a beamsplitter, cross-correlate the arms and accumulate
the results of every repeat into a :class:`~speckles.types.SimulationRun`.
Sweeps run many configurations and merge their summaries into the
results table.

Routine Listings
----------------
correlation_window : function
    Samples per correlation window of a configuration.
run_instance : function
    Readout and correlation of one field instance.
run_configuration : function
    All repeats of a single configuration, persisted.
run_sweep : function
    Every configuration of a sweep, merged into the results table.
SweepOutcome : NamedTuple
    Table, completed runs and per-configuration failures of a sweep.

Notes
-----
Randomness flows from ``jax.random.PRNGKey(params.seed)`` through
deterministic key splits, so a configuration with a fixed seed always
reproduces the same field instances and, with a deterministic readout
function, the same correlations.
"""

import math
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

import jax
import pandas as pd
from beartype.typing import (
    Callable,
    Dict,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)
from jaxtyping import Array, Float, Int, PRNGKeyArray

from speckles.correlate import correlate_lags
from speckles.sources import make_field_instance, produce_readout
from speckles.types import (
    Beamsplitter,
    DetectorParams,
    FieldInstance,
    RunResult,
    SimulationRun,
    SpeckleParams,
)
from speckles.utils import PreconditionViolation, get_logger

from .analysis import snr, speckle_fft, tabulate
from .persist import (
    load_table,
    merge_tables,
    results_lock,
    save_run,
    save_table,
    table_path,
)
from .sweep import SweepDescription, expand_sweep

logger = get_logger(__name__)

ReadoutFn = Callable[
    [FieldInstance, Beamsplitter, DetectorParams, PRNGKeyArray],
    Int[Array, " 2 nt"],
]


class SweepOutcome(NamedTuple):
    """Result of a parameter sweep.

    Attributes
    ----------
    table : pd.DataFrame
        Results table after merging, including rows of earlier sweeps.
    runs : Tuple[SimulationRun, ...]
        Completed runs in configuration order.
    failures : Dict[int, PreconditionViolation]
        Configurations that were aborted, keyed by their sweep index.
    """

    table: pd.DataFrame
    runs: Tuple[SimulationRun, ...]
    failures: Dict[int, PreconditionViolation]


def correlation_window(num_samples: int, params: SpeckleParams) -> int:
    """Return the number of samples in one correlation window.

    The readout is split into ``ceil(duration / window)`` windows of
    equal length.

    Raises
    ------
    PreconditionViolation
        If the window would hold no sample.
    """
    n_windows: int = math.ceil(params.duration / params.window)
    size: int = num_samples // n_windows
    if size < 1:
        raise PreconditionViolation(
            f"correlation window is empty: {num_samples} samples split into "
            f"{n_windows} windows"
        )
    return size


def _draw_instance(key: PRNGKeyArray, params: SpeckleParams) -> FieldInstance:
    return make_field_instance(
        key,
        params.field_params(),
        params.n_emitters,
        params.num_samples,
        params.dt,
    )


def run_instance(
    instance: FieldInstance,
    params: SpeckleParams,
    key: PRNGKeyArray,
    readout_fn: ReadoutFn = produce_readout,
) -> RunResult:
    """Read out a field instance and correlate its two arms.

    Parameters
    ----------
    instance : FieldInstance
        Field realization to detect.
    params : SpeckleParams
        Configuration providing the beamsplitter, detector and window.
    key : PRNGKeyArray
        Random key handed to ``readout_fn``.
    readout_fn : ReadoutFn, optional
        Photon counting collaborator, :func:`produce_readout` by default.

    Returns
    -------
    result : RunResult
        The readout and its cross-correlation at lags ``0 .. w - 1`` over
        a window of ``w`` samples.

    Raises
    ------
    PreconditionViolation
        If the correlation window holds no sample.
    """
    window: int = correlation_window(instance.intensity.shape[0], params)
    readout: Int[Array, " 2 nt"] = readout_fn(
        instance, params.beamsplitter(), params.detector(), key
    )
    correlation: Float[Array, " w"] = correlate_lags(
        readout[0], readout[1], window, window
    )
    return RunResult(readout=readout, correlation=correlation)


def run_configuration(
    params: SpeckleParams,
    results_dir: Union[str, Path],
    readout_fn: ReadoutFn = produce_readout,
) -> SimulationRun:
    """Run every repeat of a configuration and persist the run.

    A field instance is drawn once and reused for every repeat unless
    ``params.reinstance`` is set, in which case a new instance is drawn
    before each further repeat.

    Parameters
    ----------
    params : SpeckleParams
        Configuration to run.
    results_dir : str or Path
        Results root; the run is written to ``<results_dir>/<run_id>``.
    readout_fn : ReadoutFn, optional
        Photon counting collaborator.

    Returns
    -------
    sim : SimulationRun
        The completed, persisted run.

    Raises
    ------
    PreconditionViolation
        If the correlation window holds no sample. Nothing is written.
    PersistenceFailure
        If the run cannot be saved.
    """
    correlation_window(params.num_samples, params)
    run_id = str(uuid.uuid4())
    timestamp = datetime.now()
    logger.info(
        "Starting run %s: %d repeats of %d samples",
        run_id,
        params.repeat,
        params.num_samples,
    )
    key, instance_key = jax.random.split(jax.random.PRNGKey(params.seed))
    instance = _draw_instance(instance_key, params)
    results: List[RunResult] = []
    for index in range(params.repeat):
        key, readout_key = jax.random.split(key)
        results.append(run_instance(instance, params, readout_key, readout_fn))
        logger.debug("Run %s: repeat %d done", run_id, index + 1)
        if params.reinstance and index < params.repeat - 1:
            key, instance_key = jax.random.split(key)
            instance = _draw_instance(instance_key, params)
    sim = SimulationRun(
        run_id=run_id,
        timestamp=timestamp,
        params=params,
        results=tuple(results),
    )
    save_run(sim, results_dir)
    logger.info("Finished run %s", run_id)
    return sim


def run_sweep(
    config_set: SweepDescription,
    results_dir: Union[str, Path],
    max_workers: int = 1,
    readout_fn: ReadoutFn = produce_readout,
) -> SweepOutcome:
    """Run every configuration of a sweep and update the results table.

    Parameters
    ----------
    config_set : SweepDescription
        Sweep description, see :func:`~speckles.simul.expand_sweep`.
    results_dir : str or Path
        Results root holding the run directories and ``simdb.csv``.
    max_workers : int, optional
        Configurations run concurrently in a thread pool when larger
        than one. Default is 1.
    readout_fn : ReadoutFn, optional
        Photon counting collaborator.

    Returns
    -------
    outcome : SweepOutcome
        Merged table, completed runs and aborted configurations.

    Raises
    ------
    ConfigurationError
        If the sweep description is invalid. No configuration is run.
    PersistenceFailure
        If the stored table is unreadable, checked before any
        configuration runs, or if a run or the table cannot be written.
        Pending configurations are cancelled.
    IdentifierCollision
        If a new run identifier already exists in the table.
    """
    configs: List[SpeckleParams] = expand_sweep(config_set)
    path = table_path(results_dir)
    load_table(path)
    logger.info("Running sweep of %d configurations", len(configs))

    outcomes: List[Optional[SimulationRun]] = [None] * len(configs)
    failures: Dict[int, PreconditionViolation] = {}
    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {
                pool.submit(
                    run_configuration, params, results_dir, readout_fn
                ): index
                for index, params in enumerate(configs)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    outcomes[index] = future.result()
                except PreconditionViolation as err:
                    failures[index] = err
                    logger.error("Configuration %d failed: %s", index, err)
                except Exception:
                    logger.error(
                        "Configuration %d aborted the sweep", index
                    )
                    pool.shutdown(wait=True, cancel_futures=True)
                    raise
    else:
        for index, params in enumerate(configs):
            try:
                outcomes[index] = run_configuration(
                    params, results_dir, readout_fn
                )
            except PreconditionViolation as err:
                failures[index] = err
                logger.error("Configuration %d failed: %s", index, err)
    runs = tuple(sim for sim in outcomes if sim is not None)

    with results_lock(path):
        store: Optional[pd.DataFrame] = load_table(path)
        if not runs:
            table = store if store is not None else pd.DataFrame()
            return SweepOutcome(table=table, runs=runs, failures=failures)
        snrs = [snr(speckle_fft(sim), sim.params) for sim in runs]
        table = merge_tables(store, tabulate(runs, snrs))
        save_table(table, path)
    logger.info(
        "Sweep finished: %d runs, %d failures", len(runs), len(failures)
    )
    return SweepOutcome(table=table, runs=runs, failures=failures)
