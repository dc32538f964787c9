"""Persistence of simulation runs and of the results table.

Extended Summary
----------------
Every :class:`~speckles.types.SimulationRun` is written to its own
directory below the results root::

    <results_dir>/<run_id>/data/run.npz      readouts and correlations
    <results_dir>/<run_id>/data/params.json  id, timestamp, configuration
    <results_dir>/<run_id>/plots/            reserved for figures

Run summaries are collected in a single CSV table, by convention
``<results_dir>/simdb.csv``, which is loaded at the start of a sweep,
merged with the new rows and written back at its end.

Routine Listings
----------------
save_run : function
    Write the arrays and metadata of a run.
load_run : function
    Read back the arrays and metadata of a run.
load_table : function
    Read the results table, or None if it does not exist yet.
save_table : function
    Write the results table.
merge_tables : function
    Union of two results tables keyed by run identifier.
results_lock : function
    Process-wide lock guarding one results table path.
table_path : function
    Conventional table location below a results directory.

Notes
-----
Operating-system errors are re-raised as
:class:`~speckles.utils.PersistenceFailure`.
"""

import json
import threading
from pathlib import Path

import numpy as np
import pandas as pd
from beartype.typing import Any, ContextManager, Dict, Optional, Tuple, Union

from speckles.types import SimulationRun, speckle_params_to_dict
from speckles.utils import IdentifierCollision, PersistenceFailure, get_logger

logger = get_logger(__name__)

TABLE_NAME: str = "simdb.csv"

_LOCKS: Dict[str, ContextManager[bool]] = {}
_LOCKS_GUARD = threading.Lock()

PathLike = Union[str, Path]


def table_path(results_dir: PathLike) -> Path:
    """Return the location of the results table below ``results_dir``."""
    return Path(results_dir) / TABLE_NAME


def results_lock(path: PathLike) -> ContextManager[bool]:
    """Return the re-entrant lock shared by every writer of ``path``.

    One lock exists per resolved path and process, so a sweep may hold it
    across load, merge and save while :func:`save_table` acquires it
    again.
    """
    key = str(Path(path).resolve())
    with _LOCKS_GUARD:
        if key not in _LOCKS:
            _LOCKS[key] = threading.RLock()
        return _LOCKS[key]


def save_run(sim: SimulationRun, results_dir: PathLike) -> Path:
    """Write a simulation run below ``results_dir``.

    Parameters
    ----------
    sim : SimulationRun
        Completed run.
    results_dir : str or Path
        Results root. Created if missing.

    Returns
    -------
    run_dir : Path
        Directory holding the run.

    Raises
    ------
    PersistenceFailure
        If a directory or file cannot be written.
    """
    run_dir = Path(results_dir) / sim.run_id
    data_dir = run_dir / "data"
    metadata: Dict[str, Any] = {
        "run_id": sim.run_id,
        "timestamp": sim.timestamp.isoformat(),
        "params": speckle_params_to_dict(sim.params),
    }
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        (run_dir / "plots").mkdir(exist_ok=True)
        np.savez(
            data_dir / "run.npz",
            readouts=np.stack([np.asarray(r) for r in sim.readouts]),
            correlations=np.stack([np.asarray(c) for c in sim.correlations]),
        )
        with open(data_dir / "params.json", "w", encoding="utf-8") as fh:
            json.dump(metadata, fh, indent=2)
    except OSError as err:
        raise PersistenceFailure(
            f"could not write run {sim.run_id} to {run_dir}: {err}"
        ) from err
    logger.debug("Saved run %s to %s", sim.run_id, run_dir)
    return run_dir


def load_run(
    results_dir: PathLike, run_id: str
) -> Tuple[Dict[str, Any], np.ndarray, np.ndarray]:
    """Read back a run written by :func:`save_run`.

    Returns
    -------
    metadata : dict
        Identifier, ISO timestamp and configuration mapping.
    readouts : np.ndarray
        Shape ``(repeat, 2, nt)``.
    correlations : np.ndarray
        Shape ``(repeat, nlags)``.

    Raises
    ------
    PersistenceFailure
        If the run files are missing or unreadable.
    """
    data_dir = Path(results_dir) / run_id / "data"
    try:
        with open(data_dir / "params.json", encoding="utf-8") as fh:
            metadata = json.load(fh)
        with np.load(data_dir / "run.npz") as arrays:
            readouts = arrays["readouts"]
            correlations = arrays["correlations"]
    except OSError as err:
        raise PersistenceFailure(
            f"could not read run {run_id} from {data_dir}: {err}"
        ) from err
    return metadata, readouts, correlations


def load_table(path: PathLike) -> Optional[pd.DataFrame]:
    """Read the results table at ``path``; None when it does not exist.

    Raises
    ------
    PersistenceFailure
        If the file cannot be read, is empty or malformed, or has no
        ``run_id`` column.
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        table = pd.read_csv(path)
    except (OSError, pd.errors.EmptyDataError, pd.errors.ParserError) as err:
        raise PersistenceFailure(f"could not read table {path}: {err}") from err
    if "run_id" not in table.columns:
        raise PersistenceFailure(f"table {path} has no run_id column")
    return table


def save_table(table: pd.DataFrame, path: PathLike) -> None:
    """Write the results table to ``path`` while holding its lock."""
    path = Path(path)
    with results_lock(path):
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            table.to_csv(path, index=False)
        except OSError as err:
            raise PersistenceFailure(
                f"could not write table {path}: {err}"
            ) from err
    logger.info("Saved %d rows to %s", len(table), path)


def merge_tables(
    store: Optional[pd.DataFrame], new_rows: pd.DataFrame
) -> pd.DataFrame:
    """Append ``new_rows`` to ``store``.

    Columns missing on either side are filled with NaN.

    Raises
    ------
    IdentifierCollision
        If a ``run_id`` occurs more than once in the union.
    """
    if store is None or store.empty:
        merged = new_rows.reset_index(drop=True)
    else:
        merged = pd.concat([store, new_rows], ignore_index=True, sort=False)
    duplicated = merged["run_id"][merged["run_id"].duplicated()]
    if not duplicated.empty:
        raise IdentifierCollision(
            f"duplicate run identifiers: {sorted(set(duplicated))}"
        )
    return merged
