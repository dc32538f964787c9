"""Tests for run and table persistence in speckles.simul.persist."""

import os
import shutil
import tempfile
from datetime import datetime

import chex
import jax.numpy as jnp
import numpy as np
import pandas as pd

from speckles.simul import (
    load_run,
    load_table,
    merge_tables,
    results_lock,
    save_run,
    save_table,
    table_path,
)
from speckles.types import RunResult, SimulationRun, make_speckle_params
from speckles.utils import IdentifierCollision, PersistenceFailure


def _simulation(run_id: str = "run-1") -> SimulationRun:
    results = tuple(
        RunResult(
            readout=jnp.arange(8).reshape(2, 4) + k,
            correlation=jnp.linspace(0.0, 1.0, 3) * (k + 1),
        )
        for k in range(2)
    )
    return SimulationRun(
        run_id=run_id,
        timestamp=datetime(2024, 5, 6, 7, 8, 9),
        params=make_speckle_params(em=[1 + 1j], omega_m=[2.0], repeat=2),
        results=results,
    )


class TestRunFiles(chex.TestCase):
    """Test save_run and load_run."""

    def setUp(self) -> None:
        """Set up a temporary results directory."""
        super().setUp()
        self.results = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.results, ignore_errors=True)

    def test_round_trip(self) -> None:
        """Test that arrays and metadata are read back unchanged."""
        sim = _simulation()
        run_dir = save_run(sim, self.results)
        chex.assert_equal(os.path.isdir(run_dir / "plots"), True)
        metadata, readouts, correlations = load_run(self.results, sim.run_id)
        chex.assert_equal(metadata["run_id"], "run-1")
        chex.assert_equal(metadata["timestamp"], "2024-05-06T07:08:09")
        chex.assert_equal(metadata["params"]["em"], [[1.0, 1.0]])
        chex.assert_equal(readouts.shape, (2, 2, 4))
        np.testing.assert_array_equal(readouts[1], np.asarray(sim.readouts[1]))
        np.testing.assert_allclose(
            correlations, np.stack([np.asarray(c) for c in sim.correlations])
        )

    def test_unwritable_root(self) -> None:
        """Test that a file in place of the results root fails cleanly."""
        blocker = os.path.join(self.results, "blocker")
        with open(blocker, "w") as fh:
            fh.write("x")
        with self.assertRaises(PersistenceFailure):
            save_run(_simulation(), blocker)

    def test_missing_run(self) -> None:
        """Test that loading an unknown run fails cleanly."""
        with self.assertRaises(PersistenceFailure):
            load_run(self.results, "missing")


class TestTables(chex.TestCase):
    """Test the results table helpers."""

    def setUp(self) -> None:
        """Set up a temporary results directory."""
        super().setUp()
        self.results = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.results, ignore_errors=True)

    def test_missing_table(self) -> None:
        """Test that an absent table loads as None."""
        chex.assert_equal(load_table(table_path(self.results)), None)

    def test_table_round_trip(self) -> None:
        """Test that a saved table is read back."""
        table = pd.DataFrame({"run_id": ["a", "b"], "snr": [1.5, 2.0]})
        path = table_path(self.results)
        save_table(table, path)
        pd.testing.assert_frame_equal(load_table(path), table)

    def test_merge_into_empty_store(self) -> None:
        """Test that the first merge returns the new rows."""
        new = pd.DataFrame({"run_id": ["a"], "snr": [1.0]})
        pd.testing.assert_frame_equal(merge_tables(None, new), new)

    def test_merge_appends_and_fills(self) -> None:
        """Test the union of tables with different columns."""
        store = pd.DataFrame({"run_id": ["a"], "snr": [1.0]})
        new = pd.DataFrame({"run_id": ["b"], "sigma": [0.5]})
        merged = merge_tables(store, new)
        chex.assert_equal(list(merged["run_id"]), ["a", "b"])
        chex.assert_equal(bool(merged["snr"].isna().iloc[1]), True)
        chex.assert_equal(bool(merged["sigma"].isna().iloc[0]), True)

    def test_merge_collision(self) -> None:
        """Test that a repeated run identifier is rejected."""
        store = pd.DataFrame({"run_id": ["a", "b"]})
        new = pd.DataFrame({"run_id": ["b"]})
        with self.assertRaises(IdentifierCollision):
            merge_tables(store, new)

    def test_lock_per_path(self) -> None:
        """Test that spellings of one path share a lock."""
        path = table_path(self.results)
        same = os.path.join(self.results, ".", "simdb.csv")
        other = os.path.join(self.results, "other.csv")
        chex.assert_equal(results_lock(path) is results_lock(same), True)
        chex.assert_equal(results_lock(path) is results_lock(other), False)

    def test_lock_is_reentrant(self) -> None:
        """Test that saving works while the sweep holds the lock."""
        path = table_path(self.results)
        with results_lock(path):
            save_table(pd.DataFrame({"run_id": ["a"]}), path)
        chex.assert_equal(os.path.isfile(path), True)

    def test_empty_table_file(self) -> None:
        """Test that a zero-byte table is reported as unreadable."""
        path = table_path(self.results)
        open(path, "w").close()
        with self.assertRaises(PersistenceFailure):
            load_table(path)

    def test_table_without_run_ids(self) -> None:
        """Test that a table must carry run identifiers."""
        path = table_path(self.results)
        pd.DataFrame({"snr": [1.0]}).to_csv(path, index=False)
        with self.assertRaises(PersistenceFailure):
            load_table(path)
