"""Simulation orchestration, analysis and persistence.

Extended Summary
----------------
Runs the photon-counting simulation for one configuration or a sweep of
configurations, derives spectra and signal-to-noise figures from the
correlations and keeps the results on disk.

Submodules
----------
orchestrate
    Repeat loop, configuration runs and sweeps
sweep
    Sweep expansion and YAML loading
analysis
    g2 estimate, spectrum, SNR and tabulation
persist
    Run files and the results table
cli
    ``speckles-sweep`` console script

Routine Listings
----------------
run_instance : function
    Readout and correlation of one field instance
run_configuration : function
    All repeats of one configuration
run_sweep : function
    All configurations of a sweep
correlation_window : function
    Samples per correlation window
SweepOutcome : NamedTuple
    Result of a sweep
expand_sweep : function
    Sweep description to configurations
load_sweep : function
    Sweep description from YAML
g2_estimate : function
    Empirical g2 of a run
speckle_fft : function
    Spectrum of the g2 estimate
snr : function
    Signal-to-noise ratio of a spectrum
tabulate : function
    Runs to a DataFrame
save_run : function
    Write a run
load_run : function
    Read a run
load_table : function
    Read the results table
save_table : function
    Write the results table
merge_tables : function
    Union of results tables
results_lock : function
    Lock guarding a results table
table_path : function
    Results table location
"""

from .analysis import g2_estimate, snr, speckle_fft, tabulate
from .orchestrate import (
    SweepOutcome,
    correlation_window,
    run_configuration,
    run_instance,
    run_sweep,
)
from .persist import (
    load_run,
    load_table,
    merge_tables,
    results_lock,
    save_run,
    save_table,
    table_path,
)
from .sweep import expand_sweep, load_sweep

__all__: list[str] = [
    "SweepOutcome",
    "correlation_window",
    "expand_sweep",
    "g2_estimate",
    "load_run",
    "load_sweep",
    "load_table",
    "merge_tables",
    "results_lock",
    "run_configuration",
    "run_instance",
    "run_sweep",
    "save_run",
    "save_table",
    "snr",
    "speckle_fft",
    "table_path",
    "tabulate",
]
