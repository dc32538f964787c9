"""Type definitions and factory functions for speckles.

Extended Summary
----------------
Core type definitions for the speckles package including PyTree
records, scalar type aliases and factory functions for validated
construction.

Routine Listings
----------------
:func:`make_field_params`
    Factory function for FieldEnsembleParams creation.
:func:`make_field_instance_record`
    Factory function for FieldInstance creation from drawn components.
:func:`make_beamsplitter`
    Factory function for Beamsplitter creation.
:func:`make_detector_params`
    Factory function for DetectorParams creation.
:func:`make_speckle_params`
    Factory function for SpeckleParams creation.
:func:`speckle_params_to_dict`
    JSON-friendly mapping of a SpeckleParams record.
:class:`FieldEnsembleParams`
    PyTree for the statistics of a multi-emitter field.
:class:`FieldInstance`
    PyTree for one realization of a field ensemble.
:class:`Beamsplitter`
    PyTree for a two-port beamsplitter.
:class:`DetectorParams`
    PyTree for a photon-counting detector.
:class:`SpeckleParams`
    Configuration of one simulation.
:class:`RunResult`
    PyTree pairing a readout with its correlation.
:class:`SimulationRun`
    Completed simulation under one configuration.
:class:`SpectralResult`
    PyTree holding a one-sided spectrum.

Notes
-----
Always use the factory functions for creating instances to ensure
proper validation of the contents.
"""

from .common_types import (
    ScalarFloat,
    ScalarInteger,
    ScalarNumeric,
)
from .field_types import (
    Beamsplitter,
    DetectorParams,
    FieldEnsembleParams,
    FieldInstance,
    make_beamsplitter,
    make_detector_params,
    make_field_instance_record,
    make_field_params,
)
from .sim_types import (
    RunResult,
    SimulationRun,
    SpeckleParams,
    SpectralResult,
    make_speckle_params,
    speckle_params_to_dict,
)

__all__: list[str] = [
    "Beamsplitter",
    "DetectorParams",
    "FieldEnsembleParams",
    "FieldInstance",
    "make_beamsplitter",
    "make_detector_params",
    "make_field_instance_record",
    "make_field_params",
    "make_speckle_params",
    "RunResult",
    "ScalarFloat",
    "ScalarInteger",
    "ScalarNumeric",
    "SimulationRun",
    "SpeckleParams",
    "SpectralResult",
    "speckle_params_to_dict",
]
