"""Expansion of parameter sweeps into individual configurations.

Extended Summary
----------------
A sweep is either

- a mapping from configuration field name to a list of candidate
  values, expanded into the cross product of all candidates in key
  order (the last key varies fastest). A scalar value is a single
  candidate. Fields whose value is itself a sequence (``em``,
  ``omega_m``) must be given as a list of candidates, e.g.
  ``omega_m: [[0.0, 1.0], [0.0, 2.0]]``; or
- a list of mappings, each of which is one configuration.

Every configuration is validated with
:func:`~speckles.types.make_speckle_params` before anything is run.

Routine Listings
----------------
expand_sweep : function
    Expand a sweep description into validated SpeckleParams.
load_sweep : function
    Read a sweep description from a YAML file.
make_speckle_params : function
    Validating factory for a single configuration (re-exported).
"""

import itertools
from collections.abc import Mapping
from pathlib import Path

import yaml
from beartype.typing import Any, List, Sequence, Union

from speckles.types import SpeckleParams, make_speckle_params
from speckles.utils import ConfigurationError, PersistenceFailure

SweepDescription = Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]

_SEQUENCE_FIELDS = ("em", "omega_m")


def _candidates(name: str, value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        if not value:
            raise ConfigurationError(f"sweep field {name!r} has no values")
        if name in _SEQUENCE_FIELDS and not isinstance(
            value[0], (list, tuple)
        ):
            return [value]
        return list(value)
    return [value]


def _check_fields(names: Sequence[str]) -> None:
    unknown = sorted(set(names) - set(SpeckleParams._fields))
    if unknown:
        raise ConfigurationError(f"unknown sweep fields: {unknown}")


def expand_sweep(config_set: SweepDescription) -> List[SpeckleParams]:
    """Expand a sweep description into a list of configurations.

    Parameters
    ----------
    config_set : mapping or sequence of mappings
        Field name to candidate values, or an explicit list of
        configurations.

    Returns
    -------
    configs : list of SpeckleParams
        Validated configurations in execution order.

    Raises
    ------
    ConfigurationError
        On unknown field names, empty candidate lists or values rejected
        by :func:`~speckles.types.make_speckle_params`.

    Examples
    --------
    >>> [(p.sigma, p.n_emitters) for p in expand_sweep(
    ...     {"sigma": [1.0, 2.0], "n_emitters": [5, 10]})]
    [(1.0, 5), (1.0, 10), (2.0, 5), (2.0, 10)]
    """
    if isinstance(config_set, Mapping):
        names = list(config_set.keys())
        _check_fields(names)
        grids = [_candidates(name, config_set[name]) for name in names]
        return [
            make_speckle_params(**dict(zip(names, combination)))
            for combination in itertools.product(*grids)
        ]
    if isinstance(config_set, (list, tuple)):
        configs = []
        for entry in config_set:
            if not isinstance(entry, Mapping):
                raise ConfigurationError(
                    f"sweep entries must be mappings, got {entry!r}"
                )
            _check_fields(list(entry.keys()))
            configs.append(make_speckle_params(**entry))
        return configs
    raise ConfigurationError(
        f"a sweep must be a mapping or a list of mappings, got "
        f"{type(config_set).__name__}"
    )


def load_sweep(path: Union[str, Path]) -> SweepDescription:
    """Read a sweep description from a YAML file.

    An optional top-level ``sweep`` key is unwrapped, so a file may hold
    either the description itself or ``{"sweep": description}``.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as err:
        raise PersistenceFailure(f"could not read sweep {path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigurationError(f"invalid YAML in {path}: {err}") from err
    if isinstance(data, Mapping) and set(data) == {"sweep"}:
        data = data["sweep"]
    if data is None:
        raise ConfigurationError(f"sweep file {path} is empty")
    return data


__all__: list[str] = ["expand_sweep", "load_sweep", "make_speckle_params"]
