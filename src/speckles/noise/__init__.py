"""Doppler noise model for multi-emitter fields.

Extended Summary
----------------
Analytic, non-simulated predictions for the statistics of the Doppler
noise term and of the second-order intensity correlation g2(tau). These
are used to validate the empirical output of the correlation engine.

Submodules
----------
doppler
    Moments of the Doppler noise term and the g2 prediction

Routine Listings
----------------
stau_avg : function
    Mean of the Doppler noise term
stau_avg_from_params : function
    Mean of the Doppler noise term from ensemble parameters
stau_var : function
    Variance of the Doppler noise term
stau_var_from_params : function
    Variance of the Doppler noise term from ensemble parameters
stau : function
    Sampled Doppler noise term for given frequencies
stau_from_instance : function
    Sampled Doppler noise term of a field instance
g2_calc : function
    Ensemble-averaged g2(tau)
g2_zero_delay : function
    Theoretical g2(0)
"""

from .doppler import (
    g2_calc,
    g2_zero_delay,
    stau,
    stau_avg,
    stau_avg_from_params,
    stau_from_instance,
    stau_var,
    stau_var_from_params,
)

__all__: list[str] = [
    "g2_calc",
    "g2_zero_delay",
    "stau",
    "stau_avg",
    "stau_avg_from_params",
    "stau_from_instance",
    "stau_var",
    "stau_var_from_params",
]
