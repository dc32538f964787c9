"""Correlation engine for photon count sequences.

Extended Summary
----------------
Stateless functions computing offset and windowed correlations of
discrete count sequences with explicit zero padding, selecting the lag
times that carry a positive correlated signal, and expanding count
histograms into event-time lists.

Submodules
----------
windowed
    Windowed correlation, lag-time filters and count expansion

Routine Listings
----------------
correlate : function
    Correlation of two sequences at one offset
autocorrelate : function
    Correlation of a sequence with itself at one offset
correlate_lags : function
    Correlation at every offset below a lag count
corr_times : function
    Lag times with positive cross-correlation
autocorr_times : function
    Lag times with positive autocorrelation
count_times : function
    Expand a count histogram into event times

Notes
-----
Indices past the end of the shifted sequence contribute zero. Bounds
violations raise :class:`~speckles.utils.PreconditionViolation`.
"""

from .windowed import (
    autocorr_times,
    autocorrelate,
    corr_times,
    correlate,
    correlate_lags,
    count_times,
)

__all__: list[str] = [
    "autocorr_times",
    "autocorrelate",
    "corr_times",
    "correlate",
    "correlate_lags",
    "count_times",
]
