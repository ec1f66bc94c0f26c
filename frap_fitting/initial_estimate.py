"""
Initial Parameter Estimates

Rough starting values for the nonlinear recovery fit, derived from the
mean response across groups.
"""

from typing import Dict, List
import numpy as np

from frap_models import ObservationTable, ParameterSet


def estimate_initial_parameters(table: ObservationTable) -> ParameterSet:
    """
    Estimate a shared starting ParameterSet for all groups.

    f0 and finf are the first and last values of the mean response.
    thalf is the midpoint of the first pair of adjacent time points whose
    mean responses bracket (f0 + finf)/2 from below, i.e.
    prev <= fhalf <= cur. Only the first such crossing is used. When no
    pair brackets the midpoint (for example decreasing or flat data),
    thalf falls back to the midpoint of the first and last times.

    Parameters
    ----------
    table : ObservationTable
        Wide observation table

    Returns
    -------
    start : ParameterSet
    """
    fmeans = table.mean_response()
    times = table.times

    f0 = float(fmeans[0])
    finf = float(fmeans[-1])
    fhalf = (f0 + finf) / 2.0

    thalf = (times[0] + times[-1]) / 2.0
    for r in range(1, len(fmeans)):
        if fmeans[r - 1] <= fhalf <= fmeans[r]:
            thalf = (times[r - 1] + times[r]) / 2.0
            break

    return ParameterSet(thalf=float(thalf), f0=f0, finf=finf)


def replicate_start(start: ParameterSet, labels: List[str]) -> Dict[str, ParameterSet]:
    """Use the same starting parameters for every group."""
    return {label: start for label in labels}
