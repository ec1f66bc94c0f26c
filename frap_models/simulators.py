"""
FRAP Synthetic Data Engine

Generates noisy observation tables from known recovery parameters:
- Evenly spaced time grid scaled to the slowest group
- Multiplicative (relative) Gaussian noise
- Rounding to a fixed number of significant digits
"""

from typing import Dict, Optional, Sequence, Union
import warnings

import numpy as np

from .base import ParameterSet
from .observations import ObservationTable, group_labels
from .recovery import HyperbolicRecoveryModel


KnownParameters = Union[Sequence[ParameterSet], Dict[str, ParameterSet]]


def default_known_parameters() -> Dict[str, ParameterSet]:
    """Ground-truth parameters of the three-group example data set."""
    return {
        'A': ParameterSet(thalf=11.0, f0=0.1, finf=2.1),
        'B': ParameterSet(thalf=12.0, f0=0.3, finf=3.7),
        'C': ParameterSet(thalf=14.0, f0=0.2, finf=5.8),
    }


def round_significant(values: np.ndarray, digits: int) -> np.ndarray:
    """
    Round to `digits` significant digits, elementwise.

    Zeros are left unchanged.
    """
    if digits < 1:
        raise ValueError(f"digits must be >= 1, got {digits}")
    values = np.asarray(values, dtype=float)
    magnitude = np.floor(np.log10(np.where(values == 0, 1.0, np.abs(values))))
    factor = 10.0 ** (digits - 1 - magnitude)
    return np.round(values * factor) / factor


class FRAPSimulator:
    """
    Synthetic FRAP observation generator.

    Each group's noiseless recovery curve is scaled by (1 + e), with
    e ~ N(0, noise_sd), independently at every time point.
    """

    def __init__(
        self,
        model: HyperbolicRecoveryModel = None,
        seed: Optional[int] = None
    ):
        """
        Parameters
        ----------
        model : HyperbolicRecoveryModel, optional
            Recovery model used to evaluate the noiseless curves
        seed : int, optional
            Seed of the random generator for reproducible noise
        """
        self.model = model or HyperbolicRecoveryModel()
        self.rng = np.random.default_rng(seed)

    def time_grid(
        self,
        known: Dict[str, ParameterSet],
        tmax_factor: float = 8.0,
        nobs: int = 50
    ) -> np.ndarray:
        """Time points from 0 to tmax_factor times the largest thalf."""
        if nobs < 2:
            raise ValueError(f"nobs must be >= 2, got {nobs}")
        if tmax_factor <= 0:
            raise ValueError(f"tmax_factor must be positive, got {tmax_factor}")
        tmax = tmax_factor * max(p.thalf for p in known.values())
        return np.linspace(0.0, tmax, nobs)

    def synthesize(
        self,
        known: KnownParameters,
        tmax_factor: float = 8.0,
        nobs: int = 50,
        noise_sd: float = 0.0,
        significant_digits: Optional[int] = 4
    ) -> ObservationTable:
        """
        Generate an observation table, one response column per parameter set.

        Parameters
        ----------
        known : sequence or dict of ParameterSet
            Ground-truth parameters. A sequence is labelled A, B, C, ...;
            a dict keeps its own labels.
        tmax_factor : float
            Time runs from 0 to tmax_factor * max(thalf)
        nobs : int
            Number of time points
        noise_sd : float
            Standard deviation of the relative noise (0 for noiseless data)
        significant_digits : int or None
            Rounding applied to times and responses; None keeps full precision

        Returns
        -------
        table : ObservationTable
        """
        if not isinstance(known, dict):
            known = list(known)
            known = dict(zip(group_labels(len(known)), known))
        else:
            group_labels(len(known))
        if noise_sd < 0:
            raise ValueError(f"noise_sd must be non-negative, got {noise_sd}")

        times = self.time_grid(known, tmax_factor, nobs)
        responses = {}
        for label, params in known.items():
            fts = self.model.simulate(params, times)
            if noise_sd > 0:
                fts = fts * (1.0 + self.rng.normal(0.0, noise_sd, size=nobs))
            responses[label] = fts

        if significant_digits is not None:
            rounded_times = round_significant(times, significant_digits)
            if np.any(np.diff(rounded_times) <= 0):
                warnings.warn(
                    f"Rounding to {significant_digits} significant digits merges time points; "
                    "keeping full-precision times.",
                    UserWarning
                )
            else:
                times = rounded_times
            responses = {
                label: round_significant(values, significant_digits)
                for label, values in responses.items()
            }

        return ObservationTable(times=times, responses=responses)


def synthesize(
    known: KnownParameters = None,
    tmax_factor: float = 8.0,
    nobs: int = 50,
    noise_sd: float = 0.0,
    seed: Optional[int] = None,
    significant_digits: Optional[int] = 4
) -> ObservationTable:
    """
    Convenience wrapper around `FRAPSimulator.synthesize`.

    Uses the three-group example parameters when `known` is None.
    """
    if known is None:
        known = default_known_parameters()
    simulator = FRAPSimulator(seed=seed)
    return simulator.synthesize(
        known,
        tmax_factor=tmax_factor,
        nobs=nobs,
        noise_sd=noise_sd,
        significant_digits=significant_digits
    )
