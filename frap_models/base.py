"""
Base FRAP Model Interface

Defines the abstract interface for closed-form FRAP recovery models:
- Deterministic evaluation given a parameter set
- Named, immutable parameter sets
- Parameter bounds for constrained fitting
- The error types shared by the models, the fitters and the data layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Tuple, Sequence
import numpy as np


class FRAPAnalysisError(Exception):
    """Base class for errors that abort a FRAP analysis run."""
    pass


class DomainError(FRAPAnalysisError):
    """Raised when model parameters are outside the model's domain."""
    pass


class ConvergenceError(FRAPAnalysisError):
    """Raised when nonlinear fitting fails to converge or the gradient is singular."""
    pass


class DataShapeError(FRAPAnalysisError):
    """Raised when an observation table is malformed."""
    pass


PARAMETER_NAMES = ('thalf', 'f0', 'finf')


@dataclass(frozen=True)
class ParameterSet:
    """
    The three free parameters of the hyperbolic recovery model.

    Parameters
    ----------
    thalf : float
        Time at which recovery is halfway between f0 and finf. Must be > 0.
    f0 : float
        Fluorescence immediately after bleaching.
    finf : float
        Fluorescence at full recovery.
    """
    thalf: float
    f0: float
    finf: float

    def __post_init__(self):
        values = (self.thalf, self.f0, self.finf)
        if not np.all(np.isfinite(values)):
            raise DomainError(f"Parameters must be finite, got {values}")
        if self.thalf <= 0:
            raise DomainError(f"thalf must be positive, got {self.thalf}")

    def as_array(self) -> np.ndarray:
        """Return parameters as an array ordered (thalf, f0, finf)."""
        return np.array([self.thalf, self.f0, self.finf], dtype=float)

    def as_dict(self) -> Dict[str, float]:
        return {name: float(getattr(self, name)) for name in PARAMETER_NAMES}

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "ParameterSet":
        if len(values) != len(PARAMETER_NAMES):
            raise ValueError(f"Expected 3 values (thalf, f0, finf), got {len(values)}")
        return cls(float(values[0]), float(values[1]), float(values[2]))


class FRAPModel(ABC):
    """
    Abstract base class for closed-form FRAP recovery models.

    Subclasses evaluate the recovery curve F(t) and its partial derivatives
    with respect to the free parameters, which is all a least-squares
    fitter needs.
    """

    def __init__(self, name: str = "FRAPModel"):
        """
        Initialize FRAP model.

        Parameters
        ----------
        name : str
            Model name for identification
        """
        self.name = name

    @abstractmethod
    def simulate(self, params: ParameterSet, timepoints: np.ndarray) -> np.ndarray:
        """
        Evaluate the recovery curve.

        Parameters
        ----------
        params : ParameterSet
            Model parameters
        timepoints : np.ndarray
            Time points at which to evaluate recovery

        Returns
        -------
        recovery : np.ndarray
            Fluorescence at each time point
        """
        pass

    @abstractmethod
    def jacobian(self, params: ParameterSet, timepoints: np.ndarray) -> np.ndarray:
        """
        Partial derivatives of the recovery curve.

        Returns
        -------
        jac : np.ndarray
            Array of shape (len(timepoints), n_params), columns ordered as
            `parameter_names()`
        """
        pass

    def parameter_names(self) -> List[str]:
        return list(PARAMETER_NAMES)

    def get_parameter_bounds(self) -> Dict[str, Tuple[float, float]]:
        """
        Get bounds for model parameters.

        Returns
        -------
        bounds : dict
            Parameter bounds as {param_name: (lower, upper)}
        """
        # Default implementation - override in subclasses
        return {name: (-np.inf, np.inf) for name in self.parameter_names()}
