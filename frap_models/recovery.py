"""
Hyperbolic FRAP Recovery Model

Closed-form recovery curve from Yguerabide et al., Biophys. J. 39:69-75
(1982), Eq. 12:

    F(t) = (F0 + Finf * t/thalf) / (1 + t/thalf)

F(0) = F0, F(thalf) = (F0 + Finf)/2 and F(t) -> Finf as t -> infinity.
"""

from typing import Dict, Tuple, Union
import numpy as np

from .base import FRAPModel, ParameterSet, DomainError

ArrayLike = Union[float, np.ndarray]


def recovery_curve(t: ArrayLike, thalf: ArrayLike, f0: ArrayLike, finf: ArrayLike) -> np.ndarray:
    """
    Broadcasting evaluation of F(t) without domain checks.

    `t`, `thalf`, `f0` and `finf` may be arrays of matching shape, so rows
    belonging to different parameter sets can be evaluated in one call.
    Callers guarantee thalf != 0.
    """
    trel = np.asarray(t, dtype=float) / thalf
    return (f0 + finf * trel) / (1.0 + trel)


def recovery_jacobian(t: ArrayLike, thalf: ArrayLike, f0: ArrayLike, finf: ArrayLike) -> np.ndarray:
    """
    Broadcasting partial derivatives of F(t) without domain checks.

    With r = t/thalf:
        dF/dthalf = -(finf - f0) * r / (thalf * (1 + r)^2)
        dF/df0    = 1 / (1 + r)
        dF/dfinf  = r / (1 + r)

    Returns
    -------
    jac : np.ndarray
        Shape (n, 3), columns ordered (thalf, f0, finf)
    """
    trel = np.atleast_1d(np.asarray(t, dtype=float) / thalf)
    denom = 1.0 + trel
    d_thalf = -(finf - f0) * trel / (thalf * denom ** 2)
    return np.column_stack([
        np.broadcast_to(d_thalf, trel.shape),
        1.0 / denom,
        trel / denom,
    ])


def evaluate(t: ArrayLike, thalf: float, f0: float, finf: float) -> ArrayLike:
    """
    Evaluate the FRAP recovery curve.

    Parameters
    ----------
    t : float or np.ndarray
        Time since bleaching (t >= 0)
    thalf : float
        Half-recovery time; must be non-zero
    f0 : float
        Fluorescence right after bleaching
    finf : float
        Fluorescence at full recovery

    Returns
    -------
    ft : float or np.ndarray
        F(t), same shape as `t`

    Raises
    ------
    DomainError
        If thalf == 0
    """
    if thalf == 0:
        raise DomainError("thalf must be non-zero")
    ft = recovery_curve(t, thalf, f0, finf)
    if np.ndim(ft) == 0:
        return float(ft)
    return ft


def evaluate_parameters(t: ArrayLike, params: ParameterSet) -> ArrayLike:
    """Evaluate the recovery curve for a ParameterSet."""
    return evaluate(t, params.thalf, params.f0, params.finf)


def jacobian(t: ArrayLike, thalf: float, f0: float, finf: float) -> np.ndarray:
    """Partial derivatives of F(t) with respect to (thalf, f0, finf)."""
    if thalf == 0:
        raise DomainError("thalf must be non-zero")
    return recovery_jacobian(t, thalf, f0, finf)


class HyperbolicRecoveryModel(FRAPModel):
    """
    Three-parameter hyperbolic FRAP recovery model.

    Used by the fitters to evaluate predictions and Jacobians and to
    supply parameter bounds.
    """

    def __init__(self, min_thalf: float = 0.0):
        """
        Parameters
        ----------
        min_thalf : float
            Lower bound of thalf during constrained fitting
        """
        super().__init__(name="HyperbolicRecoveryModel")
        self.min_thalf = min_thalf

    def simulate(self, params: ParameterSet, timepoints: np.ndarray) -> np.ndarray:
        return np.asarray(evaluate_parameters(np.asarray(timepoints, dtype=float), params))

    def jacobian(self, params: ParameterSet, timepoints: np.ndarray) -> np.ndarray:
        return jacobian(timepoints, params.thalf, params.f0, params.finf)

    def get_parameter_bounds(self) -> Dict[str, Tuple[float, float]]:
        return {
            'thalf': (self.min_thalf, np.inf),
            'f0': (-np.inf, np.inf),
            'finf': (-np.inf, np.inf),
        }
