"""
Hyperbolic Recovery Model Fitting

Nonlinear least-squares fits of the FRAP recovery curve to tidy
observations, either pooled (one parameter set for every row) or grouped
(one parameter set per group, fitted jointly).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Union
import warnings

import numpy as np
import pandas as pd
from scipy import stats
from scipy.optimize import least_squares

from frap_models import (
    HyperbolicRecoveryModel,
    ParameterSet,
    TidyObservation,
    ConvergenceError,
    DataShapeError,
    DomainError,
)
from frap_models.base import PARAMETER_NAMES
from frap_models.recovery import recovery_curve, recovery_jacobian
from .initial_estimate import replicate_start
from .likelihoods import (
    gaussian_log_likelihood,
    compute_aic,
    compute_bic,
    residual_sum_of_squares,
)

POOLED_LABEL = 'pooled'
DEFAULT_MAX_NFEV = 1000
DEFAULT_TOLERANCE = 1e-10

StartValues = Union[ParameterSet, Mapping[str, ParameterSet]]


@dataclass
class NLSFit:
    """
    Result of a nonlinear least-squares recovery fit.

    The coefficient vector is laid out parameter-major:
    [thalf_1..thalf_G, f0_1..f0_G, finf_1..finf_G] for G parameter sets
    (G = 1 for a pooled fit).
    """
    labels: List[str]
    parameters: Dict[str, ParameterSet]
    rss: float
    n_obs: int
    n_params: int
    covariance: np.ndarray
    fitted: np.ndarray
    residuals: np.ndarray
    success: bool
    message: str
    nfev: int
    method: str
    pooled: bool = False
    data_labels: List[str] = field(default_factory=list)

    @property
    def df_resid(self) -> int:
        return self.n_obs - self.n_params

    @property
    def sigma(self) -> float:
        """Residual standard error."""
        return float(np.sqrt(self.rss / self.df_resid))

    @property
    def coefficients(self) -> np.ndarray:
        return pack_parameters(self.parameters, self.labels)

    @property
    def stderr(self) -> np.ndarray:
        diag = np.diag(self.covariance)
        return np.sqrt(np.where(diag < 0, np.nan, diag))

    @property
    def parameter_set(self) -> ParameterSet:
        """The single parameter set of a pooled fit."""
        if len(self.labels) != 1:
            raise ValueError("Grouped fit has one parameter set per group; use `parameters`")
        return self.parameters[self.labels[0]]

    @property
    def log_likelihood(self) -> float:
        return gaussian_log_likelihood(self.rss, self.n_obs)

    @property
    def aic(self) -> float:
        # The noise variance counts as an estimated parameter
        return compute_aic(self.log_likelihood, self.n_params + 1)

    @property
    def bic(self) -> float:
        return compute_bic(self.log_likelihood, self.n_params + 1, self.n_obs)

    def coefficient_names(self) -> List[str]:
        if len(self.labels) == 1:
            return list(PARAMETER_NAMES)
        return [f"{name}[{label}]" for name in PARAMETER_NAMES for label in self.labels]

    def coefficient_table(self) -> pd.DataFrame:
        """
        Estimates with standard errors, t values and two-sided p values.

        p values use the t distribution with the residual degrees of freedom.
        """
        estimate = self.coefficients
        stderr = self.stderr
        with np.errstate(divide='ignore', invalid='ignore'):
            t_value = estimate / stderr
        p_value = 2.0 * stats.t.sf(np.abs(t_value), self.df_resid)
        return pd.DataFrame(
            {
                'Estimate': estimate,
                'Std. Error': stderr,
                't value': t_value,
                'Pr(>|t|)': p_value,
            },
            index=self.coefficient_names(),
        )

    def parameter_table(self) -> pd.DataFrame:
        """Fitted parameters, one row per parameter set."""
        rows = [self.parameters[label].as_dict() for label in self.labels]
        return pd.DataFrame(rows, index=pd.Index(self.labels, name='group'), columns=list(PARAMETER_NAMES))

    def predict(self, t: np.ndarray, label: Optional[str] = None) -> np.ndarray:
        """Fitted curve for one parameter set (the only one for a pooled fit)."""
        params = self.parameter_set if label is None else self.parameters[label]
        return recovery_curve(np.asarray(t, dtype=float), params.thalf, params.f0, params.finf)


def pack_parameters(parameters: Mapping[str, ParameterSet], labels: List[str]) -> np.ndarray:
    """Flatten parameter sets into the parameter-major coefficient vector."""
    matrix = np.array([parameters[label].as_array() for label in labels], dtype=float)
    return matrix.T.ravel()


def unpack_parameters(x: np.ndarray, labels: List[str]) -> Dict[str, ParameterSet]:
    """Inverse of `pack_parameters`."""
    matrix = np.asarray(x, dtype=float).reshape(len(PARAMETER_NAMES), len(labels)).T
    return {label: ParameterSet.from_array(row) for label, row in zip(labels, matrix)}


class _IndexedResiduals:
    """
    Residuals and Jacobian of the indexed recovery model.

    Row i of the data uses parameter set `group_index[i]`.
    """

    def __init__(self, times: np.ndarray, values: np.ndarray, group_index: np.ndarray, n_sets: int):
        self.times = times
        self.values = values
        self.group_index = group_index
        self.n_sets = n_sets
        self._rows = np.arange(times.size)

    def _row_parameters(self, x: np.ndarray):
        g = self.n_sets
        idx = self.group_index
        return x[:g][idx], x[g:2 * g][idx], x[2 * g:][idx]

    def __call__(self, x: np.ndarray) -> np.ndarray:
        thalf, f0, finf = self._row_parameters(x)
        return recovery_curve(self.times, thalf, f0, finf) - self.values

    def jacobian(self, x: np.ndarray) -> np.ndarray:
        thalf, f0, finf = self._row_parameters(x)
        partials = recovery_jacobian(self.times, thalf, f0, finf)
        g = self.n_sets
        jac = np.zeros((self.times.size, 3 * g), dtype=float)
        for k in range(3):
            jac[self._rows, k * g + self.group_index] = partials[:, k]
        return jac


def _fit_indexed(
    tidy: TidyObservation,
    labels: List[str],
    group_index: np.ndarray,
    start: Dict[str, ParameterSet],
    pooled: bool,
    method: str = 'trf',
    max_nfev: Optional[int] = DEFAULT_MAX_NFEV,
    ftol: float = DEFAULT_TOLERANCE,
    xtol: float = DEFAULT_TOLERANCE,
    gtol: float = DEFAULT_TOLERANCE,
    model: HyperbolicRecoveryModel = None,
) -> NLSFit:
    model = model or HyperbolicRecoveryModel()
    n_sets = len(labels)
    n_params = 3 * n_sets
    n_obs = tidy.n_rows
    if n_obs <= n_params:
        raise DataShapeError(
            f"{n_obs} observations are not enough to fit {n_params} parameters"
        )

    problem = _IndexedResiduals(tidy.times, tidy.values, group_index, n_sets)
    x0 = pack_parameters(start, labels)

    if method == 'lm':
        bounds = (-np.inf, np.inf)
    else:
        bounds_dict = model.get_parameter_bounds()
        lower = np.repeat([bounds_dict[name][0] for name in PARAMETER_NAMES], n_sets)
        upper = np.repeat([bounds_dict[name][1] for name in PARAMETER_NAMES], n_sets)
        bounds = (lower, upper)

    try:
        result = least_squares(
            problem,
            x0,
            jac=problem.jacobian,
            bounds=bounds,
            method=method,
            max_nfev=max_nfev,
            ftol=ftol,
            xtol=xtol,
            gtol=gtol,
        )
    except (ValueError, np.linalg.LinAlgError) as e:
        raise ConvergenceError(f"Least-squares optimization failed: {e}") from e

    if result.status <= 0:
        raise ConvergenceError(
            f"Fit did not converge after {result.nfev} function evaluations: {result.message}"
        )
    if not np.all(np.isfinite(result.fun)) or not np.all(np.isfinite(result.x)):
        raise ConvergenceError("Fit produced non-finite residuals or parameters")

    jac = problem.jacobian(result.x)
    rank = np.linalg.matrix_rank(jac)
    if rank < n_params:
        raise ConvergenceError(
            f"Singular gradient at the solution (Jacobian rank {rank} < {n_params} parameters)"
        )

    fitted = tidy.values + np.asarray(result.fun, dtype=float)
    rss = residual_sum_of_squares(tidy.values, fitted)
    df_resid = n_obs - n_params

    jtj = jac.T @ jac
    cond = np.linalg.cond(jtj)
    if not np.isfinite(cond) or cond > 1e14:
        warnings.warn(
            f"Normal matrix is ill-conditioned (condition number {cond:.3g}); "
            "standard errors may be unreliable.",
            UserWarning
        )
    covariance = np.linalg.pinv(jtj) * (rss / df_resid)

    try:
        parameters = unpack_parameters(result.x, labels)
    except DomainError as e:
        raise ConvergenceError(f"Fit ended outside the model domain: {e}") from e

    return NLSFit(
        labels=list(labels),
        parameters=parameters,
        rss=rss,
        n_obs=n_obs,
        n_params=n_params,
        covariance=covariance,
        fitted=fitted,
        residuals=tidy.values - fitted,
        success=bool(result.success),
        message=str(result.message),
        nfev=int(result.nfev),
        method=method,
        pooled=pooled,
        data_labels=list(tidy.labels),
    )


def fit_pooled(tidy: TidyObservation, start: ParameterSet, **kwargs) -> NLSFit:
    """
    Fit one parameter set to all observations, ignoring group labels.

    Parameters
    ----------
    tidy : TidyObservation
        Long-format observations
    start : ParameterSet
        Starting values
    **kwargs
        Optimizer options: method ('trf' or 'lm'), max_nfev, ftol, xtol, gtol

    Returns
    -------
    fit : NLSFit

    Raises
    ------
    ConvergenceError
        If the optimizer does not converge or the gradient is singular
    """
    group_index = np.zeros(tidy.n_rows, dtype=int)
    return _fit_indexed(
        tidy, [POOLED_LABEL], group_index, {POOLED_LABEL: start}, pooled=True, **kwargs
    )


def fit_grouped(tidy: TidyObservation, start: StartValues, **kwargs) -> NLSFit:
    """
    Fit an independent parameter set to every group in one optimization.

    Parameters
    ----------
    tidy : TidyObservation
        Long-format observations
    start : ParameterSet or mapping
        A single ParameterSet is used as the start of every group;
        a mapping gives per-group starting values
    **kwargs
        Optimizer options, see `fit_pooled`

    Returns
    -------
    fit : NLSFit
    """
    labels = list(tidy.labels)
    if isinstance(start, ParameterSet):
        starts = replicate_start(start, labels)
    else:
        missing = [label for label in labels if label not in start]
        if missing:
            raise ValueError(f"No starting values for groups {missing}")
        starts = {label: start[label] for label in labels}

    return _fit_indexed(tidy, labels, tidy.group_index, starts, pooled=False, **kwargs)
