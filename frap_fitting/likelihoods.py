"""
Likelihood Functions for FRAP Fitting

Statistical summaries of least-squares recovery fits:
- Residual sum of squares
- Gaussian log-likelihood at the maximum-likelihood noise level
- Information criteria (AIC, BIC) and evidence ratios
"""

import numpy as np


def residual_sum_of_squares(
    observed: np.ndarray,
    predicted: np.ndarray,
    weights: np.ndarray = None
) -> float:
    """
    (Weighted) sum of squared residuals.

    Parameters
    ----------
    observed : np.ndarray
        Observed data
    predicted : np.ndarray
        Model predictions
    weights : np.ndarray, optional
        Weights for each point (default: uniform)

    Returns
    -------
    rss : float
    """
    residuals = np.asarray(observed, dtype=float) - np.asarray(predicted, dtype=float)

    if weights is None:
        weights = np.ones_like(residuals)

    return float(np.sum(weights * residuals**2))


def gaussian_log_likelihood(rss: float, n_data: int) -> float:
    """
    Gaussian log-likelihood of a least-squares fit.

    The noise variance is profiled out at its maximum-likelihood value
    RSS/n, which gives

        ln L = -n/2 * (ln(2*pi) + 1 - ln(n) + ln(RSS))

    Parameters
    ----------
    rss : float
        Residual sum of squares
    n_data : int
        Number of observations

    Returns
    -------
    log_likelihood : float
        Log-likelihood; +inf for an exact fit (RSS = 0)
    """
    if n_data <= 0:
        raise ValueError("n_data must be positive")
    if rss <= 0:
        return np.inf
    n = float(n_data)
    return -0.5 * n * (np.log(2 * np.pi) + 1.0 - np.log(n) + np.log(rss))


def compute_aic(log_likelihood: float, n_params: int) -> float:
    """
    Compute Akaike Information Criterion.

    AIC = 2k - 2·ln(L)

    Lower AIC indicates better model considering complexity.

    Parameters
    ----------
    log_likelihood : float
        Maximum log-likelihood
    n_params : int
        Number of model parameters (including the noise variance)

    Returns
    -------
    aic : float
        Akaike Information Criterion
    """
    return 2 * n_params - 2 * log_likelihood


def compute_bic(log_likelihood: float, n_params: int, n_data: int) -> float:
    """
    Compute Bayesian Information Criterion.

    BIC = k·ln(n) - 2·ln(L)

    Lower BIC indicates better model. More conservative than AIC.
    """
    return n_params * np.log(n_data) - 2 * log_likelihood


def compute_evidence_ratio(aic1: float, aic2: float) -> float:
    """
    Compute evidence ratio between two models.

    Evidence ratio ≈ exp((AIC_2 - AIC_1) / 2)

    Interpretation:
    - > 10: Strong evidence for model 1
    - 3-10: Moderate evidence for model 1
    - 1-3: Weak evidence

    Parameters
    ----------
    aic1 : float
        AIC of model 1 (should be lower)
    aic2 : float
        AIC of model 2

    Returns
    -------
    evidence_ratio : float
        Relative evidence for model 1 vs model 2
    """
    delta_aic = aic2 - aic1
    if np.isnan(delta_aic):
        return np.inf
    return float(np.exp(delta_aic / 2))
