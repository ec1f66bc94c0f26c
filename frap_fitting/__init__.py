"""
FRAP Fitting Module

Nonlinear least-squares fitting of the hyperbolic FRAP recovery model:
- Initial estimates from the mean response
- Pooled and per-group fits with a shared optimizer
- Extra sum-of-squares F-test and information criteria for comparison
"""

from .likelihoods import (
    gaussian_log_likelihood,
    compute_aic,
    compute_bic,
)
from .initial_estimate import estimate_initial_parameters, replicate_start
from .fit_recovery import NLSFit, fit_pooled, fit_grouped
from .model_selection import FTestResult, ModelSelection, compare_fits, compare_models

__all__ = [
    'gaussian_log_likelihood',
    'compute_aic',
    'compute_bic',
    'estimate_initial_parameters',
    'replicate_start',
    'NLSFit',
    'fit_pooled',
    'fit_grouped',
    'FTestResult',
    'ModelSelection',
    'compare_fits',
    'compare_models',
]
