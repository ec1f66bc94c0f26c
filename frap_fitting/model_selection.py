"""
Model Selection for FRAP Analysis

Compare pooled and per-group recovery fits with the extra sum-of-squares
F-test, and rank any set of fits by information criteria.
"""

from dataclasses import dataclass
from typing import Dict, Any, List
import numpy as np
import pandas as pd
from scipy import stats

from .fit_recovery import NLSFit
from .likelihoods import compute_evidence_ratio


@dataclass
class FTestResult:
    """Extra sum-of-squares F-test of two nested least-squares fits."""
    rss_pooled: float
    rss_grouped: float
    df_pooled: int
    df_grouped: int
    f_statistic: float
    p_value: float

    @property
    def df_difference(self) -> int:
        return self.df_pooled - self.df_grouped

    @property
    def sum_of_squares(self) -> float:
        return self.rss_pooled - self.rss_grouped

    def to_frame(self) -> pd.DataFrame:
        """ANOVA table, one row per model."""
        return pd.DataFrame(
            {
                'Res.Df': [self.df_pooled, self.df_grouped],
                'Res.Sum Sq': [self.rss_pooled, self.rss_grouped],
                'Df': [np.nan, self.df_difference],
                'Sum Sq': [np.nan, self.sum_of_squares],
                'F value': [np.nan, self.f_statistic],
                'Pr(>F)': [np.nan, self.p_value],
            },
            index=['pooled', 'grouped'],
        )


def f_test(rss_pooled: float, df_pooled: int, rss_grouped: float, df_grouped: int) -> FTestResult:
    """
    F-test of a restricted model against a larger nested model.

    F = ((RSS_p - RSS_g) / (df_p - df_g)) / (RSS_g / df_g)

    Parameters
    ----------
    rss_pooled, df_pooled : float, int
        Residual sum of squares and residual df of the restricted model
    rss_grouped, df_grouped : float, int
        Same for the larger model

    Returns
    -------
    result : FTestResult
        An exact larger-model fit (RSS_g = 0) gives F = inf and p = 0
    """
    delta_df = df_pooled - df_grouped
    if delta_df <= 0:
        raise ValueError(
            f"Grouped model must have more parameters than the pooled model (df {df_grouped} vs {df_pooled})"
        )
    if df_grouped <= 0:
        raise ValueError(f"Grouped model has no residual degrees of freedom ({df_grouped})")

    if rss_grouped <= 0:
        F = np.inf
        p_value = 0.0
    else:
        F = ((rss_pooled - rss_grouped) / delta_df) / (rss_grouped / df_grouped)
        p_value = float(stats.f.sf(F, delta_df, df_grouped))

    return FTestResult(
        rss_pooled=float(rss_pooled),
        rss_grouped=float(rss_grouped),
        df_pooled=int(df_pooled),
        df_grouped=int(df_grouped),
        f_statistic=float(F),
        p_value=p_value,
    )


def compare_fits(pooled: NLSFit, grouped: NLSFit) -> FTestResult:
    """
    Compare the pooled fit with the grouped fit.

    A small p value indicates that the per-group parameters differ.
    The result is for reporting; nothing downstream depends on it.
    """
    if pooled.n_obs != grouped.n_obs:
        raise ValueError(
            f"Fits use different data sizes ({pooled.n_obs} vs {grouped.n_obs} observations)"
        )
    return f_test(pooled.rss, pooled.df_resid, grouped.rss, grouped.df_resid)


class ModelSelection:
    """
    Model selection and comparison for FRAP fits.

    Computes AIC, BIC, Akaike weights and evidence ratios.
    """

    def __init__(self):
        """Initialize model selection."""
        self.results = {}

    def add_model(self, name: str, fit: NLSFit):
        """
        Add a fitted model to the comparison.

        Parameters
        ----------
        name : str
            Model name
        fit : NLSFit
            Least-squares fit result
        """
        self.results[name] = {
            'log_likelihood': fit.log_likelihood,
            'n_params': fit.n_params,
            'n_data': fit.n_obs,
            'rss': fit.rss,
            'aic': fit.aic,
            'bic': fit.bic,
        }

    def get_best_model(self, criterion: str = 'aic') -> str:
        """
        Get best model according to criterion.

        Parameters
        ----------
        criterion : str
            'aic' or 'bic'

        Returns
        -------
        best_model : str
            Name of best model
        """
        if not self.results:
            raise ValueError("No models added yet")

        values = {name: res[criterion] for name, res in self.results.items()}
        return min(values, key=values.get)

    def compute_weights(self, criterion: str = 'aic') -> Dict[str, float]:
        """
        Compute Akaike weights.

        Weight_i = exp(-Δ_i/2) / Σ exp(-Δ_j/2)
        where Δ_i = AIC_i - AIC_min
        """
        values = {name: res[criterion] for name, res in self.results.items()}
        min_value = min(values.values())
        if not np.isfinite(min_value):
            # Exact fits: share the weight among the models that reach it
            best = [name for name, val in values.items() if val == min_value]
            return {name: (1.0 / len(best) if name in best else 0.0) for name in values}

        rel_likes = {
            name: np.exp(-(val - min_value) / 2)
            for name, val in values.items()
        }
        total = sum(rel_likes.values())
        return {name: float(like / total) for name, like in rel_likes.items()}

    def compare_models(
        self,
        model1: str,
        model2: str,
        criterion: str = 'aic'
    ) -> Dict[str, Any]:
        """
        Compare two models directly.

        Returns
        -------
        comparison : dict
            Better/worse model, criterion difference, evidence ratio
            and a verbal interpretation
        """
        if model1 not in self.results or model2 not in self.results:
            raise ValueError("Both models must be added first")

        val1 = self.results[model1][criterion]
        val2 = self.results[model2][criterion]

        if val1 <= val2:
            better, worse = model1, model2
        else:
            better, worse = model2, model1

        evidence_ratio = compute_evidence_ratio(min(val1, val2), max(val1, val2))

        if evidence_ratio > 10:
            interpretation = "Strong evidence"
        elif evidence_ratio > 3:
            interpretation = "Moderate evidence"
        elif evidence_ratio > 1.5:
            interpretation = "Weak evidence"
        else:
            interpretation = "Negligible difference"

        return {
            'better_model': better,
            'worse_model': worse,
            f'{criterion}_difference': abs(val1 - val2),
            'evidence_ratio': evidence_ratio,
            'interpretation': interpretation
        }

    def to_frame(self) -> pd.DataFrame:
        """Information criteria of all models, sorted by AIC."""
        if not self.results:
            return pd.DataFrame(columns=['n_params', 'rss', 'log_likelihood', 'aic', 'bic', 'aic_weight'])
        weights = self.compute_weights('aic')
        frame = pd.DataFrame.from_dict(self.results, orient='index')
        frame['aic_weight'] = pd.Series(weights)
        frame = frame[['n_params', 'rss', 'log_likelihood', 'aic', 'bic', 'aic_weight']]
        return frame.sort_values('aic')


def compare_models(fits: List[NLSFit], model_names: List[str] = None) -> ModelSelection:
    """
    Convenience function to compare multiple fits.

    Parameters
    ----------
    fits : list of NLSFit
        Fit results
    model_names : list, optional
        Names for models

    Returns
    -------
    selection : ModelSelection
    """
    if model_names is None:
        model_names = [f"Model_{i+1}" for i in range(len(fits))]

    selection = ModelSelection()
    for name, fit in zip(model_names, fits):
        selection.add_model(name, fit)

    return selection
