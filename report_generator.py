"""
Console Report Generation Module
Plain-text summaries of observation tables, fits and fit comparisons
"""

from typing import Dict, Optional

import numpy as np
import pandas as pd

from data_loader import known_parameters_frame
from frap_models import ParameterSet
from frap_fitting import NLSFit, FTestResult


def _format_frame(frame: pd.DataFrame, float_format: str = "{:.6g}") -> str:
    return frame.to_string(float_format=lambda v: float_format.format(v))


def _format_p_value(p: float) -> str:
    if not np.isfinite(p):
        return "NA"
    if p < 2.2e-16:
        return "< 2.2e-16"
    return f"{p:.4g}"


def head_tail(frame: pd.DataFrame, n: int = 6) -> str:
    """First and last `n` rows of a table."""
    return "\n".join([
        "First few lines:",
        _format_frame(frame.head(n)),
        "Last few lines:",
        _format_frame(frame.tail(n)),
    ])


def format_parameter_set(params: ParameterSet) -> str:
    return ", ".join(f"{name} = {value:.6g}" for name, value in params.as_dict().items())


def format_parameter_table(table: pd.DataFrame) -> str:
    return _format_frame(table)


def format_known_parameters(known: Dict[str, ParameterSet]) -> str:
    return _format_frame(known_parameters_frame(known))


def format_fit_summary(fit: NLSFit, title: Optional[str] = None) -> str:
    """
    Summary of a least-squares fit in the layout of R's summary.nls.

    Coefficient table, residual standard error with its degrees of
    freedom, and the optimizer's convergence information.
    """
    coefficients = fit.coefficient_table()
    formatted = pd.DataFrame({
        'Estimate': coefficients['Estimate'].map(lambda v: f"{v:.6g}"),
        'Std. Error': coefficients['Std. Error'].map(lambda v: f"{v:.4g}"),
        't value': coefficients['t value'].map(lambda v: f"{v:.3f}"),
        'Pr(>|t|)': coefficients['Pr(>|t|)'].map(_format_p_value),
    }, index=coefficients.index)

    kind = "pooled" if fit.pooled else f"grouped ({len(fit.labels)} groups)"
    lines = []
    if title:
        lines.append(title)
    lines.extend([
        f"Formula: ft ~ frap(times, thalf, f0, finf)  [{kind}]",
        "",
        "Parameters:",
        formatted.to_string(),
        "",
        f"Residual standard error: {fit.sigma:.4g} on {fit.df_resid} degrees of freedom",
        f"Residual sum of squares: {fit.rss:.6g}",
        f"Number of function evaluations to convergence: {fit.nfev} ({fit.method})",
        f"Convergence message: {fit.message}",
    ])
    return "\n".join(lines)


def format_anova(result: FTestResult) -> str:
    """Analysis of variance table of the pooled vs grouped comparison."""
    table = result.to_frame()
    formatted = pd.DataFrame({
        'Res.Df': table['Res.Df'].map(lambda v: f"{int(v)}"),
        'Res.Sum Sq': table['Res.Sum Sq'].map(lambda v: f"{v:.6g}"),
        'Df': table['Df'].map(lambda v: "" if np.isnan(v) else f"{int(v)}"),
        'Sum Sq': table['Sum Sq'].map(lambda v: "" if np.isnan(v) else f"{v:.6g}"),
        'F value': table['F value'].map(lambda v: "" if np.isnan(v) else f"{v:.4g}"),
        'Pr(>F)': table['Pr(>F)'].map(lambda v: "" if np.isnan(v) else _format_p_value(v)),
    }, index=table.index)
    return "\n".join([
        "Analysis of Variance Table",
        "",
        "Model 1 (pooled): one parameter set for all groups",
        "Model 2 (grouped): one parameter set per group",
        formatted.to_string(),
    ])


def format_model_selection(frame: pd.DataFrame) -> str:
    return "\n".join(["Information criteria:", _format_frame(frame)])
