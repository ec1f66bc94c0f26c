"""
Workflow Configuration

Defaults of the FRAP synthesis and analysis runs. Command line options
override individual fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from frap_models import ParameterSet, default_known_parameters

DEFAULT_DATA_PATH = "data/synthdata.csv"
DEFAULT_PLOT_BASENAME = "plots/fits"


@dataclass
class SynthesisConfig:
    """
    Configuration of the synthetic data set.

    Parameters
    ----------
    known_parameters : dict
        Ground-truth parameters per group label
    tmax_factor : float
        Time runs from 0 to tmax_factor times the largest thalf
    nobs : int
        Number of time points
    noise_sd : float
        Standard deviation of the relative Gaussian noise
    seed : int | None
        Random seed for reproducible noise
    significant_digits : int | None
        Rounding of the written values; None keeps full precision
    output_path : str
        Destination CSV file
    """
    known_parameters: Dict[str, ParameterSet] = field(default_factory=default_known_parameters)
    tmax_factor: float = 8.0
    nobs: int = 50
    noise_sd: float = 0.01
    seed: Optional[int] = 137
    significant_digits: Optional[int] = 4
    output_path: str = DEFAULT_DATA_PATH

    def __post_init__(self):
        if self.nobs < 2:
            raise ValueError(f"nobs must be >= 2, got {self.nobs}")
        if self.tmax_factor <= 0:
            raise ValueError(f"tmax_factor must be positive, got {self.tmax_factor}")
        if self.noise_sd < 0:
            raise ValueError(f"noise_sd must be non-negative, got {self.noise_sd}")


@dataclass
class AnalysisConfig:
    """
    Configuration of the fitting run.

    Parameters
    ----------
    data_path : str
        Input observation table
    plot_basename : str
        Chart path without the `.png` extension
    html_path : str | None
        Optional interactive chart destination
    method : str
        least-squares algorithm: 'trf' (bounded trust region) or 'lm'
    max_nfev : int
        Function-evaluation budget per fit
    tolerance : float
        ftol, xtol and gtol of the optimizer
    plot_width, plot_height : float
        Chart size in inches
    """
    data_path: str = DEFAULT_DATA_PATH
    plot_basename: str = DEFAULT_PLOT_BASENAME
    html_path: Optional[str] = None
    method: str = 'trf'
    max_nfev: int = 1000
    tolerance: float = 1e-10
    plot_width: float = 12.0
    plot_height: float = 8.0

    def __post_init__(self):
        if self.method not in ('trf', 'lm'):
            raise ValueError(f"Unknown least-squares method: {self.method}")
        if self.max_nfev < 1:
            raise ValueError(f"max_nfev must be positive, got {self.max_nfev}")

    def fit_options(self) -> Dict[str, Any]:
        """Keyword arguments for the fitters."""
        return {
            'method': self.method,
            'max_nfev': self.max_nfev,
            'ftol': self.tolerance,
            'xtol': self.tolerance,
            'gtol': self.tolerance,
        }
