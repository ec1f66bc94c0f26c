"""
FRAP Models Module

Closed-form FRAP recovery analysis using:
- The hyperbolic recovery curve of Yguerabide et al. (1982)
- Wide and tidy observation containers
- A synthetic data generator with relative noise

All parameter sets are validated on construction.
"""

from .base import (
    FRAPModel,
    ParameterSet,
    FRAPAnalysisError,
    DomainError,
    ConvergenceError,
    DataShapeError,
)
from .recovery import HyperbolicRecoveryModel, evaluate, evaluate_parameters
from .observations import ObservationTable, TidyObservation, group_labels
from .simulators import FRAPSimulator, synthesize, default_known_parameters

__all__ = [
    'FRAPModel',
    'ParameterSet',
    'FRAPAnalysisError',
    'DomainError',
    'ConvergenceError',
    'DataShapeError',
    'HyperbolicRecoveryModel',
    'evaluate',
    'evaluate_parameters',
    'ObservationTable',
    'TidyObservation',
    'group_labels',
    'FRAPSimulator',
    'synthesize',
    'default_known_parameters',
]
