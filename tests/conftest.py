import pytest

from frap_models import ParameterSet, default_known_parameters, synthesize


@pytest.fixture
def known_parameters():
    """Ground truth of the three-group example."""
    return default_known_parameters()


@pytest.fixture
def noiseless_table(known_parameters):
    """50 noiseless points from 0 to 8 x 14 for groups A, B, C."""
    return synthesize(known_parameters, nobs=50, noise_sd=0.0, significant_digits=None)


@pytest.fixture
def noisy_table(known_parameters):
    """The example data set: 1% relative noise, 4 significant digits."""
    return synthesize(known_parameters, nobs=50, noise_sd=0.01, seed=137, significant_digits=4)


@pytest.fixture
def single_group_table():
    return synthesize({'A': ParameterSet(11.0, 0.1, 2.1)}, noise_sd=0.0, significant_digits=None)
