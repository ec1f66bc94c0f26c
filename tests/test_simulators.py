import numpy as np
import pytest

from frap_models import (
    DataShapeError,
    FRAPSimulator,
    ParameterSet,
    evaluate_parameters,
    synthesize,
)
from frap_models.simulators import round_significant


def test_time_grid_spans_eight_times_largest_thalf(noiseless_table):
    assert noiseless_table.nobs == 50
    assert noiseless_table.times[0] == 0.0
    assert noiseless_table.times[-1] == pytest.approx(112.0)
    assert np.allclose(np.diff(noiseless_table.times), 112.0 / 49)


def test_groups_are_letter_labelled(noiseless_table):
    assert noiseless_table.groups == ['A', 'B', 'C']


def test_noiseless_values_follow_model(noiseless_table, known_parameters):
    for label, params in known_parameters.items():
        expected = evaluate_parameters(noiseless_table.times, params)
        assert np.allclose(noiseless_table.responses[label], expected, rtol=0, atol=1e-12)


def test_sequence_input_is_labelled_in_order():
    table = synthesize([ParameterSet(5.0, 0.0, 1.0), ParameterSet(6.0, 0.1, 2.0)], nobs=10)
    assert table.groups == ['A', 'B']


def test_noise_is_reproducible_with_seed(known_parameters):
    a = synthesize(known_parameters, noise_sd=0.05, seed=7)
    b = synthesize(known_parameters, noise_sd=0.05, seed=7)
    c = synthesize(known_parameters, noise_sd=0.05, seed=8)
    assert np.array_equal(a.response_matrix(), b.response_matrix())
    assert not np.array_equal(a.response_matrix(), c.response_matrix())


def test_noise_is_relative(known_parameters):
    table = synthesize(known_parameters, noise_sd=0.01, seed=137, significant_digits=None)
    for label, params in known_parameters.items():
        clean = evaluate_parameters(table.times, params)
        relative = table.responses[label] / clean - 1.0
        # f0 > 0 for all groups so the ratio is defined everywhere
        assert np.std(relative) == pytest.approx(0.01, rel=0.5)


def test_values_rounded_to_significant_digits(known_parameters):
    table = synthesize(known_parameters, significant_digits=4)
    values = table.responses['C']
    assert np.allclose(values, round_significant(values, 4), rtol=0, atol=1e-12)
    assert table.times[1] == pytest.approx(2.286)


def test_round_significant():
    values = np.array([0.0, 123456.0, 0.000123456, -9.87654])
    rounded = round_significant(values, 3)
    assert np.allclose(rounded, [0.0, 123000.0, 0.000123, -9.88])


def test_too_many_groups():
    known = [ParameterSet(10.0 + i, 0.0, 1.0) for i in range(27)]
    with pytest.raises(DataShapeError):
        synthesize(known)


def test_invalid_settings():
    simulator = FRAPSimulator(seed=1)
    known = {'A': ParameterSet(10.0, 0.0, 1.0)}
    with pytest.raises(ValueError):
        simulator.synthesize(known, nobs=1)
    with pytest.raises(ValueError):
        simulator.synthesize(known, noise_sd=-0.1)
