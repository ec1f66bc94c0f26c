"""
Test Hyperbolic Recovery Model

Validates the closed-form recovery curve, its derivatives and the
parameter container.
"""

import unittest
import numpy as np

from frap_models import (
    HyperbolicRecoveryModel,
    ParameterSet,
    DomainError,
    evaluate,
    evaluate_parameters,
)
from frap_models.recovery import jacobian


class TestRecoveryCurve(unittest.TestCase):
    """Limits and special points of F(t)."""

    def setUp(self):
        self.params = ParameterSet(thalf=11.0, f0=0.1, finf=2.1)

    def test_value_at_zero_is_f0(self):
        for thalf, f0, finf in [(11.0, 0.1, 2.1), (0.5, -3.0, 7.0), (-2.0, 1.0, 0.2)]:
            self.assertEqual(evaluate(0.0, thalf, f0, finf), f0)

    def test_value_at_thalf_is_midpoint(self):
        for thalf, f0, finf in [(11.0, 0.1, 2.1), (12.0, 0.3, 3.7), (14.0, 0.2, 5.8), (3.3, 5.0, 1.0)]:
            self.assertAlmostEqual(evaluate(thalf, thalf, f0, finf), (f0 + finf) / 2, places=12)

    def test_known_scenario(self):
        self.assertAlmostEqual(evaluate(11.0, 11.0, 0.1, 2.1), 1.1, places=12)

    def test_large_time_approaches_finf(self):
        value = evaluate(1e9, 11.0, 0.1, 2.1)
        self.assertAlmostEqual(value, 2.1, places=6)

    def test_zero_thalf_raises(self):
        with self.assertRaises(DomainError):
            evaluate(1.0, 0.0, 0.1, 2.1)

    def test_vectorized_evaluation(self):
        t = np.array([0.0, 11.0, 22.0])
        values = evaluate_parameters(t, self.params)
        self.assertEqual(values.shape, (3,))
        expected = np.array([0.1, 1.1, (0.1 + 2.1 * 2) / 3])
        self.assertTrue(np.allclose(values, expected))

    def test_scalar_evaluation_returns_float(self):
        self.assertIsInstance(evaluate(5.0, 11.0, 0.1, 2.1), float)

    def test_recovery_is_monotonic_when_finf_above_f0(self):
        t = np.linspace(0, 200, 101)
        values = evaluate_parameters(t, self.params)
        self.assertTrue(np.all(np.diff(values) > 0))

    def test_jacobian_matches_finite_differences(self):
        t = np.linspace(0, 80, 17)
        base = self.params.as_array()
        analytic = jacobian(t, *base)
        h = 1e-6
        for k in range(3):
            up = base.copy()
            down = base.copy()
            up[k] += h
            down[k] -= h
            numeric = (evaluate(t, *up) - evaluate(t, *down)) / (2 * h)
            self.assertTrue(np.allclose(analytic[:, k], numeric, atol=1e-7))

    def test_model_bounds_keep_thalf_positive(self):
        model = HyperbolicRecoveryModel()
        bounds = model.get_parameter_bounds()
        self.assertEqual(bounds['thalf'][0], 0.0)
        self.assertEqual(model.parameter_names(), ['thalf', 'f0', 'finf'])


class TestParameterSet(unittest.TestCase):
    """Validation of the parameter container."""

    def test_array_round_trip(self):
        params = ParameterSet(thalf=12.0, f0=0.3, finf=3.7)
        self.assertEqual(ParameterSet.from_array(params.as_array()), params)
        self.assertEqual(params.as_dict(), {'thalf': 12.0, 'f0': 0.3, 'finf': 3.7})

    def test_non_positive_thalf_rejected(self):
        with self.assertRaises(DomainError):
            ParameterSet(thalf=0.0, f0=0.1, finf=2.1)
        with self.assertRaises(DomainError):
            ParameterSet(thalf=-1.0, f0=0.1, finf=2.1)

    def test_non_finite_values_rejected(self):
        with self.assertRaises(DomainError):
            ParameterSet(thalf=1.0, f0=np.nan, finf=2.1)

    def test_wrong_length_array(self):
        with self.assertRaises(ValueError):
            ParameterSet.from_array([1.0, 2.0])

    def test_immutable(self):
        params = ParameterSet(thalf=12.0, f0=0.3, finf=3.7)
        with self.assertRaises(Exception):
            params.thalf = 1.0


if __name__ == '__main__':
    unittest.main()
