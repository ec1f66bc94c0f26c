"""
Test Visualization

Charts are built on explicit figure objects and written to PNG/HTML.
"""

import unittest
import tempfile
from pathlib import Path

from frap_fitting import estimate_initial_parameters, fit_grouped
from frap_models import default_known_parameters, synthesize
from visualization import (
    FIT_TITLE,
    RAW_TITLE,
    plot_recovery,
    plot_recovery_interactive,
    save_html,
    save_png,
)


class TestRecoveryPlots(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        table = synthesize(default_known_parameters(), noise_sd=0.01, seed=137)
        cls.tidy = table.tidy()
        cls.parameter_table = fit_grouped(cls.tidy, estimate_initial_parameters(table)).parameter_table()

    def test_raw_plot(self):
        fig = plot_recovery(self.tidy)
        ax = fig.axes[0]
        self.assertEqual(len(ax.collections), 3)
        self.assertEqual(len(ax.lines), 0)
        self.assertEqual(ax.get_title(), RAW_TITLE)

    def test_fitted_plot(self):
        fig = plot_recovery(self.tidy, self.parameter_table)
        ax = fig.axes[0]
        self.assertEqual(len(ax.collections), 3)
        self.assertEqual(len(ax.lines), 3)
        self.assertEqual(ax.get_title(), FIT_TITLE)
        line = ax.lines[0]
        self.assertEqual(len(line.get_xdata()), 100)
        self.assertEqual(line.get_xdata()[0], self.tidy.times.min())
        self.assertEqual(line.get_xdata()[-1], self.tidy.times.max())

    def test_custom_title(self):
        fig = plot_recovery(self.tidy, title="Cells")
        self.assertEqual(fig.axes[0].get_title(), "Cells")

    def test_save_png(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_png(plot_recovery(self.tidy), Path(tmp) / "plots" / "fits", width=6, height=4)
            self.assertEqual(path.name, "fits.png")
            with open(path, 'rb') as f:
                self.assertEqual(f.read(8), b'\x89PNG\r\n\x1a\n')

    def test_interactive_traces(self):
        raw = plot_recovery_interactive(self.tidy)
        self.assertEqual(len(raw.data), 3)
        fitted = plot_recovery_interactive(self.tidy, self.parameter_table)
        self.assertEqual(len(fitted.data), 6)
        self.assertEqual(fitted.data[3].mode, 'lines')

    def test_save_html(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_html(plot_recovery_interactive(self.tidy), Path(tmp) / "fits.html")
            self.assertTrue(path.exists())
            self.assertIn('plotly', path.read_text().lower())


if __name__ == '__main__':
    unittest.main()
