import logging

import numpy as np
import pytest

from frap_analysis import run_analysis
from frap_cli import main
from frap_config import AnalysisConfig, SynthesisConfig
from frap_models import ConvergenceError, ObservationTable
from report_generator import format_anova, format_fit_summary, format_known_parameters, head_tail


def test_analysis_of_example_data(noisy_table, known_parameters):
    result = run_analysis(noisy_table)
    assert result.tidy.n_rows == 150
    assert result.comparison is not None
    assert result.comparison.p_value < 1e-10
    assert result.grouped.rss <= result.pooled.rss
    assert result.selection.get_best_model() == 'grouped'
    table = result.grouped.parameter_table()
    for label, truth in known_parameters.items():
        assert table.loc[label, 'finf'] == pytest.approx(truth.finf, rel=0.05)


def test_single_group_skips_f_test(single_group_table, caplog):
    with caplog.at_level(logging.WARNING, logger="frap_analysis"):
        result = run_analysis(single_group_table)
    assert result.comparison is None
    assert result.pooled.rss == pytest.approx(result.grouped.rss, abs=1e-12)
    assert "skipping the F-test" in caplog.text


def test_analysis_propagates_convergence_failure():
    table = ObservationTable(times=np.linspace(0, 10, 8), responses={'A': np.ones(8), 'B': np.ones(8)})
    with pytest.raises(ConvergenceError):
        run_analysis(table)


def test_config_validation():
    with pytest.raises(ValueError):
        AnalysisConfig(method='dogbox')
    with pytest.raises(ValueError):
        SynthesisConfig(nobs=1)
    assert AnalysisConfig(tolerance=1e-8).fit_options()['xtol'] == 1e-8


def test_reports(noisy_table):
    result = run_analysis(noisy_table)
    summary = format_fit_summary(result.grouped, title="Group-wise fit")
    assert "thalf[A]" in summary
    assert "Residual standard error" in summary
    assert "Pr(>F)" in format_anova(result.comparison)
    listing = head_tail(result.tidy.to_frame())
    assert listing.startswith("First few lines:")
    assert "Last few lines:" in listing


def test_cli_synth_then_analyze(tmp_path, capsys):
    data = tmp_path / "data" / "synthdata.csv"
    plots = tmp_path / "plots" / "fits"

    assert main(["synth", "-o", str(data)]) == 0
    assert data.exists()

    assert main(["analyze", "-i", str(data), "--plot", str(plots), "--html", str(tmp_path / "fits.html")]) == 0
    assert (tmp_path / "plots" / "fits.png").exists()
    assert (tmp_path / "fits.html").exists()

    out = capsys.readouterr().out
    assert "Initial parameters, rough estimate:" in out
    assert "Estimated parameter table:" in out


def test_cli_synth_with_parameter_file(tmp_path):
    params = tmp_path / "known.csv"
    params.write_text("thalf,f0,finf\n5,0,1\n9,0.5,2\n")
    data = tmp_path / "two.csv"
    assert main(["synth", "--params", str(params), "--nobs", "20", "--seed", "1", "-o", str(data)]) == 0
    assert data.read_text().splitlines()[0] == "times,A,B"
    assert len(data.read_text().splitlines()) == 21


def test_cli_plot(tmp_path):
    data = tmp_path / "synthdata.csv"
    assert main(["synth", "-o", str(data)]) == 0
    assert main(["plot", "-i", str(data), "--plot", str(tmp_path / "raw")]) == 0
    assert (tmp_path / "raw.png").exists()


def test_cli_missing_input(tmp_path, capsys):
    assert main(["analyze", "-i", str(tmp_path / "missing.csv"), "--plot", str(tmp_path / "fits")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_cli_bad_data(tmp_path, capsys):
    data = tmp_path / "bad.csv"
    data.write_text("times,A\n0,0.1\n1,oops\n2,0.9\n")
    assert main(["analyze", "-i", str(data), "--plot", str(tmp_path / "fits")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_known_parameter_report(known_parameters):
    report = format_known_parameters(known_parameters)
    lines = report.splitlines()
    assert lines[0].split() == ['thalf', 'f0', 'finf']
    assert lines[1].split() == ['group']
    assert lines[2].split() == ['A', '11', '0.1', '2.1']
