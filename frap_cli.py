"""
Command line interface of the FRAP recovery workflow.

    frap-nls synth     write a synthetic observation table
    frap-nls analyze   fit pooled and grouped models, report and plot
    frap-nls plot      plot the observations only
"""

import argparse
import logging
import sys
from typing import List, Optional

from data_loader import (
    read_known_parameters,
    read_observation_table,
    write_observation_table,
)
from frap_analysis import run_analysis
from frap_config import AnalysisConfig, SynthesisConfig, DEFAULT_DATA_PATH, DEFAULT_PLOT_BASENAME
from frap_models import FRAPAnalysisError, FRAPSimulator
from report_generator import (
    format_anova,
    format_fit_summary,
    format_known_parameters,
    format_model_selection,
    format_parameter_set,
    format_parameter_table,
    head_tail,
)
from visualization import plot_recovery, plot_recovery_interactive, save_html, save_png

LOGGER = logging.getLogger(__name__)


def _optional_int(value: str) -> Optional[int]:
    if value.lower() in ("none", "off"):
        return None
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="frap-nls",
        description="Nonlinear least-squares analysis of FRAP recovery curves.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    synth = subparsers.add_parser("synth", help="Generate a synthetic observation table")
    synth.add_argument("--params", help="CSV of known parameters (columns thalf, f0, finf)")
    synth.add_argument("--nobs", type=int, default=50, help="Number of time points")
    synth.add_argument("--noise-sd", type=float, default=0.01, help="Relative noise standard deviation")
    synth.add_argument("--tmax-factor", type=float, default=8.0,
                       help="Last time point as a multiple of the largest thalf")
    synth.add_argument("--seed", type=_optional_int, default=137, help="Random seed ('none' for random)")
    synth.add_argument("--digits", type=_optional_int, default=4,
                       help="Significant digits of the output ('none' for full precision)")
    synth.add_argument("-o", "--output", default=DEFAULT_DATA_PATH, help="Output CSV path")

    analyze = subparsers.add_parser("analyze", help="Fit pooled and grouped models")
    analyze.add_argument("-i", "--input", default=DEFAULT_DATA_PATH, help="Observation table CSV")
    analyze.add_argument("--plot", default=DEFAULT_PLOT_BASENAME, help="Chart path without .png")
    analyze.add_argument("--html", default=None, help="Also write an interactive HTML chart")
    analyze.add_argument("--method", choices=("trf", "lm"), default="trf", help="Least-squares algorithm")
    analyze.add_argument("--max-nfev", type=int, default=1000, help="Function-evaluation budget per fit")
    analyze.add_argument("--width", type=float, default=12.0, help="Chart width in inches")
    analyze.add_argument("--height", type=float, default=8.0, help="Chart height in inches")

    plot = subparsers.add_parser("plot", help="Plot the observations without fits")
    plot.add_argument("-i", "--input", default=DEFAULT_DATA_PATH, help="Observation table CSV")
    plot.add_argument("--plot", default="plots/synthdata", help="Chart path without .png")
    plot.add_argument("--width", type=float, default=12.0, help="Chart width in inches")
    plot.add_argument("--height", type=float, default=8.0, help="Chart height in inches")

    return parser


def run_synth(args: argparse.Namespace) -> int:
    kwargs = {}
    if args.params:
        kwargs['known_parameters'] = read_known_parameters(args.params)
    config = SynthesisConfig(
        tmax_factor=args.tmax_factor,
        nobs=args.nobs,
        noise_sd=args.noise_sd,
        seed=args.seed,
        significant_digits=args.digits,
        output_path=args.output,
        **kwargs
    )

    print("Table of the 'known' parameters:")
    print(format_known_parameters(config.known_parameters))

    simulator = FRAPSimulator(seed=config.seed)
    table = simulator.synthesize(
        config.known_parameters,
        tmax_factor=config.tmax_factor,
        nobs=config.nobs,
        noise_sd=config.noise_sd,
        significant_digits=config.significant_digits,
    )
    path = write_observation_table(table, config.output_path)
    LOGGER.info("Wrote %d x %d observations to %s", table.nobs, table.n_groups, path)
    print(f"Synthetic data written to {path}")
    return 0


def run_analyze(args: argparse.Namespace) -> int:
    config = AnalysisConfig(
        data_path=args.input,
        plot_basename=args.plot,
        html_path=args.html,
        method=args.method,
        max_nfev=args.max_nfev,
        plot_width=args.width,
        plot_height=args.height,
    )
    table = read_observation_table(config.data_path)
    print("Original data set:")
    print(head_tail(table.to_frame()))

    result = run_analysis(table, config)

    print("Rearranged (tidied) data set:")
    print(head_tail(result.tidy.to_frame()))
    print("Initial parameters, rough estimate:")
    print(format_parameter_set(result.start))
    print()
    print(format_fit_summary(result.pooled, title="Pooled fit"))
    print()
    print(format_fit_summary(result.grouped, title="Group-wise fit"))
    print()
    if result.comparison is not None:
        print(format_anova(result.comparison))
        print()
    print(format_model_selection(result.selection.to_frame()))
    print()
    parameter_table = result.grouped.parameter_table()
    print("Estimated parameter table:")
    print(format_parameter_table(parameter_table))

    figure = plot_recovery(result.tidy, parameter_table)
    png = save_png(figure, config.plot_basename, width=config.plot_width, height=config.plot_height)
    print(f"Look at the plot '{png}'")

    if config.html_path:
        html = save_html(plot_recovery_interactive(result.tidy, parameter_table), config.html_path)
        print(f"Interactive plot written to '{html}'")
    return 0


def run_plot(args: argparse.Namespace) -> int:
    table = read_observation_table(args.input)
    figure = plot_recovery(table.tidy())
    png = save_png(figure, args.plot, width=args.width, height=args.height)
    print(f"Look at the plot '{png}'")
    return 0


COMMANDS = {
    'synth': run_synth,
    'analyze': run_analyze,
    'plot': run_plot,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        return COMMANDS[args.command](args)
    except (FRAPAnalysisError, ValueError, OSError) as e:
        LOGGER.debug("Run aborted", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
