"""
CLI argument parsing for the precalculation command.

Every flag is optional; a bare ``dcprecalc`` runs all configured phases
with the packaged defaults.
"""

import argparse

from dcprecalc import VERSION
from dcprecalc.config import GAP_POLICY, PHASE_IDS

HELP_MESSAGES = {
    'description': (
        "Precompute benchmark results for the four datacenter simulation phases across the "
        "configured trace dates and write one phase{N}-results.json file per phase."
    ),
    'config_file': "Path to a YAML file merged over the packaged defaults (env: DCPRECALC_CONFIG)",
    'results_dir': "Directory for the phase result files (env: DCPRECALC_RESULTS_DIR)",
    'dataset_url': "Download URL of the trace dataset archive (env: DATASET_DOWNLOAD_URL)",
    'skip_dataset': "Do not check for or download the trace dataset before running phases",
    'phases': "Phases to run, in order. Example: '--phases 3 4' re-runs only the last two phases",
    'strict_gaps': "Fail a phase when any date has no metrics instead of leaving the date out",
    'what_if': "Print the resolved configuration and task list, then exit without running",
}


def add_pipeline_arguments(parser):
    """Add the pipeline configuration arguments.

    Args:
        parser: Argparse parser to add arguments to.
    """
    standard_args = parser.add_argument_group("Standard Arguments")
    standard_args.add_argument(
        '--config-file', '-c',
        type=str,
        help=HELP_MESSAGES['config_file']
    )
    standard_args.add_argument(
        '--results-dir', '-rd',
        type=str,
        help=HELP_MESSAGES['results_dir']
    )
    standard_args.add_argument(
        '--phases',
        type=int,
        nargs='+',
        choices=PHASE_IDS,
        help=HELP_MESSAGES['phases']
    )
    standard_args.add_argument(
        '--strict-gaps',
        action="store_true",
        help=HELP_MESSAGES['strict_gaps']
    )

    dataset_args = parser.add_argument_group("Dataset")
    dataset_args.add_argument(
        '--skip-dataset',
        action="store_true",
        help=HELP_MESSAGES['skip_dataset']
    )
    dataset_args.add_argument(
        '--dataset-url',
        type=str,
        help=HELP_MESSAGES['dataset_url']
    )


def add_output_arguments(parser):
    output_control = parser.add_argument_group("Output Control")
    output_control.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    output_control.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose mode"
    )
    output_control.add_argument(
        "--stream-log-level",
        type=str,
        help="Explicit stream log level (overrides --verbose/--debug levels)"
    )
    output_control.add_argument(
        "--what-if",
        action="store_true",
        help=HELP_MESSAGES['what_if']
    )


def parse_arguments(argv=None):
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = argparse.ArgumentParser(prog="dcprecalc", description=HELP_MESSAGES['description'])
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    add_pipeline_arguments(parser)
    add_output_arguments(parser)
    return parser.parse_args(argv)


def args_to_overrides(args) -> dict:
    """Turn the flags that were given into config overrides (highest priority)."""
    overrides = {}
    if getattr(args, "results_dir", None):
        overrides["results_dir"] = args.results_dir
    if getattr(args, "phases", None):
        overrides["phases"] = list(args.phases)
    if getattr(args, "strict_gaps", False):
        overrides["gap_policy"] = GAP_POLICY.STRICT.value
    if getattr(args, "skip_dataset", False):
        overrides["skip_dataset"] = True
    if getattr(args, "dataset_url", None):
        overrides["dataset"] = {"url": args.dataset_url}
    return overrides
