#!/usr/bin/env python3
"""
Precalculation - Main Entry Point

Loads the configuration, runs the pipeline and turns the report into an
exit code. Failures are classified by ErrorKind, never by message text.
"""

import signal
import sys

import yaml

from dcprecalc.cli_parser import args_to_overrides, parse_arguments
from dcprecalc.config import DCP_DEBUG, EXIT_CODE, load_config
from dcprecalc.dcp_logging import apply_logging_options, setup_logging
from dcprecalc.error_messages import ErrorFormatter, format_error
from dcprecalc.errors import ConfigurationError, ErrorKind, PrecalcException
from dcprecalc.pipeline import PrecalculationPipeline
from dcprecalc.progress import is_interactive_terminal

logger = setup_logging("DCPrecalc")
signal_received = False

KIND_EXIT_CODES = {
    ErrorKind.CONFIGURATION: EXIT_CODE.CONFIG_ERROR,
    ErrorKind.TRANSPORT: EXIT_CODE.TRANSPORT_ERROR,
    ErrorKind.VALIDATION: EXIT_CODE.VALIDATION_ERROR,
    ErrorKind.COLLABORATOR: EXIT_CODE.COLLABORATOR_ERROR,
}


def signal_handler(sig, frame):
    """Handle SIGINT and SIGTERM.

    The first signal lets the running task finish and stops before the next
    one; a second signal aborts immediately.
    """
    global signal_received

    signal_name = signal.Signals(sig).name
    if signal_received:
        logger.warning(f"Received signal {signal_name} ({sig}) again, aborting")
        raise KeyboardInterrupt
    logger.warning(f"Received signal {signal_name} ({sig}), stopping after the current task")
    signal_received = True


def exit_code_for(kind) -> EXIT_CODE:
    return KIND_EXIT_CODES.get(kind, EXIT_CODE.FAILURE)


def show_what_if(config, pipeline):
    logger.status("Resolved configuration:\n" + yaml.safe_dump(config.as_dict(), sort_keys=False))
    for task in pipeline.build_tasks():
        logger.status(f"Would run: {task.title}")


def _main_impl(argv=None):
    """
    Main implementation with error handling.

    This is the actual implementation of main(), separated out
    so that main() can wrap it with exception handling.
    """
    global signal_received
    signal_received = False
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_arguments(argv)
    apply_logging_options(logger, args)

    config = load_config(args.config_file, overrides=args_to_overrides(args))
    pipeline = PrecalculationPipeline(
        config,
        logger=logger,
        formatter=ErrorFormatter(use_colors=is_interactive_terminal()),
        stop_requested=lambda: signal_received,
    )

    if args.what_if:
        show_what_if(config, pipeline)
        return EXIT_CODE.SUCCESS

    report = pipeline.run_all()
    if report.success:
        return EXIT_CODE.SUCCESS
    if report.interrupted:
        return EXIT_CODE.INTERRUPTED
    return exit_code_for(report.error_kind)


def main(argv=None):
    """
    Main entry point with comprehensive error handling.

    This function wraps _main_impl() to catch and handle all
    exceptions with user-friendly error messages.
    """
    try:
        return _main_impl(argv)

    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CODE.CONFIG_ERROR

    except PrecalcException as e:
        logger.error(str(e))
        return exit_code_for(e.kind)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_CODE.INTERRUPTED

    except SystemExit:
        raise

    except Exception as e:
        logger.error(format_error('INTERNAL_ERROR', error=str(e)))
        if DCP_DEBUG or "--debug" in (argv if argv is not None else sys.argv):
            logger.error("Stack trace:", exc_info=e)
        return EXIT_CODE.FAILURE


if __name__ == "__main__":
    sys.exit(main())
