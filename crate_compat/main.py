"""
crate-compat CLI.

Entry point: argument parsing, logging setup and dispatch to the analysis workflow.
Exit status is 0 when the check ran (whatever it found) and 1 when it failed.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from crate_compat import __version__
from crate_compat.core.config import LOG_LEVEL
from crate_compat.core.errors import CompatCheckError
from crate_compat.services.analysis_workflow import perform_check
from crate_compat.services.report_service import print_report

logger = logging.getLogger("crate_compat")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crate-compat",
        description="Report public API changes of a Rust library crate that break backward compatibility",
    )
    parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--dir", "-d",
        default=".",
        help="Path to working directory (default: .)",
    )
    parser.add_argument(
        "--oid", "-o",
        default=None,
        help="Git object id of the commit to compare against (default: HEAD)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, str(LOG_LEVEL).upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        report = perform_check(args.dir, args.oid)
    except CompatCheckError as e:
        logger.debug("Check aborted", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
