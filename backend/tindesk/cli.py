# backend/tindesk/cli.py
"""
Command-line trigger for valuation runs (operators, cron, schedulers).

    python backend/scripts/run_valuation.py monthly --date 2026-03-31
    python backend/scripts/run_valuation.py daily

Prints the stored record (with per-position breakdown) as JSON on stdout;
log lines go to stderr so stdout can be parsed as-is.
Exit status: 0 on success, 1 when the run was rejected or failed (the
reason goes to stderr).
"""

import argparse
import logging
import sys
from collections.abc import Callable
from datetime import date

from sqlalchemy.orm import Session

from tindesk.schemas.valuation import DailyValuationResponse, MonthlyValuationResponse
from tindesk.services.exceptions import ServiceError
from tindesk.services.valuation import ValuationService, VALID_CYCLES
from tindesk.services.valuation.types import MonthlyValuationResult
from tindesk.utils import correlation_scope, setup_logging
from tindesk.utils.logging import LOG_LEVELS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run_valuation",
        description="Run a mark-to-market valuation of the tin book",
    )
    parser.add_argument("type", choices=VALID_CYCLES, help="Valuation cycle to run")
    parser.add_argument(
        "--date",
        dest="valuation_date",
        default=None,
        help="Valuation date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=list(LOG_LEVELS),
        default=None,
        help="Override LOG_LEVEL",
    )
    return parser


def main(
        argv: list[str] | None = None,
        session_factory: Callable[[], Session] | None = None,
        service: ValuationService | None = None,
) -> int:
    """
    Run one valuation and report it.

    Args:
        argv: Arguments (default: sys.argv[1:])
        session_factory: Creates the run's Session (default: SessionLocal)
        service: Valuation service (default: a new ValuationService)

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    try:
        setup_logging(level=args.log_level, stream=sys.stderr)
    except ValueError as e:
        # LOG_LEVEL from the environment; --log-level is checked by the parser
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILED

    if session_factory is None:
        from tindesk.database import SessionLocal
        session_factory = SessionLocal
    service = service or ValuationService()
    valuation_date = args.valuation_date or date.today()

    with correlation_scope() as run_id:
        logger.info(f"CLI {args.type} valuation requested (run {run_id})")
        db = session_factory()
        try:
            result = service.run_valuation(db, args.type, valuation_date)
        except ServiceError as e:
            logger.error(f"{args.type.capitalize()} valuation failed: {e}")
            print(f"error: {type(e).__name__}: {e}", file=sys.stderr)
            return EXIT_FAILED
        finally:
            db.close()

    if isinstance(result, MonthlyValuationResult):
        response = MonthlyValuationResponse.from_result(result)
    else:
        response = DailyValuationResponse.from_result(result)
    print(response.model_dump_json(indent=2))
    return EXIT_OK
