"""CLI entry point for the invoice settlement reconciliation job.

Repairs invoices whose stored paid flag disagrees with their splits, which can
happen when a settlement propagation write fails after the triggering write.

Usage:
    python -m propertyhub.cli.reconcile
    python -m propertyhub.cli.reconcile --invoice-id 42

Exit Codes:
    0 - Success: all candidate invoices reconciled
    1 - Failure: error encountered; invoices reconciled before it stay reconciled
"""

import argparse
import logging
import sys

from propertyhub.config import settings
from propertyhub.errors import AppError
from propertyhub.logging import LOG_LEVEL_MAP, setup_server_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="propertyhub-reconcile",
        description="Reconcile invoice paid flags with their splits",
    )
    parser.add_argument(
        "--invoice-id",
        type=int,
        default=None,
        help="Reconcile a single invoice instead of every candidate",
    )
    parser.add_argument(
        "--log-file",
        default=settings.log_file,
        help="Log file path (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVEL_MAP),
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the reconciliation CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)
    setup_server_logging(args.log_file, args.log_level)

    from propertyhub.database import SessionLocal
    from propertyhub.services.settlement_service import SettlementService

    db = SessionLocal()
    try:
        service = SettlementService(db)
        if args.invoice_id is not None:
            result = service.reconcile_invoice(args.invoice_id)
        else:
            result = service.reconcile_all()
        logger.info(
            "Reconciliation finished: checked=%d invoices_marked_paid=%d splits_marked_paid=%d",
            result.invoices_checked,
            result.invoices_marked_paid,
            result.splits_marked_paid,
        )
        return 0
    except AppError as e:
        logger.error("Reconciliation failed: %s", e.message)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
