#!/usr/bin/env python3
"""Expire stale pending orders and report ledger debits that have no order.

Redemption already rejects expired codes on its own; this sweep only keeps
abandoned pending orders from lingering. Run it from cron or a scheduler.
"""

from __future__ import annotations

import argparse
import logging

from kiosk.core.database import SessionLocal
from kiosk.core.logging import configure_logging
from kiosk.services.orders import expire_stale_orders, find_orphaned_debits


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expire stale kiosk orders and audit purchase debits.")
    parser.add_argument("--skip-expire", action="store_true", help="Do not expire stale pending orders")
    parser.add_argument("--skip-audit", action="store_true", help="Do not look for debits without an order")
    return parser


def main() -> int:
    args = build_parser().parse_args()
    configure_logging()
    logger = logging.getLogger("sweep_orders")

    db = SessionLocal()
    try:
        if not args.skip_expire:
            expired = expire_stale_orders(db)
            logger.info("Expired %s pending order(s).", expired)
        if not args.skip_audit:
            orphans = find_orphaned_debits(db)
            if orphans:
                logger.error("Found %s debit(s) without an order. Reconcile manually.", len(orphans))
                return 2
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
