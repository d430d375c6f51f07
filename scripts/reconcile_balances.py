#!/usr/bin/env python3
"""Leave balance reconciliation — recompute used_days from approved requests.

Approval does not debit the balance at decision time. Run this periodically
(e.g. nightly via cron) to bring ``leave_balances.used_days`` in line with
the approved requests starting in the target year.

Usage:
    python -m scripts.reconcile_balances                 # current year
    python -m scripts.reconcile_balances --year 2025
    python -m scripts.reconcile_balances --dry-run       # compute, then roll back

Requires in .env (project root) or the environment:
    DATABASE_URL, JWT_SECRET
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# ── Path setup ────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from backend.database import async_session_factory, engine  # noqa: E402
from backend.leave.service import LeaveService  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("reconcile_balances")


async def run(year: Optional[int], dry_run: bool) -> int:
    async with async_session_factory() as session:
        try:
            result = await LeaveService.reconcile_used_days(session, year)
            if dry_run:
                await session.rollback()
                logger.info("Dry run — changes rolled back.")
            else:
                await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Reconciliation failed")
            return 1
        finally:
            await engine.dispose()

    logger.info(
        "Year %d: %d balance(s) updated, %d created.",
        result.year, result.balances_updated, result.balances_created,
    )
    return 0


# ══════════════════════════════════════════════════════════════════════
# Main
# ══════════════════════════════════════════════════════════════════════

def main():
    parser = argparse.ArgumentParser(
        description="Recompute leave_balances.used_days from approved leave requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--year", type=int, default=None,
                        help="Leave year (default: current year in the app timezone)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Compute and log, but roll back instead of committing")
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args.year, args.dry_run)))


if __name__ == "__main__":
    main()
