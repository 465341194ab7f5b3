"""Mark overdue unjustified petty cash withdrawals as not closed.

Meant to run from cron, e.g. nightly::

    python -m scripts.reconcile_petty_cash --as-of 2024-06-01T00:00:00+00:00
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import UTC, datetime, timedelta

from pettycash.core.config import get_settings
from pettycash.db.session import dispose_engine, session_scope
from pettycash.services import petty_cash_service

logger = logging.getLogger("pettycash.reconcile")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp to evaluate ages against (default: now, UTC)",
    )
    parser.add_argument(
        "--window-days",
        type=int,
        default=None,
        help="Override PETTY_CASH_POLICY_WINDOW_DAYS",
    )
    return parser.parse_args()


async def main() -> None:
    args = _parse_args()
    as_of = args.as_of or datetime.now(UTC)
    window_days = args.window_days or get_settings().petty_cash_policy_window_days
    try:
        async with session_scope() as session:
            transitioned = await petty_cash_service.reconcile_overdue_withdrawals(
                session, as_of=as_of, policy_window=timedelta(days=window_days)
            )
    finally:
        await dispose_engine()
    logger.info("Sweep finished: %s withdrawal(s) marked not closed", len(transitioned))
    for withdrawal_id in transitioned:
        print(withdrawal_id)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    asyncio.run(main())
