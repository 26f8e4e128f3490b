#!/usr/bin/env python3
"""
Script to export the order ledger to XLSX.

Usage:
    python scripts/export_orders.py
    python scripts/export_orders.py --status nuevo --days 30 --output reports/
"""

import argparse
import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pedidobot.core.orders import Granularity, OrderLedger, OrderSearchCriteria, ledger_exporter, parse_status
from pedidobot.db.sqlite import db


async def main(status: str | None, days: int | None, output_dir: str | None) -> None:
    """Export matching orders with a summary sheet."""
    criteria = OrderSearchCriteria()
    if status:
        criteria.status = parse_status(status)
        if criteria.status is None:
            print(f"Error: Unknown status: {status}")
            sys.exit(1)
    if days:
        criteria.from_date = datetime.now() - timedelta(days=days)

    await db.init()
    ledger = OrderLedger(db)

    try:
        orders = await ledger.search(criteria)
        summary = await ledger.summarize(criteria)
        top = await ledger.top_products(10, criteria)
        monthly = await ledger.by_period(Granularity.MONTHLY, criteria)

        path = ledger_exporter.export(
            orders,
            summary,
            top,
            monthly,
            output_dir=Path(output_dir) if output_dir else None,
        )
        print(f"✅ Exported {len(orders)} orders to {path}")
    finally:
        await db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export orders to XLSX")
    parser.add_argument("--status", "-s", help="Only orders with this status", default=None)
    parser.add_argument("--days", "-d", type=int, help="Only orders from the last N days", default=None)
    parser.add_argument("--output", "-o", help="Output directory", default=None)

    args = parser.parse_args()
    asyncio.run(main(args.status, args.days, args.output))
