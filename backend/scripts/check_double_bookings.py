#!/usr/bin/env python3
"""
One-off check: list confirmed bookings that share a table at overlapping times on a date.
Run: cd backend && poetry run python scripts/check_double_bookings.py --restaurant-id 1 --date 2025-06-13 [--with-buffer]
"""
import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from booking_engine.core.assignment_config import get_assignment_config
from booking_engine.services.availability.conflicts import detect_double_bookings
from booking_engine.services.storage.sqlalchemy_store import SqlAlchemyBookingStore


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--restaurant-id", type=int, required=True)
    parser.add_argument("--date", type=date.fromisoformat, required=True, help="YYYY-MM-DD")
    parser.add_argument("--with-buffer", action="store_true", help="Apply the turnover buffer as the assigner does")
    args = parser.parse_args()

    config = get_assignment_config()
    bookings = asyncio.run(SqlAlchemyBookingStore().get_bookings_for_date(args.restaurant_id, args.date))
    found = detect_double_bookings(
        bookings,
        buffer_minutes=config.buffer_minutes if args.with_buffer else 0,
        default_duration_minutes=config.default_duration_minutes,
    )
    print(f"=== {args.date} restaurant {args.restaurant_id} ===")
    print(f"Bookings: {len(bookings)}  Double bookings: {len(found)}")
    for c in found[:50]:
        print(f"  table={c.table_id} bookings={c.first_booking_id},{c.second_booking_id} overlap={c.overlap}")
    if len(found) > 50:
        print(f"  ... and {len(found) - 50} more")
    sys.exit(1 if found else 0)


if __name__ == "__main__":
    main()
