#!/usr/bin/env python3
"""
Print the current time (or a date difference) as JSON

Usage:
    python get_time.py [--timezone TZ] [--format FMT]
    python get_time.py --diff 2026-01-01 2026-03-01
"""

import argparse
import json
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def current_time(timezone=None, fmt="%Y-%m-%d %H:%M:%S"):
    timezone = timezone or os.environ.get("DATETIME_DEFAULT_TZ")
    try:
        tz = ZoneInfo(timezone) if timezone else None
    except ZoneInfoNotFoundError:
        return {"error": f"Invalid timezone: {timezone}"}
    now = datetime.now(tz)
    return {
        "datetime": now.strftime(fmt),
        "weekday": now.strftime("%A"),
        "iso_format": now.isoformat(),
        "timezone": timezone or "local",
    }


def date_diff(first, second):
    delta = date.fromisoformat(second) - date.fromisoformat(first)
    return {"from": first, "to": second, "days": delta.days}


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--timezone")
    parser.add_argument("--format", default="%Y-%m-%d %H:%M:%S")
    parser.add_argument("--diff", nargs=2, metavar=("FROM", "TO"))
    args = parser.parse_args()

    result = date_diff(*args.diff) if args.diff else current_time(args.timezone, args.format)
    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
