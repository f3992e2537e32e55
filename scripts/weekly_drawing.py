"""Admin command line for the weekly lucky draw.

Usage::

    python scripts/weekly_drawing.py stats
    python scripts/weekly_drawing.py register "Jane Doe" --contact "(555)123-4567"
    python scripts/weekly_drawing.py search jan
    python scripts/weekly_drawing.py sign-in 12
    python scripts/weekly_drawing.py lookup "jane"
    python scripts/weekly_drawing.py draw
    python scripts/weekly_drawing.py reset
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from luckydraw.db.engine import get_sessionmaker, make_engine
from luckydraw.drawing import DrawingResult
from luckydraw.stats import WeekStats, fetch_week_stats
from luckydraw.workflows import (
    lookup_number,
    register_patron,
    reset_weekly_drawing,
    run_weekly_drawing,
    search_patrons_with_status,
    sign_in_patron,
)


def format_stats(stats: WeekStats) -> str:
    lines = [
        f"Week {stats.week_number}: "
        + ("Drawing Complete" if stats.is_drawing_done else "Drawing Pending"),
    ]
    if stats.is_drawing_done:
        lines.append(f"New sign-ins go to Week {stats.effective_week}")
    lines.append(f"Sign-ins: {stats.sign_in_count}")
    lines.append(f"Prize pool: ${stats.prize_amount}")
    if stats.latest_drawing is not None:
        summary = stats.latest_drawing
        verdict = "winner" if summary.was_winner else "no winner"
        lines.append(
            f"Drawn: #{summary.drawn_number} ({summary.drawn_name}), {verdict}"
        )
    return "\n".join(lines)


def format_result(result: DrawingResult) -> str:
    """Render the three drawing outcomes as a title and a description."""
    patron = result.selected_patron
    if result.is_winner:
        return (
            "Winner Found!\n"
            f"Winner: {patron.name} (Number: {patron.assigned_number}) "
            f"takes ${result.prize_amount}"
        )
    if result.no_sign_ins:
        return (
            "No Sign-Ins This Week\n"
            f"Drawn patron #{patron.assigned_number} ({patron.name}) would have won "
            "if they had signed in. The prize will roll over."
        )
    return (
        "No Winner This Week\n"
        f"Drawn patron #{patron.assigned_number} ({patron.name}) did not sign in "
        "this week. The prize will roll over."
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weekly lucky draw administration.")
    parser.add_argument("--db-url", default=None, help="override DB_URL")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    stats = sub.add_parser("stats", help="show the current week")
    stats.add_argument("--json", action="store_true", help="print the snapshot as JSON")
    register = sub.add_parser("register", help="register and auto sign in a patron")
    register.add_argument("name")
    register.add_argument("--contact", default=None)
    search = sub.add_parser("search", help="search by number or name")
    search.add_argument("query")
    sign_in = sub.add_parser("sign-in", help="sign in a patron by id")
    sign_in.add_argument("patron_id", type=int)
    lookup = sub.add_parser("lookup", help="look up a patron's number by name")
    lookup.add_argument("name")
    sub.add_parser("draw", help="perform this week's drawing")
    sub.add_parser("reset", help="undo this week's drawing (development only)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )

    Session = get_sessionmaker(make_engine(args.db_url))
    try:
        with Session.begin() as session:
            if args.command == "stats":
                stats = fetch_week_stats(session)
                if args.json:
                    print(json.dumps(stats.to_dict(), indent=2))
                else:
                    print(format_stats(stats))
            elif args.command == "register":
                patron = register_patron(session, args.name, contact=args.contact)
                print(
                    f"Registered {patron.name}. Assigned number: "
                    f"{patron.assigned_number} (signed in for the next drawing)"
                )
            elif args.command == "search":
                hits = search_patrons_with_status(session, args.query)
                if not hits:
                    print("No matching patrons.")
                for hit in hits:
                    flag = " (already signed in)" if hit.is_already_signed_in else ""
                    print(
                        f"[{hit.patron.id}] #{hit.patron.assigned_number} "
                        f"{hit.patron.name}{flag}"
                    )
            elif args.command == "sign-in":
                record = sign_in_patron(session, args.patron_id)
                print(f"Signed in for week {record.week_number}.")
            elif args.command == "lookup":
                patron = lookup_number(session, args.name)
                print(f"{patron.name}: #{patron.assigned_number}")
            elif args.command == "draw":
                print(format_result(run_weekly_drawing(session)))
            elif args.command == "reset":
                stats = reset_weekly_drawing(session)
                print("The current week's drawing has been deleted.")
                print(format_stats(stats))
    except (ValueError, PermissionError, SQLAlchemyError) as exc:
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
