"""Inspect a configuration sheet without starting the API.

Loads the sheet from a local CSV export or a URL, recovers its tables and
prints the dashboard rows and the cards a segment would see.

Usage:
    python scripts/inspect_sheet.py --file data/sheet.csv
    python scripts/inspect_sheet.py --url https://... --segment "New User"
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.api.exceptions import CardSheetException
from src.ingest.grid_parser import parse_sheet_text
from src.ingest.sheet_fetcher import fetch_sheet_text_sync
from src.recommend.engine import (
    SEGMENT_ALL,
    administrative_view,
    card_benefits,
    card_priority,
    eligible_cards,
)


def main():
    parser = argparse.ArgumentParser(
        description="Recover the stacked tables of a configuration sheet and preview eligibility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Published sheet (CARDSHEET_CSV_URL or the default export)
  python scripts/inspect_sheet.py

  # Local export, preview for new users
  python scripts/inspect_sheet.py --file sheet.csv --segment "New User"
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--file",
        type=str,
        default=None,
        help="Path to a local CSV export"
    )
    source.add_argument(
        "--url",
        type=str,
        default=None,
        help="Sheet URL (default: CARDSHEET_CSV_URL or the published export)"
    )
    parser.add_argument(
        "--segment",
        type=str,
        default=SEGMENT_ALL,
        help="Viewer segment, matched exactly (default: All)"
    )

    args = parser.parse_args()

    if args.file:
        text = Path(args.file).read_text(encoding="utf-8-sig")
    else:
        try:
            text = fetch_sheet_text_sync(args.url)
        except CardSheetException as exc:
            print(f"Error loading configuration: {exc.message}")
            return 1

    tables = parse_sheet_text(text)

    print("=" * 60)
    print("Recovered tables")
    print("=" * 60)
    for name, count in tables.counts().items():
        print(f"  {name:<16} {count}")

    print("\nDashboard")
    print("-" * 60)
    rows = administrative_view(tables)
    if not rows:
        print("  No configurations found.")
    for row in rows:
        print(f"  {row.Config_ID:<10} {row.Partner_Name:<20} {row.Card_Title:<24} "
              f"prio={row.Priority:<4} {row.Status} ({row.User_Segment})")

    print(f"\nPreview for segment '{args.segment}'")
    print("-" * 60)
    cards = eligible_cards(tables, args.segment)
    if not cards:
        print("  No cards for this segment.")
    for card in cards:
        print(f"  [{card_priority(tables, card.Config_ID)}] {card.Config_ID} {card.Card_Title}")
        for benefit in card_benefits(card):
            print(f"      - {benefit}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
