"""
Data Loader Script - imports a JSON file of students through the API,
or downloads the current export.

Each entry is sent as its own create request; rejected entries are
reported and the rest still load.

Usage:
    students-import students.json                               # default URL
    students-import students.json --url http://localhost:3000
    students-import --export backup.json --url http://backend:3000
"""

import argparse
import json
import os
import sys

import httpx

from students_api.client import StudentsClient
from students_api.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Import or export student records.")
    parser.add_argument("file", nargs="?", help="JSON array of students to import")
    parser.add_argument("--url", default=os.getenv("API_URL", "http://localhost:3000"),
                        help="API base URL (default: $API_URL or http://localhost:3000)")
    parser.add_argument("--export", metavar="PATH", help="write the export to PATH instead of importing")
    return parser


def load_items(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError("expected a JSON array of students")
    return items


def run_export(client: StudentsClient, path: str) -> int:
    records = client.export_students()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2)
    print(f"Exported {len(records)} students to {path}")
    return 0


def run_import(client: StudentsClient, path: str) -> int:
    try:
        items = load_items(path)
    except (OSError, ValueError) as e:
        print(f"Import failed: {e}")
        return 1

    print(f"Found {len(items)} students to import")
    print()

    summary = client.import_students(items)

    print("=" * 60)
    print("IMPORT SUMMARY")
    print("=" * 60)
    print(f"  Total:    {summary.total}")
    print(f"  Created:  {summary.created}")
    print(f"  Failed:   {summary.failed}")
    print("=" * 60)
    print()

    for d in summary.details:
        if d["status"] == "CREATED":
            print(f"  ✅ #{d['index']}: created ({d['id']})")
        else:
            print(f"  ❌ #{d['index']}: {'; '.join(d['errors'])}")

    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if not args.file and not args.export:
        print("Nothing to do: pass a file to import or --export PATH")
        return 1

    setup_logging()
    with StudentsClient(base_url=args.url) as client:
        try:
            if args.export:
                return run_export(client, args.export)
            return run_import(client, args.file)
        except httpx.HTTPError as e:
            print(f"Request failed: {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
