#!/usr/bin/env python3
"""
Recompute the derived health services of every clinic.

Cascades are not transactional, so a request that failed halfway can
leave a clinic's health services out of step with its doctors.
Recomputation is idempotent; running this script after the fact brings
every clinic back in line.

Usage:
    python recompute_clinics.py --db ./clinic_directory.db
"""

import argparse
import asyncio
import logging
import os
import sys

from clinic_directory_api.app.core.db import init_db
from clinic_directory_api.app.core.logging_config import setup_logging
from clinic_directory_api.app.services import build_services

logger = logging.getLogger("recompute_clinics")

PAGE_SIZE = 500


async def recompute_all(database_path: str) -> int:
    """Recompute every clinic in ``database_path`` and return how many were processed."""
    services = build_services(database_path)
    processed = 0
    offset = 0
    while True:
        clinics = await services.clinics.list_clinics(limit=PAGE_SIZE, offset=offset)
        if not clinics:
            break
        for clinic in clinics:
            await services.clinics.recompute_health_services(clinic.id)
            processed += 1
        offset += PAGE_SIZE
    logger.info("Recomputed %d clinics", processed)
    return processed


def main() -> None:
    ap = argparse.ArgumentParser(description="Recompute clinic health services.")
    ap.add_argument("--db", required=True, help="Path to the SQLite database file")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    setup_logging(args.log_level)
    database_path = os.path.abspath(args.db)
    init_db(database_path)
    count = asyncio.run(recompute_all(database_path))
    print(f"[+] Recomputed {count} clinics")


if __name__ == "__main__":
    main()
