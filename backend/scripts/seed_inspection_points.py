#!/usr/bin/env python
"""Seed the default refuge bay door checklist.

Does nothing when inspection points already exist.

Usage:
    python backend/scripts/seed_inspection_points.py
"""

from inspex.database import get_db_session
from inspex.inspection_points.seed import seed_inspection_points


def main():
    with get_db_session() as session:
        added = seed_inspection_points(session)
    print(f"Inspection points added: {added}")


if __name__ == "__main__":
    main()
