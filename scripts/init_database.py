#!/usr/bin/env python3
"""
Create storefront tables (packages, orders, settings) and seed the default
package catalogue when it is empty.

Uses DATABASE_URL environment variable. Does NOT drop existing tables.
"""

from __future__ import annotations
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

# Make sure src is on sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from src.database.seed import default_packages
from src.database.storage import StorefrontDB


def main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    try:
        db = StorefrontDB(url)

        with db.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")

        # Only missing tables are created
        db.create_tables()
        tables = inspect(db.engine).get_table_names()
        print("✅ App tables now exist:", sorted(tables))

        inserted = db.seed_packages(default_packages())
        print(f"✅ Seeded {inserted} packages" if inserted else "ℹ️  Packages already present; seed skipped")
        return 0

    except OperationalError as e:
        print(f"❌ Failed to connect to database: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
