"""
Database bootstrap script.

Applies schema.sql to the database named by DATABASE_URL, then checks that
every table the services query actually exists.

Usage:
    python -m event_platform.database.init_db
"""

import os
import sys

import psycopg2
from dotenv import load_dotenv

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.sql")

TABLES = [
    "users",
    "cities",
    "postal_codes",
    "locations",
    "organizers",
    "events",
    "organize",
    "register",
]


def apply_schema(conn) -> None:
    with open(SCHEMA_PATH, encoding="utf-8") as f:
        ddl = f.read()
    with conn.cursor() as cur:
        cur.execute(ddl)
    conn.commit()


def missing_tables(conn) -> list:
    """
    Return the names of expected tables that are absent.
    """
    missing = []
    with conn.cursor() as cur:
        for t in TABLES:
            cur.execute("SELECT to_regclass(%s);", (t,))
            if cur.fetchone()[0] is None:
                missing.append(t)
    return missing


def main() -> int:
    load_dotenv()
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("DATABASE_URL is not set. Please set the environment variable.")
        return 1

    print("--- Initializing database ---")
    conn = psycopg2.connect(database_url)
    try:
        apply_schema(conn)
        print("Schema applied.")

        print("\nChecking if critical tables exist...")
        missing = missing_tables(conn)
        for t in TABLES:
            print(f" - {t}: {'MISSING' if t in missing else 'Found'}")
    except psycopg2.Error as e:
        conn.rollback()
        print(f"\nDatabase init FAILED: {e}")
        return 1
    finally:
        conn.close()

    if missing:
        print("\nOne or more critical tables are missing.")
        return 1

    print("\nDatabase ready.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
