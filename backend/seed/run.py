#!/usr/bin/env python3
"""Create the sample customers table and stored procedure.

Usage:
    python -m seed.run [--clear]
"""

import argparse
import asyncio
import sys

import psycopg

from core.config import AppConfig, DatabaseConfig
from seed.customers import clear_customers, seed_customers


async def seed(database: DatabaseConfig, clear: bool = False) -> None:
    async with await psycopg.AsyncConnection.connect(
        database.conninfo, autocommit=True
    ) as conn:
        if clear:
            await clear_customers(conn, database.procedure)
        await seed_customers(conn, database.procedure)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--clear",
        action="store_true",
        help="drop the seeded rows and procedure first",
    )
    args = parser.parse_args(argv)

    database = AppConfig.load().database
    if not database.configured:
        print("Error: No database configured (set DB_SERVER)")
        return 1

    print(f"Seeding {database.host}/{database.name}")
    asyncio.run(seed(database, clear=args.clear))
    return 0


if __name__ == "__main__":
    sys.exit(main())
