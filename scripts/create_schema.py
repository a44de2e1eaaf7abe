#!/usr/bin/env python3
"""
Create the VidSum tables in Snowflake.

Safe to re-run: every statement is CREATE TABLE IF NOT EXISTS.

Usage:
    python scripts/create_schema.py
    python scripts/create_schema.py --print   # show the DDL only

Requires:
    - .env file (or environment) with Snowflake credentials
"""

import sys
from pathlib import Path

# Make the vidsum package importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def main():
    import argparse

    from vidsum.config.settings import get_settings
    from vidsum.infrastructure.snowflake.client import SnowflakeConfig, get_snowflake_connection
    from vidsum.infrastructure.snowflake.schema import TABLES, create_schema

    parser = argparse.ArgumentParser(description='Create VidSum tables in Snowflake')
    parser.add_argument('--print', dest='print_only', action='store_true', help='Print DDL, don\'t execute')
    args = parser.parse_args()

    if args.print_only:
        for name, ddl in TABLES.items():
            print(f"-- {name}")
            print(ddl.strip() + ";\n")
        sys.exit(0)

    settings = get_settings()
    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    print(f"Creating tables in {config.database}.{config.schema}")

    try:
        with get_snowflake_connection(config) as conn:
            created = create_schema(conn)
    except Exception as e:
        print(f"ERROR creating schema: {e}")
        sys.exit(1)

    for name in created:
        print(f"[OK] {name}")

    sys.exit(0)


if __name__ == '__main__':
    main()
