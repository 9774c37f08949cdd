"""AgriMarket database management CLI.

Creates or drops the schema of every bounded context in the database named by
the active settings (``MARKET_ENV`` / ``MARKET_DATABASE_URI``).

Usage:
    python src/manage.py setup-db              # Create all tables
    python src/manage.py drop-db               # Drop all tables
    python src/manage.py setup-db --env test   # Use the [test] settings
"""

import argparse
import sys


def _database(env=None):
    # Importing the aggregates registers their tables on the shared metadata
    import catalogue.product.product  # noqa: F401
    import identity.account.account  # noqa: F401
    import ordering.order.order  # noqa: F401
    from shared.config import load_settings
    from shared.database import Database

    settings = load_settings(env)
    return settings, Database(settings.database_uri)


def setup_database(env=None):
    """Create every table that does not exist yet."""
    settings, database = _database(env)
    print(f"Creating schema in {settings.env} database...")
    database.create_all()
    database.dispose()
    print("Done.")


def drop_database(env=None):
    """Drop every table known to the application."""
    settings, database = _database(env)
    print(f"Dropping schema in {settings.env} database...")
    database.drop_all()
    database.dispose()
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="AgriMarket database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--env",
            choices=["development", "test", "production"],
            help="Settings overlay to use (default: MARKET_ENV or development)",
        )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.env)
    elif args.command == "drop-db":
        drop_database(args.env)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
