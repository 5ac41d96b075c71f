"""
Seed CLI

    python -m saas_console.seeds [all|permissions|plans|admin]
"""
import argparse
import logging
import sys

from saas_console.config import get_settings
from saas_console.database import SessionLocal, init_db
from saas_console.seeds import run_all, seed_admin, seed_permissions, seed_plans
from saas_console.utils.logging import setup_logging

logger = logging.getLogger("saas_console.seeds")

SEEDERS = {
    "all": run_all,
    "permissions": seed_permissions,
    "plans": seed_plans,
    "admin": seed_admin,
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m saas_console.seeds",
        description="Bootstrap permissions, plans and the super admin account"
    )
    parser.add_argument(
        "target",
        nargs="?",
        default="all",
        choices=sorted(SEEDERS),
        help="What to seed (default: all)"
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override LOG_LEVEL"
    )
    return parser


def main(argv=None) -> int:
    args = create_parser().parse_args(argv)
    setup_logging(args.log_level or get_settings().LOG_LEVEL)

    if args.create_tables:
        init_db()

    db = SessionLocal()
    try:
        SEEDERS[args.target](db)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Seeding '{args.target}' failed: {e}", exc_info=True)
        return 1
    finally:
        db.close()

    logger.info(f"Seeding '{args.target}' finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
