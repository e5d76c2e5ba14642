#!/usr/bin/env python3
"""Create the default administrator account.

The HTTP seeding route is disabled in production; run this against the
production database instead:

    DATABASE_URL=postgresql://... python scripts/create_admin.py --migrate

Exits 0 when the admin was created or already existed, 1 on errors.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from structlog import get_logger

from signflow.bootstrap.database import apply_migrations, close_database_engine
from signflow.bootstrap.services import get_user_admin_service
from signflow.config.settings import get_settings
from signflow.domain.exceptions import SignflowError
from signflow.infrastructure.observability import configure_structlog

logger = get_logger()


async def seed(migrate: bool = False) -> int:
    service = get_user_admin_service()
    try:
        if migrate:
            applied = await apply_migrations()
            print(f"Migrations applied: {', '.join(applied) or 'none'}")
        user, created = await service.seed_admin()
    except SignflowError as e:
        logger.error("admin_seed_failed", error=e.message)
        return 1
    finally:
        await close_database_engine()

    if created:
        print(f"Admin user created: {user.email}")
        print("Change the default password after the first sign-in.")
    else:
        print(f"Admin user already exists: {user.email}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--allow-memory",
        action="store_true",
        help="Run without DATABASE_URL (in-memory store, for smoke tests)",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply migrations/*.sql before seeding",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_structlog(environment=settings.environment)
    if not settings.database_url and (args.migrate or not args.allow_memory):
        print("DATABASE_URL is not set; refusing to seed an in-memory store.", file=sys.stderr)
        return 1
    return asyncio.run(seed(migrate=args.migrate))


if __name__ == "__main__":
    sys.exit(main())
