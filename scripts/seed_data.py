"""Seed script for the fuel ledger database.

Seeds roles and the default users, and optionally a week of demo stock
movements for both sites.
Run: python -m scripts.seed_data [--demo]
"""

import argparse
import asyncio
from datetime import timedelta
from decimal import Decimal
from random import randint, uniform

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fuel_ledger.config import get_settings
from fuel_ledger.dependencies import create_engine, create_session_factory
from fuel_ledger.models.base import utc_now
from fuel_ledger.models.transaction import Transaction, TransactionType
from fuel_ledger.models.user import LEDGER_SITES
from fuel_ledger.repositories.user_repository import UserRepository
from fuel_ledger.services.seed import seed_default_users
from fuel_ledger.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

DEMO_DAYS = 7


async def seed_demo_transactions(session: AsyncSession) -> int:
    """Add one delivery per site and daily usage over the last week.

    Skipped when the ledger already has transactions.
    """
    existing = (await session.execute(select(func.count()).select_from(Transaction))).scalar()
    if existing:
        logger.info("Ledger already has %d transactions, skipping demo data", existing)
        return 0

    users = UserRepository(session)
    admin = await users.get_by_email("admin@example.com")
    operator = await users.get_by_email("op@example.com")
    now = utc_now()
    count = 0

    for site in sorted(LEDGER_SITES):
        session.add(
            Transaction(
                type=TransactionType.IN.value,
                amount=Decimal("5000.00"),
                category=site.value,
                timestamp=now - timedelta(days=DEMO_DAYS),
                description="Initial delivery",
                user_id=admin.id if admin else None,
            )
        )
        count += 1

        for days_ago in range(DEMO_DAYS - 1, -1, -1):
            session.add(
                Transaction(
                    type=TransactionType.OUT.value,
                    amount=Decimal(str(round(uniform(50, 400), 2))),
                    category=site.value,
                    timestamp=now - timedelta(days=days_ago, hours=randint(1, 6)),
                    description=f"Daily usage {site.value}",
                    user_id=operator.id if operator and operator.site == site else None,
                )
            )
            count += 1

    await session.commit()
    logger.info("Created %d demo transactions", count)
    return count


async def main(demo: bool) -> None:
    """Run all seed steps."""
    settings = get_settings()
    setup_logging(settings.log_level)

    engine = create_engine(settings)
    session_factory = create_session_factory(engine)

    async with session_factory() as session:
        logger.info("Seeding roles and default users...")
        await seed_default_users(session, settings)

        if demo:
            logger.info("Seeding demo transactions...")
            await seed_demo_transactions(session)

    await engine.dispose()
    logger.info("Seeding complete!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--demo", action="store_true", help="also add demo stock movements")
    args = parser.parse_args()
    asyncio.run(main(args.demo))
