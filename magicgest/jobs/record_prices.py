"""
Price recording job.

Records today's price for every card in the collection on the requested
platforms, then evaluates price alerts. Meant to be run by cron or by hand;
it opens its own database connection.
"""

import argparse
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError

from magicgest.config import LOG_FORMAT, settings
from magicgest.db.database import Database
from magicgest.db.operations import check_alerts, record_collection_prices
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, PriceSource
from magicgest.models.price import BulkRecordResult

logger = logging.getLogger(__name__)


async def run_price_recording(
    database: Database,
    platforms: list[PriceSource] | None = None,
) -> dict[PriceSource, BulkRecordResult]:
    """
    Record collection prices for each platform, then check alerts.

    Each platform runs in its own transaction. A platform whose run fails is
    logged and left out of the results; the remaining platforms and the
    alert check still run.

    Args:
        database: Open database
        platforms: Platforms to record, defaults to Scryfall USD

    Returns:
        Recording counters per platform that completed
    """
    results: dict[PriceSource, BulkRecordResult] = {}

    for platform in platforms or [DEFAULT_PRICE_SOURCE]:
        try:
            async with database.session() as session:
                results[platform] = await record_collection_prices(session, platform)
        except SQLAlchemyError:
            logger.exception("Price recording failed for %s", platform.value)

    async with database.session() as session:
        checked, triggered = await check_alerts(session)
    logger.info("Checked %d alerts, %d triggered", checked, len(triggered))

    return results


async def _main(platforms: list[PriceSource]) -> None:
    database = Database(settings.database_url, echo=settings.debug)
    try:
        await database.create_all()
        await run_price_recording(database, platforms)
    finally:
        await database.dispose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Record collection prices and check alerts")
    parser.add_argument(
        "--platform",
        action="append",
        choices=[p.value for p in PriceSource],
        help="Price platform to record (repeatable, default scryfall_usd)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    platforms = [PriceSource(p) for p in args.platform or [DEFAULT_PRICE_SOURCE.value]]
    asyncio.run(_main(platforms))


if __name__ == "__main__":
    main()
