"""One-time script: create the events and outbox tables."""
from __future__ import annotations

import asyncio
import logging

from score_publisher.config import settings
from score_publisher.infrastructure.db import models  # noqa: F401
from score_publisher.infrastructure.db.base import Base
from score_publisher.infrastructure.db.session import engine

logger = logging.getLogger(__name__)


async def create_schema() -> None:
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(
            "Created tables %s in database '%s'",
            ", ".join(sorted(Base.metadata.tables)),
            settings.POSTGRES_DB,
        )
    finally:
        await engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(create_schema())


if __name__ == "__main__":
    main()
