# seed.py
import argparse
import asyncio
import logging

from app.core.database import db_helper
from app.services.achievement_catalog import seed_achievements

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def main(reset: bool) -> None:
    try:
        async with db_helper.session_factory() as session:
            created = await seed_achievements(session, reset=reset)
        logger.info(f"✅ Seed complete, {created} achievement(s) created")
    finally:
        await db_helper.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the achievement catalog")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="delete all achievements and user unlocks before seeding",
    )
    args = parser.parse_args()
    asyncio.run(main(args.reset))
