import asyncio
import sys

from feedbeep.config import settings, validate_config
from feedbeep.feeds_config import SCHEDULED_TOPICS, DEFAULT_LANGUAGE
from feedbeep.services.logger import logger, setup_logging
from feedbeep.workflows.pipeline import create_pipeline


async def run_scheduled():
    validate_config(settings)
    pipeline = create_pipeline(settings)
    await pipeline.gate.store.init()
    result = await pipeline.run_pipeline(SCHEDULED_TOPICS, DEFAULT_LANGUAGE)
    logger.info(
        f"Scheduled run finished: fetched={result.total_fetched} processed={result.processed} "
        f"saved={result.saved} duplicates={result.duplicates} errors={len(result.errors)}"
    )
    return result


def main():
    setup_logging(settings)
    try:
        asyncio.run(run_scheduled())
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
