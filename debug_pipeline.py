import asyncio
from feedbeep.config import settings
from feedbeep.feeds_config import DEFAULT_TOPICS, DEFAULT_LANGUAGE
from feedbeep.services.logger import setup_logging
from feedbeep.workflows.pipeline import create_pipeline

async def main():
    print(">>> Starting Debug Pipeline Run...")
    pipeline = create_pipeline(settings)
    await pipeline.gate.store.init()

    print("--- Status ---")
    print((await pipeline.get_status()).model_dump_json(indent=2))

    print("\n--- Run ---")
    result = await pipeline.run_pipeline(DEFAULT_TOPICS, DEFAULT_LANGUAGE)
    print(result.model_dump_json(indent=2))

    print("\n--- Insights ---")
    for insight in pipeline.monitor.get_performance_insights():
        print(f"- {insight}")

    print("\n[OK] Run Complete.")

if __name__ == "__main__":
    setup_logging(settings)
    asyncio.run(main())
