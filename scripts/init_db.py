"""Create the remote-store schema and seed default settings.

Usage:
    python -m scripts.init_db
    python -m scripts.init_db --no-seed
"""

import argparse
import asyncio

from blogdesk.core.database import async_session_factory, create_tables, engine
from blogdesk.services.model_catalogue import DEFAULT_GENERAL_MODEL, DEFAULT_SVG_MODEL
from blogdesk.services.persistence_gateway import (
    SETTING_GENERAL_AI,
    SETTING_SVG_AI,
    PersistenceGateway,
)


async def init_db(seed: bool) -> None:
    """Create every table; optionally store default model settings if unset."""
    if engine is None:
        print("DATABASE_URL is not set; nothing to initialise.")
        return

    await create_tables(engine)
    print("Tables created.")

    if seed:
        gateway = PersistenceGateway(async_session_factory)
        for key, default in (
            (SETTING_GENERAL_AI, DEFAULT_GENERAL_MODEL),
            (SETTING_SVG_AI, DEFAULT_SVG_MODEL),
        ):
            current = await gateway.get_setting(key, "")
            if current:
                print(f"Setting '{key}' already set to '{current}'.")
                continue
            await gateway.save_setting(key, default)
            print(f"Setting '{key}' = '{default}'.")

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Initialise the remote store")
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Skip seeding default model settings",
    )
    args = parser.parse_args()

    asyncio.run(init_db(seed=not args.no_seed))


if __name__ == "__main__":
    main()
