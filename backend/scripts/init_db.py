import sys
import os
import asyncio

# Ensure the pulsedesk package (backend/src) is importable when run from the repo root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))


async def main(seed: bool) -> None:
    # Imported late so a TEST_DATABASE_URL override reaches the settings
    from pulsedesk.logstore.seed import seed_if_empty
    from pulsedesk.logstore.session import init_db

    await init_db()
    if seed:
        await seed_if_empty()


if __name__ == "__main__":
    """Create the log store tables (and optionally seed sample conversations).

    Usage:
      TEST_DATABASE_URL="sqlite+aiosqlite:///./scratch.db" python backend/scripts/init_db.py --seed

    If TEST_DATABASE_URL is provided it will be used to override DATABASE_URL for this run.
    """
    test_db = os.environ.get("TEST_DATABASE_URL")
    if test_db:
        os.environ["DATABASE_URL"] = test_db
    asyncio.run(main("--seed" in sys.argv[1:]))
