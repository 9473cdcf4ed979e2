"""
Create the pdfchat tables directly from the ORM models (local development).

    uv run python -m scripts.create_tables
"""

import asyncio

from pdfchat.db.models import Base
from pdfchat.db.session import DATABASE_URL, engine


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print(f"Tables ready on {DATABASE_URL.rsplit('@', 1)[-1]}")


if __name__ == "__main__":
    asyncio.run(main())
