import os
from pathlib import Path

import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool

MIGRATION = (
    Path(__file__).resolve().parents[2]
    / "migrations"
    / "20250101_0000_verification_codes.sql"
)


@pytest.fixture(scope="session")
def database_url() -> str:
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL is not set")
    return url


@pytest_asyncio.fixture
async def pool(database_url):
    p = AsyncConnectionPool(database_url, min_size=1, max_size=4, open=False)
    await p.open(wait=True, timeout=30)
    async with p.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(MIGRATION.read_text(encoding="utf-8"))
            await cur.execute("TRUNCATE verification_codes;")
    try:
        yield p
    finally:
        await p.close()


@pytest_asyncio.fixture
async def seed(pool):
    async def _seed(code: str) -> str:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "INSERT INTO verification_codes (code) VALUES (%s) RETURNING id;",
                    (code,),
                )
                row = await cur.fetchone()
        return str(row[0])

    return _seed
