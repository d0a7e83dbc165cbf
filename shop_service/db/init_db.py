# shop_service/db/init_db.py
from shop_service.db.database import engine, Base
from shop_service.db import models  # noqa: F401  registers every table on Base.metadata


async def init_db():
    async with engine.begin() as conn:
        # Создание всех таблиц
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    await engine.dispose()
