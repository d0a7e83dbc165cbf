# shop_service/db/functions/common.py
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shop_service.db.models import utcnow
from shop_service.errors import Conflict


def provided_fields(data: BaseModel) -> dict:
    """Fields the client actually sent; nulls are ignored."""
    return data.model_dump(exclude_unset=True, exclude_none=True)


def merge_fields(obj, fields: dict, stamp: bool = True):
    """Merge provided fields into an existing record and stamp updated_at."""
    for key, value in fields.items():
        setattr(obj, key, value)
    if stamp and hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return obj


async def commit_unique(db: AsyncSession, detail: str):
    """Commit, reporting a unique constraint hit as Conflict.

    Covers writes that race past the pre-insert uniqueness check.
    """
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(detail)


async def count_rows(db: AsyncSession, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.filter(*criteria)
    result = await db.execute(query)
    return result.scalar_one()
