# shop_service/db/functions/references.py
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.errors import ValidationError, NotFound, InvalidReference


def is_valid_id(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def check_id(value, label: str) -> str:
    if not is_valid_id(value):
        raise ValidationError(f"Invalid {label} ID format")
    return value


async def get_or_404(db: AsyncSession, model, object_id, label: str):
    """Load the target of a read/update/delete by id."""
    check_id(object_id, label)
    obj = await db.get(model, object_id)
    if obj is None:
        raise NotFound(f"{label.capitalize()} not found")
    return obj


async def resolve_reference(db: AsyncSession, model, object_id, label: str):
    """Validate a foreign id embedded in a write and make sure it exists."""
    check_id(object_id, label)
    obj = await db.get(model, object_id)
    if obj is None:
        raise InvalidReference(f"{label.capitalize()} not found")
    return obj
