# shop_service/db/functions/addresses.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shop_service.db.functions.common import provided_fields, merge_fields
from shop_service.db.functions.references import get_or_404, resolve_reference
from shop_service.db.functions.users import get_user_by_id
from shop_service.db.models import Address, Billing, User, new_id, utcnow
from shop_service.db.schemas import AddressCreate, AddressUpdate, BillingCreate
from shop_service.errors import Conflict, NotFound

logger = logging.getLogger(__name__)

MIRRORED_FIELDS = ("street_address", "city", "state", "postal_code", "country")


async def mirror_address_to_billing(db: AsyncSession, address: Address):
    """Copy a default address into the user's existing Billing record.

    Never creates a Billing record. Does not commit; the caller's commit
    covers both writes.
    """
    result = await db.execute(select(Billing).filter(Billing.user_id == address.user_id))
    billing = result.scalars().first()
    if billing is None:
        logger.info("no billing record to mirror into", extra={"user_id": address.user_id})
        return None

    for field in MIRRORED_FIELDS:
        setattr(billing, field, getattr(address, field))
    billing.updated_at = utcnow()
    return billing


async def _make_only_default(db: AsyncSession, address: Address):
    others = await db.execute(
        select(Address).filter(Address.user_id == address.user_id, Address.id != address.id,
                               Address.is_default.is_(True))
    )
    for other in others.scalars().all():
        other.is_default = False


async def get_user_addresses(db: AsyncSession, user_id: str):
    await get_user_by_id(db, user_id)
    result = await db.execute(
        select(Address).filter(Address.user_id == user_id).order_by(Address.created_at.desc())
    )
    return result.scalars().all()


async def create_address(db: AsyncSession, user_id: str, data: AddressCreate):
    user = await get_user_by_id(db, user_id)

    address = Address(id=new_id(), user_id=user.id, **data.model_dump())
    db.add(address)

    # новый адрес становится текущим адресом пользователя
    user.address_id = address.id
    user.updated_at = utcnow()

    if address.is_default:
        await _make_only_default(db, address)
        await mirror_address_to_billing(db, address)

    await db.commit()
    await db.refresh(address)
    return address


async def _get_user_address(db: AsyncSession, user: User, address_id: str):
    address = await get_or_404(db, Address, address_id, "address")
    if address.user_id != user.id:
        raise NotFound("Address not found")
    return address


async def update_address(db: AsyncSession, user_id: str, address_id: str, data: AddressUpdate):
    """Returns None when the request carried no fields to update."""
    user = await get_user_by_id(db, user_id)
    address = await _get_user_address(db, user, address_id)

    fields = provided_fields(data)
    if not fields:
        return None

    # зеркалим только при переходе false -> true
    becomes_default = fields.get("is_default") is True and not address.is_default
    merge_fields(address, fields)
    if becomes_default:
        user.address_id = address.id
        await _make_only_default(db, address)
        await mirror_address_to_billing(db, address)

    await db.commit()
    await db.refresh(address)
    return address


async def delete_address(db: AsyncSession, user_id: str, address_id: str):
    user = await get_user_by_id(db, user_id)
    address = await _get_user_address(db, user, address_id)

    if user.address_id == address.id:
        user.address_id = None
        user.updated_at = utcnow()

    await db.delete(address)
    await db.commit()
    return address


# Платёжные адреса
async def get_all_billings(db: AsyncSession):
    result = await db.execute(select(Billing).order_by(Billing.created_at.desc()))
    return result.scalars().all()


async def get_billing_by_user(db: AsyncSession, user_id: str):
    await get_user_by_id(db, user_id)
    result = await db.execute(select(Billing).filter(Billing.user_id == user_id))
    billing = result.scalars().first()
    if billing is None:
        raise NotFound("Billing address not found")
    return billing


async def create_billing(db: AsyncSession, data: BillingCreate):
    await resolve_reference(db, User, data.user_id, "user")
    existing = await db.execute(select(Billing).filter(Billing.user_id == data.user_id))
    if existing.scalars().first():
        raise Conflict("Billing address already exists for this user")

    billing = Billing(**data.model_dump())
    db.add(billing)
    await db.commit()
    await db.refresh(billing)
    return billing


async def sync_billing_with_default_address(db: AsyncSession, user_id: str):
    """Re-copy the user's default address into their Billing record.

    Idempotent. Returns the Billing record, or None when either the default
    address or the Billing record is missing.
    """
    await get_user_by_id(db, user_id)
    result = await db.execute(
        select(Address)
        .filter(Address.user_id == user_id, Address.is_default.is_(True))
        .order_by(Address.updated_at.desc())
    )
    address = result.scalars().first()
    if address is None:
        return None

    billing = await mirror_address_to_billing(db, address)
    if billing is not None:
        await db.commit()
        await db.refresh(billing)
    return billing
