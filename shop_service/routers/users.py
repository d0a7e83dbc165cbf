# shop_service/routers/users.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import addresses, users
from shop_service.db.schemas import (
    UserUpdate, UserOut, AddressCreate, AddressUpdate, AddressOut, BillingCreate, BillingOut,
)
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

users_router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(enforce_route_policy)])
address_router = APIRouter(prefix="/address", tags=["Address"], dependencies=[Depends(enforce_route_policy)])
billing_router = APIRouter(prefix="/billing-address", tags=["BillingAddress"],
                           dependencies=[Depends(enforce_route_policy)])


@users_router.get("")
async def read_users(db: AsyncSession = Depends(get_db)):
    all_users, total = await users.get_all_users(db)
    return success([UserOut.model_validate(u) for u in all_users], total=total)


@users_router.get("/get-count")
async def read_user_count(db: AsyncSession = Depends(get_db)):
    return success(await users.count_users(db))


@users_router.get("/{user_id}")
async def read_user(user_id: str, db: AsyncSession = Depends(get_db)):
    user = await users.get_user_by_id(db, user_id)
    return success(UserOut.model_validate(user))


@users_router.put("/{user_id}")
async def update_existing_user(user_id: str, user: UserUpdate, db: AsyncSession = Depends(get_db)):
    updated = await users.update_user(db, user_id, user)
    return success(UserOut.model_validate(updated), message="User updated successfully")


@users_router.delete("/{user_id}")
async def delete_existing_user(user_id: str, db: AsyncSession = Depends(get_db)):
    await users.delete_user(db, user_id)
    return success(message="User deleted successfully")


# Адреса пользователя
@address_router.get("/{user_id}")
async def read_user_addresses(user_id: str, db: AsyncSession = Depends(get_db)):
    user_addresses = await addresses.get_user_addresses(db, user_id)
    return success([AddressOut.model_validate(a) for a in user_addresses], total=len(user_addresses))


@address_router.post("/{user_id}")
async def create_user_address(user_id: str, address: AddressCreate, db: AsyncSession = Depends(get_db)):
    new_address = await addresses.create_address(db, user_id, address)
    return created(AddressOut.model_validate(new_address), "Address created successfully")


@address_router.put("/{user_id}/{address_id}")
async def update_user_address(user_id: str, address_id: str, address: AddressUpdate,
                              db: AsyncSession = Depends(get_db)):
    updated = await addresses.update_address(db, user_id, address_id, address)
    if updated is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return success(AddressOut.model_validate(updated), message="Address updated successfully")


@address_router.delete("/{user_id}/{address_id}")
async def delete_user_address(user_id: str, address_id: str, db: AsyncSession = Depends(get_db)):
    await addresses.delete_address(db, user_id, address_id)
    return success(message="Address deleted successfully")


# Платёжные адреса
@billing_router.get("")
async def read_billings(db: AsyncSession = Depends(get_db)):
    billings = await addresses.get_all_billings(db)
    return success([BillingOut.model_validate(b) for b in billings], total=len(billings))


@billing_router.post("")
async def create_new_billing(billing: BillingCreate, db: AsyncSession = Depends(get_db)):
    new_billing = await addresses.create_billing(db, billing)
    return created(BillingOut.model_validate(new_billing), "Billing address created successfully")


@billing_router.get("/{user_id}")
async def read_user_billing(user_id: str, db: AsyncSession = Depends(get_db)):
    billing = await addresses.get_billing_by_user(db, user_id)
    return success(BillingOut.model_validate(billing))


@billing_router.put("/{user_id}/sync")
async def sync_user_billing(user_id: str, db: AsyncSession = Depends(get_db)):
    """Copy the user's default address into their billing address, if both exist."""
    billing = await addresses.sync_billing_with_default_address(db, user_id)
    if billing is None:
        return success(None, message="Nothing to synchronize")
    return success(BillingOut.model_validate(billing), message="Billing address synchronized")
