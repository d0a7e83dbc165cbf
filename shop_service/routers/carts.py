# shop_service/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import carts
from shop_service.db.schemas import CartCreate, CartOut, CartItemCreate, CartItemUpdate, CartItemOut
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

carts_router = APIRouter(prefix="/carts", tags=["Carts"], dependencies=[Depends(enforce_route_policy)])
cart_items_router = APIRouter(prefix="/cart-items", tags=["CartItems"], dependencies=[Depends(enforce_route_policy)])


@carts_router.get("")
async def read_carts(db: AsyncSession = Depends(get_db)):
    all_carts = await carts.get_all_carts(db)
    return success([CartOut.model_validate(c) for c in all_carts], total=len(all_carts))


@carts_router.post("")
async def create_new_cart(cart: CartCreate, db: AsyncSession = Depends(get_db)):
    new_cart = await carts.create_cart(db, cart)
    return created(CartOut.model_validate(new_cart), "Cart created successfully")


@carts_router.get("/{cart_id}")
async def read_cart(cart_id: str, db: AsyncSession = Depends(get_db)):
    cart = await carts.get_cart_by_id(db, cart_id)
    return success(CartOut.model_validate(cart))


@carts_router.delete("/{cart_id}")
async def delete_existing_cart(cart_id: str, db: AsyncSession = Depends(get_db)):
    await carts.delete_cart(db, cart_id)
    return success(message="Cart deleted successfully")


@cart_items_router.get("")
async def read_cart_items(db: AsyncSession = Depends(get_db)):
    items = await carts.get_all_cart_items(db)
    return success([CartItemOut.model_validate(i) for i in items], total=len(items))


@cart_items_router.post("")
async def add_to_cart(item: CartItemCreate, db: AsyncSession = Depends(get_db)):
    new_item = await carts.create_cart_item(db, item)
    return created(CartItemOut.model_validate(new_item), "Cart item created successfully")


@cart_items_router.put("/{item_id}")
async def update_cart_item_quantity(item_id: str, item: CartItemUpdate, db: AsyncSession = Depends(get_db)):
    updated = await carts.update_cart_item(db, item_id, item)
    return success(CartItemOut.model_validate(updated), message="Cart item updated successfully")


@cart_items_router.delete("/{item_id}")
async def remove_from_cart(item_id: str, db: AsyncSession = Depends(get_db)):
    await carts.delete_cart_item(db, item_id)
    return success(message="Cart item deleted successfully")
