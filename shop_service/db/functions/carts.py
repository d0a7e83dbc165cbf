# shop_service/db/functions/carts.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shop_service.db.functions.common import merge_fields
from shop_service.db.functions.references import check_id, get_or_404, resolve_reference
from shop_service.db.models import Cart, CartItem, Product, User
from shop_service.db.schemas import CartCreate, CartItemCreate, CartItemUpdate
from shop_service.errors import NotFound


def _cart_query():
    return select(Cart).options(selectinload(Cart.items))


async def get_all_carts(db: AsyncSession):
    result = await db.execute(_cart_query().order_by(Cart.created_at.desc()))
    return result.scalars().all()


# Получение корзины по ID
async def get_cart_by_id(db: AsyncSession, cart_id: str):
    check_id(cart_id, "cart")
    result = await db.execute(
        _cart_query().filter(Cart.id == cart_id).execution_options(populate_existing=True)
    )
    cart = result.scalar_one_or_none()
    if not cart:
        raise NotFound("Cart not found")
    return cart


async def create_cart(db: AsyncSession, data: CartCreate):
    await resolve_reference(db, User, data.user_id, "user")
    cart = Cart(**data.model_dump())
    db.add(cart)
    await db.commit()
    return await get_cart_by_id(db, cart.id)


async def delete_cart(db: AsyncSession, cart_id: str):
    cart = await get_cart_by_id(db, cart_id)
    # элементы корзины удаляются каскадом
    await db.delete(cart)
    await db.commit()
    return cart


async def get_all_cart_items(db: AsyncSession):
    result = await db.execute(select(CartItem).order_by(CartItem.created_at.desc()))
    return result.scalars().all()


# Добавление товара в корзину
async def create_cart_item(db: AsyncSession, data: CartItemCreate):
    await resolve_reference(db, Cart, data.cart_id, "cart")
    await resolve_reference(db, Product, data.product_id, "product")

    item = CartItem(**data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


# Обновление количества товара в корзине
async def update_cart_item(db: AsyncSession, item_id: str, data: CartItemUpdate):
    item = await get_or_404(db, CartItem, item_id, "cart item")
    merge_fields(item, data.model_dump(exclude_none=True))
    await db.commit()
    await db.refresh(item)
    return item


# Удаление товара из корзины
async def delete_cart_item(db: AsyncSession, item_id: str):
    item = await get_or_404(db, CartItem, item_id, "cart item")
    await db.delete(item)
    await db.commit()
    return item
