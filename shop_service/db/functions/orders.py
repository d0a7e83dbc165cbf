# shop_service/db/functions/orders.py
"""Order aggregation.

An order stores the ordered list of its OrderItem ids (`order_item`). Its
`total_amount` is summed from the items' `total_price` once, at creation,
and is not recomputed later. Order items snapshot the product price when
they are created.
"""
import logging
from decimal import Decimal
from typing import List

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shop_service.config import settings
from shop_service.db.functions.common import count_rows, merge_fields
from shop_service.db.functions.references import check_id, is_valid_id, get_or_404, resolve_reference
from shop_service.db.models import Order, OrderItem, OrderStatus, Payment, Product, User
from shop_service.db.schemas import OrderCreate, OrderItemCreate, OrderOut, OrderDetail, OrderItemDetail, UserOut
from shop_service.errors import ValidationError, NotFound

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def check_status_transition(current: str, new: str) -> str:
    """Validate a status change under the configured policy and return the status to store."""
    if settings.order_status_policy == "lax":
        return new

    try:
        target = OrderStatus(new)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status '{new}'. Allowed: {allowed}")

    try:
        source = OrderStatus(current)
    except ValueError:
        # a status stored under the lax policy; treat it like Pending
        source = OrderStatus.PENDING

    if target not in ORDER_TRANSITIONS[source]:
        raise ValidationError(f"Cannot change order status from {source.value} to {target.value}")
    return target.value


# Позиции заказа
async def create_order_item(db: AsyncSession, data: OrderItemCreate):
    product = await resolve_reference(db, Product, data.product_id, "product")
    if data.order_id is not None:
        await resolve_reference(db, Order, data.order_id, "order")

    unit_price = Decimal(str(product.price))
    order_item = OrderItem(
        order_id=data.order_id,
        product_id=product.id,
        quantity=data.quantity,
        unit_price=unit_price,
        total_price=unit_price * data.quantity,
        created_by=data.created_by,
    )
    db.add(order_item)
    await db.commit()
    await db.refresh(order_item)
    return order_item


async def get_all_order_items(db: AsyncSession):
    result = await db.execute(select(OrderItem).order_by(OrderItem.created_at.desc()))
    return result.scalars().all()


async def get_order_item_by_id(db: AsyncSession, item_id: str):
    return await get_or_404(db, OrderItem, item_id, "order item")


async def _items_by_ids(db: AsyncSession, item_ids: List[str], with_product: bool = False):
    if not item_ids:
        return []
    query = select(OrderItem).filter(OrderItem.id.in_(item_ids))
    if with_product:
        query = query.options(selectinload(OrderItem.product).selectinload(Product.category))
    result = await db.execute(query)
    return result.scalars().all()


# Заказы
async def create_order(db: AsyncSession, data: OrderCreate):
    if not all(is_valid_id(item_id) for item_id in data.order_item):
        raise ValidationError("Invalid OrderItem IDs in the order_item array")
    await resolve_reference(db, User, data.user_id, "user")

    items = await _items_by_ids(db, data.order_item)
    found = {item.id for item in items}
    missing = [item_id for item_id in data.order_item if item_id not in found]
    if missing:
        logger.warning("order references unknown order items", extra={"missing_ids": missing})

    total_amount = sum((Decimal(str(item.total_price)) for item in items), Decimal("0"))

    new_order = Order(
        user_id=data.user_id,
        total_amount=total_amount,
        order_item=list(data.order_item),
        shipping_address=data.shipping_address,
        created_by=data.created_by,
    )
    db.add(new_order)
    await db.flush()

    # привязываем позиции к заказу в той же транзакции
    for item in items:
        item.order_id = new_order.id

    await db.commit()
    await db.refresh(new_order)
    logger.info("order created", extra={"order_id": new_order.id, "total_amount": str(total_amount)})
    return new_order


async def _compose_orders(db: AsyncSession, orders, with_user: bool = True) -> List[OrderDetail]:
    """Join orders with their items (and product/category) and their user."""
    all_ids = [item_id for order in orders for item_id in (order.order_item or [])]
    items = {item.id: item for item in await _items_by_ids(db, all_ids, with_product=True)}

    users = {}
    if with_user:
        user_ids = {order.user_id for order in orders}
        if user_ids:
            result = await db.execute(
                select(User).filter(User.id.in_(user_ids)).options(selectinload(User.address))
            )
            users = {user.id: user for user in result.scalars().all()}

    composed = []
    for order in orders:
        user = users.get(order.user_id)
        composed.append(OrderDetail(
            **OrderOut.model_validate(order).model_dump(),
            items=[
                OrderItemDetail.model_validate(items[item_id])
                for item_id in (order.order_item or []) if item_id in items
            ],
            user=UserOut.model_validate(user) if user is not None else None,
        ))
    return composed


async def get_all_orders(db: AsyncSession):
    result = await db.execute(select(Order).order_by(Order.created_at.desc()))
    orders = result.scalars().all()
    total = await count_rows(db, Order)
    return await _compose_orders(db, orders), total


async def get_user_orders(db: AsyncSession, user_id: str):
    check_id(user_id, "user")
    if await db.get(User, user_id) is None:
        raise NotFound("User not found")
    result = await db.execute(
        select(Order).filter(Order.user_id == user_id).order_by(Order.created_at.desc())
    )
    orders = result.scalars().all()
    return await _compose_orders(db, orders, with_user=False), len(orders)


async def get_order_by_id(db: AsyncSession, order_id: str):
    return await get_or_404(db, Order, order_id, "order")


async def get_order_detail(db: AsyncSession, order_id: str) -> OrderDetail:
    order = await get_order_by_id(db, order_id)
    composed = await _compose_orders(db, [order])
    return composed[0]


async def update_order_status(db: AsyncSession, order_id: str, order_status: str, updated_by: str = None):
    order = await get_order_by_id(db, order_id)
    new_status = check_status_transition(order.order_status, order_status)

    fields = {"order_status": new_status}
    if updated_by:
        fields["updated_by"] = updated_by
    merge_fields(order, fields)
    await db.commit()
    await db.refresh(order)
    logger.info("order status changed", extra={"order_id": order.id, "order_status": new_status})
    return order


async def cancel_order(db: AsyncSession, order_id: str, updated_by: str = None):
    return await update_order_status(db, order_id, OrderStatus.CANCELLED.value, updated_by)


async def delete_order(db: AsyncSession, order_id: str):
    """Delete an order, its payments and exactly the order items it references, in one transaction."""
    order = await get_order_by_id(db, order_id)
    item_ids = list(order.order_item or [])

    result = await db.execute(
        delete(Payment).filter(Payment.order_id == order.id).execution_options(synchronize_session=False)
    )
    deleted_payments = result.rowcount
    deleted_items = 0
    if item_ids:
        result = await db.execute(
            delete(OrderItem).filter(OrderItem.id.in_(item_ids)).execution_options(synchronize_session=False)
        )
        deleted_items = result.rowcount
    # позиции, ссылающиеся на заказ, но не входящие в его список, остаются
    await db.execute(
        update(OrderItem).filter(OrderItem.order_id == order.id).values(order_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.delete(order)
    await db.commit()

    logger.info("order deleted", extra={
        "order_id": order_id, "deleted_items": deleted_items, "deleted_payments": deleted_payments,
    })
    return deleted_items


async def get_total_sales(db: AsyncSession) -> Decimal:
    result = await db.execute(select(func.coalesce(func.sum(Order.total_amount), 0)))
    total = result.scalar_one()
    return Decimal(str(total or 0)).quantize(Decimal("0.01"))


async def count_orders(db: AsyncSession) -> int:
    return await count_rows(db, Order)
