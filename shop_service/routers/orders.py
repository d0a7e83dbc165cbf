# shop_service/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import orders
from shop_service.db.schemas import (
    OrderCreate, OrderOut, OrderStatusUpdate, OrderItemCreate, OrderItemOut,
)
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

orders_router = APIRouter(prefix="/orders", tags=["Orders"], dependencies=[Depends(enforce_route_policy)])
order_items_router = APIRouter(prefix="/order-items", tags=["OrderItems"],
                               dependencies=[Depends(enforce_route_policy)])


@orders_router.get("")
async def read_orders(db: AsyncSession = Depends(get_db)):
    """Все заказы вместе с позициями, товарами и пользователем."""
    all_orders, total = await orders.get_all_orders(db)
    return success(all_orders, total=total)


@orders_router.post("")
async def create_new_order(order: OrderCreate, db: AsyncSession = Depends(get_db)):
    new_order = await orders.create_order(db, order)
    return created(OrderOut.model_validate(new_order), "Order created successfully")


@orders_router.get("/total-sales")
async def read_total_sales(db: AsyncSession = Depends(get_db)):
    total_sales = await orders.get_total_sales(db)
    return success(float(total_sales))


@orders_router.get("/get-count")
async def read_order_count(db: AsyncSession = Depends(get_db)):
    return success(await orders.count_orders(db))


@orders_router.get("/user/{user_id}")
async def read_user_orders(user_id: str, db: AsyncSession = Depends(get_db)):
    user_orders, total = await orders.get_user_orders(db, user_id)
    return success(user_orders, total=total)


@orders_router.get("/{order_id}")
async def read_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await orders.get_order_detail(db, order_id)
    return success(order)


@orders_router.put("/update-order-status/{order_id}")
async def change_order_status(order_id: str, update: OrderStatusUpdate, db: AsyncSession = Depends(get_db)):
    order = await orders.update_order_status(db, order_id, update.order_status, update.updated_by)
    return success(OrderOut.model_validate(order), message="Order status updated successfully")


@orders_router.put("/cancel/{order_id}")
async def cancel_existing_order(order_id: str, updated_by: Optional[str] = Body(default=None, embed=True),
                                db: AsyncSession = Depends(get_db)):
    order = await orders.cancel_order(db, order_id, updated_by)
    return success(OrderOut.model_validate(order), message="Order cancelled successfully")


@orders_router.delete("/{order_id}")
async def delete_existing_order(order_id: str, db: AsyncSession = Depends(get_db)):
    deleted_items = await orders.delete_order(db, order_id)
    return success({"deleted_order_items": deleted_items}, message="Order deleted successfully")


# Позиции заказа
@order_items_router.get("")
async def read_order_items(db: AsyncSession = Depends(get_db)):
    items = await orders.get_all_order_items(db)
    return success([OrderItemOut.model_validate(i) for i in items], total=len(items))


@order_items_router.post("")
async def create_new_order_item(item: OrderItemCreate, db: AsyncSession = Depends(get_db)):
    new_item = await orders.create_order_item(db, item)
    return created(OrderItemOut.model_validate(new_item), "Order item created successfully")


@order_items_router.get("/{item_id}")
async def read_order_item(item_id: str, db: AsyncSession = Depends(get_db)):
    item = await orders.get_order_item_by_id(db, item_id)
    return success(OrderItemOut.model_validate(item))
