# shop_service/db/functions/payments.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shop_service.db.functions.common import commit_unique
from shop_service.db.functions.references import get_or_404, resolve_reference
from shop_service.db.models import Payment, Order
from shop_service.db.schemas import PaymentCreate
from shop_service.errors import Conflict


async def get_all_payments(db: AsyncSession):
    result = await db.execute(select(Payment).order_by(Payment.payment_date.desc()))
    return result.scalars().all()


# Получение оплаты по ID
async def get_payment_by_id(db: AsyncSession, payment_id: str):
    return await get_or_404(db, Payment, payment_id, "payment")


async def _ensure_transaction_free(db: AsyncSession, transaction_id: str):
    existing = await db.execute(select(Payment).filter(Payment.transaction_id == transaction_id))
    if existing.scalar_one_or_none():
        raise Conflict(f"Transaction {transaction_id} already recorded")


# Создание новой оплаты
async def create_payment(db: AsyncSession, data: PaymentCreate):
    await resolve_reference(db, Order, data.order_id, "order")
    await _ensure_transaction_free(db, data.transaction_id)

    payment = Payment(**data.model_dump())
    db.add(payment)
    await commit_unique(db, f"Transaction {data.transaction_id} already recorded")
    await db.refresh(payment)
    return payment
