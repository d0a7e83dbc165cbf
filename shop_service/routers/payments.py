# shop_service/routers/payments.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import payments
from shop_service.db.schemas import PaymentCreate, PaymentOut
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=[Depends(enforce_route_policy)])


@router.get("")
async def read_payments(db: AsyncSession = Depends(get_db)):
    all_payments = await payments.get_all_payments(db)
    return success([PaymentOut.model_validate(p) for p in all_payments], total=len(all_payments))


@router.post("")
async def create_new_payment(payment: PaymentCreate, db: AsyncSession = Depends(get_db)):
    """Регистрация оплаты заказа."""
    new_payment = await payments.create_payment(db, payment)
    return created(PaymentOut.model_validate(new_payment), "Payment created successfully")


@router.get("/{payment_id}")
async def read_payment(payment_id: str, db: AsyncSession = Depends(get_db)):
    payment = await payments.get_payment_by_id(db, payment_id)
    return success(PaymentOut.model_validate(payment))
