# shop_service/db/functions/users.py
import logging

from sqlalchemy import or_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shop_service.auth_utils import hash_password, verify_password
from shop_service.db.functions.common import provided_fields, merge_fields, count_rows, commit_unique
from shop_service.db.functions.references import check_id
from shop_service.db.models import User, Order, Billing, Cart, Review
from shop_service.db.schemas import UserRegister, UserUpdate
from shop_service.errors import Conflict, NotFound, Unauthorized

logger = logging.getLogger(__name__)


def _user_query():
    return select(User).options(selectinload(User.address))


# Функция для получения всех пользователей
async def get_all_users(db: AsyncSession):
    result = await db.execute(_user_query().order_by(User.created_at.desc()))
    users = result.scalars().all()
    return users, len(users)


async def count_users(db: AsyncSession) -> int:
    return await count_rows(db, User)


# Функция для получения пользователя по ID
async def get_user_by_id(db: AsyncSession, user_id: str):
    check_id(user_id, "user")
    result = await db.execute(
        _user_query().filter(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound("User not found")
    return user


async def get_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(_user_query().filter(User.email == email))
    return result.scalar_one_or_none()


async def _ensure_unique(db: AsyncSession, username: str = None, email: str = None, exclude_id: str = None):
    conditions = []
    if username:
        conditions.append(User.username == username)
    if email:
        conditions.append(User.email == email)
    if not conditions:
        return
    query = select(User).filter(or_(*conditions))
    if exclude_id:
        query = query.filter(User.id != exclude_id)
    result = await db.execute(query)
    if result.scalars().first():
        raise Conflict("Username or email already exists")


async def register_user(db: AsyncSession, data: UserRegister):
    await _ensure_unique(db, username=data.username, email=data.email)

    fields = data.model_dump(exclude={"password"})
    new_user = User(**fields, password_hash=hash_password(data.password))
    db.add(new_user)
    await commit_unique(db, "Username or email already exists")
    logger.info("user registered", extra={"user_id": new_user.id})
    return await get_user_by_id(db, new_user.id)


async def authenticate_user(db: AsyncSession, email: str, password: str):
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login rejected", extra={"email": email})
        raise Unauthorized("Invalid credentials")
    return user


# Функция для обновления данных пользователя
async def update_user(db: AsyncSession, user_id: str, data: UserUpdate):
    user = await get_user_by_id(db, user_id)
    fields = provided_fields(data)
    await _ensure_unique(db, username=fields.get("username"), email=fields.get("email"), exclude_id=user.id)

    merge_fields(user, fields)
    await commit_unique(db, "Username or email already exists")
    return await get_user_by_id(db, user.id)


# Функция для удаления пользователя
async def delete_user(db: AsyncSession, user_id: str):
    user = await get_user_by_id(db, user_id)
    if await count_rows(db, Order, Order.user_id == user.id):
        raise Conflict("User still has orders")

    await db.execute(delete(Billing).filter(Billing.user_id == user.id))
    await db.execute(delete(Review).filter(Review.user_id == user.id))
    carts = await db.execute(select(Cart).filter(Cart.user_id == user.id).options(selectinload(Cart.items)))
    for cart in carts.scalars().all():
        await db.delete(cart)

    # адреса удаляются каскадом
    await db.delete(user)
    await db.commit()
    return user
