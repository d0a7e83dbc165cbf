# shop_service/routers/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.auth_utils import token_for_user
from shop_service.db.database import get_db
from shop_service.db.functions.users import register_user, authenticate_user
from shop_service.db.schemas import UserRegister, UserLogin, UserOut
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

router = APIRouter(prefix="/auth", tags=["Auth"], dependencies=[Depends(enforce_route_policy)])


@router.post("/register")
async def register(user: UserRegister, db: AsyncSession = Depends(get_db)):
    """Регистрация нового пользователя."""
    new_user = await register_user(db, user)
    return created(UserOut.model_validate(new_user), "User registered successfully")


@router.post("/login")
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, credentials.email, credentials.password)
    token = token_for_user(user)
    return success(
        {"token": token, "token_type": "bearer", "user": UserOut.model_validate(user)},
        message="Login successful",
    )
