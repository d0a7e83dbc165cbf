# shop_service/db/functions/reviews.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shop_service.db.functions.references import check_id, get_or_404, resolve_reference
from shop_service.db.models import Review, Product, User
from shop_service.db.schemas import ReviewCreate
from shop_service.errors import NotFound


async def get_all_reviews(db: AsyncSession):
    result = await db.execute(select(Review).order_by(Review.created_at.desc()))
    return result.scalars().all()


async def get_product_reviews(db: AsyncSession, product_id: str):
    check_id(product_id, "product")
    if await db.get(Product, product_id) is None:
        raise NotFound("Product not found")
    result = await db.execute(
        select(Review).filter(Review.product_id == product_id).order_by(Review.created_at.desc())
    )
    return result.scalars().all()


async def create_review(db: AsyncSession, data: ReviewCreate):
    await resolve_reference(db, User, data.user_id, "user")
    await resolve_reference(db, Product, data.product_id, "product")

    review = Review(**data.model_dump())
    db.add(review)
    await db.commit()
    await db.refresh(review)
    return review


async def delete_review(db: AsyncSession, review_id: str):
    review = await get_or_404(db, Review, review_id, "review")
    await db.delete(review)
    await db.commit()
    return review
