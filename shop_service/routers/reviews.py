# shop_service/routers/reviews.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import reviews
from shop_service.db.schemas import ReviewCreate, ReviewOut
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

router = APIRouter(prefix="/reviews", tags=["Reviews"], dependencies=[Depends(enforce_route_policy)])


@router.get("")
async def read_reviews(db: AsyncSession = Depends(get_db)):
    all_reviews = await reviews.get_all_reviews(db)
    return success([ReviewOut.model_validate(r) for r in all_reviews], total=len(all_reviews))


@router.get("/product/{product_id}")
async def read_product_reviews(product_id: str, db: AsyncSession = Depends(get_db)):
    product_reviews = await reviews.get_product_reviews(db, product_id)
    return success([ReviewOut.model_validate(r) for r in product_reviews], total=len(product_reviews))


@router.post("")
async def create_new_review(review: ReviewCreate, db: AsyncSession = Depends(get_db)):
    new_review = await reviews.create_review(db, review)
    return created(ReviewOut.model_validate(new_review), "Review created successfully")


@router.delete("/{review_id}")
async def delete_existing_review(review_id: str, db: AsyncSession = Depends(get_db)):
    await reviews.delete_review(db, review_id)
    return success(message="Review deleted successfully")
