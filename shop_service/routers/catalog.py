# shop_service/routers/catalog.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db.database import get_db
from shop_service.db.functions import catalog
from shop_service.db.schemas import (
    CategoryCreate, CategoryUpdate, CategoryOut,
    ProductCreate, ProductUpdate, ProductOut, ProductSummary,
    ProductImageCreate, ProductImageOut, ProductVideoCreate, ProductVideoOut,
)
from shop_service.responses import success, created
from shop_service.security import enforce_route_policy

products_router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(enforce_route_policy)])
categories_router = APIRouter(prefix="/categories", tags=["Categories"], dependencies=[Depends(enforce_route_policy)])
product_images_router = APIRouter(prefix="/product-images", tags=["ProductImages"],
                                  dependencies=[Depends(enforce_route_policy)])
product_videos_router = APIRouter(prefix="/product-videos", tags=["ProductVideos"],
                                  dependencies=[Depends(enforce_route_policy)])


def _products(products):
    return [ProductOut.model_validate(p) for p in products]


@products_router.get("")
async def read_products(categories: Optional[str] = Query(default=None), db: AsyncSession = Depends(get_db)):
    """Products, optionally filtered by a comma separated list of category ids."""
    category_ids = [c.strip() for c in categories.split(",") if c.strip()] if categories else None
    products, total = await catalog.get_all_products(db, category_ids)
    return success(_products(products), total=total)


@products_router.get("/featured-products/{count}")
async def read_featured_products(count: int, db: AsyncSession = Depends(get_db)):
    products, total = await catalog.get_featured_products(db, count)
    return success(_products(products), total=total)


@products_router.get("/selected-properties")
async def read_selected_properties(db: AsyncSession = Depends(get_db)):
    products, total = await catalog.get_selected_properties(db)
    return success([ProductSummary.model_validate(p) for p in products], total=total)


@products_router.get("/get-count")
async def read_product_count(db: AsyncSession = Depends(get_db)):
    return success(await catalog.count_products(db))


@products_router.post("")
async def create_new_product(product: ProductCreate, db: AsyncSession = Depends(get_db)):
    new_product = await catalog.create_product(db, product)
    return created(ProductOut.model_validate(new_product), "Product created successfully")


@products_router.get("/{product_id}")
async def read_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await catalog.get_product_by_id(db, product_id)
    return success(ProductOut.model_validate(product))


@products_router.put("/{product_id}")
async def update_existing_product(product_id: str, product: ProductUpdate, db: AsyncSession = Depends(get_db)):
    updated_product = await catalog.update_product(db, product_id, product)
    return success(ProductOut.model_validate(updated_product), message="Product updated successfully")


@products_router.delete("/{product_id}")
async def delete_existing_product(product_id: str, db: AsyncSession = Depends(get_db)):
    await catalog.delete_product(db, product_id)
    return success(message="Product deleted successfully")


@categories_router.get("")
async def get_categories(db: AsyncSession = Depends(get_db)):
    categories = await catalog.get_all_categories(db)
    return success([CategoryOut.model_validate(c) for c in categories])


@categories_router.post("")
async def create_new_category(category: CategoryCreate, db: AsyncSession = Depends(get_db)):
    new_category = await catalog.create_category(db, category)
    return created(CategoryOut.model_validate(new_category), "Category created successfully")


@categories_router.get("/{category_id}")
async def read_category(category_id: str, db: AsyncSession = Depends(get_db)):
    category = await catalog.get_category_by_id(db, category_id)
    return success(CategoryOut.model_validate(category))


@categories_router.put("/{category_id}")
async def update_existing_category(category_id: str, category: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    updated = await catalog.update_category(db, category_id, category)
    return success(CategoryOut.model_validate(updated), message="Category updated successfully")


@categories_router.delete("/{category_id}")
async def delete_existing_category(category_id: str, db: AsyncSession = Depends(get_db)):
    await catalog.delete_category(db, category_id)
    return success(message="Category deleted successfully")


@product_images_router.get("")
async def read_product_images(db: AsyncSession = Depends(get_db)):
    images = await catalog.get_all_product_images(db)
    return success([ProductImageOut.model_validate(i) for i in images])


@product_images_router.post("")
async def create_new_product_image(image: ProductImageCreate, db: AsyncSession = Depends(get_db)):
    new_image = await catalog.create_product_image(db, image)
    return created(ProductImageOut.model_validate(new_image), "Product Image created successfully")


@product_videos_router.get("")
async def read_product_videos(db: AsyncSession = Depends(get_db)):
    videos = await catalog.get_all_product_videos(db)
    return success([ProductVideoOut.model_validate(v) for v in videos])


@product_videos_router.post("")
async def create_new_product_video(video: ProductVideoCreate, db: AsyncSession = Depends(get_db)):
    new_video = await catalog.create_product_video(db, video)
    return created(ProductVideoOut.model_validate(new_video), "Product Video created successfully")
