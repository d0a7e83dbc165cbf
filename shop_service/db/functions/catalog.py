# shop_service/db/functions/catalog.py
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shop_service.db.functions.common import provided_fields, merge_fields, count_rows, commit_unique
from shop_service.db.functions.references import check_id, get_or_404, resolve_reference
from shop_service.db.models import Category, Product, ProductImage, ProductVideo, OrderItem, CartItem
from shop_service.db.schemas import (
    CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate,
    ProductImageCreate, ProductVideoCreate,
)
from shop_service.errors import Conflict, NotFound


# Категории
async def get_all_categories(db: AsyncSession):
    result = await db.execute(select(Category).order_by(Category.created_at.desc()))
    return result.scalars().all()


async def get_category_by_id(db: AsyncSession, category_id: str):
    return await get_or_404(db, Category, category_id, "category")


async def _ensure_category_name_free(db: AsyncSession, name: str, exclude_id: str = None):
    query = select(Category).filter(Category.name == name)
    if exclude_id:
        query = query.filter(Category.id != exclude_id)
    result = await db.execute(query)
    if result.scalars().first():
        raise Conflict(f"Category {name} already exists")


async def create_category(db: AsyncSession, data: CategoryCreate):
    await _ensure_category_name_free(db, data.name)
    if data.parent_category_id:
        await resolve_reference(db, Category, data.parent_category_id, "parent category")

    new_category = Category(**data.model_dump())
    db.add(new_category)
    await commit_unique(db, f"Category {data.name} already exists")
    await db.refresh(new_category)
    return new_category


async def update_category(db: AsyncSession, category_id: str, data: CategoryUpdate):
    category = await get_category_by_id(db, category_id)
    fields = provided_fields(data)

    if "name" in fields and fields["name"] != category.name:
        await _ensure_category_name_free(db, fields["name"], exclude_id=category.id)
    if "parent_category_id" in fields:
        if fields["parent_category_id"] == category.id:
            raise Conflict("A category cannot be its own parent")
        await resolve_reference(db, Category, fields["parent_category_id"], "parent category")

    merge_fields(category, fields)
    await commit_unique(db, f"Category {category.name} already exists")
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: str):
    category = await get_category_by_id(db, category_id)
    if await count_rows(db, Product, Product.category_id == category.id):
        raise Conflict("Category still has products")

    children = await db.execute(select(Category).filter(Category.parent_category_id == category.id))
    for child in children.scalars().all():
        child.parent_category_id = None

    await db.delete(category)
    await db.commit()
    return category


# Товары
def _product_query():
    return select(Product).options(
        selectinload(Product.category),
        selectinload(Product.images),
        selectinload(Product.videos),
    )


async def get_all_products(db: AsyncSession, category_ids: Optional[List[str]] = None):
    query = _product_query()
    criteria = []
    if category_ids:
        for category_id in category_ids:
            check_id(category_id, "category")
        criteria.append(Product.category_id.in_(category_ids))
    result = await db.execute(query.filter(*criteria).order_by(Product.created_at.desc()))
    products = result.scalars().all()
    total = await count_rows(db, Product, *criteria)
    return products, total


async def get_featured_products(db: AsyncSession, count: int = 0):
    # count <= 0 means no limit
    query = _product_query().filter(Product.is_featured.is_(True)).order_by(Product.created_at.desc())
    if count > 0:
        query = query.limit(count)
    result = await db.execute(query)
    total = await count_rows(db, Product, Product.is_featured.is_(True))
    return result.scalars().all(), total


async def get_selected_properties(db: AsyncSession):
    result = await db.execute(select(Product).order_by(Product.created_at.desc()))
    products = result.scalars().all()
    return products, len(products)


async def count_products(db: AsyncSession) -> int:
    return await count_rows(db, Product)


async def get_product_by_id(db: AsyncSession, product_id: str):
    check_id(product_id, "product")
    result = await db.execute(
        _product_query().filter(Product.id == product_id).execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise NotFound("Product not found")
    return product


async def create_product(db: AsyncSession, data: ProductCreate):
    await resolve_reference(db, Category, data.category_id, "category")

    new_product = Product(**data.model_dump(), updated_by=data.created_by)
    db.add(new_product)
    await db.commit()  # Сохраняем в базу данных
    return await get_product_by_id(db, new_product.id)


async def update_product(db: AsyncSession, product_id: str, data: ProductUpdate):
    product = await get_product_by_id(db, product_id)
    fields = provided_fields(data)
    if "category_id" in fields:
        await resolve_reference(db, Category, fields["category_id"], "category")

    merge_fields(product, fields)
    await db.commit()
    return await get_product_by_id(db, product.id)


async def delete_product(db: AsyncSession, product_id: str):
    check_id(product_id, "product")
    result = await db.execute(
        _product_query().options(selectinload(Product.reviews)).filter(Product.id == product_id)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise NotFound("Product not found")

    in_orders = await count_rows(db, OrderItem, OrderItem.product_id == product.id)
    in_carts = await count_rows(db, CartItem, CartItem.product_id == product.id)
    if in_orders or in_carts:
        raise Conflict("Product is referenced by order or cart items")

    await db.delete(product)
    await db.commit()
    return product


# Изображения и видео товара
async def get_all_product_images(db: AsyncSession):
    result = await db.execute(select(ProductImage).order_by(ProductImage.created_at.desc()))
    return result.scalars().all()


async def create_product_image(db: AsyncSession, data: ProductImageCreate):
    await resolve_reference(db, Product, data.product_id, "product")
    image = ProductImage(**data.model_dump())
    db.add(image)
    await db.commit()
    await db.refresh(image)
    return image


async def get_all_product_videos(db: AsyncSession):
    result = await db.execute(select(ProductVideo).order_by(ProductVideo.created_at.desc()))
    return result.scalars().all()


async def create_product_video(db: AsyncSession, data: ProductVideoCreate):
    await resolve_reference(db, Product, data.product_id, "product")
    video = ProductVideo(**data.model_dump())
    db.add(video)
    await db.commit()
    await db.refresh(video)
    return video
