# shop_service/routers/__init__.py
from shop_service.routers.auth import router as auth_router
from shop_service.routers.catalog import (
    products_router, categories_router, product_images_router, product_videos_router,
)
from shop_service.routers.users import users_router, address_router, billing_router
from shop_service.routers.carts import carts_router, cart_items_router
from shop_service.routers.orders import orders_router, order_items_router
from shop_service.routers.payments import router as payments_router
from shop_service.routers.reviews import router as reviews_router

ALL_ROUTERS = [
    auth_router,
    products_router,
    categories_router,
    product_images_router,
    product_videos_router,
    users_router,
    address_router,
    billing_router,
    carts_router,
    cart_items_router,
    orders_router,
    order_items_router,
    payments_router,
    reviews_router,
]
