from fastapi import APIRouter

from .catalog import router as catalog_router
from .cart import router as cart_router
from .orders import router as orders_router

router = APIRouter(prefix="/storefront")

router.include_router(catalog_router)
router.include_router(cart_router)
router.include_router(orders_router)
