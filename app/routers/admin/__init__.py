from fastapi import APIRouter

from .vendors import router as vendors_router
from .categories import router as categories_router
from .products import router as products_router
from .schedules import router as schedules_router
from .settings import router as settings_router
from .orders import router as orders_router
from .invoices import router as invoices_router

router = APIRouter(prefix="/admin")

router.include_router(vendors_router)
router.include_router(categories_router)
router.include_router(products_router)
router.include_router(schedules_router)
router.include_router(settings_router)
router.include_router(orders_router)
router.include_router(invoices_router)
