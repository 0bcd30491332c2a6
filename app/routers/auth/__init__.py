# app/routers/auth/__init__.py
from fastapi import APIRouter

from . import activity_router, auth, users

router = APIRouter()

for module in (auth, users, activity_router):
    router.include_router(module.router)
