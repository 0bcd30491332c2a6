# main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.routers import auth
from app.routers import admin
from app.routers import storefront
from app.core.config import LOG_LEVEL
from app.core.db import init_models
from app.services.cart_service import CartRegistry

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="Kitchen Order API",
    description="FastAPI backend for the kitchen storefront, orders and vendor invoicing",
    version="0.1.0"
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cart-Session"],
)

# one cart per storefront session, kept for the life of the process
app.state.carts = CartRegistry()

# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Backend is running"}

# Register routers
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(storefront.router)


@app.on_event("startup")
async def on_startup():
    await init_models()
