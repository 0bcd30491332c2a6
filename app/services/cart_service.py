# app/services/cart_service.py
"""
In-memory shopping carts.

Each browser session owns one ``CartService``; the ``CartRegistry`` hands them
out by session id and lives on ``app.state`` for the lifetime of the process.
Carts are not persisted: a restart empties them, which matches how the
storefront treated its client-side cart.
"""
import logging
import threading
import time
import uuid
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import Header, Request

from app.core.config import CART_IDLE_MINUTES, CART_MAX_SESSIONS
from app.models.product_models import Product
from app.schemas.cart_schemas import CartItem, CartOut
from app.utils.decimal_utils import to_decimal
from app.utils.errors import NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)

CART_SESSION_HEADER = "X-Cart-Session"


class CartService:
    def __init__(self, session_id: str):
        self.session_id = session_id
        self._items: Dict[int, CartItem] = {}
        self.touched_at = 0.0

    def add(self, product: Product, quantity: int = 1) -> CartItem:
        if quantity < 1:
            raise ValidationFailure("Quantity must be at least 1")

        existing = self._items.get(product.id)
        if existing:
            existing.quantity += quantity
            return existing

        item = CartItem(
            product_id=product.id,
            name=product.name,
            image_url=product.image_url or "",
            price_base=to_decimal(product.price_base),
            price=to_decimal(product.price),
            vendor_id=product.vendor_id,
            quantity=quantity,
        )
        self._items[product.id] = item
        return item

    def set_quantity(self, product_id: int, quantity: int) -> Optional[CartItem]:
        """Set the quantity of a line; zero removes it."""
        if quantity < 0:
            raise ValidationFailure("Quantity must not be negative")
        if product_id not in self._items:
            raise NotFoundError("Product is not in the cart")
        if quantity == 0:
            self.remove(product_id)
            return None
        self._items[product_id].quantity = quantity
        return self._items[product_id]

    def remove(self, product_id: int):
        if self._items.pop(product_id, None) is None:
            raise NotFoundError("Product is not in the cart")

    def clear(self):
        self._items.clear()

    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def is_empty(self) -> bool:
        return not self._items

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items.values())

    @property
    def total_price(self) -> Decimal:
        return to_decimal(sum((item.line_total for item in self._items.values()), Decimal("0")))

    def to_out(self) -> CartOut:
        return CartOut(
            session_id=self.session_id,
            items=self.items(),
            total_quantity=self.total_quantity,
            total_price=self.total_price,
        )


class CartRegistry:
    """
    Maps cart session ids to their carts.

    Carts untouched for ``idle_minutes`` are dropped on the next lookup, and
    once ``max_sessions`` carts are open the least recently used one makes
    room for a new session.
    """

    def __init__(self, idle_minutes: int = CART_IDLE_MINUTES, max_sessions: int = CART_MAX_SESSIONS, clock=time.monotonic):
        self._carts: Dict[str, CartService] = {}
        self._lock = threading.Lock()
        self._idle_seconds = idle_minutes * 60
        self._max_sessions = max_sessions
        self._clock = clock

    def _evict_idle(self, now: float):
        cutoff = now - self._idle_seconds
        stale = [sid for sid, cart in self._carts.items() if cart.touched_at < cutoff]
        for sid in stale:
            del self._carts[sid]
        if stale:
            logger.debug("Dropped %d idle cart session(s)", len(stale))

    def get(self, session_id: Optional[str]) -> Optional[CartService]:
        """The open cart for ``session_id``, or None; never opens one."""
        if not session_id:
            return None
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            cart = self._carts.get(session_id)
            if cart is not None:
                cart.touched_at = now
            return cart

    def get_or_create(self, session_id: Optional[str] = None) -> CartService:
        with self._lock:
            now = self._clock()
            self._evict_idle(now)
            if session_id and session_id in self._carts:
                cart = self._carts[session_id]
                cart.touched_at = now
                return cart

            while self._carts and len(self._carts) >= self._max_sessions:
                oldest = min(self._carts.values(), key=lambda c: c.touched_at)
                del self._carts[oldest.session_id]
                logger.warning("Cart limit of %d reached, dropped session %s", self._max_sessions, oldest.session_id)

            session_id = session_id or uuid.uuid4().hex
            cart = CartService(session_id)
            cart.touched_at = now
            self._carts[session_id] = cart
            logger.debug("Opened cart session %s", session_id)
            return cart

    def discard(self, session_id: str):
        with self._lock:
            self._carts.pop(session_id, None)

    def __len__(self):
        return len(self._carts)


def get_cart(
    request: Request,
    x_cart_session: Optional[str] = Header(default=None),
) -> CartService:
    """
    Dependency: the caller's cart for reads and edits.

    An unknown session gets an empty cart that is not registered, so browsing
    never opens a session.
    """
    cart = request.app.state.carts.get(x_cart_session)
    if cart is None:
        cart = CartService(x_cart_session or uuid.uuid4().hex)
    return cart


def open_cart(
    request: Request,
    x_cart_session: Optional[str] = Header(default=None),
) -> CartService:
    """Dependency: the caller's cart, opened on first write."""
    return request.app.state.carts.get_or_create(x_cart_session)
