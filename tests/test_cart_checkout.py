"""
Tests for carts, checkout and the WhatsApp order message
"""
import re
from decimal import Decimal
from urllib.parse import unquote

import pytest

from app.models.product_models import Product
from app.schemas.order_schemas import CustomerInfo, ProductOrder
from app.services.cart_service import CartRegistry, CartService
from app.utils.decimal_utils import to_idr
from app.utils.errors import NotFoundError, ValidationFailure
from app.utils.order_text import build_whatsapp_url, generate_order_text, normalize_phone_number
from tests.factories import create_product, create_vendor, in_session, product_line

ORDERER = {
    "name": "Ibu Aminah",
    "phone_number": "081234567890",
    "nama_santri": "Ahmad",
    "kelas": "7A",
}


def _product(id, price, vendor_id=1, name="Nasi Goreng"):
    return Product(id=id, name=name, price=Decimal(price), price_base=Decimal(price), vendor_id=vendor_id, image_url="")


class TestCartService:
    """In-memory cart behaviour"""

    def test_adding_same_product_merges_quantity(self):
        cart = CartService("s1")
        cart.add(_product(1, "10000"), 1)
        cart.add(_product(1, "10000"), 2)

        assert len(cart.items()) == 1
        assert cart.items()[0].quantity == 3
        assert cart.total_quantity == 3
        assert cart.total_price == Decimal("30000.00")

    def test_set_quantity_zero_removes_line(self):
        cart = CartService("s1")
        cart.add(_product(1, "10000"))
        cart.add(_product(2, "5000", name="Es Teh"), 2)

        cart.set_quantity(1, 0)
        assert [item.product_id for item in cart.items()] == [2]

        cart.set_quantity(2, 5)
        assert cart.total_price == Decimal("25000.00")

    def test_unknown_line(self):
        cart = CartService("s1")
        with pytest.raises(NotFoundError):
            cart.remove(1)
        with pytest.raises(NotFoundError):
            cart.set_quantity(1, 2)

    def test_invalid_quantities(self):
        cart = CartService("s1")
        with pytest.raises(ValidationFailure):
            cart.add(_product(1, "10000"), 0)
        cart.add(_product(1, "10000"))
        with pytest.raises(ValidationFailure):
            cart.set_quantity(1, -1)

    def test_clear(self):
        cart = CartService("s1")
        cart.add(_product(1, "10000"))
        cart.clear()
        assert cart.is_empty()
        assert cart.total_price == Decimal("0.00")

    def test_registry_hands_out_one_cart_per_session(self):
        registry = CartRegistry()
        first = registry.get_or_create("abc")
        assert registry.get_or_create("abc") is first
        assert registry.get_or_create("xyz") is not first

        anonymous = registry.get_or_create(None)
        assert anonymous.session_id
        assert registry.get_or_create(anonymous.session_id) is anonymous
        assert len(registry) == 3

        registry.discard("abc")
        assert registry.get_or_create("abc") is not first

    def test_lookup_never_opens_a_session(self):
        registry = CartRegistry()
        assert registry.get("abc") is None
        assert registry.get(None) is None
        assert len(registry) == 0

    def test_idle_carts_are_dropped(self):
        now = [0.0]
        registry = CartRegistry(idle_minutes=10, clock=lambda: now[0])
        idle = registry.get_or_create("idle")
        busy = registry.get_or_create("busy")

        now[0] = 9 * 60
        assert registry.get("busy") is busy

        now[0] = 11 * 60
        assert registry.get("idle") is None
        assert registry.get("busy") is busy
        assert len(registry) == 1
        assert registry.get_or_create("idle") is not idle

    def test_size_cap_drops_least_recently_used(self):
        now = [0.0]
        registry = CartRegistry(max_sessions=2, clock=lambda: now[0])
        registry.get_or_create("a")
        now[0] = 1
        registry.get_or_create("b")
        now[0] = 2
        registry.get("a")

        now[0] = 3
        registry.get_or_create("c")

        assert len(registry) == 2
        assert registry.get("b") is None
        assert registry.get("a") is not None
        assert registry.get("c") is not None


class TestOrderText:
    """WhatsApp message formatting"""

    def test_idr_formatting(self):
        assert to_idr(Decimal("10000")) == "Rp 10.000"
        assert to_idr(Decimal("1250000.00")) == "Rp 1.250.000"
        assert to_idr(0) == "Rp 0"

    def test_message_lists_items_totals_and_order_link(self):
        lines = [
            ProductOrder.model_validate(product_line(1, 11, "Nasi Goreng", 10000, 2)),
            ProductOrder.model_validate(product_line(2, 12, "Es Teh", 3000, 1)),
        ]
        customer = CustomerInfo(**ORDERER)

        text = generate_order_text(lines, customer, Decimal("23000"), "BAF-20240101-12345", "https://kitchen.example/")

        assert text.startswith("Assalamualaikum, saya mau order.")
        assert "1. *Nasi Goreng*" in text
        assert "Quantity: 2" in text
        assert "Harga (@): Rp 10.000" in text
        assert "Total Harga: Rp 20.000" in text
        assert "2. *Es Teh*" in text
        assert "Total : *Rp 23.000*" in text
        assert "Ibu Aminah ( 081234567890 )" in text
        assert "*Santri :* Ahmad (7A)" in text
        assert text.endswith("Halaman order: https://kitchen.example/orders/BAF-20240101-12345")

    def test_phone_normalization(self):
        assert normalize_phone_number("0812-3456-7890") == "6281234567890"
        assert normalize_phone_number("+62 812 3456") == "628123456"
        assert normalize_phone_number("") == ""

    def test_whatsapp_url(self):
        url = build_whatsapp_url("08123", "Halo kak")
        assert url == "https://wa.me/628123?text=Halo%20kak"
        assert build_whatsapp_url(None, "Halo") is None


class TestCheckoutApi:
    """Storefront cart and checkout endpoints"""

    def _seed_products(self):
        vendor_a = in_session(lambda db: create_vendor(db, "Dapur A"))
        vendor_b = in_session(lambda db: create_vendor(db, "Dapur B"))
        nasi = in_session(lambda db: create_product(db, vendor_a, "Nasi Goreng", 10000, price_base=8000))
        ayam = in_session(lambda db: create_product(db, vendor_b, "Ayam Bakar", 50000, price_base=45000))
        return nasi, ayam

    def test_cart_session_is_issued_and_reused(self, client):
        nasi, _ = self._seed_products()

        response = client.post("/storefront/cart/items", json={"product_id": nasi, "quantity": 1})
        assert response.status_code == 200
        session_id = response.json()["data"]["session_id"]

        headers = {"X-Cart-Session": session_id}
        client.post("/storefront/cart/items", json={"product_id": nasi, "quantity": 2}, headers=headers)
        cart = client.get("/storefront/cart", headers=headers).json()["data"]

        assert cart["session_id"] == session_id
        assert cart["total_quantity"] == 3
        assert Decimal(cart["total_price"]) == Decimal("30000")

    def test_add_unknown_product(self, client):
        response = client.post("/storefront/cart/items", json={"product_id": 999, "quantity": 1})
        assert response.status_code == 404

    def test_update_and_remove_lines(self, client):
        nasi, ayam = self._seed_products()
        headers = {"X-Cart-Session": "cart-1"}
        client.post("/storefront/cart/items", json={"product_id": nasi}, headers=headers)
        client.post("/storefront/cart/items", json={"product_id": ayam}, headers=headers)

        response = client.put(f"/storefront/cart/items/{nasi}", json={"quantity": 4}, headers=headers)
        assert response.json()["data"]["total_quantity"] == 5

        response = client.delete(f"/storefront/cart/items/{ayam}", headers=headers)
        assert response.json()["data"]["total_quantity"] == 4

        response = client.delete("/storefront/cart", headers=headers)
        assert response.json()["data"]["items"] == []

    def test_checkout_creates_pending_order(self, client, admin_headers):
        nasi, ayam = self._seed_products()
        client.post(
            "/admin/settings",
            json={"admin_phone_number": "081111111111", "app_name": "BAF Kitchen"},
            headers=admin_headers,
        )
        headers = {"X-Cart-Session": "cart-1"}
        client.post("/storefront/cart/items", json={"product_id": nasi, "quantity": 2}, headers=headers)
        client.post("/storefront/cart/items", json={"product_id": ayam, "quantity": 1}, headers=headers)

        response = client.post("/storefront/cart/checkout", json={"orderer": ORDERER}, headers=headers)
        assert response.status_code == 201
        data = response.json()["data"]
        order = data["order"]

        assert re.fullmatch(r"BAF-\d{8}-\d{5}", order["order_number"])
        assert order["status"] == "Payment Pending"
        assert order["activities"] == []
        assert order["store_name"] == "Baf Kitchen"
        assert Decimal(order["total"]) == Decimal("70000")
        assert order["customer"]["nama_santri"] == "Ahmad"
        assert len(order["product_orders"]) == 2
        assert order["product_orders"][0]["product"]["vendor"]["name"] == "Dapur A"
        assert sorted(v["name"] for v in order["vendors"]) == ["Dapur A", "Dapur B"]

        assert data["whatsapp_url"].startswith("https://wa.me/6281111111111?text=")
        assert unquote(data["whatsapp_url"].split("text=", 1)[1]) == data["message_text"]
        assert f"/orders/{order['order_number']}" in data["message_text"]

        # cart is emptied by checkout
        cart = client.get("/storefront/cart", headers=headers).json()["data"]
        assert cart["items"] == []

        tracked = client.get(f"/storefront/orders/{order['order_number']}")
        assert tracked.status_code == 200
        assert tracked.json()["message"] == "Menunggu pembayaran"

    def test_checkout_without_settings_has_no_whatsapp_url(self, client):
        nasi, _ = self._seed_products()
        headers = {"X-Cart-Session": "cart-1"}
        client.post("/storefront/cart/items", json={"product_id": nasi}, headers=headers)

        response = client.post("/storefront/cart/checkout", json={"orderer": ORDERER}, headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["whatsapp_url"] is None
        assert "https://kitchen.example/orders/" in response.json()["data"]["message_text"]

    def test_empty_cart_cannot_check_out(self, client):
        response = client.post(
            "/storefront/cart/checkout", json={"orderer": ORDERER}, headers={"X-Cart-Session": "empty"}
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "Cart is empty"

    def test_orderer_name_is_required(self, client):
        nasi, _ = self._seed_products()
        headers = {"X-Cart-Session": "cart-1"}
        client.post("/storefront/cart/items", json={"product_id": nasi}, headers=headers)

        response = client.post(
            "/storefront/cart/checkout", json={"orderer": {"name": "", "phone_number": "0812"}}, headers=headers
        )
        assert response.status_code == 422

    def test_unknown_order_number(self, client):
        assert client.get("/storefront/orders/BAF-20240101-00000").status_code == 404

    def test_browsing_does_not_open_sessions(self, client):
        for i in range(5):
            assert client.get("/storefront/cart", headers={"X-Cart-Session": f"junk-{i}"}).status_code == 200
            assert client.get("/storefront/cart").json()["data"]["items"] == []
        client.delete("/storefront/cart", headers={"X-Cart-Session": "junk-0"})
        client.put("/storefront/cart/items/1", json={"quantity": 2}, headers={"X-Cart-Session": "junk-0"})

        assert len(client.app.state.carts) == 0

    def test_checkout_closes_the_session(self, client):
        nasi, _ = self._seed_products()
        headers = {"X-Cart-Session": "cart-1"}
        client.post("/storefront/cart/items", json={"product_id": nasi}, headers=headers)
        assert len(client.app.state.carts) == 1

        response = client.post("/storefront/cart/checkout", json={"orderer": ORDERER}, headers=headers)
        assert response.status_code == 201
        assert len(client.app.state.carts) == 0
