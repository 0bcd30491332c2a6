# app/utils/order_text.py
import re
from typing import List, Optional
from urllib.parse import quote

from app.schemas.order_schemas import CustomerInfo, ProductOrder
from app.utils.decimal_utils import to_idr

SEPARATOR = "--------------------------------"


def generate_order_text(
    product_orders: List[ProductOrder],
    customer: CustomerInfo,
    total,
    order_number: str,
    app_domain: str,
) -> str:
    """The WhatsApp message a customer sends the admin after checkout."""
    lines = ["Assalamualaikum, saya mau order.", ""]
    for index, line in enumerate(product_orders, start=1):
        lines.append(f"{index}. *{line.product.name}*")
        lines.append(f"    Quantity: {line.quantity}")
        lines.append(f"    Harga (@): {to_idr(line.product.price)}")
        lines.append(f"    Total Harga: {to_idr(line.product.price * line.quantity)}")
    lines.append("")
    lines.append(f"Total : *{to_idr(total)}*")
    lines.append(SEPARATOR)
    lines.append("*Nama :*")
    lines.append(f"{customer.name} ( {customer.phone_number} )")
    if customer.nama_santri:
        kelas = f" ({customer.kelas})" if customer.kelas else ""
        lines.append(f"*Santri :* {customer.nama_santri}{kelas}")
    if customer.notes:
        lines.append(f"*Catatan :* {customer.notes}")
    lines.append(SEPARATOR)
    lines.append(f"Halaman order: {app_domain.rstrip('/')}/orders/{order_number}")
    return "\n".join(lines)


def normalize_phone_number(phone: str) -> str:
    # wa.me wants digits only, in international form (08xx -> 628xx)
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith("0"):
        digits = "62" + digits[1:]
    return digits


def build_whatsapp_url(phone: Optional[str], text: str) -> Optional[str]:
    digits = normalize_phone_number(phone or "")
    if not digits:
        return None
    return f"https://wa.me/{digits}?text={quote(text)}"
