# app/models/__init__.py
from app.models.user_models import User, RefreshToken
from app.models.activity_models import UserActivity
from app.models.vendor_models import Vendor
from app.models.product_models import Product, Category, product_categories
from app.models.schedule_models import Schedule
from app.models.order_models import Order, OrderStatus, ORDER_STATUS_FLOW
from app.models.invoice_models import Invoice, InvoiceStatus
from app.models.settings_models import AppSettings
