"""
API routers, mounted under /api by app.main.
"""

from app.api.routes import auth, cart, orders, payments, restaurants

__all__ = ["auth", "cart", "orders", "payments", "restaurants"]
