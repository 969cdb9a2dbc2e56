"""
                Food Ordering API

Role- and country-scoped REST backend for restaurant browsing, carts,
orders and stored payment methods.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
