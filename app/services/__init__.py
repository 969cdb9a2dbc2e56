"""
                        Services Module

Domain operations. Each takes an explicit ``Actor`` (where identity
matters) and an AsyncSession, and raises app.core.errors on failure.

Services:
    - policy: role gate, country gate and order access decision
    - accounts: registration, login and token resolution
    - catalog: restaurants and menus
    - cart: per-user cart with quantity merge
    - orders: order creation and status lifecycle
    - payments: stored payment method metadata
"""
