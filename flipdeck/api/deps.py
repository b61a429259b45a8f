"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication, plan gating and storage
dependencies so that router modules can import everything they need from
one place::

    from flipdeck.api.deps import get_db, get_current_active_user
"""

from flipdeck.auth.dependencies import (
    get_current_active_user,
    get_current_user,
    get_optional_user,
)
from flipdeck.billing.dependencies import check_flipbook_limit, get_plan_limits
from flipdeck.database import get_db
from flipdeck.storage.asset_store import get_asset_store

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "get_plan_limits",
    "check_flipbook_limit",
    "get_asset_store",
]
