"""SQLAlchemy models for FlipDeck.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from flipdeck.models.flipbook import Flipbook
from flipdeck.models.subscription import Subscription
from flipdeck.models.user import User
from flipdeck.models.user_role import UserRole

__all__ = [
    "Flipbook",
    "Subscription",
    "User",
    "UserRole",
]
