from .base import Base
from .models import collection, event, item, refresh_token, user

__all__ = ["Base", "collection", "event", "item", "refresh_token", "user"]
