from .models import Connection, normalize_url
from .session import RemoteSession

__all__ = ["Connection", "RemoteSession", "normalize_url"]
