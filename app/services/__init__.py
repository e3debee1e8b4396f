from app.services.engine import CodeEngine
from app.services.users import InMemoryUserStore, SqlUserStore, UserStore

__all__ = ["CodeEngine", "InMemoryUserStore", "SqlUserStore", "UserStore"]
