from app.models.user import User
from app.models.code_session import CodeSession

__all__ = ["User", "CodeSession"]
