"""CodeSession model: one analyze/debug/translate call made by a signed-in user."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class CodeSession(Base):
    __tablename__ = "code_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # analyze | debug | translate
    code = Column(Text, nullable=False)
    language = Column(String(64), nullable=False)
    target_language = Column(String(64), nullable=True)
    # result object serialized as JSON text
    result_json = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    user = relationship("User", back_populates="sessions")
