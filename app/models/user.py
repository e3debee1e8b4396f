"""User model: login identity plus its code-operation history."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Case-sensitive as submitted; the unique index backs signup's duplicate check
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    sessions = relationship(
        "CodeSession",
        back_populates="user",
        order_by="CodeSession.id",
        cascade="all, delete-orphan",
    )
