from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from gazette.core.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(180), unique=True, nullable=False, index=True)
    roles = Column(JSON, nullable=False, default=lambda: ["ROLE_USER"])
    password_hash = Column(String(255), nullable=False)

    # Metadata
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    last_login = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
