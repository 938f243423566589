from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from gazette.core.database import Base, utcnow


class Article(Base):
    __tablename__ = "articles"
    __table_args__ = (
        # Public URLs are /{category_alias}/{article_alias}_{id}
        UniqueConstraint("category_id", "alias", name="uq_articles_category_alias"),
    )

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(
        Integer, ForeignKey("categories.id"), nullable=False, index=True
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    alias = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    photo = Column(String(255), nullable=True)  # Filename inside UPLOAD_DIR

    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)  # Soft delete marker
