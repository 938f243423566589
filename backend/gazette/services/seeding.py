"""Default data for a fresh installation."""

import logging
from typing import List
from sqlalchemy.orm import Session

from gazette.core.aliases import make_alias
from gazette.core.database import utcnow
from gazette.models.category import Category
from gazette.repositories import CategoryRepository

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Politique",
    "Société",
    "Sport",
    "Cinéma",
    "Santé",
    "Mode",
    "Sciences",
    "Musique",
    "Hi Tech",
    "Écologie",
    "Gaming",
]


def seed_categories(db: Session, names: List[str] = DEFAULT_CATEGORIES) -> List[str]:
    """Insert the missing categories in one commit and return their aliases."""
    repo = CategoryRepository(db)
    added = []
    for name in names:
        alias = make_alias(name)
        if repo.find_by_alias(alias) is not None:
            continue
        now = utcnow()
        repo.persist(Category(name=name, alias=alias, created_at=now, updated_at=now))
        added.append(alias)

    if added:
        repo.flush()
        logger.info(f"Seeded {len(added)} categories")
    return added
