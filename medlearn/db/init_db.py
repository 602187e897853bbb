"""
Create the schema and seed the admin account and a shared starter deck.

Run with ``medlearn-init-db`` (or ``python -m medlearn.db.init_db``).
Seeding is idempotent, so it is safe to run on every deploy.
"""
import logging
import os

from sqlalchemy.orm import Session

from medlearn.core.security import get_password_hash
from medlearn.db.base import SessionLocal, engine
from medlearn.models import Base
from medlearn.models.flashcard import FlashcardCategory
from medlearn.models.user import User

logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin12345")
STARTER_CATEGORY = "General Medicine"


def _ensure_admin(db: Session) -> User:
    admin = db.query(User).filter(User.email == ADMIN_EMAIL).first()
    if admin:
        return admin

    admin = User(
        email=ADMIN_EMAIL,
        name="System Administrator",
        hashed_password=get_password_hash(ADMIN_PASSWORD),
        role="admin",
        is_active=True,
        profile={},
        preferences={},
        achievements=[],
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Created admin user {ADMIN_EMAIL}")
    return admin


def init_db(db: Session) -> None:
    """
    Seed default data.

    Args:
        db: Database session
    """
    admin = _ensure_admin(db)

    starter = db.query(FlashcardCategory).filter(
        FlashcardCategory.user_id == admin.id,
        FlashcardCategory.name == STARTER_CATEGORY,
    ).first()
    if starter is None:
        db.add(FlashcardCategory(
            name=STARTER_CATEGORY,
            description="Shared starter deck",
            is_public=True,
            user_id=admin.id,
            flashcard_count=0,
        ))
        db.commit()
        logger.info(f"Created public flashcard category '{STARTER_CATEGORY}'")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format='%(levelname)s:\t%(name)s\t%(message)s')

    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        init_db(db)
    finally:
        db.close()
    logger.info("Database initialization complete")


if __name__ == "__main__":
    main()
