from medlearn.db.init_db import ADMIN_EMAIL, init_db
from medlearn.models.flashcard import FlashcardCategory
from medlearn.models.user import User


def test_init_db_seeds_once(db_session):
    init_db(db_session)
    init_db(db_session)

    admins = db_session.query(User).filter(User.email == ADMIN_EMAIL).all()
    assert len(admins) == 1
    assert admins[0].role == "admin"

    categories = db_session.query(FlashcardCategory).all()
    assert [c.name for c in categories] == ["General Medicine"]
    assert categories[0].is_public is True
