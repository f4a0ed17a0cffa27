from loguru import logger
from sqlalchemy.orm import Session

from mobileshop.config import settings
from mobileshop.stock.category.service import ensure_default_categories
from mobileshop.users import crud as user_crud
from mobileshop.users.auth import hash_password
from mobileshop.users.models import User


# username -> role
DEFAULT_USERS = {
    "admin": "admin",
    "superuser": "superuser",
}


def seed_defaults(db: Session):
    """First-run data: the standard categories plus one account per role."""
    ensure_default_categories(db)

    for username, role in DEFAULT_USERS.items():
        if user_crud.get_user_by_username(db, username):
            continue

        db.add(User(
            username=username,
            hashed_password=hash_password(settings.DEFAULT_PASSWORD),
            role=role,
        ))
        logger.info(f"Seeded default {role} account '{username}'")

    db.commit()
