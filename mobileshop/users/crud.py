from sqlalchemy.orm import Session
from mobileshop.users.models import User
from mobileshop.users import schemas as user_schema


def create_user(db: Session, user: user_schema.UserSchema, hashed_password: str):
    new_user = User(
        username=user.username,
        hashed_password=hashed_password,
        role=user.role
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()


def get_all_users(db: Session, skip: int = 0, limit: int = 50):
    users = db.query(User).order_by(User.id).offset(skip).limit(limit).all()
    return [user_schema.UserDisplaySchema.model_validate(user) for user in users]


def update_user(db: Session, username: str, updated_user: user_schema.UserUpdateSchema, hashed_password: str = None):
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None

    if hashed_password:
        user.hashed_password = hashed_password
    if updated_user.role:
        user.role = updated_user.role

    db.commit()
    db.refresh(user)
    return user


def delete_user_by_username(db: Session, username: str):
    user = db.query(User).filter(User.username == username).first()
    if user:
        db.delete(user)
        db.commit()
        return True
    return False
