from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from loguru import logger

from mobileshop.users.auth import authenticate_user, create_access_token, get_current_user, hash_password
from mobileshop.users.permissions import require_superuser
from mobileshop.database import get_db
from mobileshop.users import crud as user_crud, schemas

router = APIRouter()


@router.post("/register/", status_code=status.HTTP_201_CREATED)
def sign_up(
    user: schemas.UserSchema,
    db: Session = Depends(get_db),
    current_user: schemas.UserDisplaySchema = Depends(require_superuser),
):
    # Normalize username
    user.username = user.username.strip().lower()

    existing_user = user_crud.get_user_by_username(db, user.username)
    if existing_user:
        raise HTTPException(status_code=409, detail="Username already exists")

    user_crud.create_user(db, user, hash_password(user.password))
    logger.info(f"User {user.username} ({user.role}) registered by {current_user.username}")

    return {"message": f"User {user.username} registered successfully"}


@router.post("/token", response_model=schemas.TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    username = form_data.username.strip().lower()
    password = form_data.password

    user = authenticate_user(db, username, password)
    if not user:
        logger.warning(f"Authentication denied for username: {username}")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(data={"sub": user.username, "role": user.role})
    logger.info(f"User authenticated: {username}")

    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.post("/logout")
def logout(current_user: schemas.UserDisplaySchema = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy.
    logger.info(f"User logged out: {current_user.username}")
    return {"success": True}


@router.get("/me", response_model=schemas.UserDisplaySchema)
def get_current_user_info(
    current_user: schemas.UserDisplaySchema = Depends(get_current_user),
):
    return current_user


@router.get("/", response_model=list[schemas.UserDisplaySchema])
def list_all_users(
    db: Session = Depends(get_db),
    current_user: schemas.UserDisplaySchema = Depends(require_superuser),
):
    return user_crud.get_all_users(db)


@router.put("/{username}")
def update_user(
    username: str,
    updated_user: schemas.UserUpdateSchema,
    db: Session = Depends(get_db),
    current_user: schemas.UserDisplaySchema = Depends(require_superuser),
):
    hashed = hash_password(updated_user.password) if updated_user.password else None

    user = user_crud.update_user(db, username, updated_user, hashed_password=hashed)
    if not user:
        logger.warning(f"User not found: {username}")
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {username} updated successfully")
    return {"message": f"User {username} updated successfully"}


@router.delete("/{username}")
def delete_user(
    username: str,
    db: Session = Depends(get_db),
    current_user: schemas.UserDisplaySchema = Depends(require_superuser),
):
    # Prevent self-deletion
    if username == current_user.username:
        logger.warning(f"{current_user.username} attempted to delete themselves.")
        raise HTTPException(status_code=400, detail="You cannot delete yourself.")

    if not user_crud.delete_user_by_username(db, username):
        logger.warning(f"User not found: {username}")
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(f"User {username} deleted successfully")
    return {"message": f"User {username} deleted successfully"}
