from sqlalchemy import func
from sqlalchemy.orm import Session
from loguru import logger

from mobileshop.errors import ConflictError, NotFoundError, ValidationError
from mobileshop.stock.products.models import Product
from . import models, schemas


DEFAULT_CATEGORIES = ("Phone", "Watch", "Accessory")


# ================= CREATE =================
def create_category(db: Session, category: schemas.CategoryCreate):
    existing = (
        db.query(models.Category)
        .filter(func.lower(models.Category.name) == category.name.lower())
        .first()
    )

    if existing:
        raise ConflictError(f"Category '{category.name}' already exists")

    db_category = models.Category(name=category.name)

    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


# ================= LIST =================
def list_categories(db: Session):
    return db.query(models.Category).order_by(models.Category.name).all()


def get_category(db: Session, category_id: int):
    db_category = (
        db.query(models.Category)
        .filter(models.Category.id == category_id)
        .first()
    )

    if not db_category:
        raise NotFoundError("Category not found")

    return db_category


# ================= UPDATE =================
def update_category(
    db: Session,
    category_id: int,
    category: schemas.CategoryUpdate
):
    db_category = get_category(db, category_id)

    name_exists = (
        db.query(models.Category)
        .filter(func.lower(models.Category.name) == category.name.lower())
        .filter(models.Category.id != category_id)
        .first()
    )
    if name_exists:
        raise ConflictError("Another category with this name already exists")

    db_category.name = category.name

    db.commit()
    db.refresh(db_category)
    return db_category


# ================= DELETE =================
def count_products(db: Session, category_id: int) -> int:
    return (
        db.query(func.count(Product.id))
        .filter(Product.category_id == category_id)
        .scalar()
    )


def delete_category(db: Session, category_id: int):
    db_category = get_category(db, category_id)

    if count_products(db, category_id) > 0:
        raise ValidationError("Cannot delete category with existing products")

    db.delete(db_category)
    db.commit()
    logger.info(f"Category '{db_category.name}' deleted")
    return {"success": True}


def ensure_default_categories(db: Session):
    existing = {name for (name,) in db.query(models.Category.name).all()}
    for name in DEFAULT_CATEGORIES:
        if name not in existing:
            db.add(models.Category(name=name))
    db.commit()
