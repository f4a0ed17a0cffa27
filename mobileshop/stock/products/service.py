import re
from typing import BinaryIO, Optional

import pandas as pd
from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from mobileshop.errors import ConflictError, NotFoundError, ValidationError
from mobileshop.sales.models import SaleItem
from mobileshop.stock.category.models import Category
from mobileshop.stock.products import models, schemas
from .models import Product


def serialize_product(product: Product) -> schemas.ProductOut:
    out = schemas.ProductOut.model_validate(product)
    out.category_name = product.category.name if product.category else None
    return out


def _require_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise ValidationError(f"Category {category_id} does not exist.")
    return category


def create_product(db: Session, product: schemas.ProductCreate):
    _require_category(db, product.category_id)

    data = product.model_dump()
    data["name"] = data["name"].strip()

    db_product = models.Product(**data)
    db.add(db_product)
    db.commit()
    db.refresh(db_product)

    logger.info(f"Product '{db_product.name}' created with quantity {db_product.quantity}")
    return db_product


def get_products(
    db: Session,
    category_id: Optional[int] = None,
    name: Optional[str] = None,
):
    query = db.query(models.Product).options(joinedload(models.Product.category))

    if category_id:
        query = query.filter(models.Product.category_id == category_id)

    if name:
        query = query.filter(
            func.lower(models.Product.name).contains(name.lower().strip())
        )

    return query.order_by(models.Product.created_at.desc(), models.Product.id.desc()).all()


def get_product_by_id(db: Session, product_id: int):
    product = (
        db.query(models.Product)
        .options(joinedload(models.Product.category))
        .filter(models.Product.id == product_id)
        .first()
    )

    if not product:
        raise NotFoundError(f"Product {product_id} not found")

    return product


def update_product(
    db: Session,
    product_id: int,
    product: schemas.ProductUpdate
):
    db_product = get_product_by_id(db, product_id)

    update_data = product.model_dump(exclude_unset=True)

    if "category_id" in update_data:
        _require_category(db, update_data["category_id"])

    if "name" in update_data:
        update_data["name"] = update_data["name"].strip()

    for field, value in update_data.items():
        setattr(db_product, field, value)

    db.commit()
    db.refresh(db_product)

    return db_product


def delete_product(db: Session, product_id: int):
    product = get_product_by_id(db, product_id)

    # Sale lines keep referencing the product for history and returns
    sold = db.query(SaleItem.id).filter(SaleItem.product_id == product_id).first()
    if sold:
        raise ValidationError("Cannot delete product with existing sales records")

    db.delete(product)
    db.commit()
    return {"success": True}


# --------------------------------------------------
# Helper: Clean price values from Excel
# --------------------------------------------------
def clean_price(value):
    """
    Accepts: int, float, str (Rs 1,200.50), or NaN
    Returns: float
    """
    if value is None or pd.isna(value):
        return 0.0

    if isinstance(value, (int, float)):
        return float(value)

    value = re.sub(r"[^\d.]", "", str(value))

    try:
        return float(value)
    except ValueError:
        return 0.0


def _clean_int(value) -> int:
    if value is None or pd.isna(value):
        return 0
    try:
        return max(int(float(value)), 0)
    except (TypeError, ValueError):
        return 0


def _clean_text(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _clean_bool(value) -> bool:
    if value is None or pd.isna(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in {"1", "yes", "true", "y"}
    return bool(value)


IMPORT_REQUIRED_COLUMNS = {"name", "category", "purchase_price", "selling_price"}


def import_products_from_excel(db: Session, file: BinaryIO, filename: str):
    """
    Bulk-create products from an Excel sheet.

    Required columns: name, category, purchase_price, selling_price.
    Optional: quantity, condition, serial_number, description,
    supplier_phone, supplier_cnic, pta_approved, warranty_days.
    Rows with an unknown category or a name already present in that
    category are skipped.
    """
    if not filename.lower().endswith((".xlsx", ".xls")):
        raise ValidationError("Invalid file type. Upload .xlsx or .xls")

    try:
        df = pd.read_excel(file)
    except Exception as exc:
        raise ValidationError(f"Could not read Excel file: {exc}") from exc

    # Normalize column names
    df.columns = [str(c).strip().lower() for c in df.columns]

    if not IMPORT_REQUIRED_COLUMNS.issubset(df.columns):
        raise ValidationError(
            f"Excel must contain columns: {sorted(IMPORT_REQUIRED_COLUMNS)}"
        )

    def normalize(text: str) -> str:
        return " ".join(text.lower().strip().split())

    categories = {normalize(c.name): c.id for c in db.query(Category).all()}
    if not categories:
        raise ValidationError("No categories found. Create categories first.")

    existing_products = {
        (name.lower().strip(), category_id)
        for name, category_id in db.query(Product.name, Product.category_id).all()
    }

    products_to_add = []
    skipped = 0

    for _, row in df.iterrows():
        if pd.isna(row["name"]) or pd.isna(row["category"]):
            skipped += 1
            continue

        name = str(row["name"]).strip()
        category_id = categories.get(normalize(str(row["category"])))
        if category_id is None:
            skipped += 1
            continue

        key = (name.lower(), category_id)
        if key in existing_products:
            skipped += 1
            continue

        condition = (_clean_text(row.get("condition")) or "new").lower()
        if condition not in ("new", "used"):
            condition = "new"

        products_to_add.append(
            Product(
                name=name,
                category_id=category_id,
                description=_clean_text(row.get("description")),
                serial_number=_clean_text(row.get("serial_number")),
                condition=condition,
                supplier_phone=_clean_text(row.get("supplier_phone")),
                supplier_cnic=_clean_text(row.get("supplier_cnic")),
                purchase_price=clean_price(row["purchase_price"]),
                selling_price=clean_price(row["selling_price"]),
                quantity=_clean_int(row.get("quantity")),
                pta_approved=_clean_bool(row.get("pta_approved")),
                warranty_days=_clean_int(row.get("warranty_days")),
            )
        )
        existing_products.add(key)

    if not products_to_add:
        raise ConflictError(
            f"Import unsuccessful: all {skipped} rows were invalid or duplicated"
        )

    db.add_all(products_to_add)
    db.commit()
    logger.info(f"Imported {len(products_to_add)} products from {filename}, skipped {skipped}")

    return {
        "message": "Import completed successfully",
        "imported": len(products_to_add),
        "skipped": skipped,
    }
