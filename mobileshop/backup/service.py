"""
Database export / import for the shop owner.

- Snapshot the live SQLite file with the online backup API, so a download
  never catches a half-written page.
- Restore from an uploaded SQLite file after checking it really is a shop
  database.
- Dump the business tables as JSON-ready rows, an Excel workbook or CSV.
"""
import io
import os
import shutil
import sqlite3
import uuid
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

import pandas as pd
import pytz
from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from mobileshop.accounts.expenses.models import Expense
from mobileshop.config import settings
from mobileshop.errors import NotFoundError, ValidationError
from mobileshop.returns.models import Return
from mobileshop.sales.models import Sale
from mobileshop.stock.category.models import Category
from mobileshop.stock.products.models import Product


SQLITE_HEADER = b"SQLite format 3\x00"

REQUIRED_TABLES = {
    "users",
    "categories",
    "products",
    "sales",
    "sale_items",
    "returns",
    "expenses",
}

EXPORT_DATASETS = ("sales", "expenses", "products", "returns")


def _shop_timestamp() -> str:
    return datetime.now(pytz.timezone(settings.TIMEZONE)).strftime("%Y%m%d_%H%M%S")


def sqlite_path(engine: Engine) -> Path:
    """Path of the live database file behind ``engine``."""
    if engine.dialect.name != "sqlite":
        raise ValidationError("Only SQLite databases can be exported or imported.")

    database = engine.url.database
    if not database or database == ":memory:":
        raise ValidationError("In-memory databases cannot be exported or imported.")

    return Path(database).resolve()


# ----------------------------
# Export
# ----------------------------

def create_snapshot(engine: Engine, backup_dir: Optional[str] = None) -> Path:
    src_path = sqlite_path(engine)
    if not src_path.exists():
        raise NotFoundError("Database file not found")

    dest_dir = Path(backup_dir or settings.BACKUP_DIR)
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest_path = dest_dir / f"mobile_shop_backup_{_shop_timestamp()}.db"

    with closing(sqlite3.connect(str(src_path))) as src, \
            closing(sqlite3.connect(str(dest_path))) as dst:
        src.backup(dst)

    logger.info(f"Database snapshot written to {dest_path}")
    return dest_path


# ----------------------------
# Import
# ----------------------------

def verify_database_file(path: Path) -> None:
    """Raise ValidationError unless ``path`` is a healthy shop database."""
    with open(path, "rb") as fh:
        if fh.read(len(SQLITE_HEADER)) != SQLITE_HEADER:
            raise ValidationError("Uploaded file is not a SQLite database")

    try:
        with closing(sqlite3.connect(f"file:{path.as_posix()}?mode=ro", uri=True)) as con:
            check = con.execute("PRAGMA quick_check").fetchone()
            tables = {
                row[0]
                for row in con.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
    except sqlite3.DatabaseError as exc:
        raise ValidationError(f"Uploaded database is unreadable: {exc}") from exc

    if not check or check[0] != "ok":
        raise ValidationError("Uploaded database failed the integrity check")

    missing = REQUIRED_TABLES - tables
    if missing:
        raise ValidationError(f"Uploaded database is missing tables: {sorted(missing)}")


def restore_database(engine: Engine, upload: BinaryIO, upload_dir: Optional[str] = None):
    live_path = sqlite_path(engine)

    staging_dir = Path(upload_dir or settings.UPLOAD_DIR)
    staging_dir.mkdir(parents=True, exist_ok=True)
    staged = staging_dir / f"import_{uuid.uuid4().hex}.db"

    try:
        with open(staged, "wb") as out:
            shutil.copyfileobj(upload, out)

        verify_database_file(staged)

        # Drop pooled connections so nothing keeps the old file open
        engine.dispose()
        shutil.copyfile(staged, live_path)
    finally:
        if staged.exists():
            os.remove(staged)

    logger.warning(f"Database replaced from upload: {live_path}")
    return {"success": True, "message": "Database imported successfully."}


# ----------------------------
# Data dumps
# ----------------------------

def _row_dict(obj) -> Dict:
    return {column.key: getattr(obj, column.key) for column in obj.__table__.columns}


def collect_export_data(db: Session) -> Dict[str, List[Dict]]:
    sales = db.query(Sale).order_by(Sale.sale_date.desc(), Sale.id.desc()).all()
    expenses = db.query(Expense).order_by(Expense.expense_date.desc(), Expense.id.desc()).all()

    products = []
    for product, category_name in (
        db.query(Product, Category.name)
        .join(Category, Category.id == Product.category_id)
        .order_by(Product.id)
        .all()
    ):
        row = _row_dict(product)
        row["category_name"] = category_name
        products.append(row)

    returns = []
    for sale_return, invoice_number, customer_name in (
        db.query(Return, Sale.invoice_number, Sale.customer_name)
        .join(Sale, Sale.id == Return.sale_id)
        .order_by(Return.return_date.desc(), Return.id.desc())
        .all()
    ):
        row = _row_dict(sale_return)
        row["invoice_number"] = invoice_number
        row["customer_name"] = customer_name
        returns.append(row)

    return {
        "sales": [_row_dict(s) for s in sales],
        "expenses": [_row_dict(e) for e in expenses],
        "products": products,
        "returns": returns,
    }


def export_excel(db: Session) -> bytes:
    data = collect_export_data(db)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name in EXPORT_DATASETS:
            pd.DataFrame(data[name]).to_excel(writer, sheet_name=name, index=False)

    return buffer.getvalue()


def export_csv(db: Session, dataset: str) -> str:
    if dataset not in EXPORT_DATASETS:
        raise NotFoundError(f"Unknown dataset '{dataset}'")

    rows = collect_export_data(db)[dataset]
    return pd.DataFrame(rows).to_csv(index=False)
