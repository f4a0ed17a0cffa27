# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path
# - Defaults (categories, admin + superuser) seeded the way startup does
# - API tests go through TestClient with get_db pointed at the test file
# ---------------------------------------------------------------------

import os
import tempfile
from pathlib import Path

# Keep module-level settings (log file, upload/backup dirs) out of the repo
_WORKDIR = Path(tempfile.mkdtemp(prefix="mobileshop-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{(_WORKDIR / 'bootstrap.db').as_posix()}"
os.environ["LOG_FILE"] = str(_WORKDIR / "test.log")
os.environ["BACKUP_DIR"] = str(_WORKDIR / "backup_files")
os.environ["UPLOAD_DIR"] = str(_WORKDIR / "uploads")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from mobileshop.config import settings
from mobileshop.database import Base, build_engine, get_db
from mobileshop.main import app
from mobileshop.sales import schemas as sales_schemas
from mobileshop.sales import service as sales_service
from mobileshop.seed import seed_defaults
from mobileshop.stock.category.models import Category
from mobileshop.stock.products.models import Product
from mobileshop.users.models import User
from mobileshop.users.schemas import Identity


# ---------- Database ----------
@pytest.fixture()
def engine(tmp_path):
    db_path = tmp_path / "shop.db"
    test_engine = build_engine(f"sqlite:///{db_path.as_posix()}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    seed_defaults(session)
    try:
        yield session
    finally:
        session.close()


# ---------- Handy ids / identities ----------
@pytest.fixture()
def admin(db) -> Identity:
    user = db.query(User).filter(User.username == "admin").one()
    return Identity(id=user.id, role=user.role)


@pytest.fixture()
def superuser(db) -> Identity:
    user = db.query(User).filter(User.username == "superuser").one()
    return Identity(id=user.id, role=user.role)


@pytest.fixture()
def phone_category_id(db) -> int:
    return db.query(Category.id).filter(Category.name == "Phone").scalar()


@pytest.fixture()
def make_product(db, phone_category_id):
    """Factory: make_product(name=..., quantity=..., purchase_price=..., selling_price=...)."""

    def _make(
        name="Galaxy A15",
        quantity=10,
        purchase_price=90.0,
        selling_price=100.0,
        **extra,
    ) -> Product:
        product = Product(
            category_id=extra.pop("category_id", phone_category_id),
            name=name,
            quantity=quantity,
            purchase_price=purchase_price,
            selling_price=selling_price,
            **extra,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture()
def checkout(db, admin):
    """
    Ring up a sale through the register path:
    checkout([(product, qty), ...], discount_amount=..., discount_type=...)
    gives back the (sale, warnings) result.
    """

    def _checkout(lines, **sale_fields):
        items = [
            sales_schemas.SaleItemIn(product_id=product.id, quantity=qty)
            for product, qty in lines
        ]
        invoice_factory = sale_fields.pop("invoice_number_factory", None)
        allow_oversell = sale_fields.pop("allow_oversell", None)

        record = sales_schemas.SaleRecord(
            items=sales_service.price_line_items(db, items),
            **sale_fields,
        )

        kwargs = {"allow_oversell": allow_oversell}
        if invoice_factory is not None:
            kwargs["invoice_number_factory"] = invoice_factory
        return sales_service.create_sale(db, admin, record, **kwargs)

    return _checkout


@pytest.fixture()
def sell(checkout):
    """Same as checkout, but only the sale."""

    def _sell(lines, **sale_fields):
        return checkout(lines, **sale_fields).sale

    return _sell


# ---------- API ----------
@pytest.fixture()
def client(db, session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _login(client, username):
    response = client.post(
        "/users/token",
        data={"username": username, "password": settings.DEFAULT_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    return _login(client, "admin")


@pytest.fixture()
def superuser_headers(client):
    return _login(client, "superuser")
