from datetime import date, timedelta

import pytest

from mobileshop.accounts.dashboard import service as dashboard_service
from mobileshop.accounts.expenses import schemas as expense_schemas
from mobileshop.accounts.expenses import service as expense_service
from mobileshop.errors import NotFoundError
from mobileshop.returns import schemas as return_schemas
from mobileshop.returns import service as return_service


def _expense(db, identity, amount, day, description="Shop rent"):
    return expense_service.create_expense(
        db,
        expense_schemas.ExpenseCreate(description=description, amount=amount, expense_date=day),
        user_id=identity.id,
    )


# ---------- expenses ----------
def test_expense_crud(db, superuser):
    created = _expense(db, superuser, 5000, date(2024, 3, 1))
    assert created["created_by_username"] == "superuser"

    updated = expense_service.update_expense(
        db, created["id"], expense_schemas.ExpenseUpdate(amount=5500)
    )
    assert updated["amount"] == pytest.approx(5500)
    assert updated["description"] == "Shop rent"

    assert expense_service.delete_expense(db, created["id"]) == {"success": True}
    with pytest.raises(NotFoundError):
        expense_service.get_expense_by_id(db, created["id"])


def test_expense_list_by_date_range(db, superuser):
    _expense(db, superuser, 100, date(2024, 1, 10), "Tea")
    _expense(db, superuser, 200, date(2024, 1, 20), "Electricity")
    _expense(db, superuser, 300, date(2024, 2, 5), "Internet")

    january = expense_service.list_expenses(
        db, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )

    assert january["total_expenses"] == pytest.approx(300)
    assert [e["description"] for e in january["expenses"]] == ["Electricity", "Tea"]


# ---------- dashboard ----------
def test_dashboard_stats_net_of_returns_and_expenses(db, admin, superuser, make_product, sell):
    phone = make_product(quantity=10, purchase_price=90, selling_price=100)
    sale = sell([(phone, 3)])
    return_service.create_return(
        db,
        admin,
        return_schemas.ReturnCreate(
            sale_id=sale.id, sale_item_id=sale.items[0].id, product_id=phone.id, quantity=1
        ),
    )
    _expense(db, superuser, 15, date.today())

    stats = dashboard_service.dashboard_stats(db)

    assert stats["transactions"] == 1
    assert stats["total_sales"] == pytest.approx(200)
    assert stats["total_profit"] == pytest.approx(20)
    assert stats["total_expenses"] == pytest.approx(15)
    assert stats["net_profit"] == pytest.approx(5)


def test_dashboard_stats_outside_period_is_zero(db, make_product, sell):
    phone = make_product()
    sell([(phone, 1)])

    last_year = date.today() - timedelta(days=400)
    stats = dashboard_service.dashboard_stats(db, last_year, last_year + timedelta(days=1))

    assert stats == {
        "transactions": 0,
        "total_sales": 0.0,
        "total_profit": 0.0,
        "total_expenses": 0.0,
        "net_profit": 0.0,
    }


def test_top_products_ranked_by_units(db, make_product, sell):
    phone = make_product(name="Galaxy A05", quantity=20)
    case = make_product(name="Silicone Case", quantity=50, purchase_price=1, selling_price=3)

    sell([(phone, 1), (case, 4)])
    sell([(case, 2)])

    top = dashboard_service.top_products(db, limit=1)

    assert top == [{"product_name": "Silicone Case", "total_sold": 6, "revenue": pytest.approx(18)}]


def test_low_stock_below_threshold(db, make_product):
    make_product(name="Nokia 105", quantity=1)
    make_product(name="Tecno Spark", quantity=4)
    make_product(name="Vivo Y17", quantity=9)

    rows = dashboard_service.low_stock(db, threshold=5)

    assert [r["name"] for r in rows] == ["Nokia 105", "Tecno Spark"]
    assert rows[0]["category_name"] == "Phone"
