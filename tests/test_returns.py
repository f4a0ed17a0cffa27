import pytest

from mobileshop.errors import ConflictError, NotFoundError, ValidationError
from mobileshop.returns import schemas, service
from mobileshop.returns.models import Return
from mobileshop.sales.models import Sale, SaleItem
from mobileshop.stock.inventory import service as inventory_service


def _return(db, identity, sale, quantity, **overrides):
    item = sale.items[0]
    data = {
        "sale_id": sale.id,
        "sale_item_id": item.id,
        "product_id": item.product_id,
        "quantity": quantity,
        "reason": "Customer changed mind",
    }
    data.update(overrides)
    return service.create_return(db, identity, schemas.ReturnCreate(**data))


def _return_by_ids(db, identity, sale_id, sale_item_id, product_id, quantity):
    return service.create_return(
        db,
        identity,
        schemas.ReturnCreate(
            sale_id=sale_id, sale_item_id=sale_item_id, product_id=product_id, quantity=quantity
        ),
    )


def test_partial_return_restocks_and_reverses_profit(db, admin, make_product, sell):
    phone = make_product(quantity=10, purchase_price=90, selling_price=100)
    sale = sell([(phone, 3)])
    sale_id, item_id = sale.id, sale.items[0].id

    sale_return = _return(db, admin, sale, 1)

    assert sale_return.return_amount == pytest.approx(100)
    assert sale_return.return_profit == pytest.approx(10)
    assert inventory_service.get_stock(db, phone.id) == 8

    item = db.query(SaleItem).filter(SaleItem.id == item_id).one()
    assert item.returned_quantity == 1

    stored = db.query(Sale).filter(Sale.id == sale_id).one()
    assert stored.net_total == pytest.approx(200)
    assert stored.total_profit == pytest.approx(20)


def test_return_profit_uses_sold_margin_after_discount(db, admin, make_product, sell):
    phone = make_product(quantity=10, purchase_price=90, selling_price=100)
    sale = sell([(phone, 2)], discount_amount=5, discount_type="flat")

    sale_return = _return(db, admin, sale, 2)

    # Line profit is pre-discount; the header discount is not reversed
    assert sale_return.return_profit == pytest.approx(20)
    stored = db.query(Sale).filter(Sale.id == sale.id).one()
    assert stored.net_total == pytest.approx(-5)
    assert stored.total_profit == pytest.approx(-5)


def test_over_return_rejected_without_changes(db, admin, make_product, sell):
    phone = make_product(quantity=10)
    sale = sell([(phone, 3)])
    _return(db, admin, sale, 1)

    with pytest.raises(ValidationError) as exc_info:
        _return(db, admin, sale, 3)

    assert "exceeds" in exc_info.value.detail
    assert db.query(Return).count() == 1
    assert db.query(SaleItem.returned_quantity).scalar() == 1
    assert inventory_service.get_stock(db, phone.id) == 8


def test_full_return_then_nothing_left(db, admin, make_product, sell):
    phone = make_product(quantity=10)
    sale = sell([(phone, 3)])

    _return(db, admin, sale, 3)

    with pytest.raises(ValidationError):
        _return(db, admin, sale, 1)
    assert inventory_service.get_stock(db, phone.id) == 10


def test_return_for_wrong_sale_rejected(db, admin, make_product, sell):
    phone = make_product(quantity=10)
    first = sell([(phone, 1)])
    second = sell([(phone, 1)])

    with pytest.raises(ValidationError):
        _return(db, admin, first, 1, sale_id=second.id)

    with pytest.raises(ValidationError):
        _return(db, admin, first, 1, product_id=phone.id + 100)

    assert db.query(Return).count() == 0


def test_unknown_sale_item(db, admin, make_product, sell):
    phone = make_product()
    sale = sell([(phone, 1)])

    with pytest.raises(NotFoundError):
        _return(db, admin, sale, 1, sale_item_id=9999)


def test_zero_quantity_rejected_by_schema():
    with pytest.raises(ValueError):
        schemas.ReturnCreate(sale_id=1, sale_item_id=1, product_id=1, quantity=0)


def test_list_returns_joins_sale_details(db, admin, make_product, sell):
    phone = make_product(name="Redmi 13C")
    sale = sell([(phone, 2)], customer_name="Bilal", customer_phone="03450000000")
    _return(db, admin, sale, 1)

    (row,) = service.list_returns(db, customer="bil")
    assert row.product_name == "Redmi 13C"
    assert row.invoice_number == sale.invoice_number
    assert row.customer_phone == "03450000000"

    assert service.list_returns(db, invoice="nope") == []


# ---------- two registers on one sale line ----------
def test_balance_read_fresh_when_row_already_loaded(db, session_factory, admin, make_product, sell):
    phone = make_product(quantity=10)
    sale = sell([(phone, 3)])
    item = sale.items[0]
    assert item.returned_quantity == 0
    sale_id, item_id, product_id = sale.id, item.id, phone.id

    other = session_factory()
    try:
        _return_by_ids(other, admin, sale_id, item_id, product_id, 2)
    finally:
        other.close()

    # This session still holds the line with returned_quantity 0
    with pytest.raises(ValidationError) as exc_info:
        _return_by_ids(db, admin, sale_id, item_id, product_id, 2)

    assert "exceeds" in exc_info.value.detail
    assert db.query(Return).count() == 1
    assert db.query(SaleItem.returned_quantity).scalar() == 2
    assert inventory_service.get_stock(db, product_id) == 9


def test_return_losing_the_race_is_a_conflict(
    db, session_factory, admin, make_product, sell, monkeypatch
):
    phone = make_product(quantity=10, purchase_price=90, selling_price=100)
    sale = sell([(phone, 3)])
    sale_id, item_id, product_id = sale.id, sale.items[0].id, phone.id

    real_amounts = service.return_amounts
    raced = []

    def amounts_after_competing_return(item, quantity):
        # The other register commits between the balance check and the update
        if not raced:
            raced.append(True)
            other = session_factory()
            try:
                _return_by_ids(other, admin, sale_id, item_id, product_id, 2)
            finally:
                other.close()
        return real_amounts(item, quantity)

    monkeypatch.setattr(service, "return_amounts", amounts_after_competing_return)

    with pytest.raises(ConflictError):
        _return_by_ids(db, admin, sale_id, item_id, product_id, 2)

    assert raced == [True]
    assert db.query(Return).count() == 1
    assert db.query(SaleItem.returned_quantity).scalar() == 2
    assert inventory_service.get_stock(db, product_id) == 9

    stored = db.query(Sale).filter(Sale.id == sale_id).one()
    assert stored.net_total == pytest.approx(100)
    assert stored.total_profit == pytest.approx(10)
