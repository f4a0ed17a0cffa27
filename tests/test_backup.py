import io
import sqlite3

import pandas as pd
import pytest

from mobileshop.backup import service
from mobileshop.errors import NotFoundError, ValidationError
from mobileshop.sales.models import Sale


def test_snapshot_is_a_valid_shop_database(engine, db, tmp_path, make_product, sell):
    sell([(make_product(), 1)])

    snapshot = service.create_snapshot(engine, str(tmp_path / "backups"))

    assert snapshot.exists()
    assert snapshot.name.startswith("mobile_shop_backup_")
    service.verify_database_file(snapshot)


def test_verify_rejects_non_sqlite_file(tmp_path):
    junk = tmp_path / "notes.db"
    junk.write_bytes(b"just some text, definitely not sqlite")

    with pytest.raises(ValidationError):
        service.verify_database_file(junk)


def test_verify_rejects_foreign_sqlite_file(tmp_path):
    other = tmp_path / "other.db"
    con = sqlite3.connect(other)
    con.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY)")
    con.commit()
    con.close()

    with pytest.raises(ValidationError) as exc_info:
        service.verify_database_file(other)
    assert "missing tables" in exc_info.value.detail


def test_restore_brings_back_snapshot_state(engine, db, session_factory, tmp_path, make_product, sell):
    phone = make_product()
    sell([(phone, 1)])
    snapshot = service.create_snapshot(engine, str(tmp_path / "backups"))

    sell([(phone, 1)])
    assert db.query(Sale).count() == 2
    db.close()

    with open(snapshot, "rb") as fh:
        result = service.restore_database(engine, fh, str(tmp_path / "staging"))

    assert result["success"] is True
    assert list((tmp_path / "staging").iterdir()) == []

    fresh = session_factory()
    try:
        assert fresh.query(Sale).count() == 1
    finally:
        fresh.close()


def test_restore_refuses_bad_upload(engine, db, tmp_path, make_product, sell):
    sell([(make_product(), 1)])

    with pytest.raises(ValidationError):
        service.restore_database(engine, io.BytesIO(b"garbage"), str(tmp_path / "staging"))

    assert db.query(Sale).count() == 1


def test_export_data_and_csv(db, admin, make_product, sell):
    phone = make_product(name="Oppo A18")
    sale = sell([(phone, 2)], customer_name="Hina")

    data = service.collect_export_data(db)

    assert [s["invoice_number"] for s in data["sales"]] == [sale.invoice_number]
    assert data["products"][0]["category_name"] == "Phone"
    assert data["returns"] == []

    frame = pd.read_csv(io.StringIO(service.export_csv(db, "products")))
    assert list(frame["name"]) == ["Oppo A18"]

    with pytest.raises(NotFoundError):
        service.export_csv(db, "passwords")


def test_export_excel_has_one_sheet_per_dataset(db, make_product, sell):
    sell([(make_product(), 1)])

    workbook = pd.read_excel(io.BytesIO(service.export_excel(db)), sheet_name=None)

    assert set(workbook) == set(service.EXPORT_DATASETS)
    assert len(workbook["sales"]) == 1
