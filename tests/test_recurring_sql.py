import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import text

from backend.app.crud.stores import SQLClientDirectory, SQLInvoiceStore, SQLTemplateStore, build_recurring_processor
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.models.client import Client
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_template import InvoiceTemplate
from backend.app.schemas.recurring import SkipReason


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def _create_client(db, **overrides):
    values = {
        "name": "Acme Ltd",
        "email": "billing@acme.test",
        "phone": "555-0100",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
    }
    values.update(overrides)
    client = Client(**values)
    db.add(client)
    db.commit()
    db.refresh(client)
    return client


def _create_template(db, client_id, **overrides):
    values = {
        "name": "Monthly retainer",
        "client_id": client_id,
        "amount": Decimal("250.00"),
        "frequency": "monthly",
        "payment_terms": "net_30",
        "next_invoice_date": "2025-01-01",
        "line_items": "[]",
        "tax_amount": Decimal("20.00"),
        "shipping_amount": Decimal("0.00"),
    }
    values.update(overrides)
    template = InvoiceTemplate(**values)
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def test_run_batch_creates_invoice_rows_and_advances_templates():
    db = SessionLocal()
    try:
        client = _create_client(db)
        monthly = _create_template(db, client.id)
        weekly = _create_template(db, client.id, frequency="weekly", payment_terms="due_on_receipt")
        future = _create_template(db, client.id, next_invoice_date="2025-03-01")

        result = build_recurring_processor(db).run_batch(today=date(2025, 1, 5))

        assert result.success is True
        assert result.processed == 2
        invoices = db.query(Invoice).order_by(Invoice.id).all()
        assert [inv.template_id for inv in invoices] == [monthly.id, weekly.id]
        assert [inv.invoice_number for inv in invoices] == ["INV-0001", "INV-0002"]
        first = invoices[0]
        assert first.status == "draft"
        assert first.issue_date == date(2025, 1, 5)
        assert first.due_date == date(2025, 2, 4)
        assert first.total_amount == Decimal("270.00")
        assert first.client_name == "Acme Ltd"
        assert first.client_address == "1 Main St, Springfield, IL 62701"
        assert invoices[1].due_date == date(2025, 1, 5)

        db.refresh(monthly)
        db.refresh(weekly)
        db.refresh(future)
        assert monthly.next_invoice_date == "2025-02-01"
        assert weekly.next_invoice_date == "2025-01-08"
        assert future.next_invoice_date == "2025-03-01"
    finally:
        db.close()


def test_corrupt_rows_are_skipped_without_failing_the_batch():
    db = SessionLocal()
    try:
        client = _create_client(db)
        no_client = _create_template(db, None)
        bad_date = _create_template(db, client.id, next_invoice_date="someday")
        missing_client = _create_template(db, client.id + 100)
        good = _create_template(db, client.id)

        result = build_recurring_processor(db).run_batch(today=date(2025, 1, 5))

        assert result.success is True
        assert result.processed == 1
        reasons = {o.template_id: o.skip_reason for o in result.outcomes}
        assert reasons[no_client.id] == SkipReason.MISSING_REQUIRED_FIELDS
        assert reasons[bad_date.id] == SkipReason.INVALID_NEXT_INVOICE_DATE
        assert reasons[missing_client.id] == SkipReason.CLIENT_NOT_FOUND
        assert reasons[good.id] is None
        assert db.query(Invoice).count() == 1
        db.refresh(bad_date)
        assert bad_date.next_invoice_date == "someday"
    finally:
        db.close()


def test_duplicate_invoice_number_rolls_back_and_keeps_schedule():
    db = SessionLocal()
    try:
        client = _create_client(db)
        template = _create_template(db, client.id)
        db.add(
            Invoice(
                invoice_number="INV-0002",
                client_id=client.id,
                amount=Decimal("10.00"),
                total_amount=Decimal("10.00"),
                issue_date=date(2024, 12, 1),
                due_date=date(2024, 12, 1),
            )
        )
        db.commit()

        result = build_recurring_processor(db).run_batch(today=date(2025, 1, 5))

        assert result.success is True
        assert result.processed == 0
        assert result.outcomes[0].skip_reason == SkipReason.INSERT_FAILED
        assert db.query(Invoice).count() == 1
        db.refresh(template)
        assert template.next_invoice_date == "2025-01-01"
    finally:
        db.close()


def test_template_store_reads_all_rows_in_id_order():
    db = SessionLocal()
    try:
        client = _create_client(db)
        first = _create_template(db, client.id, name="First")
        second = _create_template(db, client.id, name="Second", is_active=False)

        records = SQLTemplateStore(db).read_all_templates()

        assert [r.id for r in records] == [first.id, second.id]
        assert records[0].amount == Decimal("250.00")
        assert records[1].is_active is False
    finally:
        db.close()


def test_template_store_update_of_missing_template_raises():
    db = SessionLocal()
    try:
        with pytest.raises(LookupError):
            SQLTemplateStore(db).update_next_invoice_date(404, date(2025, 2, 1))
    finally:
        db.close()


def test_client_directory_returns_none_for_unknown_client():
    db = SessionLocal()
    try:
        client = _create_client(db)
        directory = SQLClientDirectory(db)
        assert directory.read_client(client.id).name == "Acme Ltd"
        assert directory.read_client(client.id + 1) is None
        assert SQLInvoiceStore(db).count_invoices() == 0
    finally:
        db.close()


@pytest.mark.parametrize("raw_amount", ["", "abc", "NaN"])
def test_unreadable_amount_skips_only_that_template(raw_amount):
    db = SessionLocal()
    try:
        client = _create_client(db)
        bad = _create_template(db, client.id, name="bad")
        good = _create_template(db, client.id, name="good")
        db.execute(text("UPDATE invoice_templates SET amount = :a WHERE id = :id"), {"a": raw_amount, "id": bad.id})
        db.commit()

        result = build_recurring_processor(db).run_batch(today=date(2025, 1, 5))

        assert result.success is True
        assert result.processed == 1
        reasons = {o.template_id: o.skip_reason for o in result.outcomes}
        assert reasons[bad.id] == SkipReason.MISSING_REQUIRED_FIELDS
        assert reasons[good.id] is None
        invoices = db.query(Invoice).all()
        assert [inv.template_id for inv in invoices] == [good.id]
        next_date = db.execute(
            text("SELECT next_invoice_date FROM invoice_templates WHERE id = :id"), {"id": bad.id}
        ).scalar_one()
        assert next_date == "2025-01-01"
    finally:
        db.close()


@pytest.mark.parametrize(
    "column, raw_value",
    [("client_id", "abc"), ("is_active", "maybe"), ("tax_amount", "twenty")],
)
def test_row_failing_validation_is_left_out_of_the_batch(column, raw_value):
    db = SessionLocal()
    try:
        client = _create_client(db)
        bad = _create_template(db, client.id, name="bad")
        good = _create_template(db, client.id, name="good")
        db.execute(text(f"UPDATE invoice_templates SET {column} = :v WHERE id = :id"), {"v": raw_value, "id": bad.id})
        db.commit()

        records = SQLTemplateStore(db).read_all_templates()
        assert [r.id for r in records] == [good.id]

        result = build_recurring_processor(db).run_batch(today=date(2025, 1, 5))

        assert result.success is True
        assert result.processed == 1
        assert [o.template_id for o in result.outcomes] == [good.id]
        assert db.query(Invoice).count() == 1
    finally:
        db.close()
