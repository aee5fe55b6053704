from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apgbuilders import create_app
from apgbuilders.config import TestingConfig
from apgbuilders.extensions import db
from apgbuilders.models import Expense, Site, SiteIncome, Vendor, Worker, WorkerPayment


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ledger(app):
    """Tower A (Pune): income 50000, expenses 20000, payments 10000."""
    tower = Site(name="Tower A", location="Pune", status="active", budget=Decimal("100000"))
    villa = Site(name="Villa B", location="Nashik", status="paused")
    cement = Vendor(name="Shree Cement")
    steel = Vendor(name="Deccan Steel")
    mason = Worker(name="Suresh", daily_rate=Decimal("800"))
    db.session.add_all([tower, villa, cement, steel, mason])
    db.session.flush()
    db.session.add_all([
        Expense(site_id=tower.id, vendor_id=cement.id, description="Cement", amount=Decimal("12000"),
                expense_date=date(2024, 2, 1)),
        Expense(site_id=tower.id, vendor_id=steel.id, description="Steel", amount=Decimal("8000"),
                expense_date=date(2024, 3, 1), is_credit=True),
        WorkerPayment(site_id=tower.id, worker_id=mason.id, amount=Decimal("10000"), days_worked=12,
                      payment_date=date(2024, 2, 10)),
        SiteIncome(site_id=tower.id, description="RA bill 1", amount=Decimal("30000"),
                   income_date=date(2024, 2, 28)),
        SiteIncome(site_id=tower.id, description="RA bill 2", amount=Decimal("20000"),
                   income_date=date(2024, 3, 28)),
    ])
    db.session.commit()
    return {"tower": tower, "villa": villa, "cement": cement, "steel": steel, "mason": mason}
