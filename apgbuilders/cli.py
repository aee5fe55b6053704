# -*- coding: utf-8 -*-
"""
Database housekeeping commands.

  flask --app apgbuilders init-db
  flask --app apgbuilders seed-demo [--reset]
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal

import click
from sqlalchemy import inspect

from .extensions import db
from .models import Expense, Site, SiteIncome, Vendor, Worker, WorkerPayment

TABLES = ("sites", "vendors", "workers", "expenses", "worker_payments", "site_income")


def _tables() -> set[str]:
    return set(inspect(db.engine).get_table_names())


def _cnt(model) -> int:
    return db.session.query(model).count()


def create_missing_tables() -> list[str]:
    before = _tables()
    db.create_all()
    return sorted(_tables() - before)


def seed_demo_data() -> dict[str, int]:
    tower = Site(name="Tower A", location="Pune", status="active", budget=Decimal("100000"),
                 start_date=date(2024, 1, 1), description="G+7 residential block")
    villa = Site(name="Villa B", location="Nashik", status="paused", budget=Decimal("45000"),
                 start_date=date(2023, 9, 15), end_date=date(2024, 6, 30))
    cement = Vendor(name="Shree Cement Traders", vendor_type="Materials", contact_person="R. Patil",
                    phone="9800000001", credit_balance=Decimal("0"))
    steel = Vendor(name="Deccan Steel", vendor_type="Materials", phone="9800000002",
                   credit_balance=Decimal("5000"))
    mason = Worker(name="Suresh Jadhav", skill_type="Mason", daily_rate=Decimal("800"))
    helper = Worker(name="Anil More", skill_type="Helper", daily_rate=Decimal("500"))
    db.session.add_all([tower, villa, cement, steel, mason, helper])
    db.session.flush()

    db.session.add_all([
        Expense(site_id=tower.id, vendor_id=cement.id, description="Cement, 200 bags", amount=Decimal("12000"),
                expense_date=date(2024, 2, 1), category="Materials"),
        Expense(site_id=tower.id, vendor_id=steel.id, description="TMT bars", amount=Decimal("8000"),
                expense_date=date(2024, 3, 1), category="Materials", is_credit=True),
        Expense(site_id=villa.id, vendor_id=cement.id, description="Plaster sand", amount=Decimal("3500"),
                expense_date=date(2024, 1, 20), category="Materials"),
        WorkerPayment(site_id=tower.id, worker_id=mason.id, amount=Decimal("8000"), days_worked=10,
                      payment_date=date(2024, 2, 10), description="February, first half"),
        WorkerPayment(site_id=tower.id, worker_id=helper.id, amount=Decimal("2000"), days_worked=4,
                      payment_date=date(2024, 2, 10)),
        SiteIncome(site_id=tower.id, description="First RA bill", amount=Decimal("50000"),
                   income_date=date(2024, 2, 28), source="Client"),
        SiteIncome(site_id=villa.id, description="Advance", amount=Decimal("10000"),
                   income_date=date(2023, 9, 20), source="Client"),
    ])
    db.session.commit()
    return {t.__tablename__: _cnt(t) for t in (Site, Vendor, Worker, Expense, WorkerPayment, SiteIncome)}


def register_cli(app) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create missing tables without touching existing data."""
        click.echo(f"[init-db] SQLALCHEMY_DATABASE_URI = {app.config.get('SQLALCHEMY_DATABASE_URI', '')}")
        created = create_missing_tables()
        if created:
            click.echo(f"[init-db] created tables: {', '.join(created)}")
        else:
            click.echo("[init-db] no new tables needed")
        present = [t for t in TABLES if t in _tables()]
        click.echo(f"[init-db] ledger tables: {', '.join(present)}")

    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Drop and recreate all tables first.")
    def seed_demo(reset: bool):
        """Insert a small demo dataset."""
        if reset:
            click.echo("[seed-demo] dropping tables")
            db.drop_all()
        create_missing_tables()
        counts = seed_demo_data()
        for table, n in counts.items():
            click.echo(f"[seed-demo] {table}: {n} rows")
