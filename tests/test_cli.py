from __future__ import annotations

from apgbuilders.extensions import db
from apgbuilders.models import Expense, Site


def test_init_db_is_idempotent(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0, result.output
    assert "[init-db] no new tables needed" in result.output
    assert "sites, vendors, workers, expenses, worker_payments, site_income" in result.output


def test_init_db_creates_missing_tables(app):
    db.drop_all()
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0, result.output
    assert "[init-db] created tables:" in result.output
    assert "site_income" in result.output


def test_seed_demo_reset(app, ledger):
    result = app.test_cli_runner().invoke(args=["seed-demo", "--reset"])
    assert result.exit_code == 0, result.output
    assert "[seed-demo] dropping tables" in result.output
    assert "[seed-demo] sites: 2 rows" in result.output
    assert "[seed-demo] expenses: 3 rows" in result.output
    db.session.remove()
    assert db.session.query(Site).filter_by(name="Tower A").one().location == "Pune"
    assert db.session.query(Expense).count() == 3
