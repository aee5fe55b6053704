from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from apgbuilders.extensions import db
from apgbuilders.repository import (
    ExpenseRepository,
    RecordNotFound,
    SiteIncomeRepository,
    SiteRepository,
    VendorRepository,
    WorkerPaymentRepository,
)


def test_create_get_update_site(app):
    repo = SiteRepository()
    site = repo.create({"name": "Tower C", "location": "Thane", "budget": Decimal("2500.50")})
    assert site.id
    assert site.status == "active"

    repo.update(site.id, {"status": "completed"})
    assert repo.get(site.id).status == "completed"
    assert repo.get(site.id).budget == Decimal("2500.50")


def test_get_unknown_returns_none(app):
    assert SiteRepository().get(999) is None


def test_update_and_delete_unknown_raise(app):
    with pytest.raises(RecordNotFound):
        SiteRepository().update(999, {"name": "x"})
    with pytest.raises(RecordNotFound):
        SiteIncomeRepository().delete(999)


def test_count_and_filters(ledger):
    repo = SiteRepository()
    assert repo.count() == 2
    assert repo.count(status="active") == 1
    assert [s.name for s in repo.select(status="paused")] == ["Villa B"]


def test_list_for_select_is_by_name(ledger):
    assert [v.name for v in VendorRepository().list_for_select()] == ["Deccan Steel", "Shree Cement"]


def test_list_newest_breaks_ties_by_id(ledger):
    # same flush, so created_at may tie; id decides
    assert [s.name for s in SiteRepository().list_newest()] == ["Villa B", "Tower A"]


def test_expenses_with_relations_newest_first(ledger):
    rows = ExpenseRepository().list_with_relations()
    assert [e.expense_date for e in rows] == [date(2024, 3, 1), date(2024, 2, 1)]
    assert rows[0].site.name == "Tower A"
    assert rows[0].vendor.name == "Deccan Steel"


def test_per_owner_reads(ledger):
    tower = ledger["tower"]
    assert len(ExpenseRepository().for_site(tower.id)) == 2
    assert len(ExpenseRepository().for_vendor(ledger["steel"].id)) == 1
    assert len(WorkerPaymentRepository().for_worker(ledger["mason"].id)) == 1
    assert len(SiteIncomeRepository().for_site(ledger["villa"].id)) == 0


def test_list_with_ledgers_loads_nested_rows(ledger):
    sites = {s.name: s for s in SiteRepository().list_with_ledgers()}
    assert len(sites["Tower A"].expenses) == 2
    assert len(sites["Tower A"].payments) == 1
    assert len(sites["Tower A"].income) == 2
    assert sites["Villa B"].expenses == []


def test_delete_income(ledger):
    repo = SiteIncomeRepository()
    row = repo.for_site(ledger["tower"].id)[0]
    repo.delete(row.id)
    assert repo.get(row.id) is None
    assert repo.count() == 1


def test_failed_commit_rolls_back(app, monkeypatch):
    repo = VendorRepository()

    def boom():
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db.session, "commit", boom)
    with pytest.raises(SQLAlchemyError):
        repo.create({"name": "Ghost Vendor"})
    monkeypatch.undo()
    assert repo.count() == 0


def test_get_out_of_range_id_is_none(app):
    assert SiteRepository().get(2**63) is None
    assert SiteRepository().get(0) is None
    with pytest.raises(RecordNotFound):
        SiteIncomeRepository().delete(99999999999999999999)
