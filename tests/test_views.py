from __future__ import annotations

import io
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook
from sqlalchemy.exc import SQLAlchemyError

from apgbuilders.extensions import db
from apgbuilders.models import Expense, Site, SiteIncome, Vendor, Worker, WorkerPayment
from apgbuilders.repository import (
    ExpenseRepository,
    Repository,
    SiteIncomeRepository,
    SiteRepository,
)


def _boom(*_a, **_k):
    raise SQLAlchemyError("connection lost")


# ------------ dashboard -------------------------------------------------------
def test_dashboard_empty(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"No expenses recorded yet." in resp.data


def test_dashboard_totals(client, ledger):
    html = client.get("/").get_data(as_text=True)
    assert 'id="total-sites">2<' in html
    assert "1 active" in html
    assert 'id="total-expenses">₹20,000<' in html
    assert "₹10,000 to workers" in html
    assert 'id="net-profit">₹20,000<' in html
    assert html.index("Steel") < html.index("Cement")
    assert "Tower A • Deccan Steel" in html


def test_dashboard_read_failure_shows_zero_state(client, ledger, monkeypatch):
    monkeypatch.setattr(ExpenseRepository, "list_with_relations", _boom)
    html = client.get("/").get_data(as_text=True)
    assert "Failed to fetch dashboard stats" in html
    assert 'id="total-sites">0<' in html
    assert 'id="total-expenses">₹0<' in html


def test_export_csv(client, ledger):
    resp = client.get("/export.csv")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert f"apgbuilders-data-{date.today().isoformat()}.csv" in resp.headers["Content-Disposition"]
    lines = resp.get_data(as_text=True).splitlines()
    assert lines[0].startswith('"Site Name","Location"')
    assert '"Tower A","Pune","active","100000","50000","20000","10000","20000"' in lines
    assert '"Villa B","Nashik","paused","","0","0","0","0"' in lines


def test_export_xlsx(client, ledger):
    resp = client.get("/export.xlsx")
    assert resp.status_code == 200
    ws = load_workbook(io.BytesIO(resp.data)).active
    names = [r[0] for r in ws.iter_rows(min_row=2, values_only=True)]
    assert names == ["Tower A", "Villa B"]


def test_export_read_failure_redirects(client, monkeypatch):
    monkeypatch.setattr(SiteRepository, "list_with_ledgers", _boom)
    resp = client.get("/export.csv", follow_redirects=True)
    assert resp.request.path == "/"
    assert b"Failed to fetch site summary" in resp.data


def test_unknown_route_is_404(client):
    resp = client.get("/no/such/page")
    assert resp.status_code == 404
    assert b"Page not found" in resp.data


# ------------ sites -----------------------------------------------------------
def test_sites_list(client, ledger):
    html = client.get("/sites").get_data(as_text=True)
    assert "Tower A" in html and "Villa B" in html
    assert "Budget: ₹100,000" in html


def test_sites_list_read_failure(client, monkeypatch):
    monkeypatch.setattr(SiteRepository, "list_newest", _boom)
    resp = client.get("/sites")
    assert resp.status_code == 200
    assert b"Failed to fetch sites" in resp.data
    assert b"No sites yet" in resp.data


def test_site_view_summary(client, ledger):
    html = client.get(f"/sites/view/{ledger['tower'].id}").get_data(as_text=True)
    assert 'id="total-income">₹50,000<' in html
    assert 'id="total-expenses">₹20,000<' in html
    assert 'id="total-payments">₹10,000<' in html
    assert 'id="net-profit">₹20,000<' in html
    assert "text-success" in html
    assert f"/income/add?site_id={ledger['tower'].id}" in html


def test_site_view_loss_is_styled(client, ledger):
    db.session.add(Expense(site_id=ledger["villa"].id, vendor_id=ledger["cement"].id,
                           description="Sand", amount=Decimal("700")))
    db.session.commit()
    html = client.get(f"/sites/view/{ledger['villa'].id}").get_data(as_text=True)
    assert 'text-danger" id="net-profit">₹-700<' in html


def test_site_view_unknown_redirects(client):
    resp = client.get("/sites/view/999", follow_redirects=True)
    assert resp.request.path == "/sites"
    assert b"Site not found" in resp.data


def test_site_add(client):
    resp = client.post("/sites/add", data={"name": "Tower C", "location": "Thane", "budget": "5000",
                                            "status": "active"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/sites")
    assert SiteRepository().select(name="Tower C")[0].budget == Decimal("5000")


def test_site_add_invalid_stays_on_form(client):
    resp = client.post("/sites/add", data={"name": "", "budget": "-1"})
    assert resp.status_code == 200
    assert b"Please check the site details" in resp.data
    assert SiteRepository().count() == 0


def test_site_add_write_failure_stays_on_form(client, monkeypatch):
    monkeypatch.setattr(Repository, "create", _boom)
    resp = client.post("/sites/add", data={"name": "Tower C", "status": "active"})
    assert resp.status_code == 200
    assert b"Failed to save site" in resp.data
    assert b'value="Tower C"' in resp.data


def test_site_edit(client, ledger):
    sid = ledger["tower"].id
    form = client.get(f"/sites/edit/{sid}").get_data(as_text=True)
    assert 'value="100000"' in form
    resp = client.post(f"/sites/edit/{sid}", data={"name": "Tower A1", "status": "completed"},
                       follow_redirects=True)
    assert b"Site updated successfully" in resp.data
    site = db.session.get(Site, sid)
    assert (site.name, site.status, site.budget) == ("Tower A1", "completed", None)


def test_site_edit_unknown_redirects(client):
    resp = client.get("/sites/edit/999")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/sites")


# ------------ vendors & workers -----------------------------------------------
def test_vendor_view_credit_exposure(client, ledger):
    html = client.get(f"/vendors/view/{ledger['steel'].id}").get_data(as_text=True)
    assert 'id="total-expenses">₹8,000<' in html
    assert 'id="credit-expenses">₹8,000<' in html
    assert 'id="expenses-count">1<' in html


def test_vendor_add_and_list(client):
    client.post("/vendors/add", data={"name": "Konkan Timber", "vendor_type": "Wood"})
    html = client.get("/vendors").get_data(as_text=True)
    assert "Konkan Timber" in html
    assert db.session.query(Vendor).one().credit_balance == 0


def test_worker_view_average(client, ledger):
    html = client.get(f"/workers/view/{ledger['mason'].id}").get_data(as_text=True)
    assert 'id="total-payments">₹10,000<' in html
    assert 'id="days-worked">12<' in html
    assert 'id="average-daily">₹833.33<' in html


def test_worker_edit(client, ledger):
    wid = ledger["mason"].id
    client.post(f"/workers/edit/{wid}", data={"name": "Suresh J", "daily_rate": "900"})
    assert db.session.get(Worker, wid).daily_rate == Decimal("900")


def test_workers_unknown_view_redirects(client):
    resp = client.get("/workers/view/12345", follow_redirects=True)
    assert b"Worker not found" in resp.data


# ------------ expenses --------------------------------------------------------
def test_expenses_list_totals(client, ledger):
    html = client.get("/expenses").get_data(as_text=True)
    assert 'id="total">₹20,000<' in html
    assert 'id="credit-total">₹8,000<' in html


def test_expense_add_prefills_site(client, ledger):
    html = client.get(f"/expenses/add?site_id={ledger['tower'].id}").get_data(as_text=True)
    assert f'<option value="{ledger["tower"].id}" selected>Tower A</option>' in html


def test_expense_add(client, ledger):
    resp = client.post("/expenses/add", data={
        "site_id": str(ledger["villa"].id),
        "vendor_id": str(ledger["cement"].id),
        "description": "Plaster",
        "amount": "450",
        "expense_date": "2024-06-01",
        "is_credit": "1",
    })
    assert resp.status_code == 302
    row = db.session.query(Expense).filter_by(description="Plaster").one()
    assert row.is_credit is True
    assert row.credit_amount is None


def test_expense_edit(client, ledger):
    expense = ExpenseRepository().for_vendor(ledger["cement"].id)[0]
    client.post(f"/expenses/edit/{expense.id}", data={
        "site_id": str(ledger["tower"].id),
        "vendor_id": str(ledger["cement"].id),
        "description": "Cement, 250 bags",
        "amount": "15000",
        "expense_date": "2024-02-01",
    })
    assert db.session.get(Expense, expense.id).amount == Decimal("15000")


# ------------ worker payments -------------------------------------------------
def test_worker_payments_list(client, ledger):
    html = client.get("/worker-payments").get_data(as_text=True)
    assert 'id="total">₹10,000<' in html
    assert 'id="total-days">12<' in html
    assert "Suresh" in html


def test_worker_payment_add_uses_daily_rate(client, ledger):
    resp = client.post("/worker-payments/add", data={
        "site_id": str(ledger["tower"].id),
        "worker_id": str(ledger["mason"].id),
        "days_worked": "2",
        "payment_date": "2024-04-01",
    })
    assert resp.status_code == 302
    assert db.session.query(WorkerPayment).filter_by(days_worked=2).one().amount == Decimal("1600")


def test_worker_payment_edit_unknown(client):
    resp = client.post("/worker-payments/edit/77", data={}, follow_redirects=True)
    assert b"Worker payment not found" in resp.data


# ------------ income ----------------------------------------------------------
def test_income_list(client, ledger):
    html = client.get("/income").get_data(as_text=True)
    assert 'id="total">₹50,000<' in html
    assert html.index("RA bill 2") < html.index("RA bill 1")
    assert "Are you sure you want to delete this income record?" in html


def test_income_add_and_edit(client, ledger):
    client.post("/income/add", data={"site_id": str(ledger["villa"].id), "description": "Advance",
                                      "amount": "10000", "income_date": "2024-01-05"})
    row = db.session.query(SiteIncome).filter_by(description="Advance").one()
    client.post(f"/income/edit/{row.id}", data={"site_id": str(ledger["villa"].id), "description": "Advance",
                                                "amount": "12000", "income_date": "2024-01-05"})
    assert db.session.get(SiteIncome, row.id).amount == Decimal("12000")


def test_income_delete(client, ledger):
    row = SiteIncomeRepository().for_site(ledger["tower"].id)[0]
    resp = client.post(f"/income/delete/{row.id}", follow_redirects=True)
    assert b"Income record deleted successfully" in resp.data
    assert db.session.get(SiteIncome, row.id) is None


def test_income_delete_unknown(client):
    resp = client.post("/income/delete/404", follow_redirects=True)
    assert b"Income record not found" in resp.data


def test_income_delete_failure(client, ledger, monkeypatch):
    monkeypatch.setattr(Repository, "delete", _boom)
    row = SiteIncomeRepository().for_site(ledger["tower"].id)[0]
    resp = client.post(f"/income/delete/{row.id}", follow_redirects=True)
    assert b"Failed to delete income record" in resp.data


def test_income_delete_requires_post(client, ledger):
    assert client.get("/income/delete/1").status_code == 405


@pytest.mark.parametrize("path", ["/vendors", "/workers", "/expenses", "/worker-payments", "/income"])
def test_lists_render_empty(client, path):
    resp = client.get(path)
    assert resp.status_code == 200
    assert b"yet" in resp.data


# ------------ lookup failures -------------------------------------------------
def test_expense_add_reference_check_failure_stays_on_form(client, ledger, monkeypatch):
    monkeypatch.setattr(Repository, "get", _boom)
    resp = client.post("/expenses/add", data={
        "site_id": str(ledger["tower"].id),
        "vendor_id": str(ledger["cement"].id),
        "description": "Plaster",
        "amount": "450",
        "expense_date": "2024-06-01",
    })
    assert resp.status_code == 200
    assert b"Please check the expense details" in resp.data
    assert b"Could not be checked, try again" in resp.data
    assert b'value="Plaster"' in resp.data
    monkeypatch.undo()
    assert ExpenseRepository().count() == 2


def test_view_with_oversized_id_redirects(client):
    resp = client.get("/sites/view/99999999999999999999", follow_redirects=True)
    assert resp.request.path == "/sites"
    assert b"Site not found" in resp.data


def test_income_add_with_oversized_site_id(client, ledger):
    resp = client.post("/income/add", data={"site_id": "99999999999999999999", "description": "Advance",
                                             "amount": "10000", "income_date": "2024-01-05"})
    assert resp.status_code == 200
    assert b"Unknown record" in resp.data
    assert SiteIncomeRepository().count() == 2


def test_income_delete_oversized_id(client):
    resp = client.post("/income/delete/99999999999999999999", follow_redirects=True)
    assert b"Income record not found" in resp.data
