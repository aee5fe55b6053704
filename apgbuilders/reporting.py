# -*- coding: utf-8 -*-
"""
Financial rollups over rows that were already fetched from the store.

Everything here is pure: no session, no request, no I/O. Functions accept
ORM objects as well as plain mappings, so views and tests can feed them
either way.
"""
from __future__ import annotations

import csv
import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from openpyxl import Workbook
from openpyxl.styles import Font

ZERO = Decimal("0")

UNKNOWN_SITE = "Unknown Site"
UNKNOWN_VENDOR = "Unknown Vendor"

RECENT_EXPENSES_LIMIT = 5

SUMMARY_HEADER = [
    "Site Name",
    "Location",
    "Status",
    "Budget",
    "Total Income",
    "Total Expenses",
    "Worker Payments",
    "Net Profit",
]


# ------------ helpers ---------------------------------------------------------
def D(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return v if isinstance(v, Decimal) else Decimal(str(v))


def _field(row: Any, name: str, default=None):
    if row is None:
        return default
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def _display_name(row: Any, relation: str, fallback: str, by_id: Mapping | None = None) -> str:
    name = _field(_field(row, relation), "name")
    if not name and by_id:
        name = _field(by_id.get(_field(row, f"{relation}_id")), "name")
    return name or fallback


def _index_by_id(rows) -> dict:
    return {_field(r, "id"): r for r in rows or ()}


def _date_key(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value or "")


def plain_number(value) -> str:
    """Number as text without trailing zeros: 100000.00 -> "100000", 12.50 -> "12.5"."""
    if value is None or value == "":
        return ""
    d = D(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


# ------------ records ---------------------------------------------------------
@dataclass(frozen=True)
class RecentExpense:
    id: Any
    description: str
    amount: Decimal
    expense_date: Any
    site_name: str
    vendor_name: str


@dataclass(frozen=True)
class DashboardStats:
    total_sites: int = 0
    active_sites: int = 0
    total_vendors: int = 0
    total_workers: int = 0
    total_expenses: Decimal = ZERO
    total_worker_payments: Decimal = ZERO
    total_income: Decimal = ZERO
    net_profit: Decimal = ZERO
    recent_expenses: tuple[RecentExpense, ...] = field(default_factory=tuple)

    @property
    def is_loss(self) -> bool:
        return self.net_profit < 0


@dataclass(frozen=True)
class SiteSummary:
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_worker_payments: Decimal = ZERO
    net_profit: Decimal = ZERO
    expenses_count: int = 0

    @property
    def is_loss(self) -> bool:
        return self.net_profit < 0


@dataclass(frozen=True)
class VendorSummary:
    total_expenses: Decimal = ZERO
    total_credit_expenses: Decimal = ZERO
    expenses_count: int = 0


@dataclass(frozen=True)
class WorkerSummary:
    total_payments: Decimal = ZERO
    total_days_worked: int = 0
    payments_count: int = 0
    average_daily_earning: Decimal = ZERO


# ------------ reductions ------------------------------------------------------
def sum_amounts(rows: Iterable[Any] | None, field: str = "amount") -> Decimal:
    """Σ row[field]; a missing value counts as zero."""
    return sum((D(_field(r, field)) for r in rows or ()), ZERO)


def net_profit(income, expenses, worker_payments) -> Decimal:
    """Income − expenses − worker payments. Negative means a loss."""
    return D(income) - D(expenses) - D(worker_payments)


def average_daily_earning(total_payments, total_days_worked) -> Decimal:
    days = D(total_days_worked)
    if days > 0:
        return D(total_payments) / days
    return ZERO


def credit_amount(expense: Any) -> Decimal:
    """Effective credit of one expense; an unset credit amount means the whole amount."""
    if not _field(expense, "is_credit"):
        return ZERO
    return D(_field(expense, "credit_amount") or _field(expense, "amount"))


def credit_exposure(expenses: Iterable[Any] | None) -> Decimal:
    return sum((credit_amount(e) for e in expenses or ()), ZERO)


def recent_expenses(
    expenses: Iterable[Any] | None,
    limit: int = RECENT_EXPENSES_LIMIT,
    sites: Iterable[Any] | None = None,
    vendors: Iterable[Any] | None = None,
) -> list[RecentExpense]:
    """Newest expenses first. Names come from the embedded relation, else from
    ``sites``/``vendors`` by id.
    """
    # sorted() is stable with reverse=True: equal dates keep store order
    site_by_id, vendor_by_id = _index_by_id(sites), _index_by_id(vendors)
    ordered = sorted(expenses or (), key=lambda e: _date_key(_field(e, "expense_date")), reverse=True)
    return [
        RecentExpense(
            id=_field(e, "id"),
            description=_field(e, "description") or "",
            amount=D(_field(e, "amount")),
            expense_date=_field(e, "expense_date"),
            site_name=_display_name(e, "site", UNKNOWN_SITE, site_by_id),
            vendor_name=_display_name(e, "vendor", UNKNOWN_VENDOR, vendor_by_id),
        )
        for e in ordered[:max(limit, 0)]
    ]


# ------------ summaries -------------------------------------------------------
def dashboard_summary(
    sites, vendors, workers, expenses, payments, income, limit: int = RECENT_EXPENSES_LIMIT
) -> DashboardStats:
    sites = list(sites or ())
    vendors = list(vendors or ())
    expenses = list(expenses or ())
    total_expenses = sum_amounts(expenses)
    total_payments = sum_amounts(payments)
    total_income = sum_amounts(income)
    return DashboardStats(
        total_sites=len(sites),
        active_sites=sum(1 for s in sites if _field(s, "status") == "active"),
        total_vendors=len(vendors),
        total_workers=len(list(workers or ())),
        total_expenses=total_expenses,
        total_worker_payments=total_payments,
        total_income=total_income,
        net_profit=net_profit(total_income, total_expenses, total_payments),
        recent_expenses=tuple(recent_expenses(expenses, limit, sites, vendors)),
    )


def _owned_by(rows, key: str, owner_id) -> list:
    return [r for r in rows or () if _field(r, key) == owner_id]


def site_summary(site, expenses, payments, income) -> SiteSummary:
    sid = _field(site, "id")
    site_expenses = _owned_by(expenses, "site_id", sid)
    total_income = sum_amounts(_owned_by(income, "site_id", sid))
    total_expenses = sum_amounts(site_expenses)
    total_payments = sum_amounts(_owned_by(payments, "site_id", sid))
    return SiteSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        total_worker_payments=total_payments,
        net_profit=net_profit(total_income, total_expenses, total_payments),
        expenses_count=len(site_expenses),
    )


def vendor_summary(vendor, expenses) -> VendorSummary:
    rows = _owned_by(expenses, "vendor_id", _field(vendor, "id"))
    return VendorSummary(
        total_expenses=sum_amounts(rows),
        total_credit_expenses=credit_exposure(rows),
        expenses_count=len(rows),
    )


def worker_summary(worker, payments) -> WorkerSummary:
    rows = _owned_by(payments, "worker_id", _field(worker, "id"))
    total = sum_amounts(rows)
    days = int(sum_amounts(rows, field="days_worked"))
    return WorkerSummary(
        total_payments=total,
        total_days_worked=days,
        payments_count=len(rows),
        average_daily_earning=average_daily_earning(total, days),
    )


# ------------ export ----------------------------------------------------------
def _summary_rows(sites) -> list[list]:
    rows = []
    for site in sites or ():
        s = site_summary(
            site,
            _field(site, "expenses") or [],
            _field(site, "payments") or [],
            _field(site, "income") or [],
        )
        rows.append([
            _field(site, "name") or "",
            _field(site, "location") or "",
            _field(site, "status") or "",
            _field(site, "budget"),
            s.total_income,
            s.total_expenses,
            s.total_worker_payments,
            s.net_profit,
        ])
    return rows


def export_summary_csv(sites) -> str:
    """Per-site summary table as CSV: fixed header first, every field quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(SUMMARY_HEADER)
    for row in _summary_rows(sites):
        writer.writerow([plain_number(v) if i >= 3 else v for i, v in enumerate(row)])
    return buf.getvalue()


def export_summary_xlsx(sites) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Summary"
    ws.append(SUMMARY_HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in _summary_rows(sites):
        ws.append(row)
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def export_filename(ext: str = "csv", today: date | None = None) -> str:
    return f"apgbuilders-data-{(today or date.today()).isoformat()}.{ext}"
