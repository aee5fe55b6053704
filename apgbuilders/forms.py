# -*- coding: utf-8 -*-
"""
Form controllers: request.form -> FormState.

A FormState is never mutated. Every submission builds a new one from the
posted fields; the view either writes ``state.values`` through one repository
call or re-renders the form from ``state.raw`` with ``state.errors``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import SITE_STATUSES
from .reporting import plain_number
from .repository import SiteRepository, VendorRepository, WorkerRepository

logger = logging.getLogger(__name__)

SITE_FIELDS = ("name", "location", "description", "start_date", "end_date", "budget", "status")
VENDOR_FIELDS = ("name", "contact_person", "phone", "email", "address", "vendor_type", "credit_balance")
WORKER_FIELDS = ("name", "phone", "email", "address", "skill_type", "daily_rate")
EXPENSE_FIELDS = (
    "site_id", "vendor_id", "description", "amount", "expense_date",
    "category", "receipt_url", "notes", "is_credit", "credit_amount",
)
PAYMENT_FIELDS = ("site_id", "worker_id", "amount", "payment_date", "days_worked", "description", "notes")
INCOME_FIELDS = ("site_id", "description", "amount", "income_date", "source", "notes")


@dataclass(frozen=True)
class FormState:
    raw: dict[str, Any] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def from_row(cls, row, fields: tuple[str, ...]) -> "FormState":
        """Edit form prefilled from a stored row."""
        return cls(raw={k: _as_input(getattr(row, k, None)) for k in fields})

    @classmethod
    def initial(cls, fields: tuple[str, ...], **preset) -> "FormState":
        """Empty add form; dates default to today."""
        raw = {k: "" for k in fields}
        for k in fields:
            if k.endswith("_date") and k not in ("start_date", "end_date"):
                raw[k] = date.today().isoformat()
        if "status" in fields:
            raw["status"] = "active"
        raw.update({k: v for k, v in preset.items() if v not in (None, "")})
        return cls(raw=raw)


def _as_input(v) -> Any:
    if v is None:
        return ""
    if isinstance(v, bool):
        return v
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, Decimal):
        return plain_number(v)
    return v


class _Binder:
    """Collects typed values and errors for one submission."""

    def __init__(self, form: Mapping[str, Any]) -> None:
        self.form = form
        self.raw: dict[str, Any] = {}
        self.values: dict[str, Any] = {}
        self.errors: dict[str, str] = {}

    def _take(self, key: str) -> str:
        s = (self.form.get(key) or "").strip()
        self.raw[key] = s
        return s

    def text(self, key: str, required: bool = False) -> str | None:
        s = self._take(key)
        if required and not s:
            self.errors[key] = "Required"
        self.values[key] = s or None
        return s or None

    def money(self, key: str, required: bool = False) -> Decimal | None:
        s = self._take(key).replace(",", "")
        if not s:
            if required:
                self.errors[key] = "Required"
            self.values[key] = None
            return None
        try:
            v = Decimal(s)
        except InvalidOperation:
            self.errors[key] = "Must be a number"
            return None
        if not v.is_finite():
            self.errors[key] = "Must be a number"
            return None
        if v < 0:
            self.errors[key] = "Must not be negative"
            return None
        self.values[key] = v
        return v

    def integer(self, key: str) -> int | None:
        s = self._take(key)
        if not s:
            self.values[key] = None
            return None
        try:
            v = int(s)
        except ValueError:
            self.errors[key] = "Must be a whole number"
            return None
        if v < 0:
            self.errors[key] = "Must not be negative"
            return None
        self.values[key] = v
        return v

    def day(self, key: str, required: bool = False) -> date | None:
        s = self._take(key)
        if not s:
            if required:
                self.errors[key] = "Required"
            self.values[key] = None
            return None
        try:
            v = date.fromisoformat(s[:10])
        except ValueError:
            self.errors[key] = "Use YYYY-MM-DD"
            return None
        self.values[key] = v
        return v

    def choice(self, key: str, options: tuple[str, ...], default: str) -> str:
        s = self._take(key) or default
        self.raw[key] = s
        if s not in options:
            self.errors[key] = "Unknown value"
        self.values[key] = s
        return s

    def flag(self, key: str) -> bool:
        v = (self.form.get(key) or "") in ("1", "on", "true", "yes")
        self.raw[key] = v
        self.values[key] = v
        return v

    def ref(self, key: str, repo) -> Any:
        """Foreign key from a <select>; must name an existing row."""
        s = self._take(key)
        if not s:
            self.errors[key] = "Required"
            return None
        try:
            rid = int(s)
        except ValueError:
            self.errors[key] = "Unknown record"
            return None
        try:
            row = repo.get(rid)
        except SQLAlchemyError:
            logger.exception("Error checking %s=%s", key, rid)
            db.session.rollback()
            self.errors[key] = "Could not be checked, try again"
            return None
        if row is None:
            self.errors[key] = "Unknown record"
            return None
        self.values[key] = rid
        return row

    def state(self) -> FormState:
        return FormState(raw=dict(self.raw), values=dict(self.values), errors=dict(self.errors))


# ------------ per-entity controllers -------------------------------------------
def site_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.text("name", required=True)
    b.text("location")
    b.text("description")
    start = b.day("start_date")
    end = b.day("end_date")
    if start and end and end < start:
        b.errors["end_date"] = "Ends before it starts"
    b.money("budget")
    b.choice("status", SITE_STATUSES, "active")
    return b.state()


def vendor_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.text("name", required=True)
    b.text("contact_person")
    b.text("phone")
    b.text("email")
    b.text("address")
    b.text("vendor_type")
    b.money("credit_balance")
    if b.values.get("credit_balance") is None and "credit_balance" not in b.errors:
        b.values["credit_balance"] = Decimal("0")
    return b.state()


def worker_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.text("name", required=True)
    b.text("phone")
    b.text("email")
    b.text("address")
    b.text("skill_type")
    b.money("daily_rate")
    return b.state()


def expense_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.ref("site_id", SiteRepository())
    b.ref("vendor_id", VendorRepository())
    b.text("description", required=True)
    amount = b.money("amount", required=True)
    b.day("expense_date", required=True)
    b.text("category")
    b.text("receipt_url")
    b.text("notes")
    is_credit = b.flag("is_credit")
    credit = b.money("credit_amount")
    if not is_credit:
        b.values["credit_amount"] = None
    elif credit is not None and amount is not None and credit > amount:
        b.errors["credit_amount"] = "Exceeds the amount"
    return b.state()


def worker_payment_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.ref("site_id", SiteRepository())
    worker = b.ref("worker_id", WorkerRepository())
    days = b.integer("days_worked")
    amount = b.money("amount")
    if amount is None and "amount" not in b.errors:
        # amount = daily rate × days when left blank
        rate = getattr(worker, "daily_rate", None)
        if rate and days:
            b.values["amount"] = Decimal(rate) * days
            b.raw["amount"] = plain_number(b.values["amount"])
        else:
            b.errors["amount"] = "Required"
    b.day("payment_date", required=True)
    b.text("description")
    b.text("notes")
    return b.state()


def income_form(form: Mapping[str, Any]) -> FormState:
    b = _Binder(form)
    b.ref("site_id", SiteRepository())
    b.text("description", required=True)
    b.money("amount", required=True)
    b.day("income_date", required=True)
    b.text("source")
    b.text("notes")
    return b.state()
