# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, render_template, request

from ...forms import EXPENSE_FIELDS, FormState, expense_form
from ...reporting import credit_amount, credit_exposure, sum_amounts
from ...repository import ExpenseRepository, SiteRepository, VendorRepository
from ..common import fetch_batch, load_or_redirect, save_form

bp = Blueprint("expenses", __name__, url_prefix="/expenses")

expenses = ExpenseRepository()
sites = SiteRepository()
vendors = VendorRepository()

FORM = "expenses/form.html"


def _choices() -> dict:
    batch = fetch_batch("sites and vendors", sites.list_for_select, vendors.list_for_select)
    site_rows, vendor_rows = batch if batch else ([], [])
    return {"sites": site_rows, "vendors": vendor_rows}


@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("expenses", expenses.list_with_relations)
    rows = batch[0] if batch else []
    return render_template(
        "expenses/index.html",
        expenses=rows,
        total=sum_amounts(rows),
        credit_total=credit_exposure(rows),
        credit_of=credit_amount,
    )


@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        state = FormState.initial(EXPENSE_FIELDS, site_id=request.args.get("site_id"),
                                  vendor_id=request.args.get("vendor_id"))
        return render_template(FORM, state=state, item_id=None, **_choices())
    return save_form(expenses, expense_form(request.form), "expense", "expenses.index", FORM, **_choices())


@bp.route("/edit/<int:expense_id>", methods=["GET", "POST"])
def edit(expense_id: int):
    expense, back = load_or_redirect(expenses, expense_id, "expense", "expenses.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(FORM, state=FormState.from_row(expense, EXPENSE_FIELDS), item_id=expense_id, **_choices())
    return save_form(
        expenses, expense_form(request.form), "expense", "expenses.index", FORM, record_id=expense_id, **_choices()
    )
