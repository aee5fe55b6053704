# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from ...forms import INCOME_FIELDS, FormState, income_form
from ...reporting import sum_amounts
from ...repository import RecordNotFound, SiteIncomeRepository, SiteRepository
from ..common import fetch_batch, load_or_redirect, save_form

logger = logging.getLogger(__name__)

bp = Blueprint("income", __name__, url_prefix="/income")

income = SiteIncomeRepository()
sites = SiteRepository()

FORM = "income/form.html"


def _choices() -> dict:
    batch = fetch_batch("sites", sites.list_for_select)
    return {"sites": batch[0] if batch else []}


@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("income records", income.list_with_relations)
    rows = batch[0] if batch else []
    return render_template("income/index.html", income=rows, total=sum_amounts(rows))


@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        state = FormState.initial(INCOME_FIELDS, site_id=request.args.get("site_id"))
        return render_template(FORM, state=state, item_id=None, **_choices())
    return save_form(income, income_form(request.form), "income record", "income.index", FORM, **_choices())


@bp.route("/edit/<int:income_id>", methods=["GET", "POST"])
def edit(income_id: int):
    row, back = load_or_redirect(income, income_id, "income record", "income.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(FORM, state=FormState.from_row(row, INCOME_FIELDS), item_id=income_id, **_choices())
    return save_form(
        income, income_form(request.form), "income record", "income.index", FORM, record_id=income_id, **_choices()
    )


# ------------ delete ----------------------------------------------------------
@bp.post("/delete/<int:income_id>")
def delete(income_id: int):
    try:
        income.delete(income_id)
    except RecordNotFound:
        flash("Income record not found", "danger")
    except SQLAlchemyError:
        logger.exception("Error deleting income #%s", income_id)
        flash("Failed to delete income record", "danger")
    else:
        flash("Income record deleted successfully", "primary")
    return redirect(url_for("income.index"))
