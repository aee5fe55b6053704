# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, render_template, request

from ...forms import FormState, SITE_FIELDS, site_form
from ...models import SITE_STATUSES
from ...reporting import SiteSummary, site_summary
from ...repository import (
    ExpenseRepository,
    SiteIncomeRepository,
    SiteRepository,
    WorkerPaymentRepository,
)
from ..common import fetch_batch, load_or_redirect, save_form

bp = Blueprint("sites", __name__, url_prefix="/sites")

sites = SiteRepository()
expenses = ExpenseRepository()
payments = WorkerPaymentRepository()
income = SiteIncomeRepository()

FORM = "sites/form.html"


# ------------ list ------------------------------------------------------------
@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("sites", sites.list_newest)
    rows = batch[0] if batch else []
    return render_template("sites/index.html", sites=rows)


# ------------ view ------------------------------------------------------------
@bp.route("/view/<int:site_id>", methods=["GET"])
def view(site_id: int):
    site, back = load_or_redirect(sites, site_id, "site", "sites.index")
    if back:
        return back
    batch = fetch_batch(
        "site details",
        lambda: expenses.for_site(site_id),
        lambda: payments.for_site(site_id),
        lambda: income.for_site(site_id),
    )
    summary = site_summary(site, *batch) if batch else SiteSummary()
    return render_template("sites/view.html", site=site, stats=summary)


# ------------ create ----------------------------------------------------------
@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        return render_template(FORM, state=FormState.initial(SITE_FIELDS), item_id=None, statuses=SITE_STATUSES)
    return save_form(sites, site_form(request.form), "site", "sites.index", FORM, statuses=SITE_STATUSES)


# ------------ edit ------------------------------------------------------------
@bp.route("/edit/<int:site_id>", methods=["GET", "POST"])
def edit(site_id: int):
    site, back = load_or_redirect(sites, site_id, "site", "sites.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(FORM, state=FormState.from_row(site, SITE_FIELDS), item_id=site_id, statuses=SITE_STATUSES)
    return save_form(
        sites, site_form(request.form), "site", "sites.index", FORM, record_id=site_id, statuses=SITE_STATUSES
    )
