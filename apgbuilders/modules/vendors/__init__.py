# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, render_template, request

from ...forms import FormState, VENDOR_FIELDS, vendor_form
from ...reporting import VendorSummary, vendor_summary
from ...repository import ExpenseRepository, VendorRepository
from ..common import fetch_batch, load_or_redirect, save_form

bp = Blueprint("vendors", __name__, url_prefix="/vendors")

vendors = VendorRepository()
expenses = ExpenseRepository()

FORM = "vendors/form.html"


@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("vendors", vendors.list_newest)
    return render_template("vendors/index.html", vendors=batch[0] if batch else [])


@bp.route("/view/<int:vendor_id>", methods=["GET"])
def view(vendor_id: int):
    vendor, back = load_or_redirect(vendors, vendor_id, "vendor", "vendors.index")
    if back:
        return back
    batch = fetch_batch("vendor details", lambda: expenses.for_vendor(vendor_id))
    summary = vendor_summary(vendor, batch[0]) if batch else VendorSummary()
    return render_template("vendors/view.html", vendor=vendor, stats=summary)


@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        return render_template(FORM, state=FormState.initial(VENDOR_FIELDS), item_id=None)
    return save_form(vendors, vendor_form(request.form), "vendor", "vendors.index", FORM)


@bp.route("/edit/<int:vendor_id>", methods=["GET", "POST"])
def edit(vendor_id: int):
    vendor, back = load_or_redirect(vendors, vendor_id, "vendor", "vendors.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(FORM, state=FormState.from_row(vendor, VENDOR_FIELDS), item_id=vendor_id)
    return save_form(vendors, vendor_form(request.form), "vendor", "vendors.index", FORM, record_id=vendor_id)
