# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, render_template, request

from ...forms import PAYMENT_FIELDS, FormState, worker_payment_form
from ...reporting import sum_amounts
from ...repository import SiteRepository, WorkerPaymentRepository, WorkerRepository
from ..common import fetch_batch, load_or_redirect, save_form

bp = Blueprint("worker_payments", __name__, url_prefix="/worker-payments")

payments = WorkerPaymentRepository()
sites = SiteRepository()
workers = WorkerRepository()

FORM = "worker_payments/form.html"


def _choices() -> dict:
    batch = fetch_batch("sites and workers", sites.list_for_select, workers.list_for_select)
    site_rows, worker_rows = batch if batch else ([], [])
    return {"sites": site_rows, "workers": worker_rows}


@bp.route("", methods=["GET"])
def index():
    batch = fetch_batch("worker payments", payments.list_with_relations)
    rows = batch[0] if batch else []
    return render_template(
        "worker_payments/index.html",
        payments=rows,
        total=sum_amounts(rows),
        total_days=int(sum_amounts(rows, field="days_worked")),
    )


@bp.route("/add", methods=["GET", "POST"])
def add():
    if request.method == "GET":
        state = FormState.initial(PAYMENT_FIELDS, site_id=request.args.get("site_id"),
                                  worker_id=request.args.get("worker_id"))
        return render_template(FORM, state=state, item_id=None, **_choices())
    return save_form(
        payments, worker_payment_form(request.form), "worker payment", "worker_payments.index", FORM, **_choices()
    )


@bp.route("/edit/<int:payment_id>", methods=["GET", "POST"])
def edit(payment_id: int):
    payment, back = load_or_redirect(payments, payment_id, "worker payment", "worker_payments.index")
    if back:
        return back
    if request.method == "GET":
        return render_template(
            FORM, state=FormState.from_row(payment, PAYMENT_FIELDS), item_id=payment_id, **_choices()
        )
    return save_form(
        payments,
        worker_payment_form(request.form),
        "worker payment",
        "worker_payments.index",
        FORM,
        record_id=payment_id,
        **_choices(),
    )
